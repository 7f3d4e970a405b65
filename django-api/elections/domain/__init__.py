from elections.domain.models import (
    Account,
    Event,
    EventDetail,
    EventDraft,
    EventListing,
    EventPatch,
    EventResults,
    Option,
    OptionTally,
    Vote,
)
from elections.domain.value_objects import (
    Caller,
    ElectionStatus,
    EventId,
    OptionId,
    Role,
    VoteId,
)

__all__ = [
    "Account",
    "Event",
    "EventDetail",
    "EventDraft",
    "EventListing",
    "EventPatch",
    "EventResults",
    "Option",
    "OptionTally",
    "Vote",
    "Caller",
    "ElectionStatus",
    "EventId",
    "OptionId",
    "Role",
    "VoteId",
]
