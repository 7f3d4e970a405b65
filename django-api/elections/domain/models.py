"""Domain models representing persisted state and derived read models.

These are pure domain objects with no API input rules.
Django ORM models are in elections/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime

from elections.domain.value_objects import ElectionStatus, EventId, OptionId, Role, VoteId


@dataclass(frozen=True)
class Option:
    """Domain representation of an Option."""

    id: OptionId
    name: str
    position: int


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    description: str
    options: tuple[Option, ...]
    start_at: datetime
    end_at: datetime | None
    created_by: str
    created_at: datetime
    updated_at: datetime

    def find_option(self, option_id: OptionId) -> Option | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


@dataclass(frozen=True)
class Vote:
    """Domain representation of a Vote."""

    id: VoteId
    event_id: EventId
    participant_id: str
    option_id: OptionId
    voted_at: datetime


@dataclass(frozen=True)
class EventDraft:
    """Validated input for creating an Event. Ids are assigned by the store."""

    title: str
    description: str
    option_names: tuple[str, ...]
    start_at: datetime
    end_at: datetime | None
    created_by: str


@dataclass(frozen=True)
class EventPatch:
    """Partial update for an Event. None means the field is left unchanged."""

    title: str | None = None
    description: str | None = None
    options: tuple[str, ...] | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None

    @property
    def changes_options(self) -> bool:
        return self.options is not None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.title, self.description, self.options, self.start_at, self.end_at)
        )


@dataclass(frozen=True)
class OptionTally:
    """Vote count for a single option. Voters are only filled for organizers."""

    option: Option
    count: int
    voters: tuple[str, ...] = ()


@dataclass(frozen=True)
class EventListing:
    """An event with its derived status, as shown in listings."""

    event: Event
    status: ElectionStatus
    has_voted: bool | None = None


@dataclass(frozen=True)
class EventDetail:
    """Public single-event view: numeric counts only."""

    event: Event
    status: ElectionStatus
    tallies: tuple[OptionTally, ...]
    has_voted: bool | None = None


@dataclass(frozen=True)
class EventResults:
    """Organizer results view with per-option voters."""

    event: Event
    status: ElectionStatus
    tallies: tuple[OptionTally, ...] = field(default_factory=tuple)

    @property
    def total_votes(self) -> int:
        return sum(tally.count for tally in self.tallies)

    def ranked(self) -> list[OptionTally]:
        """Tallies by count descending, ties broken by option position."""
        return sorted(self.tallies, key=lambda t: (-t.count, t.option.position))

    def leading(self) -> OptionTally | None:
        if self.total_votes == 0:
            return None
        return self.ranked()[0]


@dataclass(frozen=True)
class Account:
    """A registered identity as exposed to the API."""

    id: str
    name: str
    email: str
    role: Role
