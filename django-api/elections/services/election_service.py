"""Election service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

The service holds no mutable shared state. One vote per participant is
guaranteed by the vote store's atomic insert, not by the existence check
done here beforehand.
"""

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime

import structlog
from django.utils import timezone

from elections.domain import (
    Caller,
    ElectionStatus,
    Event,
    EventDetail,
    EventDraft,
    EventId,
    EventListing,
    EventPatch,
    EventResults,
    OptionId,
    OptionTally,
    Vote,
)
from elections.domain.errors import (
    DuplicateVoteError,
    ElectionNotActiveError,
    EventNotFoundError,
    InvalidEventIdError,
    InvalidOptionError,
    StoreUnavailableError,
    ValidationFailedError,
    VotingInProgressError,
)
from elections.domain.validation import EventRules, validate_event_payload
from elections.services.access import require_authenticated, require_organizer, require_owner
from elections.stores.interfaces import (
    ConflictError,
    EventStore,
    StoreError,
    UnknownOptionError,
    VoteStore,
)

log = structlog.get_logger(__name__)


def derive_status(now: datetime, start_at: datetime, end_at: datetime | None) -> ElectionStatus:
    """Status of the voting window at ``now``.

    An event without an end time never becomes completed.
    """
    if now < start_at:
        return ElectionStatus.UPCOMING
    if end_at is not None and now > end_at:
        return ElectionStatus.COMPLETED
    return ElectionStatus.ACTIVE


def parse_event_id(raw: str | EventId) -> EventId:
    if isinstance(raw, EventId):
        return raw
    try:
        return EventId.from_string(raw)
    except (AttributeError, TypeError, ValueError):
        raise InvalidEventIdError() from None


def parse_option_id(raw: str | OptionId) -> OptionId:
    if isinstance(raw, OptionId):
        return raw
    try:
        return OptionId.from_string(raw)
    except (AttributeError, TypeError, ValueError):
        raise InvalidOptionError() from None


class ElectionService:
    """Service for event, vote and results operations.

    ``vote_events`` is the store cast_vote reads the event from. It defaults
    to ``events``; when ``events`` is a cache, pass the uncached store so a
    vote is never judged against an outdated option list or voting window.
    """

    def __init__(
        self,
        events: EventStore,
        votes: VoteStore,
        *,
        vote_events: EventStore | None = None,
        rules: EventRules = EventRules(),
        enforce_voting_window: bool = True,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._events = events
        self._votes = votes
        self._vote_events = vote_events if vote_events is not None else events
        self._rules = rules
        self._enforce_voting_window = enforce_voting_window
        self._clock = clock

    @contextmanager
    def _store_guard(self, operation: str) -> Iterator[None]:
        """Wrap unexpected store failures as StoreUnavailableError."""
        try:
            yield
        except StoreError as exc:
            log.error("store_unavailable", operation=operation, error=str(exc), exc_info=True)
            raise StoreUnavailableError() from exc

    def _require_event(self, event_id: EventId) -> Event:
        event = self._events.get_event(event_id)
        if event is None:
            raise EventNotFoundError()
        return event

    def status_of(self, event: Event) -> ElectionStatus:
        return derive_status(self._clock(), event.start_at, event.end_at)

    # Reads

    def list_events(
        self,
        status: ElectionStatus | None = None,
        caller: Caller | None = None,
    ) -> list[EventListing]:
        """Return all events newest first, with derived status.

        When a caller is given, each listing says whether they already voted.
        """
        with self._store_guard("list_events"):
            events = self._events.list_events()
            voted = self._votes.voted_event_ids(caller.id) if caller is not None else None

        now = self._clock()
        listings = [
            EventListing(
                event=event,
                status=derive_status(now, event.start_at, event.end_at),
                has_voted=(event.id in voted) if voted is not None else None,
            )
            for event in events
        ]
        if status is not None:
            listings = [listing for listing in listings if listing.status is status]
        return listings

    def list_admin_events(self, caller: Caller | None) -> list[EventListing]:
        require_organizer(caller)
        return self.list_events()

    def get_event(self, event_id: str | EventId, caller: Caller | None = None) -> EventDetail:
        """Return an event with public per-option vote counts.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event_id = parse_event_id(event_id)
        with self._store_guard("get_event"):
            event = self._require_event(event_id)
            counts = self._votes.count_by_option(event_id)
            has_voted = self._votes.has_voted(event_id, caller.id) if caller is not None else None

        tallies = tuple(
            OptionTally(option=option, count=counts.get(option.id, 0)) for option in event.options
        )
        return EventDetail(
            event=event, status=self.status_of(event), tallies=tallies, has_voted=has_voted
        )

    def get_results(self, event_id: str | EventId, caller: Caller | None) -> EventResults:
        """Return the organizer view of the tally, voters included.

        Every option appears, including options nobody voted for.

        Raises:
            ForbiddenError: If the caller is not an organizer.
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        require_organizer(caller)
        event_id = parse_event_id(event_id)
        with self._store_guard("get_results"):
            event = self._require_event(event_id)
            voters = self._votes.voters_by_option(event_id)

        tallies = tuple(
            OptionTally(
                option=option,
                count=len(voters.get(option.id, ())),
                voters=tuple(voters.get(option.id, ())),
            )
            for option in event.options
        )
        return EventResults(event=event, status=self.status_of(event), tallies=tallies)

    # Writes

    def create_event(
        self,
        title: str,
        description: str,
        options: Sequence[str],
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        *,
        caller: Caller | None,
    ) -> Event:
        """Create an event owned by the calling organizer.

        Raises:
            ForbiddenError: If the caller is not an organizer.
            ValidationFailedError: With every violated rule in ``details``.
        """
        caller = require_organizer(caller)
        now = self._clock()
        start_at = start_at if start_at is not None else now

        violations = validate_event_payload(
            title, description, options, start_at, end_at, now=now, rules=self._rules
        )
        if violations:
            raise ValidationFailedError(violations)

        draft = EventDraft(
            title=title.strip(),
            description=description.strip(),
            option_names=tuple(name.strip() for name in options),
            start_at=start_at,
            end_at=end_at,
            created_by=caller.id,
        )
        with self._store_guard("create_event"):
            event = self._events.create_event(draft)

        log.info("event_created", event_id=str(event.id), caller_id=caller.id, options=len(event.options))
        return event

    def update_event(
        self, event_id: str | EventId, patch: EventPatch, *, caller: Caller | None
    ) -> Event:
        """Apply a partial update. Any organizer may update any event.

        Raises:
            ForbiddenError: If the caller is not an organizer.
            EventNotFoundError: If the event does not exist.
            VotingInProgressError: If options change after the first vote.
            ValidationFailedError: If the merged event breaks a rule.
        """
        caller = require_organizer(caller)
        event_id = parse_event_id(event_id)

        with self._store_guard("update_event"):
            current = self._require_event(event_id)
            if patch.changes_options and self._votes.votes_exist(event_id):
                raise VotingInProgressError()

        if patch.is_empty():
            return current

        patch = replace(
            patch,
            title=patch.title.strip() if patch.title is not None else None,
            description=patch.description.strip() if patch.description is not None else None,
            options=tuple(name.strip() for name in patch.options) if patch.options is not None else None,
        )
        violations = validate_event_payload(
            patch.title if patch.title is not None else current.title,
            patch.description if patch.description is not None else current.description,
            patch.options if patch.options is not None else [o.name for o in current.options],
            patch.start_at if patch.start_at is not None else current.start_at,
            patch.end_at if patch.end_at is not None else current.end_at,
            now=self._clock(),
            rules=self._rules,
            check_start=patch.start_at is not None,
        )
        if violations:
            raise ValidationFailedError(violations)

        with self._store_guard("update_event"):
            try:
                updated = self._events.update_event(event_id, patch)
            except ConflictError as exc:
                # A vote landed between the check above and the option replacement.
                raise VotingInProgressError() from exc
        if updated is None:
            raise EventNotFoundError()

        log.info(
            "event_updated",
            event_id=str(event_id),
            caller_id=caller.id,
            options_changed=patch.changes_options,
        )
        return updated

    def delete_event(self, event_id: str | EventId, *, caller: Caller | None) -> None:
        """Delete an event and all of its votes. Only the creator may delete.

        Votes are removed before the event so a failure in between never
        leaves orphaned votes.

        Raises:
            ForbiddenError: If the caller is not the organizer who created it.
            EventNotFoundError: If the event does not exist.
        """
        caller = require_organizer(caller)
        event_id = parse_event_id(event_id)

        with self._store_guard("delete_event"):
            event = self._require_event(event_id)
            require_owner(caller, event)
            votes_deleted = self._votes.delete_votes_for_event(event_id)
            self._events.delete_event(event_id)

        log.info("event_deleted", event_id=str(event_id), caller_id=caller.id, votes_deleted=votes_deleted)

    def cast_vote(
        self, event_id: str | EventId, option_id: str | OptionId, *, caller: Caller | None
    ) -> Vote:
        """Record the caller's single vote on an event.

        Raises:
            ForbiddenError: If there is no authenticated caller.
            EventNotFoundError: If the event does not exist.
            InvalidOptionError: If the option is not one of the event's options.
            ElectionNotActiveError: If window enforcement is on and voting is closed.
            DuplicateVoteError: If the caller already voted. Never retried.
        """
        caller = require_authenticated(caller)
        event_id = parse_event_id(event_id)

        with self._store_guard("cast_vote"):
            event = self._vote_events.get_event(event_id)
            if event is None:
                raise EventNotFoundError()
            option_id = parse_option_id(option_id)
            if event.find_option(option_id) is None:
                raise InvalidOptionError()

            if self._enforce_voting_window:
                status = self.status_of(event)
                if status is not ElectionStatus.ACTIVE:
                    raise ElectionNotActiveError(status.value)

            # Fast path only; the atomic insert below is authoritative.
            if self._votes.has_voted(event_id, caller.id):
                log.info("duplicate_vote_rejected", event_id=str(event_id), participant_id=caller.id)
                raise DuplicateVoteError()

            try:
                vote = self._votes.add_vote(event_id, caller.id, option_id)
            except UnknownOptionError as exc:
                # The options were replaced after the event was read.
                raise InvalidOptionError() from exc
            except ConflictError as exc:
                log.info(
                    "duplicate_vote_rejected",
                    event_id=str(event_id),
                    participant_id=caller.id,
                    source="constraint",
                )
                raise DuplicateVoteError() from exc

        log.info(
            "vote_cast",
            event_id=str(event_id),
            participant_id=caller.id,
            option_id=str(option_id),
        )
        return vote
