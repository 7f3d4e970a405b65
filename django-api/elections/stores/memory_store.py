"""In-memory EventStore and VoteStore.

Used by unit tests and local experiments. One object implements both
interfaces so that the option-replacement guard and the vote uniqueness
check see the same state under the same lock.

Example:
    store = InMemoryElectionStore()
    service = ElectionService(events=store, votes=store)
    store.clear()  # Reset for next test
"""

from __future__ import annotations

import threading
import uuid
from collections import defaultdict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone

from elections.domain import (
    Event,
    EventDraft,
    EventId,
    EventPatch,
    Option,
    OptionId,
    Vote,
    VoteId,
)
from elections.stores.interfaces import (
    ConflictError,
    EventStore,
    StoreError,
    UnknownOptionError,
    VoteStore,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryElectionStore(EventStore, VoteStore):
    """Thread-safe in-memory store with a bounded lock wait."""

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        lock_timeout: float = 5.0,
    ) -> None:
        self._clock = clock
        self._lock_timeout = lock_timeout
        self._lock = threading.Lock()
        self._events: dict[EventId, Event] = {}
        # Keyed by (event_id, participant_id): the insert-if-absent key.
        self._votes: dict[tuple[EventId, str], Vote] = {}

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise StoreError("Timed out waiting for the store lock")
        try:
            yield
        finally:
            self._lock.release()

    def clear(self) -> None:
        with self._locked():
            self._events.clear()
            self._votes.clear()

    # EventStore

    def list_events(self) -> list[Event]:
        with self._locked():
            events = list(self._events.values())
        return sorted(events, key=lambda event: event.created_at, reverse=True)

    def get_event(self, event_id: EventId) -> Event | None:
        with self._locked():
            return self._events.get(event_id)

    def create_event(self, draft: EventDraft) -> Event:
        now = self._clock()
        event = Event(
            id=EventId(uuid.uuid4()),
            title=draft.title,
            description=draft.description,
            options=self._build_options(draft.option_names),
            start_at=draft.start_at,
            end_at=draft.end_at,
            created_by=draft.created_by,
            created_at=now,
            updated_at=now,
        )
        with self._locked():
            self._events[event.id] = event
        return event

    def update_event(self, event_id: EventId, patch: EventPatch) -> Event | None:
        with self._locked():
            current = self._events.get(event_id)
            if current is None:
                return None

            changes = {
                field: getattr(patch, field)
                for field in ("title", "description", "start_at", "end_at")
                if getattr(patch, field) is not None
            }
            if patch.options is not None:
                if self._has_votes_unlocked(event_id):
                    raise ConflictError("Options are referenced by votes")
                changes["options"] = self._build_options(patch.options)

            updated = replace(current, updated_at=self._clock(), **changes)
            self._events[event_id] = updated
            return updated

    def delete_event(self, event_id: EventId) -> None:
        with self._locked():
            self._events.pop(event_id, None)

    @staticmethod
    def _build_options(names: tuple[str, ...]) -> tuple[Option, ...]:
        return tuple(
            Option(id=OptionId(uuid.uuid4()), name=name, position=position)
            for position, name in enumerate(names)
        )

    # VoteStore

    def add_vote(self, event_id: EventId, participant_id: str, option_id: OptionId) -> Vote:
        key = (event_id, participant_id)
        with self._locked():
            event = self._events.get(event_id)
            if event is None or event.find_option(option_id) is None:
                raise UnknownOptionError("Option is not part of the event")
            if key in self._votes:
                raise ConflictError("Vote already exists for participant")
            vote = Vote(
                id=VoteId(uuid.uuid4()),
                event_id=event_id,
                participant_id=participant_id,
                option_id=option_id,
                voted_at=self._clock(),
            )
            self._votes[key] = vote
        return vote

    def has_voted(self, event_id: EventId, participant_id: str) -> bool:
        with self._locked():
            return (event_id, participant_id) in self._votes

    def votes_exist(self, event_id: EventId) -> bool:
        with self._locked():
            return self._has_votes_unlocked(event_id)

    def _has_votes_unlocked(self, event_id: EventId) -> bool:
        return any(key[0] == event_id for key in self._votes)

    def voted_event_ids(self, participant_id: str) -> set[EventId]:
        with self._locked():
            return {event_id for event_id, voter in self._votes if voter == participant_id}

    def _event_votes(self, event_id: EventId) -> list[Vote]:
        with self._locked():
            votes = [vote for vote in self._votes.values() if vote.event_id == event_id]
        return sorted(votes, key=lambda vote: vote.voted_at)

    def count_by_option(self, event_id: EventId) -> dict[OptionId, int]:
        counts: dict[OptionId, int] = defaultdict(int)
        for vote in self._event_votes(event_id):
            counts[vote.option_id] += 1
        return dict(counts)

    def voters_by_option(self, event_id: EventId) -> dict[OptionId, list[str]]:
        voters: dict[OptionId, list[str]] = defaultdict(list)
        for vote in self._event_votes(event_id):
            voters[vote.option_id].append(vote.participant_id)
        return dict(voters)

    def delete_votes_for_event(self, event_id: EventId) -> int:
        with self._locked():
            keys = [key for key in self._votes if key[0] == event_id]
            for key in keys:
                del self._votes[key]
        return len(keys)
