"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. They raise StoreError
for infrastructure failures and ConflictError when a storage constraint
rejects a write; services map both to domain errors.
"""

from abc import ABC, abstractmethod

from elections.domain import Event, EventDraft, EventId, EventPatch, OptionId, Vote


class StoreError(Exception):
    """Infrastructure failure inside a store (timeout, lost connection)."""


class ConflictError(StoreError):
    """A storage constraint rejected the write (unique key, restricted delete)."""


class UnknownOptionError(StoreError):
    """The option does not belong to the event at the time of the write."""


class EventStore(ABC):
    """Interface for event and option persistence operations."""

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return all events ordered by created_at descending."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event with its options, or None if not found."""
        ...

    @abstractmethod
    def create_event(self, draft: EventDraft) -> Event:
        """Persist a new event and its options in the given order."""
        ...

    @abstractmethod
    def update_event(self, event_id: EventId, patch: EventPatch) -> Event | None:
        """Apply a patch atomically. Returns None if the event is gone.

        When the patch replaces options, existing options are deleted first.
        Raises ConflictError if a vote still references one of them.
        """
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> None:
        """Delete an event and its options."""
        ...


class VoteStore(ABC):
    """Interface for vote persistence and aggregate queries."""

    @abstractmethod
    def add_vote(self, event_id: EventId, participant_id: str, option_id: OptionId) -> Vote:
        """Atomically insert a vote keyed by (event_id, participant_id).

        Option membership is checked in the same atomic unit as the insert.
        Raises UnknownOptionError if the option is not one of the event's
        options, and ConflictError if a vote for that pair already exists.
        """
        ...

    @abstractmethod
    def has_voted(self, event_id: EventId, participant_id: str) -> bool:
        """Check whether a vote exists for (event_id, participant_id)."""
        ...

    @abstractmethod
    def votes_exist(self, event_id: EventId) -> bool:
        """Check whether any vote references the event."""
        ...

    @abstractmethod
    def voted_event_ids(self, participant_id: str) -> set[EventId]:
        """Return the ids of every event the participant voted on."""
        ...

    @abstractmethod
    def count_by_option(self, event_id: EventId) -> dict[OptionId, int]:
        """Group the event's votes by option. Options without votes are absent."""
        ...

    @abstractmethod
    def voters_by_option(self, event_id: EventId) -> dict[OptionId, list[str]]:
        """Participant ids per option, ordered by vote time."""
        ...

    @abstractmethod
    def delete_votes_for_event(self, event_id: EventId) -> int:
        """Delete every vote of the event. Returns the number deleted."""
        ...
