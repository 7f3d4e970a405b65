"""Read-through cache in front of an EventStore.

Only event records are cached. Status is derived by the service after the
cache lookup and tallies are always aggregated from vote rows, so neither
can go stale here.
"""

from django.core.cache import cache
from django.db import transaction

from elections.domain import Event, EventDraft, EventId, EventPatch
from elections.stores.interfaces import EventStore

EVENT_LIST_KEY = "elections:events:list"


def event_detail_key(event_id: EventId | str) -> str:
    return f"elections:events:{event_id}"


def invalidate_event_cache(event_id: EventId | str | None = None) -> None:
    """Drop the list key and, when given, the detail key of one event.

    Keys are dropped immediately and again once the surrounding transaction
    commits. Between the write and the commit a reader still sees the old
    committed rows and may cache them; the second pass removes that entry.
    Outside a transaction both passes run at once.
    """
    keys = [EVENT_LIST_KEY]
    if event_id is not None:
        keys.append(event_detail_key(event_id))
    cache.delete_many(keys)
    transaction.on_commit(lambda: cache.delete_many(keys))


class CachedEventStore(EventStore):
    """EventStore decorator backed by Django's cache framework."""

    def __init__(self, inner: EventStore, ttl_seconds: int) -> None:
        self._inner = inner
        self._ttl = ttl_seconds

    def list_events(self) -> list[Event]:
        events = cache.get(EVENT_LIST_KEY)
        if events is None:
            events = self._inner.list_events()
            cache.set(EVENT_LIST_KEY, events, self._ttl)
        return events

    def get_event(self, event_id: EventId) -> Event | None:
        key = event_detail_key(event_id)
        event = cache.get(key)
        if event is None:
            event = self._inner.get_event(event_id)
            if event is not None:
                cache.set(key, event, self._ttl)
        return event

    def create_event(self, draft: EventDraft) -> Event:
        event = self._inner.create_event(draft)
        invalidate_event_cache()
        return event

    def update_event(self, event_id: EventId, patch: EventPatch) -> Event | None:
        try:
            return self._inner.update_event(event_id, patch)
        finally:
            invalidate_event_cache(event_id)

    def delete_event(self, event_id: EventId) -> None:
        try:
            self._inner.delete_event(event_id)
        finally:
            invalidate_event_cache(event_id)
