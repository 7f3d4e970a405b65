"""Tests for the Django ORM stores against a real database.

Run with: pytest tests/test_django_store.py -v
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest
from django.core.cache import cache
from django.db import connection
from django.utils import timezone

from elections import models
from elections.domain import Caller, EventDraft, EventPatch
from elections.domain.errors import InvalidOptionError
from elections.services import ElectionService
from elections.stores.cached_store import CachedEventStore, event_detail_key
from elections.stores.django_store import DjangoEventStore, DjangoVoteStore
from elections.stores.interfaces import ConflictError, StoreError, UnknownOptionError


@pytest.fixture
def event_store() -> DjangoEventStore:
    return DjangoEventStore()


@pytest.fixture
def vote_store() -> DjangoVoteStore:
    return DjangoVoteStore()


@pytest.fixture
def event(event_store):
    return event_store.create_event(
        EventDraft(
            title="Board Vote",
            description="Election of the new board chair",
            option_names=("A", "B", "C"),
            start_at=timezone.now() - timedelta(minutes=1),
            end_at=None,
            created_by="organizer-1",
        )
    )


@pytest.mark.django_db
class TestDjangoEventStore:
    def test_create_keeps_option_order(self, event, event_store):
        fetched = event_store.get_event(event.id)
        assert fetched == event
        assert [o.name for o in fetched.options] == ["A", "B", "C"]
        assert [o.position for o in fetched.options] == [0, 1, 2]

    def test_list_events_newest_first(self, event, event_store):
        newer = event_store.create_event(
            EventDraft(
                title="Newer Vote",
                description="Created after the board vote",
                option_names=("X", "Y"),
                start_at=timezone.now(),
                end_at=None,
                created_by="organizer-1",
            )
        )
        assert [e.id for e in event_store.list_events()] == [newer.id, event.id]

    def test_update_replaces_options(self, event, event_store):
        updated = event_store.update_event(
            event.id, EventPatch(title="Renamed", options=("Yes", "No"))
        )
        assert updated.title == "Renamed"
        assert [o.name for o in updated.options] == ["Yes", "No"]
        assert models.Option.objects.filter(event_id=event.id.value).count() == 2

    def test_update_missing_event_returns_none(self, event, event_store, vote_store):
        event_store.delete_event(event.id)
        assert event_store.update_event(event.id, EventPatch(title="Gone")) is None

    def test_replacing_voted_options_conflicts(self, event, event_store, vote_store):
        vote_store.add_vote(event.id, "p1", event.options[0].id)
        with pytest.raises(ConflictError):
            event_store.update_event(event.id, EventPatch(options=("X", "Y")))
        assert [o.name for o in event_store.get_event(event.id).options] == ["A", "B", "C"]

    def test_delete_cascades_to_votes(self, event, event_store, vote_store):
        vote_store.add_vote(event.id, "p1", event.options[0].id)
        vote_store.add_vote(event.id, "p2", event.options[1].id)

        event_store.delete_event(event.id)

        assert event_store.get_event(event.id) is None
        assert not models.Vote.objects.exists()
        assert not models.Option.objects.exists()


@pytest.mark.django_db
class TestDjangoVoteStore:
    def test_unique_constraint_rejects_second_vote(self, event, vote_store):
        vote_store.add_vote(event.id, "p1", event.options[0].id)
        with pytest.raises(ConflictError):
            vote_store.add_vote(event.id, "p1", event.options[1].id)
        assert models.Vote.objects.filter(participant_id="p1").count() == 1

    def test_conflict_leaves_connection_usable(self, event, vote_store):
        vote_store.add_vote(event.id, "p1", event.options[0].id)
        with pytest.raises(ConflictError):
            vote_store.add_vote(event.id, "p1", event.options[0].id)
        vote_store.add_vote(event.id, "p2", event.options[0].id)
        assert vote_store.count_by_option(event.id) == {event.options[0].id: 2}

    def test_aggregates(self, event, vote_store):
        a, b, c = event.options
        vote_store.add_vote(event.id, "p1", a.id)
        vote_store.add_vote(event.id, "p2", b.id)
        vote_store.add_vote(event.id, "p3", a.id)

        assert vote_store.count_by_option(event.id) == {a.id: 2, b.id: 1}
        assert vote_store.voters_by_option(event.id) == {a.id: ["p1", "p3"], b.id: ["p2"]}
        assert vote_store.votes_exist(event.id)
        assert vote_store.has_voted(event.id, "p2")
        assert not vote_store.has_voted(event.id, "p4")
        assert vote_store.voted_event_ids("p1") == {event.id}

    def test_delete_votes_for_event(self, event, vote_store):
        vote_store.add_vote(event.id, "p1", event.options[0].id)
        assert vote_store.delete_votes_for_event(event.id) == 1
        assert not vote_store.votes_exist(event.id)

    def test_option_must_belong_to_event(self, event, event_store, vote_store):
        other = event_store.create_event(
            EventDraft(
                title="Other Vote",
                description="A completely different election",
                option_names=("X", "Y"),
                start_at=timezone.now(),
                end_at=None,
                created_by="organizer-1",
            )
        )
        with pytest.raises(UnknownOptionError):
            vote_store.add_vote(event.id, "p1", other.options[0].id)
        assert not vote_store.votes_exist(event.id)

    def test_replaced_option_is_rejected(self, event, event_store, vote_store):
        stale_option = event.options[0]
        event_store.update_event(event.id, EventPatch(options=("X", "Y")))
        with pytest.raises(UnknownOptionError):
            vote_store.add_vote(event.id, "p1", stale_option.id)
        assert not models.Vote.objects.exists()


@pytest.mark.django_db(transaction=True)
class TestConcurrentVotes:
    """Parallel inserts for one participant race on the database constraint."""

    def test_concurrent_attempts_admit_exactly_one(self, event, vote_store):
        attempts = 8
        barrier = threading.Barrier(attempts)

        def attempt(i):
            option = event.options[i % len(event.options)]
            barrier.wait()
            try:
                # SQLite reports a busy table instead of waiting; retry those.
                for _ in range(100):
                    try:
                        vote_store.add_vote(event.id, "p1", option.id)
                        return "admitted"
                    except ConflictError:
                        return "rejected"
                    except StoreError:
                        time.sleep(0.01)
                return "gave up"
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=attempts) as pool:
            outcomes = list(pool.map(attempt, range(attempts)))

        assert outcomes.count("admitted") == 1
        assert outcomes.count("rejected") == attempts - 1
        assert models.Vote.objects.filter(participant_id="p1").count() == 1


@pytest.mark.django_db
class TestStaleEventCache:
    """A vote is judged against the database, never against a cached event."""

    @pytest.fixture
    def service(self, event_store, vote_store):
        return ElectionService(
            events=CachedEventStore(event_store, ttl_seconds=60),
            votes=vote_store,
            vote_events=event_store,
        )

    def test_votes_follow_replaced_options(self, service, event, organizer):
        outdated = service.get_event(event.id).event
        updated = service.update_event(event.id, EventPatch(options=("X", "Y")), caller=organizer)
        # Another worker's cache still holds the event as it was.
        cache.set(event_detail_key(event.id), outdated)

        vote = service.cast_vote(event.id, updated.options[0].id, caller=Caller(id="p1"))
        assert vote.option_id == updated.options[0].id

        with pytest.raises(InvalidOptionError):
            service.cast_vote(event.id, outdated.options[0].id, caller=Caller(id="p2"))
        assert models.Vote.objects.count() == 1
