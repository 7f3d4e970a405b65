"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from elections.domain import Caller, Role
from elections.services import ElectionService
from elections.stores.memory_store import InMemoryElectionStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def store(clock) -> InMemoryElectionStore:
    return InMemoryElectionStore(clock=clock)


@pytest.fixture
def service(store, clock) -> ElectionService:
    return ElectionService(events=store, votes=store, clock=clock)


@pytest.fixture
def organizer() -> Caller:
    return Caller(id="organizer-1", role=Role.ORGANIZER)


@pytest.fixture
def other_organizer() -> Caller:
    return Caller(id="organizer-2", role=Role.ORGANIZER)


@pytest.fixture
def participant() -> Caller:
    return Caller(id="participant-1", role=Role.PARTICIPANT)


@pytest.fixture
def board_vote(service, organizer, clock):
    """Active event 'Board Vote' with options A and B."""
    return service.create_event(
        "Board Vote",
        "Election of the new board chair",
        ["A", "B"],
        start_at=clock.now - timedelta(seconds=1),
        caller=organizer,
    )


@pytest.fixture
def organizer_user(django_user_model):
    return django_user_model.objects.create_user(
        username="organizer", password="organizer-pass", is_staff=True
    )


@pytest.fixture
def other_organizer_user(django_user_model):
    return django_user_model.objects.create_user(
        username="organizer2", password="organizer-pass", is_staff=True
    )


@pytest.fixture
def participant_user(django_user_model):
    return django_user_model.objects.create_user(username="voter", password="voter-pass")
