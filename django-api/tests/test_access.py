"""Unit tests for role and ownership checks."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from elections.domain import Caller, Event, EventId, Role
from elections.domain.errors import ErrorCode, ForbiddenError
from elections.services.access import require_authenticated, require_organizer, require_owner

CREATED = datetime(2026, 3, 1, tzinfo=timezone.utc)


def make_event(created_by: str) -> Event:
    return Event(
        id=EventId(uuid4()),
        title="Board Vote",
        description="Election of the new board chair",
        options=(),
        start_at=CREATED,
        end_at=None,
        created_by=created_by,
        created_at=CREATED,
        updated_at=CREATED,
    )


class TestRequireOrganizer:
    def test_organizer_passes(self):
        caller = Caller(id="o1", role=Role.ORGANIZER)
        assert require_organizer(caller) is caller

    def test_participant_is_forbidden(self):
        with pytest.raises(ForbiddenError) as exc_info:
            require_organizer(Caller(id="p1", role=Role.PARTICIPANT))
        assert exc_info.value.code is ErrorCode.FORBIDDEN

    def test_anonymous_is_forbidden(self):
        with pytest.raises(ForbiddenError):
            require_organizer(None)


class TestRequireAuthenticated:
    def test_any_role_passes(self):
        for role in Role:
            caller = Caller(id="c1", role=role)
            assert require_authenticated(caller) is caller

    def test_anonymous_is_forbidden(self):
        with pytest.raises(ForbiddenError):
            require_authenticated(None)


class TestRequireOwner:
    def test_creator_passes(self):
        require_owner(Caller(id="o1", role=Role.ORGANIZER), make_event("o1"))

    def test_other_organizer_is_forbidden(self):
        with pytest.raises(ForbiddenError):
            require_owner(Caller(id="o2", role=Role.ORGANIZER), make_event("o1"))
