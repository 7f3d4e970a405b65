"""Unit tests for domain primitives and derived read models.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from elections.domain import (
    Caller,
    ElectionStatus,
    EventId,
    EventPatch,
    EventResults,
    Option,
    OptionId,
    OptionTally,
    Role,
)
from elections.services import derive_status

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestEventId:
    """Tests for EventId value object."""

    def test_from_string_valid_uuid(self):
        """EventId.from_string parses valid UUID."""
        value = uuid4()
        assert EventId.from_string(str(value)) == EventId(value)

    def test_from_string_invalid_uuid(self):
        """EventId.from_string raises ValueError for invalid UUID."""
        with pytest.raises(ValueError):
            EventId.from_string("not-a-uuid")

    def test_str_is_plain_uuid(self):
        value = uuid4()
        assert str(EventId(value)) == str(value)


class TestCaller:
    """Tests for Caller value object."""

    def test_participant_is_not_organizer(self):
        assert not Caller(id="p1").is_organizer

    def test_organizer_role(self):
        assert Caller(id="o1", role=Role.ORGANIZER).is_organizer

    def test_rejects_empty_id(self):
        with pytest.raises(ValueError):
            Caller(id="")


class TestDeriveStatus:
    """Status is computed from the voting window on every read."""

    def test_future_start_is_upcoming(self):
        assert derive_status(NOW, NOW + timedelta(hours=1), None) is ElectionStatus.UPCOMING

    def test_started_without_end_is_active(self):
        assert derive_status(NOW, NOW - timedelta(hours=1), None) is ElectionStatus.ACTIVE

    def test_past_end_is_completed(self):
        status = derive_status(NOW, NOW - timedelta(hours=2), NOW - timedelta(hours=1))
        assert status is ElectionStatus.COMPLETED

    def test_window_boundaries_are_active(self):
        assert derive_status(NOW, NOW, NOW + timedelta(hours=1)) is ElectionStatus.ACTIVE
        assert derive_status(NOW, NOW - timedelta(hours=1), NOW) is ElectionStatus.ACTIVE

    def test_open_ended_event_never_completes(self):
        far_future = NOW + timedelta(days=3650)
        assert derive_status(far_future, NOW, None) is ElectionStatus.ACTIVE


def _tally(name: str, position: int, count: int) -> OptionTally:
    return OptionTally(option=Option(id=OptionId(uuid4()), name=name, position=position), count=count)


class TestEventResults:
    """Ranking is by count descending, ties broken by option order."""

    def test_ranked_orders_by_count_then_position(self):
        results = EventResults(
            event=None,
            status=ElectionStatus.ACTIVE,
            tallies=(_tally("A", 0, 1), _tally("B", 1, 3), _tally("C", 2, 1)),
        )
        assert [t.option.name for t in results.ranked()] == ["B", "A", "C"]
        assert results.total_votes == 5
        assert results.leading().option.name == "B"

    def test_no_leader_without_votes(self):
        results = EventResults(
            event=None,
            status=ElectionStatus.ACTIVE,
            tallies=(_tally("A", 0, 0), _tally("B", 1, 0)),
        )
        assert results.leading() is None


class TestEventPatch:
    def test_empty_patch(self):
        assert EventPatch().is_empty()
        assert not EventPatch().changes_options

    def test_options_patch_changes_options(self):
        patch = EventPatch(options=("X", "Y"))
        assert patch.changes_options
        assert not patch.is_empty()
