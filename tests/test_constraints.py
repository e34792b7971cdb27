"""Tests for domain validation rules and status predicates."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from opsconsole.domain.constraints import (
    ROOM_STATUSES,
    apply_changes,
    find_conflicting_reservation,
    is_active_reservation,
    room_status_after_booking,
    validate_status,
    validate_time_window,
    validate_utility_period,
    windows_overlap,
)
from opsconsole.domain.models import Room, RoomReservation


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute, tzinfo=timezone.utc)


def _reservation(reservation_id: str, start: datetime, end: datetime, status: str = "scheduled"):
    return RoomReservation(
        id=reservation_id,
        room_id="r1",
        user_id="u1",
        user_name="Ana",
        purpose="Sync",
        start_time=start,
        end_time=end,
        status=status,
    )


# --- Overlap ---

def test_abutting_windows_do_not_overlap() -> None:
    assert not windows_overlap(_at(11), _at(12), _at(10), _at(11))
    assert not windows_overlap(_at(9), _at(10), _at(10), _at(11))


def test_partial_overlap_is_detected() -> None:
    assert windows_overlap(_at(10, 30), _at(11, 30), _at(10), _at(11))


def test_containing_and_contained_windows_overlap() -> None:
    assert windows_overlap(_at(9), _at(12), _at(10), _at(11))
    assert windows_overlap(_at(10, 15), _at(10, 45), _at(10), _at(11))


def test_find_conflicting_reservation_honours_cancelled_policy() -> None:
    cancelled = _reservation("1", _at(10), _at(11), status="cancelled")

    assert find_conflicting_reservation(
        [cancelled], _at(10), _at(11), include_cancelled=True
    ) is cancelled
    assert find_conflicting_reservation(
        [cancelled], _at(10), _at(11), include_cancelled=False
    ) is None


# --- Room status derivation ---

def test_booking_covering_now_marks_room_occupied() -> None:
    assert room_status_after_booking("available", _at(10), _at(11), now=_at(10, 30)) == "occupied"


def test_booking_starting_exactly_now_marks_room_occupied() -> None:
    assert room_status_after_booking("available", _at(10), _at(11), now=_at(10)) == "occupied"


def test_future_booking_marks_room_reserved() -> None:
    assert room_status_after_booking("available", _at(10), _at(11), now=_at(9)) == "reserved"


def test_past_booking_leaves_status_unchanged() -> None:
    assert room_status_after_booking("reserved", _at(10), _at(11), now=_at(11)) == "reserved"


def test_active_reservation_predicate() -> None:
    assert is_active_reservation(_reservation("1", _at(10), _at(11), status="scheduled"))
    assert is_active_reservation(_reservation("2", _at(10), _at(11), status="in_progress"))
    assert not is_active_reservation(_reservation("3", _at(10), _at(11), status="completed"))
    assert not is_active_reservation(_reservation("4", _at(10), _at(11), status="cancelled"))


# --- Validation ---

def test_time_window_must_be_ordered() -> None:
    validate_time_window(_at(10), _at(11))
    with pytest.raises(ValueError):
        validate_time_window(_at(11), _at(11))
    with pytest.raises(ValueError):
        validate_time_window(_at(12), _at(11))


def test_unknown_status_raises() -> None:
    validate_status("reserved", ROOM_STATUSES, "room status")
    with pytest.raises(ValueError):
        validate_status("booked", ROOM_STATUSES, "room status")


def test_utility_period_bounds() -> None:
    validate_utility_period(2026, 1)
    validate_utility_period(2026, 12)
    with pytest.raises(ValueError):
        validate_utility_period(2026, 13)
    with pytest.raises(ValueError):
        validate_utility_period(0, 5)


# --- Partial updates ---

def test_apply_changes_updates_known_fields() -> None:
    room = Room(id="1", facility_id="f1", name="A", type="meeting", capacity=4, floor=1)
    apply_changes(room, {"name": "B", "capacity": 6})
    assert (room.name, room.capacity) == ("B", 6)


def test_apply_changes_rejects_unknown_field_without_partial_write() -> None:
    room = Room(id="1", facility_id="f1", name="A", type="meeting", capacity=4, floor=1)
    with pytest.raises(ValueError):
        apply_changes(room, {"name": "B", "colour": "red"})
    assert room.name == "A"


def test_apply_changes_rejects_protected_field() -> None:
    room = Room(id="1", facility_id="f1", name="A", type="meeting", capacity=4, floor=1)
    with pytest.raises(ValueError):
        apply_changes(room, {"id": "2"})
