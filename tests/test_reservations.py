"""Tests for room booking, conflict detection and room status derivation."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from opsconsole.domain.models import (
    ROOM_UNAVAILABLE,
    TIME_CONFLICT,
    OperationRejection,
    RoomReservation,
)
from opsconsole.repository.data_repository import ConsoleRepository
from opsconsole.services.facility_service import FacilityService
from opsconsole.services.reservation_service import ReservationScheduler
from opsconsole.utils.config import get_settings


NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _at(hour: int, minute: int = 0) -> datetime:
    return NOW.replace(hour=hour, minute=minute)


def _build_scheduler(now: datetime = NOW, **setting_overrides):
    settings = replace(get_settings(), **setting_overrides)
    repository = ConsoleRepository(settings)
    facilities = FacilityService(repository=repository, settings=settings)
    facility = facilities.add_facility(
        name="Head Office",
        address="1 Main Street",
        type="office",
        size=1500.0,
        floors=3,
    )
    room = facilities.add_room(
        facility.id,
        name="Meeting Room 1",
        type="meeting",
        capacity=10,
        floor=1,
    )
    scheduler = ReservationScheduler(
        repository=repository,
        settings=settings,
        clock=lambda: now,
    )
    return scheduler, facility, room


def _book(scheduler, facility, room, start: datetime, end: datetime):
    return scheduler.create_reservation(
        facility.id,
        room.id,
        user_id="u1",
        user_name="Ana Souza",
        purpose="Planning",
        start_time=start,
        end_time=end,
        attendees=6,
    )


def test_booking_sequence_with_overlap_and_abutting_window() -> None:
    scheduler, facility, room = _build_scheduler()

    first = _book(scheduler, facility, room, _at(10), _at(11))
    assert isinstance(first, RoomReservation)
    assert room.status == "reserved"

    overlapping = _book(scheduler, facility, room, _at(10, 30), _at(11, 30))
    assert isinstance(overlapping, OperationRejection)
    assert overlapping.code == TIME_CONFLICT

    abutting = _book(scheduler, facility, room, _at(11), _at(12))
    assert isinstance(abutting, RoomReservation)
    assert len(room.reservations) == 2
    assert first.id != abutting.id


def test_booking_that_covers_now_marks_room_occupied() -> None:
    scheduler, facility, room = _build_scheduler(now=_at(10, 15))

    reservation = _book(scheduler, facility, room, _at(10), _at(11))

    assert isinstance(reservation, RoomReservation)
    assert reservation.status == "scheduled"
    assert room.status == "occupied"


def test_booking_in_the_past_leaves_room_status_unchanged() -> None:
    scheduler, facility, room = _build_scheduler(now=_at(15))

    reservation = _book(scheduler, facility, room, _at(10), _at(11))

    assert isinstance(reservation, RoomReservation)
    assert room.status == "available"


def test_room_under_maintenance_rejects_booking() -> None:
    scheduler, facility, room = _build_scheduler()
    room.status = "maintenance"

    outcome = _book(scheduler, facility, room, _at(10), _at(11))

    assert isinstance(outcome, OperationRejection)
    assert outcome.code == ROOM_UNAVAILABLE
    assert room.reservations == []


def test_occupied_room_rejects_further_bookings() -> None:
    scheduler, facility, room = _build_scheduler(now=_at(10, 15))
    _book(scheduler, facility, room, _at(10), _at(11))

    outcome = _book(scheduler, facility, room, _at(14), _at(15))

    assert isinstance(outcome, OperationRejection)
    assert outcome.code == ROOM_UNAVAILABLE


def test_cancelled_reservation_still_blocks_its_window() -> None:
    scheduler, facility, room = _build_scheduler()
    first = _book(scheduler, facility, room, _at(10), _at(11))
    scheduler.update_reservation_status(facility.id, room.id, first.id, "cancelled")
    assert room.status == "available"

    outcome = _book(scheduler, facility, room, _at(10), _at(11))

    assert isinstance(outcome, OperationRejection)
    assert outcome.code == TIME_CONFLICT


def test_cancelled_reservation_frees_window_when_policy_disabled() -> None:
    scheduler, facility, room = _build_scheduler(reservation_conflicts_include_cancelled=False)
    first = _book(scheduler, facility, room, _at(10), _at(11))
    scheduler.update_reservation_status(facility.id, room.id, first.id, "cancelled")

    outcome = _book(scheduler, facility, room, _at(10), _at(11))

    assert isinstance(outcome, RoomReservation)
    assert room.status == "reserved"


def test_cancelling_only_active_reservation_makes_room_available() -> None:
    scheduler, facility, room = _build_scheduler()
    reservation = _book(scheduler, facility, room, _at(10), _at(11))

    updated = scheduler.update_reservation_status(facility.id, room.id, reservation.id, "cancelled")

    assert updated is reservation
    assert updated.status == "cancelled"
    assert room.status == "available"


def test_cancelling_one_of_two_active_reservations_keeps_room_status() -> None:
    scheduler, facility, room = _build_scheduler()
    first = _book(scheduler, facility, room, _at(10), _at(11))
    _book(scheduler, facility, room, _at(13), _at(14))

    scheduler.update_reservation_status(facility.id, room.id, first.id, "cancelled")

    assert room.status == "reserved"


def test_completing_reservation_does_not_change_room_status() -> None:
    scheduler, facility, room = _build_scheduler()
    reservation = _book(scheduler, facility, room, _at(10), _at(11))

    scheduler.update_reservation_status(facility.id, room.id, reservation.id, "completed")

    assert room.status == "reserved"


def test_delete_last_active_reservation_releases_room() -> None:
    scheduler, facility, room = _build_scheduler()
    reservation = _book(scheduler, facility, room, _at(10), _at(11))

    assert scheduler.delete_reservation(facility.id, room.id, reservation.id) is True
    assert room.reservations == []
    assert room.status == "available"


def test_delete_with_remaining_active_reservation_keeps_status() -> None:
    scheduler, facility, room = _build_scheduler()
    first = _book(scheduler, facility, room, _at(10), _at(11))
    _book(scheduler, facility, room, _at(13), _at(14))

    assert scheduler.delete_reservation(facility.id, room.id, first.id) is True
    assert room.status == "reserved"


def test_delete_ignores_reservation_status() -> None:
    scheduler, facility, room = _build_scheduler()
    reservation = _book(scheduler, facility, room, _at(10), _at(11))
    scheduler.update_reservation_status(facility.id, room.id, reservation.id, "completed")

    assert scheduler.delete_reservation(facility.id, room.id, reservation.id) is True
    assert scheduler.list_reservations(facility.id, room.id) == []


def test_unknown_ids_resolve_to_none_or_false() -> None:
    scheduler, facility, room = _build_scheduler()

    missing_room = scheduler.create_reservation(
        facility.id,
        "missing",
        user_id="u1",
        user_name="Ana Souza",
        purpose="Planning",
        start_time=_at(10),
        end_time=_at(11),
        attendees=2,
    )

    assert missing_room is None
    assert scheduler.update_reservation_status(facility.id, room.id, "missing", "cancelled") is None
    assert scheduler.update_reservation_status("missing", room.id, "1", "cancelled") is None
    assert scheduler.delete_reservation(facility.id, room.id, "missing") is False
    assert scheduler.list_reservations("missing", room.id) is None


def test_inverted_window_raises_value_error() -> None:
    scheduler, facility, room = _build_scheduler()

    with pytest.raises(ValueError):
        _book(scheduler, facility, room, _at(11), _at(10))


def test_naive_timestamps_are_treated_as_utc() -> None:
    scheduler, facility, room = _build_scheduler()

    reservation = _book(scheduler, facility, room, datetime(2026, 3, 2, 10), datetime(2026, 3, 2, 11))
    conflict = _book(scheduler, facility, room, _at(10, 30), _at(10, 45))

    assert reservation.start_time.tzinfo is not None
    assert isinstance(conflict, OperationRejection)


def test_update_reservation_rejects_unknown_status() -> None:
    scheduler, facility, room = _build_scheduler()
    reservation = _book(scheduler, facility, room, _at(10), _at(11))

    with pytest.raises(ValueError):
        scheduler.update_reservation_status(facility.id, room.id, reservation.id, "postponed")
    assert reservation.status == "scheduled"


def test_update_reservation_merges_fields() -> None:
    scheduler, facility, room = _build_scheduler()
    reservation = _book(scheduler, facility, room, _at(10), _at(11))

    updated = scheduler.update_reservation(
        facility.id,
        room.id,
        reservation.id,
        {"purpose": "Quarterly review", "attendees": 9},
    )

    assert updated.purpose == "Quarterly review"
    assert updated.attendees == 9
    assert updated.start_time == _at(10)
