"""Domain-level validation rules and status predicates."""

from __future__ import annotations

from dataclasses import fields
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from opsconsole.domain.models import RoomReservation


ROOM_STATUSES = frozenset({"available", "occupied", "maintenance", "reserved"})
BOOKABLE_ROOM_STATUSES = frozenset({"available", "reserved"})
RESERVATION_STATUSES = frozenset({"scheduled", "in_progress", "completed", "cancelled"})
INACTIVE_RESERVATION_STATUSES = frozenset({"cancelled", "completed"})
ROUTE_STATUSES = frozenset({"planned", "in_progress", "completed", "cancelled"})
DESTINATION_STATUSES = frozenset(
    {"pending", "arrived", "completed", "skipped", "delayed", "cancelled"}
)
DRIVER_STATUSES = frozenset({"available", "on_route", "off_duty", "inactive"})
VEHICLE_STATUSES = frozenset({"available", "in_use", "maintenance", "inactive"})
EQUIPMENT_STATUSES = frozenset({"operational", "maintenance", "broken", "retired"})
MAINTENANCE_STATUSES = frozenset({"scheduled", "in_progress", "completed", "cancelled"})
UTILITY_TYPES = frozenset({"electricity", "water", "gas", "internet", "other"})


def validate_status(value: str, allowed: frozenset[str], label: str) -> None:
    if value not in allowed:
        raise ValueError(f"{label} must be one of {sorted(allowed)}, got {value!r}")


def validate_time_window(start_time: datetime, end_time: datetime) -> None:
    if start_time >= end_time:
        raise ValueError("start_time must be earlier than end_time")


def validate_utility_period(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    if year <= 0:
        raise ValueError("year must be > 0")


def windows_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> bool:
    """Half-open overlap test: windows that only touch do not overlap."""
    return start_a < end_b and end_a > start_b


def is_active_reservation(reservation: RoomReservation) -> bool:
    return reservation.status not in INACTIVE_RESERVATION_STATUSES


def room_status_after_booking(
    current_status: str,
    start_time: datetime,
    end_time: datetime,
    now: datetime,
) -> str:
    """Return the room status implied by a newly accepted booking."""
    if start_time <= now < end_time:
        return "occupied"
    if now < start_time:
        return "reserved"
    return current_status


def find_conflicting_reservation(
    reservations: list[RoomReservation],
    start_time: datetime,
    end_time: datetime,
    *,
    include_cancelled: bool,
) -> Optional[RoomReservation]:
    for existing in reservations:
        if not include_cancelled and existing.status == "cancelled":
            continue
        if windows_overlap(start_time, end_time, existing.start_time, existing.end_time):
            return existing
    return None


def apply_changes(
    entity: object,
    changes: Mapping[str, Any],
    *,
    protected: Iterable[str] = ("id",),
) -> None:
    """Merge a partial update into a dataclass entity in place.

    Unknown or protected field names raise ValueError before anything is
    written, so a rejected update leaves the entity untouched.
    """
    known_fields = {item.name for item in fields(entity)}  # type: ignore[arg-type]
    blocked = set(protected)
    for name in changes:
        if name not in known_fields:
            raise ValueError(f"unknown field {name!r}")
        if name in blocked:
            raise ValueError(f"field {name!r} cannot be updated")
    for name, value in changes.items():
        setattr(entity, name, value)
