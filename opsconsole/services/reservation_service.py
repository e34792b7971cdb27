"""Room reservation scheduling and occupancy derivation."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Union

from opsconsole.domain.constraints import (
    BOOKABLE_ROOM_STATUSES,
    RESERVATION_STATUSES,
    apply_changes,
    find_conflicting_reservation,
    is_active_reservation,
    room_status_after_booking,
    validate_status,
    validate_time_window,
)
from opsconsole.domain.models import (
    ROOM_UNAVAILABLE,
    TIME_CONFLICT,
    OperationRejection,
    Room,
    RoomReservation,
)
from opsconsole.repository.data_repository import ConsoleRepository
from opsconsole.utils.clock import Clock, as_utc, utc_now
from opsconsole.utils.config import Settings, get_settings
from opsconsole.utils.logger import get_logger


logger = get_logger(__name__)


ReservationOutcome = Union[RoomReservation, OperationRejection]


class ReservationScheduler:
    """Books rooms and keeps each room's status in step with its reservations."""

    def __init__(
        self,
        repository: Optional[ConsoleRepository] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or ConsoleRepository(self._settings)
        self._clock = clock or utc_now

    def list_reservations(self, facility_id: str, room_id: str) -> Optional[list[RoomReservation]]:
        room = self._repository.get_room(facility_id, room_id)
        if room is None:
            return None
        return list(room.reservations)

    def create_reservation(
        self,
        facility_id: str,
        room_id: str,
        *,
        user_id: str,
        user_name: str,
        purpose: str,
        start_time: datetime,
        end_time: datetime,
        attendees: int,
        notes: Optional[str] = None,
    ) -> Optional[ReservationOutcome]:
        """Book a room, or return a rejection when it is unavailable or taken.

        Returns None when the facility or room does not exist. Overlap uses
        half-open windows, so a booking starting exactly when another ends is
        accepted. Cancelled reservations keep blocking their window unless
        `reservation_conflicts_include_cancelled` is turned off.
        """
        start_time = as_utc(start_time)
        end_time = as_utc(end_time)
        validate_time_window(start_time, end_time)

        with self._repository.lock:
            room = self._repository.get_room(facility_id, room_id)
            if room is None:
                return None

            if room.status not in BOOKABLE_ROOM_STATUSES:
                logger.warning(
                    "Reservation rejected | room_id=%s | reason=%s | room_status=%s",
                    room_id,
                    ROOM_UNAVAILABLE,
                    room.status,
                )
                return OperationRejection(
                    code=ROOM_UNAVAILABLE,
                    message="Room is not available for reservation",
                )

            conflict = find_conflicting_reservation(
                room.reservations,
                start_time,
                end_time,
                include_cancelled=self._settings.reservation_conflicts_include_cancelled,
            )
            if conflict is not None:
                logger.warning(
                    "Reservation rejected | room_id=%s | reason=%s | conflicting_id=%s",
                    room_id,
                    TIME_CONFLICT,
                    conflict.id,
                )
                return OperationRejection(
                    code=TIME_CONFLICT,
                    message="Time slot is already reserved",
                )

            reservation = RoomReservation(
                id=self._repository.next_id(),
                room_id=room_id,
                user_id=user_id,
                user_name=user_name,
                purpose=purpose,
                start_time=start_time,
                end_time=end_time,
                attendees=attendees,
                notes=notes,
            )
            room.reservations.append(reservation)
            room.status = room_status_after_booking(
                room.status,
                start_time,
                end_time,
                self._clock(),
            )

        logger.info(
            "Reservation created | room_id=%s | reservation_id=%s | room_status=%s",
            room_id,
            reservation.id,
            room.status,
        )
        return reservation

    def update_reservation(
        self,
        facility_id: str,
        room_id: str,
        reservation_id: str,
        changes: Mapping[str, Any],
    ) -> Optional[RoomReservation]:
        if "status" in changes:
            validate_status(changes["status"], RESERVATION_STATUSES, "reservation status")

        with self._repository.lock:
            room = self._repository.get_room(facility_id, room_id)
            if room is None:
                return None
            reservation = _find_reservation(room, reservation_id)
            if reservation is None:
                return None

            normalized = dict(changes)
            for key in ("start_time", "end_time"):
                if key in normalized:
                    normalized[key] = as_utc(normalized[key])
            validate_time_window(
                normalized.get("start_time", reservation.start_time),
                normalized.get("end_time", reservation.end_time),
            )
            apply_changes(reservation, normalized, protected=("id", "room_id"))

            if normalized.get("status") == "cancelled":
                self._release_room_if_idle(room, ignore_id=reservation_id)
                logger.info(
                    "Reservation cancelled | room_id=%s | reservation_id=%s | room_status=%s",
                    room_id,
                    reservation_id,
                    room.status,
                )
            return reservation

    def update_reservation_status(
        self,
        facility_id: str,
        room_id: str,
        reservation_id: str,
        status: str,
    ) -> Optional[RoomReservation]:
        return self.update_reservation(
            facility_id,
            room_id,
            reservation_id,
            {"status": status},
        )

    def delete_reservation(self, facility_id: str, room_id: str, reservation_id: str) -> bool:
        """Remove a reservation regardless of its status."""
        with self._repository.lock:
            room = self._repository.get_room(facility_id, room_id)
            if room is None:
                return False
            reservation = _find_reservation(room, reservation_id)
            if reservation is None:
                return False
            room.reservations.remove(reservation)
            self._release_room_if_idle(room)

        logger.info(
            "Reservation deleted | room_id=%s | reservation_id=%s | room_status=%s",
            room_id,
            reservation_id,
            room.status,
        )
        return True

    @staticmethod
    def _release_room_if_idle(room: Room, ignore_id: Optional[str] = None) -> None:
        has_active = any(
            is_active_reservation(item)
            for item in room.reservations
            if item.id != ignore_id
        )
        if not has_active:
            room.status = "available"


def _find_reservation(room: Room, reservation_id: str) -> Optional[RoomReservation]:
    return next((item for item in room.reservations if item.id == reservation_id), None)
