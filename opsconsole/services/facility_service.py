"""Facility, room, equipment, maintenance and utility management."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import pandas as pd

from opsconsole.domain.constraints import (
    EQUIPMENT_STATUSES,
    MAINTENANCE_STATUSES,
    ROOM_STATUSES,
    UTILITY_TYPES,
    apply_changes,
    validate_status,
    validate_utility_period,
)
from opsconsole.domain.models import (
    Equipment,
    Facility,
    FacilityMaintenanceRecord,
    Room,
    UtilityConsumption,
)
from opsconsole.repository.data_repository import ConsoleRepository
from opsconsole.utils.config import Settings, get_settings
from opsconsole.utils.logger import get_logger


logger = get_logger(__name__)


def _find_by_id(items: list, item_id: str) -> Optional[Any]:
    return next((item for item in items if item.id == item_id), None)


def _remove_by_id(items: list, item_id: str) -> bool:
    item = _find_by_id(items, item_id)
    if item is None:
        return False
    items.remove(item)
    return True


class FacilityService:
    """CRUD over facilities and their nested collections.

    Every lookup that fails to resolve returns None (or False for deletes).
    Reservations are handled by ReservationScheduler.
    """

    def __init__(
        self,
        repository: Optional[ConsoleRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or ConsoleRepository(self._settings)

    # --- Facilities ---

    def add_facility(self, **fields: Any) -> Facility:
        for nested in ("maintenance_records", "rooms", "utilities"):
            fields.pop(nested, None)
        facility = Facility(id=self._repository.next_id(), **fields)
        self._repository.save_facility(facility)
        logger.info("Facility added | facility_id=%s | name=%s", facility.id, facility.name)
        return facility

    def update_facility(self, facility_id: str, changes: Mapping[str, Any]) -> Optional[Facility]:
        with self._repository.lock:
            facility = self._repository.get_facility(facility_id)
            if facility is None:
                return None
            apply_changes(
                facility,
                changes,
                protected=("id", "maintenance_records", "rooms", "utilities"),
            )
            return facility

    def delete_facility(self, facility_id: str) -> bool:
        return self._repository.remove_facility(facility_id)

    def get_facility(self, facility_id: str) -> Optional[Facility]:
        return self._repository.get_facility(facility_id)

    def list_facilities(self) -> list[Facility]:
        return self._repository.list_facilities()

    # --- Rooms ---

    def add_room(self, facility_id: str, **fields: Any) -> Optional[Room]:
        validate_status(fields.get("status", "available"), ROOM_STATUSES, "room status")
        with self._repository.lock:
            facility = self._repository.get_facility(facility_id)
            if facility is None:
                return None
            for nested in ("equipment", "reservations"):
                fields.pop(nested, None)
            room = Room(id=self._repository.next_id(), facility_id=facility_id, **fields)
            facility.rooms.append(room)
            return room

    def update_room(self, facility_id: str, room_id: str, changes: Mapping[str, Any]) -> Optional[Room]:
        if "status" in changes:
            validate_status(changes["status"], ROOM_STATUSES, "room status")
        with self._repository.lock:
            room = self._repository.get_room(facility_id, room_id)
            if room is None:
                return None
            apply_changes(room, changes, protected=("id", "facility_id", "equipment", "reservations"))
            return room

    def delete_room(self, facility_id: str, room_id: str) -> bool:
        with self._repository.lock:
            facility = self._repository.get_facility(facility_id)
            if facility is None:
                return False
            return _remove_by_id(facility.rooms, room_id)

    def get_room(self, facility_id: str, room_id: str) -> Optional[Room]:
        return self._repository.get_room(facility_id, room_id)

    # --- Equipment ---

    def add_equipment(self, facility_id: str, room_id: str, **fields: Any) -> Optional[Equipment]:
        validate_status(fields.get("status", "operational"), EQUIPMENT_STATUSES, "equipment status")
        with self._repository.lock:
            room = self._repository.get_room(facility_id, room_id)
            if room is None:
                return None
            equipment = Equipment(id=self._repository.next_id(), **fields)
            room.equipment.append(equipment)
            return equipment

    def update_equipment(
        self,
        facility_id: str,
        room_id: str,
        equipment_id: str,
        changes: Mapping[str, Any],
    ) -> Optional[Equipment]:
        if "status" in changes:
            validate_status(changes["status"], EQUIPMENT_STATUSES, "equipment status")
        with self._repository.lock:
            room = self._repository.get_room(facility_id, room_id)
            if room is None:
                return None
            equipment = _find_by_id(room.equipment, equipment_id)
            if equipment is None:
                return None
            apply_changes(equipment, changes)
            return equipment

    def delete_equipment(self, facility_id: str, room_id: str, equipment_id: str) -> bool:
        with self._repository.lock:
            room = self._repository.get_room(facility_id, room_id)
            if room is None:
                return False
            return _remove_by_id(room.equipment, equipment_id)

    # --- Maintenance ---

    def add_maintenance_record(
        self,
        facility_id: str,
        **fields: Any,
    ) -> Optional[FacilityMaintenanceRecord]:
        validate_status(fields.get("status", "scheduled"), MAINTENANCE_STATUSES, "maintenance status")
        with self._repository.lock:
            facility = self._repository.get_facility(facility_id)
            if facility is None:
                return None
            record = FacilityMaintenanceRecord(
                id=self._repository.next_id(),
                facility_id=facility_id,
                **fields,
            )
            facility.maintenance_records.append(record)
            return record

    def update_maintenance_record(
        self,
        facility_id: str,
        record_id: str,
        changes: Mapping[str, Any],
    ) -> Optional[FacilityMaintenanceRecord]:
        if "status" in changes:
            validate_status(changes["status"], MAINTENANCE_STATUSES, "maintenance status")
        with self._repository.lock:
            facility = self._repository.get_facility(facility_id)
            if facility is None:
                return None
            record = _find_by_id(facility.maintenance_records, record_id)
            if record is None:
                return None
            apply_changes(record, changes, protected=("id", "facility_id"))
            return record

    def delete_maintenance_record(self, facility_id: str, record_id: str) -> bool:
        with self._repository.lock:
            facility = self._repository.get_facility(facility_id)
            if facility is None:
                return False
            return _remove_by_id(facility.maintenance_records, record_id)

    # --- Utilities ---

    def add_utility_consumption(self, facility_id: str, **fields: Any) -> Optional[UtilityConsumption]:
        validate_status(fields["type"], UTILITY_TYPES, "utility type")
        validate_utility_period(fields["year"], fields["month"])
        with self._repository.lock:
            facility = self._repository.get_facility(facility_id)
            if facility is None:
                return None
            consumption = UtilityConsumption(
                id=self._repository.next_id(),
                facility_id=facility_id,
                **fields,
            )
            facility.utilities.append(consumption)
            return consumption

    def update_utility_consumption(
        self,
        facility_id: str,
        consumption_id: str,
        changes: Mapping[str, Any],
    ) -> Optional[UtilityConsumption]:
        if "type" in changes:
            validate_status(changes["type"], UTILITY_TYPES, "utility type")
        with self._repository.lock:
            facility = self._repository.get_facility(facility_id)
            if facility is None:
                return None
            consumption = _find_by_id(facility.utilities, consumption_id)
            if consumption is None:
                return None
            validate_utility_period(
                changes.get("year", consumption.year),
                changes.get("month", consumption.month),
            )
            apply_changes(consumption, changes, protected=("id", "facility_id"))
            return consumption

    def delete_utility_consumption(self, facility_id: str, consumption_id: str) -> bool:
        with self._repository.lock:
            facility = self._repository.get_facility(facility_id)
            if facility is None:
                return False
            return _remove_by_id(facility.utilities, consumption_id)

    # --- Queries ---

    def get_available_rooms(self, facility_id: str, room_type: Optional[str] = None) -> list[Room]:
        facility = self._repository.get_facility(facility_id)
        if facility is None:
            return []
        return [
            room
            for room in facility.rooms
            if room.status == "available" and (room_type is None or room.type == room_type)
        ]

    def get_upcoming_maintenances(self) -> list[dict[str, Any]]:
        """Scheduled maintenance across all facilities, with facility context."""
        return [
            {
                "facility_id": facility.id,
                "facility_name": facility.name,
                "record": record,
            }
            for facility in self._repository.list_facilities()
            for record in facility.maintenance_records
            if record.status == "scheduled"
        ]

    def get_utility_consumption_stats(
        self,
        facility_id: str,
        utility_type: str,
        year: int,
    ) -> Optional[dict[str, Any]]:
        """Monthly readings and costs for one utility, ordered by month."""
        facility = self._repository.get_facility(facility_id)
        if facility is None:
            return None

        frame = pd.DataFrame(
            [
                {"month": item.month, "reading": item.reading, "cost": item.cost}
                for item in facility.utilities
                if item.type == utility_type and item.year == year
            ],
            columns=["month", "reading", "cost"],
        )
        frame = frame.sort_values("month", kind="stable")
        total_reading = float(frame["reading"].sum()) if not frame.empty else 0.0
        total_cost = float(frame["cost"].sum()) if not frame.empty else 0.0
        return {
            "readings": [float(value) for value in frame["reading"]],
            "costs": [float(value) for value in frame["cost"]],
            "months": [int(value) for value in frame["month"]],
            "total_reading": total_reading,
            "total_cost": total_cost,
            "average_unit_cost": (total_cost / total_reading) if total_reading > 0 else 0.0,
        }
