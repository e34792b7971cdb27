"""Driver and vehicle directories."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from opsconsole.domain.constraints import (
    DRIVER_STATUSES,
    VEHICLE_STATUSES,
    apply_changes,
    validate_status,
)
from opsconsole.domain.models import (
    Driver,
    FuelRecord,
    Vehicle,
    VehicleDocument,
    VehicleMaintenanceRecord,
)
from opsconsole.repository.data_repository import ConsoleRepository
from opsconsole.utils.config import Settings, get_settings
from opsconsole.utils.logger import get_logger


logger = get_logger(__name__)


class DriverDirectory:
    def __init__(
        self,
        repository: Optional[ConsoleRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or ConsoleRepository(self._settings)

    def add_driver(self, **fields: Any) -> Driver:
        validate_status(fields.get("status", "available"), DRIVER_STATUSES, "driver status")
        driver = Driver(id=self._repository.next_id(), **fields)
        self._repository.save_driver(driver)
        logger.info("Driver added | driver_id=%s", driver.id)
        return driver

    def update_driver(self, driver_id: str, changes: Mapping[str, Any]) -> Optional[Driver]:
        if "status" in changes:
            validate_status(changes["status"], DRIVER_STATUSES, "driver status")
        with self._repository.lock:
            driver = self._repository.get_driver(driver_id)
            if driver is None:
                return None
            apply_changes(driver, changes)
            return driver

    def delete_driver(self, driver_id: str) -> bool:
        return self._repository.remove_driver(driver_id)

    def find_by_id(self, driver_id: str) -> Optional[Driver]:
        return self._repository.get_driver(driver_id)

    def list_drivers(self) -> list[Driver]:
        return self._repository.list_drivers()

    def get_drivers_by_status(self, status: str) -> list[Driver]:
        return [driver for driver in self._repository.list_drivers() if driver.status == status]

    def update_status(self, driver_id: str, status: str) -> Optional[Driver]:
        """Set a driver's status; an unknown id is ignored."""
        driver = self.update_driver(driver_id, {"status": status})
        if driver is None:
            logger.debug("Driver status update skipped | driver_id=%s | status=%s", driver_id, status)
        return driver


class VehicleDirectory:
    def __init__(
        self,
        repository: Optional[ConsoleRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or ConsoleRepository(self._settings)

    def add_vehicle(self, **fields: Any) -> Vehicle:
        validate_status(fields.get("status", "available"), VEHICLE_STATUSES, "vehicle status")
        # History always starts empty for a newly registered vehicle.
        for history_field in ("documents", "maintenance_history", "fuel_history"):
            fields.pop(history_field, None)
        vehicle = Vehicle(id=self._repository.next_id(), **fields)
        self._repository.save_vehicle(vehicle)
        logger.info("Vehicle added | vehicle_id=%s | plate=%s", vehicle.id, vehicle.plate)
        return vehicle

    def update_vehicle(self, vehicle_id: str, changes: Mapping[str, Any]) -> Optional[Vehicle]:
        if "status" in changes:
            validate_status(changes["status"], VEHICLE_STATUSES, "vehicle status")
        with self._repository.lock:
            vehicle = self._repository.get_vehicle(vehicle_id)
            if vehicle is None:
                return None
            apply_changes(vehicle, changes)
            return vehicle

    def delete_vehicle(self, vehicle_id: str) -> bool:
        return self._repository.remove_vehicle(vehicle_id)

    def find_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        return self._repository.get_vehicle(vehicle_id)

    def list_vehicles(self) -> list[Vehicle]:
        return self._repository.list_vehicles()

    def get_vehicles_by_status(self, status: str) -> list[Vehicle]:
        return [vehicle for vehicle in self._repository.list_vehicles() if vehicle.status == status]

    def update_status(self, vehicle_id: str, status: str) -> Optional[Vehicle]:
        """Set a vehicle's status; an unknown id is ignored."""
        vehicle = self.update_vehicle(vehicle_id, {"status": status})
        if vehicle is None:
            logger.debug("Vehicle status update skipped | vehicle_id=%s | status=%s", vehicle_id, status)
        return vehicle

    def add_maintenance_record(self, vehicle_id: str, **fields: Any) -> Optional[VehicleMaintenanceRecord]:
        """Append a service record and roll the vehicle's odometer forward."""
        with self._repository.lock:
            vehicle = self._repository.get_vehicle(vehicle_id)
            if vehicle is None:
                return None
            record = VehicleMaintenanceRecord(id=self._repository.next_id(), **fields)
            vehicle.maintenance_history.append(record)
            vehicle.last_maintenance = record.date
            vehicle.odometer = record.odometer
            return record

    def add_fuel_record(self, vehicle_id: str, **fields: Any) -> Optional[FuelRecord]:
        with self._repository.lock:
            vehicle = self._repository.get_vehicle(vehicle_id)
            if vehicle is None:
                return None
            record = FuelRecord(id=self._repository.next_id(), **fields)
            vehicle.fuel_history.append(record)
            vehicle.odometer = record.odometer
            return record

    def add_vehicle_document(self, vehicle_id: str, **fields: Any) -> Optional[VehicleDocument]:
        with self._repository.lock:
            vehicle = self._repository.get_vehicle(vehicle_id)
            if vehicle is None:
                return None
            document = VehicleDocument(id=self._repository.next_id(), **fields)
            vehicle.documents.append(document)
            return document
