"""In-memory repository that owns every console collection."""

from __future__ import annotations

import itertools
from threading import RLock
from typing import Optional

from opsconsole.domain.models import DeliveryRoute, Driver, Facility, Room, Vehicle
from opsconsole.utils.config import Settings, get_settings


class ConsoleRepository:
    """Process-lifetime state container handed to every service.

    Collections are plain dicts keyed by id, kept in insertion order. Callers
    that read-modify-write across several entities hold `lock` for the whole
    operation so each one completes before the next starts.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._lock = RLock()
        self._id_sequence = itertools.count(1)
        self._facilities: dict[str, Facility] = {}
        self._drivers: dict[str, Driver] = {}
        self._vehicles: dict[str, Vehicle] = {}
        self._routes: dict[str, DeliveryRoute] = {}

    @property
    def lock(self) -> RLock:
        return self._lock

    def next_id(self) -> str:
        with self._lock:
            return str(next(self._id_sequence))

    # --- Facilities ---

    def save_facility(self, facility: Facility) -> Facility:
        with self._lock:
            self._facilities[facility.id] = facility
            return facility

    def get_facility(self, facility_id: str) -> Optional[Facility]:
        return self._facilities.get(facility_id)

    def list_facilities(self) -> list[Facility]:
        with self._lock:
            return list(self._facilities.values())

    def remove_facility(self, facility_id: str) -> bool:
        with self._lock:
            return self._facilities.pop(facility_id, None) is not None

    def get_room(self, facility_id: str, room_id: str) -> Optional[Room]:
        facility = self.get_facility(facility_id)
        if facility is None:
            return None
        return next((room for room in facility.rooms if room.id == room_id), None)

    # --- Drivers ---

    def save_driver(self, driver: Driver) -> Driver:
        with self._lock:
            self._drivers[driver.id] = driver
            return driver

    def get_driver(self, driver_id: str) -> Optional[Driver]:
        return self._drivers.get(driver_id)

    def list_drivers(self) -> list[Driver]:
        with self._lock:
            return list(self._drivers.values())

    def remove_driver(self, driver_id: str) -> bool:
        with self._lock:
            return self._drivers.pop(driver_id, None) is not None

    # --- Vehicles ---

    def save_vehicle(self, vehicle: Vehicle) -> Vehicle:
        with self._lock:
            self._vehicles[vehicle.id] = vehicle
            return vehicle

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        return self._vehicles.get(vehicle_id)

    def list_vehicles(self) -> list[Vehicle]:
        with self._lock:
            return list(self._vehicles.values())

    def remove_vehicle(self, vehicle_id: str) -> bool:
        with self._lock:
            return self._vehicles.pop(vehicle_id, None) is not None

    # --- Routes ---

    def save_route(self, route: DeliveryRoute) -> DeliveryRoute:
        with self._lock:
            self._routes[route.id] = route
            return route

    def get_route(self, route_id: str) -> Optional[DeliveryRoute]:
        return self._routes.get(route_id)

    def list_routes(self) -> list[DeliveryRoute]:
        with self._lock:
            return list(self._routes.values())

    def remove_route(self, route_id: str) -> bool:
        with self._lock:
            return self._routes.pop(route_id, None) is not None

    def count_entities(self) -> dict[str, int]:
        """Collection sizes for diagnostics."""
        with self._lock:
            return {
                "facilities": len(self._facilities),
                "rooms": sum(len(facility.rooms) for facility in self._facilities.values()),
                "drivers": len(self._drivers),
                "vehicles": len(self._vehicles),
                "routes": len(self._routes),
            }
