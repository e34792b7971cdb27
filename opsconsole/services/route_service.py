"""Delivery route lifecycle and driver/vehicle status propagation."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union

from opsconsole.domain.constraints import (
    DESTINATION_STATUSES,
    ROUTE_STATUSES,
    apply_changes,
    validate_status,
)
from opsconsole.domain.models import (
    NOT_FOUND,
    RESOURCE_BUSY,
    DeliveryRoute,
    OperationRejection,
    RouteDestination,
)
from opsconsole.repository.data_repository import ConsoleRepository
from opsconsole.services.fleet_service import DriverDirectory, VehicleDirectory
from opsconsole.utils.clock import Clock, as_utc, utc_now
from opsconsole.utils.config import Settings, get_settings
from opsconsole.utils.logger import get_logger


logger = get_logger(__name__)


RouteOutcome = Union[DeliveryRoute, OperationRejection]

# Destination states after which nothing is left to deliver.
_EXHAUSTED_DESTINATION_STATUSES = frozenset({"completed", "skipped", "cancelled"})
# Route states whose resources have already been handed back.
_FINISHED_ROUTE_STATUSES = frozenset({"completed", "cancelled"})


def _build_destination(destination_id: str, fields: Mapping[str, Any]) -> RouteDestination:
    payload = dict(fields)
    validate_status(payload.get("status", "pending"), DESTINATION_STATUSES, "destination status")
    payload["scheduled_arrival"] = as_utc(payload["scheduled_arrival"])
    return RouteDestination(id=destination_id, **payload)


class ResourceStatusCoordinator:
    """Owns delivery routes and the busy/available state of their resources.

    A driver is `on_route` and a vehicle `in_use` while a route that references
    them is running. Resources are released by completing the route, by
    completing its last destination, or by deleting it while in progress.
    """

    def __init__(
        self,
        repository: Optional[ConsoleRepository] = None,
        settings: Optional[Settings] = None,
        drivers: Optional[DriverDirectory] = None,
        vehicles: Optional[VehicleDirectory] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or ConsoleRepository(self._settings)
        self._drivers = drivers or DriverDirectory(self._repository, self._settings)
        self._vehicles = vehicles or VehicleDirectory(self._repository, self._settings)
        self._clock = clock or utc_now

    # --- Route lifecycle ---

    def add_route(
        self,
        *,
        destinations: Iterable[Mapping[str, Any]] = (),
        **fields: Any,
    ) -> RouteOutcome:
        """Create a route and mark its driver and vehicle busy.

        Unknown driver or vehicle ids are rejected with `not_found`. When
        `route_requires_available_resources` is enabled, a resource that is not
        `available` is rejected with `resource_busy`; otherwise the previous
        status is overwritten.
        """
        validate_status(fields.setdefault("status", "in_progress"), ROUTE_STATUSES, "route status")

        with self._repository.lock:
            driver = self._drivers.find_by_id(fields["driver_id"])
            vehicle = self._vehicles.find_by_id(fields["vehicle_id"])
            if driver is None or vehicle is None:
                missing = "driver" if driver is None else "vehicle"
                logger.warning(
                    "Route rejected | reason=%s | driver_id=%s | vehicle_id=%s",
                    NOT_FOUND,
                    fields["driver_id"],
                    fields["vehicle_id"],
                )
                return OperationRejection(code=NOT_FOUND, message=f"Assigned {missing} does not exist")

            if self._settings.route_requires_available_resources and (
                driver.status != "available" or vehicle.status != "available"
            ):
                logger.warning(
                    "Route rejected | reason=%s | driver_status=%s | vehicle_status=%s",
                    RESOURCE_BUSY,
                    driver.status,
                    vehicle.status,
                )
                return OperationRejection(
                    code=RESOURCE_BUSY,
                    message="Driver or vehicle is already assigned to another route",
                )

            fields.setdefault("driver_name", driver.name)
            fields.setdefault("vehicle_plate", vehicle.plate)
            route = DeliveryRoute(
                id=self._repository.next_id(),
                destinations=[
                    _build_destination(self._repository.next_id(), item) for item in destinations
                ],
                **fields,
            )
            self._start_route(route)
            self._repository.save_route(route)

        logger.info(
            "Route started | route_id=%s | driver_id=%s | vehicle_id=%s | destinations=%s",
            route.id,
            route.driver_id,
            route.vehicle_id,
            len(route.destinations),
        )
        return route

    def update_route(self, route_id: str, changes: Mapping[str, Any]) -> Optional[DeliveryRoute]:
        """Plain field update; status changes here do not touch resources."""
        if "status" in changes:
            validate_status(changes["status"], ROUTE_STATUSES, "route status")
        with self._repository.lock:
            route = self._repository.get_route(route_id)
            if route is None:
                return None
            apply_changes(route, changes, protected=("id", "destinations"))
            return route

    def complete_route(self, route_id: str) -> Optional[DeliveryRoute]:
        """Finish a running route; a finished route is returned as is."""
        with self._repository.lock:
            route = self._repository.get_route(route_id)
            if route is None:
                return None
            self._finish_route(route)
            return route

    def close_exhausted_route(self, route_id: str) -> Optional[DeliveryRoute]:
        """Complete a route once no destination is left to visit.

        Destinations that were skipped or cancelled count as exhausted. The
        route is returned unchanged while work remains.
        """
        with self._repository.lock:
            route = self._repository.get_route(route_id)
            if route is None:
                return None
            if all(item.status in _EXHAUSTED_DESTINATION_STATUSES for item in route.destinations):
                self._finish_route(route)
            return route

    def delete_route(self, route_id: str) -> bool:
        with self._repository.lock:
            route = self._repository.get_route(route_id)
            if route is None:
                return False
            # Completed or cancelled routes have already released their resources.
            if route.status == "in_progress":
                self._release_resources(route)
            self._repository.remove_route(route_id)

        logger.info("Route deleted | route_id=%s | status=%s", route_id, route.status)
        return True

    def get_route(self, route_id: str) -> Optional[DeliveryRoute]:
        return self._repository.get_route(route_id)

    def list_routes(self) -> list[DeliveryRoute]:
        return self._repository.list_routes()

    def get_active_routes(self) -> list[DeliveryRoute]:
        return [route for route in self._repository.list_routes() if route.status == "in_progress"]

    def route_progress(self, route_id: str) -> Optional[float]:
        """Percentage of destinations completed, 0.0 for an empty route."""
        route = self._repository.get_route(route_id)
        if route is None:
            return None
        if not route.destinations:
            return 0.0
        completed = sum(1 for item in route.destinations if item.status == "completed")
        return round(100.0 * completed / len(route.destinations), 2)

    # --- Destinations ---

    def add_destination(self, route_id: str, **fields: Any) -> Optional[RouteDestination]:
        with self._repository.lock:
            route = self._repository.get_route(route_id)
            if route is None:
                return None
            destination = _build_destination(self._repository.next_id(), fields)
            route.destinations.append(destination)
            return destination

    def update_destination(
        self,
        route_id: str,
        destination_id: str,
        changes: Mapping[str, Any],
    ) -> Optional[RouteDestination]:
        if "status" in changes:
            validate_status(changes["status"], DESTINATION_STATUSES, "destination status")
        with self._repository.lock:
            destination = self._find_destination(route_id, destination_id)
            if destination is None:
                return None
            normalized = dict(changes)
            for key in ("scheduled_arrival", "actual_arrival"):
                if isinstance(normalized.get(key), datetime):
                    normalized[key] = as_utc(normalized[key])
            apply_changes(destination, normalized)
            return destination

    def complete_destination(self, route_id: str, destination_id: str) -> Optional[RouteDestination]:
        """Mark a stop delivered; finishing the last stop completes the route."""
        with self._repository.lock:
            route = self._repository.get_route(route_id)
            if route is None:
                return None
            destination = next(
                (item for item in route.destinations if item.id == destination_id),
                None,
            )
            if destination is None:
                return None

            destination.status = "completed"
            destination.actual_arrival = self._clock()
            if all(item.status == "completed" for item in route.destinations):
                self._finish_route(route)
            return destination

    def ordered_destinations(self, route_id: str) -> Optional[list[RouteDestination]]:
        route = self._repository.get_route(route_id)
        if route is None:
            return None
        return sorted(route.destinations, key=lambda item: item.order)

    # --- Resource transitions ---

    def _start_route(self, route: DeliveryRoute) -> None:
        self._drivers.update_status(route.driver_id, "on_route")
        self._vehicles.update_status(route.vehicle_id, "in_use")

    def _finish_route(self, route: DeliveryRoute) -> None:
        if route.status in _FINISHED_ROUTE_STATUSES:
            logger.info("Route already finished | route_id=%s | status=%s", route.id, route.status)
            return
        route.status = "completed"
        self._release_resources(route)
        logger.info("Route completed | route_id=%s", route.id)

    def _release_resources(self, route: DeliveryRoute) -> None:
        self._drivers.update_status(route.driver_id, "available")
        self._vehicles.update_status(route.vehicle_id, "available")
        logger.info(
            "Route resources released | route_id=%s | driver_id=%s | vehicle_id=%s",
            route.id,
            route.driver_id,
            route.vehicle_id,
        )

    def _find_destination(self, route_id: str, destination_id: str) -> Optional[RouteDestination]:
        route = self._repository.get_route(route_id)
        if route is None:
            return None
        return next((item for item in route.destinations if item.id == destination_id), None)
