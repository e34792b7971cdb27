"""Shared FastAPI dependency providers for the controller layer."""

from __future__ import annotations

from typing import Any, NoReturn

from fastapi import HTTPException, Request, status
from pydantic import BaseModel

from opsconsole.domain.models import NOT_FOUND, OperationRejection
from opsconsole.services.facility_service import FacilityService
from opsconsole.services.fleet_service import DriverDirectory, VehicleDirectory
from opsconsole.services.reservation_service import ReservationScheduler
from opsconsole.services.route_service import ResourceStatusCoordinator


def _service_from_state(request: Request, name: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} is not initialized",
        )
    return service


def get_facility_service(request: Request) -> FacilityService:
    return _service_from_state(request, "facility_service")


def get_reservation_scheduler(request: Request) -> ReservationScheduler:
    return _service_from_state(request, "reservation_scheduler")


def get_driver_directory(request: Request) -> DriverDirectory:
    return _service_from_state(request, "driver_directory")


def get_vehicle_directory(request: Request) -> VehicleDirectory:
    return _service_from_state(request, "vehicle_directory")


def get_route_coordinator(request: Request) -> ResourceStatusCoordinator:
    return _service_from_state(request, "route_coordinator")


def require_found(entity: Any, label: str) -> Any:
    if entity is None or entity is False:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found",
        )
    return entity


def patch_changes(payload: BaseModel) -> dict[str, Any]:
    """Fields the client sent; an explicit null leaves the stored value alone."""
    return payload.model_dump(exclude_unset=True, exclude_none=True)


def raise_rejection(rejection: OperationRejection) -> NoReturn:
    status_code = (
        status.HTTP_404_NOT_FOUND
        if rejection.code == NOT_FOUND
        else status.HTTP_409_CONFLICT
    )
    raise HTTPException(
        status_code=status_code,
        detail={"error": rejection.message, "code": rejection.code},
    )


def raise_bad_request(exc: ValueError) -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=str(exc),
    ) from exc
