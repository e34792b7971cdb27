"""HTTP controller layer for delivery routes and destinations."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from opsconsole.controllers.dependencies import (
    get_route_coordinator,
    patch_changes,
    raise_bad_request,
    raise_rejection,
    require_found,
)
from opsconsole.domain.models import DestinationStatus, OperationRejection, RouteStatus
from opsconsole.services.route_service import ResourceStatusCoordinator
from opsconsole.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["routes"])


class DestinationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    address: str
    scheduled_arrival: datetime
    order: int
    status: str
    actual_arrival: Optional[datetime] = None
    notes: Optional[str] = None


class RouteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    start_date: date
    end_date: date
    status: str
    driver_id: str
    driver_name: str
    vehicle_id: str
    vehicle_plate: str
    starting_point: str
    destinations: list[DestinationResponse]
    total_distance: float
    estimated_fuel_cost: float


class RouteProgressResponse(BaseModel):
    route_id: str
    status: str
    progress_percentage: float = Field(ge=0.0, le=100.0)


class DeleteResponse(BaseModel):
    deleted: bool


class DestinationRequest(BaseModel):
    address: str = Field(min_length=1)
    scheduled_arrival: datetime
    order: int = Field(ge=0)
    status: DestinationStatus = "pending"
    notes: Optional[str] = None


class DestinationUpdateRequest(BaseModel):
    address: Optional[str] = Field(default=None, min_length=1)
    scheduled_arrival: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    order: Optional[int] = Field(default=None, ge=0)
    status: Optional[DestinationStatus] = None
    notes: Optional[str] = None


class RouteCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    start_date: date
    end_date: date
    driver_id: str = Field(min_length=1)
    vehicle_id: str = Field(min_length=1)
    status: RouteStatus = "in_progress"
    starting_point: str = ""
    destinations: list[DestinationRequest] = Field(default_factory=list)
    total_distance: float = Field(default=0.0, ge=0.0)
    estimated_fuel_cost: float = Field(default=0.0, ge=0.0)


class RouteUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[RouteStatus] = None
    starting_point: Optional[str] = None
    total_distance: Optional[float] = Field(default=None, ge=0.0)
    estimated_fuel_cost: Optional[float] = Field(default=None, ge=0.0)


@router.get("/routes", response_model=list[RouteResponse])
async def list_routes(
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> list[RouteResponse]:
    return [RouteResponse.model_validate(route) for route in coordinator.list_routes()]


@router.get("/routes/active", response_model=list[RouteResponse])
async def list_active_routes(
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> list[RouteResponse]:
    return [RouteResponse.model_validate(route) for route in coordinator.get_active_routes()]


@router.post("/routes", response_model=RouteResponse, status_code=status.HTTP_201_CREATED)
async def create_route(
    payload: RouteCreateRequest,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> RouteResponse:
    """Create a route; its driver and vehicle become busy immediately."""
    fields = payload.model_dump(exclude={"destinations"})
    try:
        outcome = coordinator.add_route(
            destinations=[item.model_dump() for item in payload.destinations],
            **fields,
        )
    except ValueError as exc:
        raise_bad_request(exc)
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected route creation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create route",
        ) from exc

    if isinstance(outcome, OperationRejection):
        raise_rejection(outcome)
    return RouteResponse.model_validate(outcome)


@router.get("/routes/{route_id}", response_model=RouteResponse)
async def get_route(
    route_id: str,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> RouteResponse:
    return RouteResponse.model_validate(require_found(coordinator.get_route(route_id), "Route"))


@router.patch("/routes/{route_id}", response_model=RouteResponse)
async def update_route(
    route_id: str,
    payload: RouteUpdateRequest,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> RouteResponse:
    try:
        route = coordinator.update_route(route_id, patch_changes(payload))
    except ValueError as exc:
        raise_bad_request(exc)
    return RouteResponse.model_validate(require_found(route, "Route"))


@router.delete("/routes/{route_id}", response_model=DeleteResponse)
async def delete_route(
    route_id: str,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> DeleteResponse:
    require_found(coordinator.delete_route(route_id), "Route")
    return DeleteResponse(deleted=True)


@router.post("/routes/{route_id}/complete", response_model=RouteResponse)
async def complete_route(
    route_id: str,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> RouteResponse:
    return RouteResponse.model_validate(require_found(coordinator.complete_route(route_id), "Route"))


@router.post("/routes/{route_id}/close", response_model=RouteResponse)
async def close_exhausted_route(
    route_id: str,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> RouteResponse:
    route = coordinator.close_exhausted_route(route_id)
    return RouteResponse.model_validate(require_found(route, "Route"))


@router.get("/routes/{route_id}/progress", response_model=RouteProgressResponse)
async def route_progress(
    route_id: str,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> RouteProgressResponse:
    route = require_found(coordinator.get_route(route_id), "Route")
    return RouteProgressResponse(
        route_id=route.id,
        status=route.status,
        progress_percentage=coordinator.route_progress(route_id) or 0.0,
    )


@router.post(
    "/routes/{route_id}/destinations",
    response_model=DestinationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_destination(
    route_id: str,
    payload: DestinationRequest,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> DestinationResponse:
    destination = coordinator.add_destination(route_id, **payload.model_dump())
    return DestinationResponse.model_validate(require_found(destination, "Route"))


@router.patch(
    "/routes/{route_id}/destinations/{destination_id}",
    response_model=DestinationResponse,
)
async def update_destination(
    route_id: str,
    destination_id: str,
    payload: DestinationUpdateRequest,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> DestinationResponse:
    try:
        destination = coordinator.update_destination(
            route_id,
            destination_id,
            patch_changes(payload),
        )
    except ValueError as exc:
        raise_bad_request(exc)
    return DestinationResponse.model_validate(require_found(destination, "Destination"))


@router.post(
    "/routes/{route_id}/destinations/{destination_id}/complete",
    response_model=DestinationResponse,
)
async def complete_destination(
    route_id: str,
    destination_id: str,
    coordinator: ResourceStatusCoordinator = Depends(get_route_coordinator),
) -> DestinationResponse:
    destination = coordinator.complete_destination(route_id, destination_id)
    return DestinationResponse.model_validate(require_found(destination, "Destination"))
