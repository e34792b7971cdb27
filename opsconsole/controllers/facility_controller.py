"""HTTP controller layer for facilities, rooms and reservations."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from opsconsole.controllers.dependencies import (
    get_facility_service,
    get_reservation_scheduler,
    patch_changes,
    raise_bad_request,
    raise_rejection,
    require_found,
)
from opsconsole.domain.models import OperationRejection, ReservationStatus, RoomStatus
from opsconsole.services.facility_service import FacilityService
from opsconsole.services.reservation_service import ReservationScheduler
from opsconsole.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["facilities"])

FacilityType = Literal["office", "warehouse", "retail", "other"]
FacilityStatus = Literal["active", "inactive", "under_maintenance", "under_construction"]
RoomType = Literal["meeting", "office", "storage", "common", "other"]
EquipmentStatus = Literal["operational", "maintenance", "broken", "retired"]
MaintenanceType = Literal["preventive", "corrective", "inspection", "emergency"]
MaintenanceStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]
UtilityType = Literal["electricity", "water", "gas", "internet", "other"]

# Alias for models that also declare a field called "date".
CalendarDate = date


class _ORMResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# --- Response DTOs ---


class EquipmentResponse(_ORMResponse):
    id: str
    name: str
    type: str
    purchase_date: date
    status: str
    serial_number: Optional[str] = None
    warranty_expiration: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None


class ReservationResponse(_ORMResponse):
    id: str
    room_id: str
    user_id: str
    user_name: str
    purpose: str
    start_time: datetime
    end_time: datetime
    status: str
    attendees: int
    notes: Optional[str] = None


class RoomResponse(_ORMResponse):
    id: str
    facility_id: str
    name: str
    type: str
    capacity: int
    floor: int
    status: str
    equipment: list[EquipmentResponse]
    reservations: list[ReservationResponse]


class MaintenanceRecordResponse(_ORMResponse):
    id: str
    facility_id: str
    date: date
    type: str
    description: str
    area: str
    cost: float
    provider: str
    status: str
    completion_date: Optional[date] = None
    notes: Optional[str] = None


class UtilityConsumptionResponse(_ORMResponse):
    id: str
    facility_id: str
    type: str
    year: int
    month: int
    reading: float
    unit: str
    cost: float
    notes: Optional[str] = None


class FacilityResponse(_ORMResponse):
    id: str
    name: str
    address: str
    type: str
    size: float
    floors: int
    status: str
    rooms: list[RoomResponse]
    maintenance_records: list[MaintenanceRecordResponse]
    utilities: list[UtilityConsumptionResponse]


class UpcomingMaintenanceRow(BaseModel):
    facility_id: str
    facility_name: str
    record: MaintenanceRecordResponse


class UtilityStatsResponse(BaseModel):
    readings: list[float]
    costs: list[float]
    months: list[int]
    total_reading: float = Field(ge=0.0)
    total_cost: float = Field(ge=0.0)
    average_unit_cost: float = Field(ge=0.0)


class DeleteResponse(BaseModel):
    deleted: bool


# --- Request DTOs ---


class FacilityCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    address: str
    type: FacilityType
    size: float = Field(ge=0.0)
    floors: int = Field(ge=1)
    status: FacilityStatus = "active"


class FacilityUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    type: Optional[FacilityType] = None
    size: Optional[float] = Field(default=None, ge=0.0)
    floors: Optional[int] = Field(default=None, ge=1)
    status: Optional[FacilityStatus] = None


class RoomCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    type: RoomType
    capacity: int = Field(ge=0)
    floor: int
    status: RoomStatus = "available"


class RoomUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[RoomType] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    floor: Optional[int] = None
    status: Optional[RoomStatus] = None


class EquipmentCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    purchase_date: date
    status: EquipmentStatus = "operational"
    serial_number: Optional[str] = None
    warranty_expiration: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None


class EquipmentUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = None
    status: Optional[EquipmentStatus] = None
    serial_number: Optional[str] = None
    warranty_expiration: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None


class ReservationCreateRequest(BaseModel):
    user_id: str = Field(min_length=1)
    user_name: str = Field(min_length=1)
    purpose: str
    start_time: datetime
    end_time: datetime
    attendees: int = Field(ge=1)
    notes: Optional[str] = None


class ReservationUpdateRequest(BaseModel):
    purpose: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[ReservationStatus] = None
    attendees: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = None


class ReservationStatusRequest(BaseModel):
    status: ReservationStatus


class MaintenanceCreateRequest(BaseModel):
    date: date
    type: MaintenanceType
    description: str
    area: str
    cost: float = Field(ge=0.0)
    provider: str
    status: MaintenanceStatus = "scheduled"
    completion_date: Optional[date] = None
    notes: Optional[str] = None


class MaintenanceUpdateRequest(BaseModel):
    date: Optional[CalendarDate] = None
    type: Optional[MaintenanceType] = None
    description: Optional[str] = None
    area: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0.0)
    provider: Optional[str] = None
    status: Optional[MaintenanceStatus] = None
    completion_date: Optional[CalendarDate] = None
    notes: Optional[str] = None


class UtilityCreateRequest(BaseModel):
    type: UtilityType
    year: int = Field(gt=0)
    month: int = Field(ge=1, le=12)
    reading: float = Field(ge=0.0)
    unit: str = Field(min_length=1)
    cost: float = Field(ge=0.0)
    notes: Optional[str] = None


class UtilityUpdateRequest(BaseModel):
    type: Optional[UtilityType] = None
    year: Optional[int] = Field(default=None, gt=0)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    reading: Optional[float] = Field(default=None, ge=0.0)
    unit: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0.0)
    notes: Optional[str] = None


# --- Facilities ---


@router.get("/facilities", response_model=list[FacilityResponse])
async def list_facilities(
    service: FacilityService = Depends(get_facility_service),
) -> list[FacilityResponse]:
    return [FacilityResponse.model_validate(item) for item in service.list_facilities()]


@router.post("/facilities", response_model=FacilityResponse, status_code=status.HTTP_201_CREATED)
async def create_facility(
    payload: FacilityCreateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> FacilityResponse:
    facility = service.add_facility(**payload.model_dump())
    return FacilityResponse.model_validate(facility)


@router.get("/facilities/{facility_id}", response_model=FacilityResponse)
async def get_facility(
    facility_id: str,
    service: FacilityService = Depends(get_facility_service),
) -> FacilityResponse:
    facility = require_found(service.get_facility(facility_id), "Facility")
    return FacilityResponse.model_validate(facility)


@router.patch("/facilities/{facility_id}", response_model=FacilityResponse)
async def update_facility(
    facility_id: str,
    payload: FacilityUpdateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> FacilityResponse:
    try:
        facility = service.update_facility(facility_id, patch_changes(payload))
    except ValueError as exc:
        raise_bad_request(exc)
    return FacilityResponse.model_validate(require_found(facility, "Facility"))


@router.delete("/facilities/{facility_id}", response_model=DeleteResponse)
async def delete_facility(
    facility_id: str,
    service: FacilityService = Depends(get_facility_service),
) -> DeleteResponse:
    require_found(service.delete_facility(facility_id), "Facility")
    return DeleteResponse(deleted=True)


# --- Rooms and equipment ---


@router.post(
    "/facilities/{facility_id}/rooms",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_room(
    facility_id: str,
    payload: RoomCreateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> RoomResponse:
    room = service.add_room(facility_id, **payload.model_dump())
    return RoomResponse.model_validate(require_found(room, "Facility"))


@router.get("/facilities/{facility_id}/rooms/{room_id}", response_model=RoomResponse)
async def get_room(
    facility_id: str,
    room_id: str,
    service: FacilityService = Depends(get_facility_service),
) -> RoomResponse:
    return RoomResponse.model_validate(require_found(service.get_room(facility_id, room_id), "Room"))


@router.patch("/facilities/{facility_id}/rooms/{room_id}", response_model=RoomResponse)
async def update_room(
    facility_id: str,
    room_id: str,
    payload: RoomUpdateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> RoomResponse:
    try:
        room = service.update_room(facility_id, room_id, patch_changes(payload))
    except ValueError as exc:
        raise_bad_request(exc)
    return RoomResponse.model_validate(require_found(room, "Room"))


@router.delete("/facilities/{facility_id}/rooms/{room_id}", response_model=DeleteResponse)
async def delete_room(
    facility_id: str,
    room_id: str,
    service: FacilityService = Depends(get_facility_service),
) -> DeleteResponse:
    require_found(service.delete_room(facility_id, room_id), "Room")
    return DeleteResponse(deleted=True)


@router.get("/facilities/{facility_id}/available_rooms", response_model=list[RoomResponse])
async def list_available_rooms(
    facility_id: str,
    room_type: Optional[RoomType] = Query(default=None, alias="type"),
    service: FacilityService = Depends(get_facility_service),
) -> list[RoomResponse]:
    rooms = service.get_available_rooms(facility_id, room_type)
    return [RoomResponse.model_validate(room) for room in rooms]


@router.post(
    "/facilities/{facility_id}/rooms/{room_id}/equipment",
    response_model=EquipmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_equipment(
    facility_id: str,
    room_id: str,
    payload: EquipmentCreateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> EquipmentResponse:
    equipment = service.add_equipment(facility_id, room_id, **payload.model_dump())
    return EquipmentResponse.model_validate(require_found(equipment, "Room"))


@router.patch(
    "/facilities/{facility_id}/rooms/{room_id}/equipment/{equipment_id}",
    response_model=EquipmentResponse,
)
async def update_equipment(
    facility_id: str,
    room_id: str,
    equipment_id: str,
    payload: EquipmentUpdateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> EquipmentResponse:
    try:
        equipment = service.update_equipment(
            facility_id,
            room_id,
            equipment_id,
            patch_changes(payload),
        )
    except ValueError as exc:
        raise_bad_request(exc)
    return EquipmentResponse.model_validate(require_found(equipment, "Equipment"))


@router.delete(
    "/facilities/{facility_id}/rooms/{room_id}/equipment/{equipment_id}",
    response_model=DeleteResponse,
)
async def delete_equipment(
    facility_id: str,
    room_id: str,
    equipment_id: str,
    service: FacilityService = Depends(get_facility_service),
) -> DeleteResponse:
    require_found(service.delete_equipment(facility_id, room_id, equipment_id), "Equipment")
    return DeleteResponse(deleted=True)


# --- Reservations ---


@router.get(
    "/facilities/{facility_id}/rooms/{room_id}/reservations",
    response_model=list[ReservationResponse],
)
async def list_reservations(
    facility_id: str,
    room_id: str,
    scheduler: ReservationScheduler = Depends(get_reservation_scheduler),
) -> list[ReservationResponse]:
    reservations = require_found(scheduler.list_reservations(facility_id, room_id), "Room")
    return [ReservationResponse.model_validate(item) for item in reservations]


@router.post(
    "/facilities/{facility_id}/rooms/{room_id}/reservations",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_reservation(
    facility_id: str,
    room_id: str,
    payload: ReservationCreateRequest,
    scheduler: ReservationScheduler = Depends(get_reservation_scheduler),
) -> ReservationResponse:
    """Book a room; conflicts and unavailable rooms map to 409."""
    try:
        outcome = scheduler.create_reservation(facility_id, room_id, **payload.model_dump())
    except ValueError as exc:
        raise_bad_request(exc)
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected reservation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create reservation",
        ) from exc

    outcome = require_found(outcome, "Room")
    if isinstance(outcome, OperationRejection):
        raise_rejection(outcome)
    return ReservationResponse.model_validate(outcome)


@router.patch(
    "/facilities/{facility_id}/rooms/{room_id}/reservations/{reservation_id}",
    response_model=ReservationResponse,
)
async def update_reservation(
    facility_id: str,
    room_id: str,
    reservation_id: str,
    payload: ReservationUpdateRequest,
    scheduler: ReservationScheduler = Depends(get_reservation_scheduler),
) -> ReservationResponse:
    try:
        reservation = scheduler.update_reservation(
            facility_id,
            room_id,
            reservation_id,
            patch_changes(payload),
        )
    except ValueError as exc:
        raise_bad_request(exc)
    return ReservationResponse.model_validate(require_found(reservation, "Reservation"))


@router.put(
    "/facilities/{facility_id}/rooms/{room_id}/reservations/{reservation_id}/status",
    response_model=ReservationResponse,
)
async def update_reservation_status(
    facility_id: str,
    room_id: str,
    reservation_id: str,
    payload: ReservationStatusRequest,
    scheduler: ReservationScheduler = Depends(get_reservation_scheduler),
) -> ReservationResponse:
    reservation = scheduler.update_reservation_status(
        facility_id,
        room_id,
        reservation_id,
        payload.status,
    )
    return ReservationResponse.model_validate(require_found(reservation, "Reservation"))


@router.delete(
    "/facilities/{facility_id}/rooms/{room_id}/reservations/{reservation_id}",
    response_model=DeleteResponse,
)
async def delete_reservation(
    facility_id: str,
    room_id: str,
    reservation_id: str,
    scheduler: ReservationScheduler = Depends(get_reservation_scheduler),
) -> DeleteResponse:
    require_found(scheduler.delete_reservation(facility_id, room_id, reservation_id), "Reservation")
    return DeleteResponse(deleted=True)


# --- Maintenance ---


@router.get("/maintenance/upcoming", response_model=list[UpcomingMaintenanceRow])
async def list_upcoming_maintenance(
    service: FacilityService = Depends(get_facility_service),
) -> list[UpcomingMaintenanceRow]:
    return [
        UpcomingMaintenanceRow(
            facility_id=row["facility_id"],
            facility_name=row["facility_name"],
            record=MaintenanceRecordResponse.model_validate(row["record"]),
        )
        for row in service.get_upcoming_maintenances()
    ]


@router.post(
    "/facilities/{facility_id}/maintenance",
    response_model=MaintenanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_maintenance_record(
    facility_id: str,
    payload: MaintenanceCreateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> MaintenanceRecordResponse:
    record = service.add_maintenance_record(facility_id, **payload.model_dump())
    return MaintenanceRecordResponse.model_validate(require_found(record, "Facility"))


@router.patch(
    "/facilities/{facility_id}/maintenance/{record_id}",
    response_model=MaintenanceRecordResponse,
)
async def update_maintenance_record(
    facility_id: str,
    record_id: str,
    payload: MaintenanceUpdateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> MaintenanceRecordResponse:
    try:
        record = service.update_maintenance_record(
            facility_id,
            record_id,
            patch_changes(payload),
        )
    except ValueError as exc:
        raise_bad_request(exc)
    return MaintenanceRecordResponse.model_validate(require_found(record, "Maintenance record"))


@router.delete("/facilities/{facility_id}/maintenance/{record_id}", response_model=DeleteResponse)
async def delete_maintenance_record(
    facility_id: str,
    record_id: str,
    service: FacilityService = Depends(get_facility_service),
) -> DeleteResponse:
    require_found(service.delete_maintenance_record(facility_id, record_id), "Maintenance record")
    return DeleteResponse(deleted=True)


# --- Utilities ---


@router.post(
    "/facilities/{facility_id}/utilities",
    response_model=UtilityConsumptionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_utility_consumption(
    facility_id: str,
    payload: UtilityCreateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> UtilityConsumptionResponse:
    consumption = service.add_utility_consumption(facility_id, **payload.model_dump())
    return UtilityConsumptionResponse.model_validate(require_found(consumption, "Facility"))


@router.patch(
    "/facilities/{facility_id}/utilities/{consumption_id}",
    response_model=UtilityConsumptionResponse,
)
async def update_utility_consumption(
    facility_id: str,
    consumption_id: str,
    payload: UtilityUpdateRequest,
    service: FacilityService = Depends(get_facility_service),
) -> UtilityConsumptionResponse:
    try:
        consumption = service.update_utility_consumption(
            facility_id,
            consumption_id,
            patch_changes(payload),
        )
    except ValueError as exc:
        raise_bad_request(exc)
    return UtilityConsumptionResponse.model_validate(require_found(consumption, "Utility consumption"))


@router.delete(
    "/facilities/{facility_id}/utilities/{consumption_id}",
    response_model=DeleteResponse,
)
async def delete_utility_consumption(
    facility_id: str,
    consumption_id: str,
    service: FacilityService = Depends(get_facility_service),
) -> DeleteResponse:
    require_found(
        service.delete_utility_consumption(facility_id, consumption_id),
        "Utility consumption",
    )
    return DeleteResponse(deleted=True)


@router.get("/facilities/{facility_id}/utilities/stats", response_model=UtilityStatsResponse)
async def utility_consumption_stats(
    facility_id: str,
    utility_type: UtilityType = Query(alias="type"),
    year: int = Query(gt=0),
    service: FacilityService = Depends(get_facility_service),
) -> UtilityStatsResponse:
    stats = require_found(
        service.get_utility_consumption_stats(facility_id, utility_type, year),
        "Facility",
    )
    return UtilityStatsResponse(**stats)
