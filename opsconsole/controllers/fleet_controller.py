"""HTTP controller layer for drivers and vehicles."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field

from opsconsole.controllers.dependencies import (
    get_driver_directory,
    get_vehicle_directory,
    patch_changes,
    raise_bad_request,
    require_found,
)
from opsconsole.domain.models import DriverStatus, VehicleStatus
from opsconsole.services.fleet_service import DriverDirectory, VehicleDirectory


router = APIRouter(tags=["fleet"])

VehicleType = Literal["car", "truck", "van", "motorcycle", "other"]
FuelType = Literal["gasoline", "diesel", "ethanol", "electric", "hybrid"]
MaintenanceType = Literal["preventive", "corrective", "inspection"]
DocumentStatus = Literal["valid", "expired", "pending"]


class DeleteResponse(BaseModel):
    deleted: bool


class DriverResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone: str
    license_number: str
    license_type: str
    license_expiration: date
    status: str
    current_vehicle_id: Optional[str] = None


class DriverCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    email: str
    phone: str
    license_number: str = Field(min_length=1)
    license_type: str = Field(min_length=1)
    license_expiration: date
    status: DriverStatus = "available"
    current_vehicle_id: Optional[str] = None


class DriverUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    license_number: Optional[str] = None
    license_type: Optional[str] = None
    license_expiration: Optional[date] = None
    status: Optional[DriverStatus] = None
    current_vehicle_id: Optional[str] = None


class VehicleDocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    number: str
    expiration_date: date
    status: str
    name: Optional[str] = None


class VehicleMaintenanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    date: date
    type: str
    description: str
    cost: float
    odometer: float
    provider: str
    notes: Optional[str] = None


class FuelRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    date: date
    fuel_type: str
    quantity: float
    cost: float
    odometer: float
    full_tank: bool
    station: str


class VehicleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    plate: str
    brand: str
    model: str
    year: int
    type: str
    status: str
    fuel_type: str
    fuel_efficiency: float
    odometer: float
    last_maintenance: Optional[date] = None
    next_maintenance: Optional[date] = None
    documents: list[VehicleDocumentResponse]
    maintenance_history: list[VehicleMaintenanceResponse]
    fuel_history: list[FuelRecordResponse]


class VehicleCreateRequest(BaseModel):
    plate: str = Field(min_length=1)
    brand: str
    model: str
    year: int = Field(gt=1900)
    type: VehicleType
    fuel_type: FuelType
    fuel_efficiency: float = Field(gt=0.0)
    odometer: float = Field(default=0.0, ge=0.0)
    status: VehicleStatus = "available"
    last_maintenance: Optional[date] = None
    next_maintenance: Optional[date] = None


class VehicleUpdateRequest(BaseModel):
    plate: Optional[str] = Field(default=None, min_length=1)
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(default=None, gt=1900)
    type: Optional[VehicleType] = None
    fuel_type: Optional[FuelType] = None
    fuel_efficiency: Optional[float] = Field(default=None, gt=0.0)
    odometer: Optional[float] = Field(default=None, ge=0.0)
    status: Optional[VehicleStatus] = None
    last_maintenance: Optional[date] = None
    next_maintenance: Optional[date] = None


class VehicleMaintenanceRequest(BaseModel):
    date: date
    type: MaintenanceType
    description: str
    cost: float = Field(ge=0.0)
    odometer: float = Field(ge=0.0)
    provider: str
    notes: Optional[str] = None


class FuelRecordRequest(BaseModel):
    date: date
    fuel_type: FuelType
    quantity: float = Field(gt=0.0)
    cost: float = Field(ge=0.0)
    odometer: float = Field(ge=0.0)
    full_tank: bool
    station: str


class VehicleDocumentRequest(BaseModel):
    type: str = Field(min_length=1)
    number: str = Field(min_length=1)
    expiration_date: date
    status: DocumentStatus = "valid"
    name: Optional[str] = None


# --- Drivers ---


@router.get("/drivers", response_model=list[DriverResponse])
async def list_drivers(
    driver_status: Optional[DriverStatus] = Query(default=None, alias="status"),
    directory: DriverDirectory = Depends(get_driver_directory),
) -> list[DriverResponse]:
    if driver_status is None:
        drivers = directory.list_drivers()
    else:
        drivers = directory.get_drivers_by_status(driver_status)
    return [DriverResponse.model_validate(item) for item in drivers]


@router.post("/drivers", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    payload: DriverCreateRequest,
    directory: DriverDirectory = Depends(get_driver_directory),
) -> DriverResponse:
    return DriverResponse.model_validate(directory.add_driver(**payload.model_dump()))


@router.get("/drivers/{driver_id}", response_model=DriverResponse)
async def get_driver(
    driver_id: str,
    directory: DriverDirectory = Depends(get_driver_directory),
) -> DriverResponse:
    return DriverResponse.model_validate(require_found(directory.find_by_id(driver_id), "Driver"))


@router.patch("/drivers/{driver_id}", response_model=DriverResponse)
async def update_driver(
    driver_id: str,
    payload: DriverUpdateRequest,
    directory: DriverDirectory = Depends(get_driver_directory),
) -> DriverResponse:
    try:
        driver = directory.update_driver(driver_id, patch_changes(payload))
    except ValueError as exc:
        raise_bad_request(exc)
    return DriverResponse.model_validate(require_found(driver, "Driver"))


@router.delete("/drivers/{driver_id}", response_model=DeleteResponse)
async def delete_driver(
    driver_id: str,
    directory: DriverDirectory = Depends(get_driver_directory),
) -> DeleteResponse:
    require_found(directory.delete_driver(driver_id), "Driver")
    return DeleteResponse(deleted=True)


# --- Vehicles ---


@router.get("/vehicles", response_model=list[VehicleResponse])
async def list_vehicles(
    vehicle_status: Optional[VehicleStatus] = Query(default=None, alias="status"),
    directory: VehicleDirectory = Depends(get_vehicle_directory),
) -> list[VehicleResponse]:
    if vehicle_status is None:
        vehicles = directory.list_vehicles()
    else:
        vehicles = directory.get_vehicles_by_status(vehicle_status)
    return [VehicleResponse.model_validate(item) for item in vehicles]


@router.post("/vehicles", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    payload: VehicleCreateRequest,
    directory: VehicleDirectory = Depends(get_vehicle_directory),
) -> VehicleResponse:
    return VehicleResponse.model_validate(directory.add_vehicle(**payload.model_dump()))


@router.get("/vehicles/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: str,
    directory: VehicleDirectory = Depends(get_vehicle_directory),
) -> VehicleResponse:
    return VehicleResponse.model_validate(require_found(directory.find_by_id(vehicle_id), "Vehicle"))


@router.patch("/vehicles/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: str,
    payload: VehicleUpdateRequest,
    directory: VehicleDirectory = Depends(get_vehicle_directory),
) -> VehicleResponse:
    try:
        vehicle = directory.update_vehicle(vehicle_id, patch_changes(payload))
    except ValueError as exc:
        raise_bad_request(exc)
    return VehicleResponse.model_validate(require_found(vehicle, "Vehicle"))


@router.delete("/vehicles/{vehicle_id}", response_model=DeleteResponse)
async def delete_vehicle(
    vehicle_id: str,
    directory: VehicleDirectory = Depends(get_vehicle_directory),
) -> DeleteResponse:
    require_found(directory.delete_vehicle(vehicle_id), "Vehicle")
    return DeleteResponse(deleted=True)


@router.post(
    "/vehicles/{vehicle_id}/maintenance",
    response_model=VehicleMaintenanceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_vehicle_maintenance(
    vehicle_id: str,
    payload: VehicleMaintenanceRequest,
    directory: VehicleDirectory = Depends(get_vehicle_directory),
) -> VehicleMaintenanceResponse:
    record = directory.add_maintenance_record(vehicle_id, **payload.model_dump())
    return VehicleMaintenanceResponse.model_validate(require_found(record, "Vehicle"))


@router.post(
    "/vehicles/{vehicle_id}/fuel",
    response_model=FuelRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_fuel_record(
    vehicle_id: str,
    payload: FuelRecordRequest,
    directory: VehicleDirectory = Depends(get_vehicle_directory),
) -> FuelRecordResponse:
    record = directory.add_fuel_record(vehicle_id, **payload.model_dump())
    return FuelRecordResponse.model_validate(require_found(record, "Vehicle"))


@router.post(
    "/vehicles/{vehicle_id}/documents",
    response_model=VehicleDocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_vehicle_document(
    vehicle_id: str,
    payload: VehicleDocumentRequest,
    directory: VehicleDirectory = Depends(get_vehicle_directory),
) -> VehicleDocumentResponse:
    document = directory.add_vehicle_document(vehicle_id, **payload.model_dump())
    return VehicleDocumentResponse.model_validate(require_found(document, "Vehicle"))
