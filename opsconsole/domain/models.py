"""Domain models for facilities, fleet resources and delivery routes.

Entities are mutable: services update them in place inside the repository,
the same way every store mutates its collections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal, Optional


RoomStatus = Literal["available", "occupied", "maintenance", "reserved"]
ReservationStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]
RouteStatus = Literal["planned", "in_progress", "completed", "cancelled"]
DestinationStatus = Literal["pending", "arrived", "completed", "skipped", "delayed", "cancelled"]
DriverStatus = Literal["available", "on_route", "off_duty", "inactive"]
VehicleStatus = Literal["available", "in_use", "maintenance", "inactive"]


# --- Facilities ---


@dataclass
class Equipment:
    id: str
    name: str
    type: str
    purchase_date: date
    status: str = "operational"
    serial_number: Optional[str] = None
    warranty_expiration: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None


@dataclass
class RoomReservation:
    """A booking of a room over the half-open window [start_time, end_time)."""

    id: str
    room_id: str
    user_id: str
    user_name: str
    purpose: str
    start_time: datetime
    end_time: datetime
    status: ReservationStatus = "scheduled"
    attendees: int = 1
    notes: Optional[str] = None


@dataclass
class Room:
    id: str
    facility_id: str
    name: str
    type: str
    capacity: int
    floor: int
    status: RoomStatus = "available"
    equipment: list[Equipment] = field(default_factory=list)
    reservations: list[RoomReservation] = field(default_factory=list)


@dataclass
class FacilityMaintenanceRecord:
    id: str
    facility_id: str
    date: date
    type: str
    description: str
    area: str
    cost: float
    provider: str
    status: str = "scheduled"
    completion_date: Optional[date] = None
    notes: Optional[str] = None


@dataclass
class UtilityConsumption:
    id: str
    facility_id: str
    type: str
    year: int
    month: int
    reading: float
    unit: str
    cost: float
    notes: Optional[str] = None


@dataclass
class Facility:
    id: str
    name: str
    address: str
    type: str
    size: float
    floors: int
    status: str = "active"
    maintenance_records: list[FacilityMaintenanceRecord] = field(default_factory=list)
    rooms: list[Room] = field(default_factory=list)
    utilities: list[UtilityConsumption] = field(default_factory=list)


# --- Fleet ---


@dataclass
class Driver:
    id: str
    name: str
    email: str
    phone: str
    license_number: str
    license_type: str
    license_expiration: date
    status: DriverStatus = "available"
    current_vehicle_id: Optional[str] = None


@dataclass
class VehicleDocument:
    id: str
    type: str
    number: str
    expiration_date: date
    status: str = "valid"
    name: Optional[str] = None


@dataclass
class VehicleMaintenanceRecord:
    id: str
    date: date
    type: str
    description: str
    cost: float
    odometer: float
    provider: str
    notes: Optional[str] = None


@dataclass
class FuelRecord:
    id: str
    date: date
    fuel_type: str
    quantity: float
    cost: float
    odometer: float
    full_tank: bool
    station: str


@dataclass
class Vehicle:
    id: str
    plate: str
    brand: str
    model: str
    year: int
    type: str
    fuel_type: str
    fuel_efficiency: float
    odometer: float = 0.0
    status: VehicleStatus = "available"
    last_maintenance: Optional[date] = None
    next_maintenance: Optional[date] = None
    documents: list[VehicleDocument] = field(default_factory=list)
    maintenance_history: list[VehicleMaintenanceRecord] = field(default_factory=list)
    fuel_history: list[FuelRecord] = field(default_factory=list)


# --- Routes ---


@dataclass
class RouteDestination:
    id: str
    address: str
    scheduled_arrival: datetime
    order: int
    status: DestinationStatus = "pending"
    actual_arrival: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass
class DeliveryRoute:
    id: str
    name: str
    driver_id: str
    vehicle_id: str
    start_date: date
    end_date: date
    status: RouteStatus = "planned"
    description: str = ""
    driver_name: str = ""
    vehicle_plate: str = ""
    starting_point: str = ""
    destinations: list[RouteDestination] = field(default_factory=list)
    total_distance: float = 0.0
    estimated_fuel_cost: float = 0.0


# --- Operation outcomes ---


@dataclass(frozen=True)
class OperationRejection:
    """Business-rule refusal returned to the caller instead of raising."""

    code: str
    message: str


ROOM_UNAVAILABLE = "room_unavailable"
TIME_CONFLICT = "time_conflict"
NOT_FOUND = "not_found"
RESOURCE_BUSY = "resource_busy"
