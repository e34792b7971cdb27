#!/usr/bin/env python3
"""Validate local operations console environment readiness."""

from __future__ import annotations

import importlib
import sys
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from opsconsole.domain.models import OperationRejection
from opsconsole.repository.data_repository import ConsoleRepository
from opsconsole.services.facility_service import FacilityService
from opsconsole.services.fleet_service import DriverDirectory, VehicleDirectory
from opsconsole.services.reservation_service import ReservationScheduler
from opsconsole.services.route_service import ResourceStatusCoordinator
from opsconsole.utils.config import get_settings
from opsconsole.utils.logger import configure_logging

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def _check_reservations(repository: ConsoleRepository) -> None:
    facilities = FacilityService(repository=repository)
    facility = facilities.add_facility(
        name="Validation HQ",
        address="n/a",
        type="office",
        size=100.0,
        floors=1,
    )
    room = facilities.add_room(facility.id, name="Room 1", type="meeting", capacity=4, floor=1)
    now = datetime.now(timezone.utc)
    scheduler = ReservationScheduler(repository=repository, clock=lambda: now)
    start = now + timedelta(hours=1)
    booking = {
        "user_id": "u1",
        "user_name": "Validator",
        "purpose": "check",
        "attendees": 1,
    }

    first = scheduler.create_reservation(
        facility.id, room.id, start_time=start, end_time=start + timedelta(hours=1), **booking
    )
    overlapping = scheduler.create_reservation(
        facility.id,
        room.id,
        start_time=start + timedelta(minutes=30),
        end_time=start + timedelta(hours=2),
        **booking,
    )
    if isinstance(first, OperationRejection) or first is None:
        raise RuntimeError("first reservation was not accepted")
    if not isinstance(overlapping, OperationRejection):
        raise RuntimeError("overlapping reservation was accepted")
    if room.status != "reserved":
        raise RuntimeError(f"expected room status 'reserved', got {room.status!r}")


def _check_routes(repository: ConsoleRepository) -> None:
    drivers = DriverDirectory(repository=repository)
    vehicles = VehicleDirectory(repository=repository)
    coordinator = ResourceStatusCoordinator(
        repository=repository,
        drivers=drivers,
        vehicles=vehicles,
    )
    driver = drivers.add_driver(
        name="Validator",
        email="validator@example.com",
        phone="0",
        license_number="X1",
        license_type="B",
        license_expiration=date.today() + timedelta(days=365),
    )
    vehicle = vehicles.add_vehicle(
        plate="VAL-0001",
        brand="Test",
        model="Van",
        year=2022,
        type="van",
        fuel_type="diesel",
        fuel_efficiency=9.0,
    )
    route = coordinator.add_route(
        name="Validation route",
        driver_id=driver.id,
        vehicle_id=vehicle.id,
        start_date=date.today(),
        end_date=date.today(),
        destinations=[
            {"address": "Stop 1", "scheduled_arrival": datetime.now(timezone.utc), "order": 1}
        ],
    )
    if isinstance(route, OperationRejection):
        raise RuntimeError(route.message)
    if driver.status != "on_route" or vehicle.status != "in_use":
        raise RuntimeError("resources were not marked busy")
    coordinator.complete_destination(route.id, route.destinations[0].id)
    if driver.status != "available" or vehicle.status != "available":
        raise RuntimeError("resources were not released")


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = ["fastapi", "uvicorn", "pydantic", "pandas", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_specs:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    settings = replace(get_settings(), log_level="WARNING")
    configure_logging(settings.log_level)

    # CHECK 3: Reservation scheduling
    try:
        _check_reservations(ConsoleRepository(settings))
        ok, line = _print_result("Reservation scheduling", True)
    except Exception as exc:
        ok, line = _print_result("Reservation scheduling", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4: Route resource propagation
    try:
        _check_routes(ConsoleRepository(settings))
        ok, line = _print_result("Route resource propagation", True)
    except Exception as exc:
        ok, line = _print_result("Route resource propagation", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Operations Console Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
