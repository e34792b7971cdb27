"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It builds the shared repository, wires every service to it, and registers
the routers.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from opsconsole.controllers.facility_controller import router as facility_router
from opsconsole.controllers.fleet_controller import router as fleet_router
from opsconsole.controllers.route_controller import router as route_router
from opsconsole.repository.data_repository import ConsoleRepository
from opsconsole.services.facility_service import FacilityService
from opsconsole.services.fleet_service import DriverDirectory, VehicleDirectory
from opsconsole.services.reservation_service import ReservationScheduler
from opsconsole.services.route_service import ResourceStatusCoordinator
from opsconsole.utils.clock import Clock
from opsconsole.utils.config import Settings, get_settings
from opsconsole.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Build and wire the FastAPI application.

    One ConsoleRepository is created per app and shared by every service via
    app.state. No module-level stores: each app instance owns its state.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    # --- Repository (process-lifetime in-memory state) ---
    repository = ConsoleRepository(settings)

    # --- Services ---
    facility_service = FacilityService(repository=repository, settings=settings)
    reservation_scheduler = ReservationScheduler(
        repository=repository,
        settings=settings,
        clock=clock,
    )
    driver_directory = DriverDirectory(repository=repository, settings=settings)
    vehicle_directory = VehicleDirectory(repository=repository, settings=settings)
    route_coordinator = ResourceStatusCoordinator(
        repository=repository,
        settings=settings,
        drivers=driver_directory,
        vehicles=vehicle_directory,
        clock=clock,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _startup(app)
        yield
        logger.info("Shutdown complete | entities=%s", repository.count_entities())

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(facility_router)
    app.include_router(fleet_router)
    app.include_router(route_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.facility_service = facility_service
    app.state.reservation_scheduler = reservation_scheduler
    app.state.driver_directory = driver_directory
    app.state.vehicle_directory = vehicle_directory
    app.state.route_coordinator = route_coordinator

    return app


def _startup(app: FastAPI) -> None:
    settings: Settings = app.state.settings
    logger.info(
        (
            "Startup complete | reservation_conflicts_include_cancelled=%s | "
            "route_requires_available_resources=%s"
        ),
        settings.reservation_conflicts_include_cancelled,
        settings.route_requires_available_resources,
    )


# Module-level app object for uvicorn
app = create_app()
