"""Runtime settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    app_name: str = "Operations Console API"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    # Cancelled reservations still block new bookings unless this is disabled.
    reservation_conflicts_include_cancelled: bool = True
    route_requires_available_resources: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings once per process; tests derive variants with replace()."""
    defaults = Settings()
    return Settings(
        app_name=os.getenv("APP_NAME", defaults.app_name),
        app_version=os.getenv("APP_VERSION", defaults.app_version),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        reservation_conflicts_include_cancelled=_env_flag(
            "RESERVATION_CONFLICTS_INCLUDE_CANCELLED",
            defaults.reservation_conflicts_include_cancelled,
        ),
        route_requires_available_resources=_env_flag(
            "ROUTE_REQUIRES_AVAILABLE_RESOURCES",
            defaults.route_requires_available_resources,
        ),
    )
