"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from readiness.api import create_api_application
from readiness.config import AppSettings, config_load_settings
from readiness.db import SQLAlchemyDatabaseProbe
from readiness.health import ReadinessHealthService, health_config_from_settings, health_metadata_from_settings


def bootstrap_create_health_service(settings: AppSettings) -> ReadinessHealthService:
    """Build the readiness service for validated settings.

    Args:
        settings: Validated application settings.

    Returns:
        ReadinessHealthService: Service probing the configured database targets.
    """

    config = health_config_from_settings(settings, health_metadata_from_settings(settings))
    return ReadinessHealthService(probe=SQLAlchemyDatabaseProbe(), config=config)


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Pre-validated settings; loaded from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings if settings is not None else config_load_settings()
    return create_api_application(
        settings=resolved_settings,
        health_service=bootstrap_create_health_service(resolved_settings),
    )
