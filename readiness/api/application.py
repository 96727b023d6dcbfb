"""FastAPI application factory for the readiness service."""

from fastapi import FastAPI

from readiness.config import AppSettings
from readiness.health import HealthServicePort

from .routers import api_create_health_router


def create_api_application(settings: AppSettings, health_service: HealthServicePort) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        health_service: Health service used by readiness endpoints.

    Returns:
        FastAPI: Framework application instance with health routes.
    """

    application = FastAPI(title="Operational Readiness", version=settings.release_sha or "dev")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service identification for bootstrap verification.

        Returns:
            dict[str, str]: Service name and environment.
        """

        return {
            "service": "ops-readiness",
            "environment": settings.app_env,
        }

    application.include_router(api_create_health_router(health_service=health_service))
    return application
