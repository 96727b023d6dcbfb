"""Health endpoint router composition for liveness and readiness checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from readiness.domain import HealthState
from readiness.health import HealthServicePort


def api_create_health_router(health_service: HealthServicePort) -> APIRouter:
    """Create health-check router with liveness and readiness endpoints.

    Args:
        health_service: Health-layer service that builds readiness reports.

    Returns:
        APIRouter: Router exposing `/health` and `/healthz` endpoints.

    Raises:
        ValueError: Raised when health_service is invalid.
    """

    if health_service is None:
        raise ValueError("health_service must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_liveness_status() -> dict[str, bool]:
        """Return process liveness without touching dependencies.

        Returns:
            dict[str, bool]: Constant liveness payload.
        """

        return {"ok": True}

    @router.get("/healthz")
    def api_readiness_status() -> JSONResponse:
        """Return readiness report with database checks and resources.

        Returns:
            JSONResponse: HTTP 200 when every check passed, HTTP 503 otherwise.
        """

        report = health_service.health_check()
        status_code = (
            status.HTTP_200_OK if report.status is HealthState.OK else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        return JSONResponse(
            content=report.health_to_payload(),
            status_code=status_code,
            headers={"Cache-Control": "no-store"},
        )

    return router
