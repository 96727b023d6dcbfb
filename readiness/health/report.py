"""Health report aggregation for readiness checks."""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Mapping

from readiness.domain import DeploymentMetadata, HealthReport, HealthState, ProbeResult, ResourceSample

logger = logging.getLogger(__name__)


def health_aggregate_status(checks: Mapping[str, ProbeResult]) -> HealthState:
    """Return `ok` iff every registered check passed.

    Args:
        checks: Probe outcome per check name.

    Returns:
        HealthState: Aggregated readiness state.
    """

    return HealthState.OK if all(result.ok for result in checks.values()) else HealthState.DEGRADED


def health_build_report(
    checks: Mapping[str, ProbeResult],
    resource_sampler: Callable[[], ResourceSample],
    started_at: float,
    metadata: DeploymentMetadata,
    process_started_at: float,
    clock: Callable[[], float] = time.monotonic,
) -> HealthReport:
    """Build one health report from check outcomes and a resource sample.

    The builder never raises: a failing sampler yields an all-None resource
    sample and leaves the status untouched.

    Args:
        checks: Probe outcome per check name.
        resource_sampler: Callable returning the current resource sample.
        started_at: `clock()` reading taken when the request began.
        metadata: Deployment identifiers passed through verbatim.
        process_started_at: `clock()` reading taken when the service started.
        clock: Monotonic clock in seconds.

    Returns:
        HealthReport: Report with total latency measured from `started_at`.
    """

    try:
        resources = resource_sampler()
    except Exception as error:  # pylint: disable=broad-exception-caught
        logger.warning("Resource sampling failed: %s", error)
        resources = ResourceSample()

    finished_at = clock()
    return HealthReport(
        status=health_aggregate_status(checks),
        checks=dict(checks),
        resources=resources,
        metadata=metadata,
        uptime_s=max(0, int(finished_at - process_started_at)),
        latency_ms=round((finished_at - started_at) * 1000, 1),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
