"""Domain models used across readiness layer boundaries."""

from .models import (
    ConnectionTarget,
    DeploymentMetadata,
    HealthReport,
    HealthState,
    ProbeResult,
    ResourceSample,
    TLSMode,
    TLSStrictness,
    ValidationIssue,
    ValidationOutcome,
)

__all__ = [
    "ConnectionTarget",
    "DeploymentMetadata",
    "HealthReport",
    "HealthState",
    "ProbeResult",
    "ResourceSample",
    "TLSMode",
    "TLSStrictness",
    "ValidationIssue",
    "ValidationOutcome",
]
