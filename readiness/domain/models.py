"""Typed domain models shared across readiness layers.

This module provides immutable data contracts for configuration issues, TLS
trust decisions, probe outcomes, and health reports.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class TLSStrictness(str, Enum):
    """Certificate validation strictness for one database connection."""

    STRICT = "strict"
    RELAXED = "relaxed"


class HealthState(str, Enum):
    """Aggregated readiness state of one health report."""

    OK = "ok"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class ValidationIssue:
    """One configuration problem tied to an environment key.

    Attributes:
        key: Environment key name the issue refers to.
        reason: Human-readable explanation suitable for startup logs.
    """

    key: str
    reason: str


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating the raw environment against the config schema.

    Attributes:
        errors: Ordered fatal issues; any entry blocks startup.
        warnings: Ordered non-fatal issues logged once at startup.
    """

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        """Return whether the validated configuration may be used.

        Returns:
            bool: True when no fatal errors were recorded.
        """

        return not self.errors


@dataclass(frozen=True)
class TLSMode:
    """TLS trust decision for one database connection target.

    Attributes:
        strictness: Strict certificate validation or explicit relaxed opt-out.
        source: Where trust material came from (`relaxed`, `system`, `candidate`, `pinned`).
        ca_path: Filesystem path of the CA bundle, when one was selected.
        ca_pem: Raw PEM bytes read from `ca_path`, when one was selected.
    """

    strictness: TLSStrictness = TLSStrictness.STRICT
    source: str = "system"
    ca_path: str | None = None
    ca_pem: bytes | None = field(default=None, repr=False)

    @property
    def reject_unauthorized(self) -> bool:
        """Return whether unknown or invalid certificate chains are rejected.

        Returns:
            bool: True for strict modes.
        """

        return self.strictness is TLSStrictness.STRICT


@dataclass(frozen=True)
class ConnectionTarget:
    """Database endpoint probed by one readiness check.

    Attributes:
        name: Check name used as the key in health report `checks`.
        kind: Endpoint kind, `pooler` or `direct`.
        database_url: SQLAlchemy or libpq style connection URL.
    """

    name: str
    kind: str
    database_url: str = field(repr=False)


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one database round-trip probe.

    Attributes:
        ok: Whether connect and query both succeeded.
        latency_ms: Connect-plus-query time in milliseconds, when measured.
        error: Failure description, when the probe failed.
        code: Failure classification or backend SQLSTATE, when the probe failed.
        db_time: Backend timestamp returned by the probe query, in ISO format.
    """

    ok: bool
    latency_ms: float | None = None
    error: str | None = None
    code: str | None = None
    db_time: str | None = None


@dataclass(frozen=True)
class ResourceSample:
    """Process memory and OS load captured at health check time.

    Attributes:
        rss_mb: Resident set size in megabytes, one decimal.
        heap_mb: Process heap (data segment) in megabytes, one decimal.
        load1: One-minute OS load average, two decimals.
    """

    rss_mb: float | None = None
    heap_mb: float | None = None
    load1: float | None = None


@dataclass(frozen=True)
class DeploymentMetadata:
    """Deployment identifiers passed verbatim into health reports.

    Attributes:
        environment_name: Deployment environment label.
        version: Release identifier.
        build_time: Build timestamp text, when provided.
    """

    environment_name: str
    version: str
    build_time: str | None = None


@dataclass(frozen=True)
class HealthReport:
    """Readiness report built fresh for one health request.

    Attributes:
        status: `ok` when every check passed, otherwise `degraded`.
        checks: Probe outcome per check name.
        resources: Resource sample taken during the request.
        metadata: Deployment identifiers.
        uptime_s: Whole seconds since the service process started.
        latency_ms: Wall-clock time spent building the report.
        timestamp: ISO-8601 UTC timestamp of report construction.
    """

    status: HealthState
    checks: Mapping[str, ProbeResult]
    resources: ResourceSample
    metadata: DeploymentMetadata
    uptime_s: int
    latency_ms: float
    timestamp: str

    def health_to_payload(self) -> dict[str, Any]:
        """Render the report as the JSON body of the readiness endpoint.

        Returns:
            dict[str, Any]: JSON-serializable readiness payload.
        """

        checks_payload: dict[str, dict[str, Any]] = {}
        for check_name, result in self.checks.items():
            check_payload: dict[str, Any] = {"ok": result.ok, "ms": result.latency_ms}
            if result.error is not None:
                check_payload["error"] = result.error
            if result.code is not None:
                check_payload["code"] = result.code
            checks_payload[check_name] = check_payload

        return {
            "status": self.status.value,
            "checks": checks_payload,
            "env": self.metadata.environment_name,
            "version": self.metadata.version,
            "build_time": self.metadata.build_time,
            "uptime_s": self.uptime_s,
            "resources": {
                "rss_mb": self.resources.rss_mb,
                "heap_mb": self.resources.heap_mb,
                "load1": self.resources.load1,
            },
            "latency_ms": self.latency_ms,
            "ts": self.timestamp,
        }
