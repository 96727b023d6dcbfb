"""Per-request readiness service composing TLS resolution, probes and reporting."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from readiness.config import AppSettings, DatabaseSettings
from readiness.db import (
    DEFAULT_CA_CANDIDATE_PATHS,
    DatabaseProbePort,
    ProbeErrorCode,
    TLSMaterialError,
    db_resolve_pinned_tls_mode,
    db_resolve_tls_mode,
)
from readiness.domain import ConnectionTarget, DeploymentMetadata, HealthReport, ProbeResult, ResourceSample, TLSMode

from .interfaces import HealthServicePort
from .report import health_build_report
from .resources import health_sample_resources

POOLER_TARGET_KIND = "pooler"
DIRECT_TARGET_KIND = "direct"


@dataclass(frozen=True)
class ReadinessConfig:
    """Immutable inputs for readiness checks.

    Attributes:
        targets: Database endpoints probed on every request.
        tls_relaxed: Explicit opt-out from certificate validation.
        ca_candidate_paths: CA bundle locations probed in order.
        pinned_ca_path: Exact CA chain for direct targets, when known.
        timeout_seconds: Budget for one probe.
        metadata: Deployment identifiers reported verbatim.
    """

    targets: tuple[ConnectionTarget, ...]
    tls_relaxed: bool
    ca_candidate_paths: tuple[str, ...]
    pinned_ca_path: str | None
    timeout_seconds: float
    metadata: DeploymentMetadata


def health_metadata_from_settings(settings: AppSettings) -> DeploymentMetadata:
    """Collect deployment identifiers reported by the readiness endpoint.

    Args:
        settings: Validated application settings.

    Returns:
        DeploymentMetadata: `SENTRY_ENV` or `APP_ENV`, `RELEASE_SHA` or `dev`, and `BUILD_TIME`.
    """

    return DeploymentMetadata(
        environment_name=settings.sentry_env or settings.app_env,
        version=settings.release_sha or "dev",
        build_time=settings.build_time,
    )


def health_config_from_settings(settings: DatabaseSettings, metadata: DeploymentMetadata) -> ReadinessConfig:
    """Derive readiness inputs from validated settings.

    Args:
        settings: Validated datastore settings.
        metadata: Deployment identifiers reported verbatim.

    Returns:
        ReadinessConfig: Targets, TLS policy inputs and deployment metadata.
    """

    targets = [
        ConnectionTarget(
            name="db",
            kind=POOLER_TARGET_KIND,
            database_url=settings.database_url.get_secret_value(),
        )
    ]
    if settings.database_direct_url is not None:
        targets.append(
            ConnectionTarget(
                name="db_direct",
                kind=DIRECT_TARGET_KIND,
                database_url=settings.database_direct_url.get_secret_value(),
            )
        )

    ca_candidate_paths = DEFAULT_CA_CANDIDATE_PATHS
    if settings.database_ca_path:
        ca_candidate_paths = (settings.database_ca_path, *DEFAULT_CA_CANDIDATE_PATHS)

    return ReadinessConfig(
        targets=tuple(targets),
        tls_relaxed=settings.database_tls_relaxed,
        ca_candidate_paths=ca_candidate_paths,
        pinned_ca_path=settings.database_ca_pinned_path,
        timeout_seconds=settings.database_probe_timeout_ms / 1000,
        metadata=metadata,
    )


class ReadinessHealthService(HealthServicePort):
    """Readiness service that probes each configured target once per request."""

    def __init__(
        self,
        probe: DatabaseProbePort,
        config: ReadinessConfig,
        resource_sampler: Callable[[], ResourceSample] = health_sample_resources,
        clock: Callable[[], float] = time.monotonic,
        process_started_at: float | None = None,
    ):
        """Initialize readiness service.

        Args:
            probe: Database probe used for every target.
            config: Immutable readiness inputs.
            resource_sampler: Callable returning the current resource sample.
            clock: Monotonic clock in seconds.
            process_started_at: Clock reading at service start; now when omitted.

        Raises:
            ValueError: Raised when probe or config is None.
        """

        if probe is None:
            raise ValueError("probe must not be None")
        if config is None:
            raise ValueError("config must not be None")
        self._probe = probe
        self._config = config
        self._resource_sampler = resource_sampler
        self._clock = clock
        self._process_started_at = clock() if process_started_at is None else process_started_at

    def health_resolve_tls_mode(self, target: ConnectionTarget) -> TLSMode:
        """Pick the TLS policy for one target.

        Direct targets trust only the pinned CA when one is configured; every
        other target uses the relax flag and candidate bundle search.

        Args:
            target: Database endpoint about to be probed.

        Returns:
            TLSMode: Resolved TLS policy.

        Raises:
            TLSMaterialError: Raised when the pinned CA file cannot be read.
        """

        if target.kind == DIRECT_TARGET_KIND and self._config.pinned_ca_path:
            return db_resolve_pinned_tls_mode(self._config.pinned_ca_path)
        return db_resolve_tls_mode(self._config.tls_relaxed, self._config.ca_candidate_paths)

    def health_check(self) -> HealthReport:
        """Probe every target and build a fresh readiness report.

        Returns:
            HealthReport: Report whose status is `ok` iff all checks passed.
        """

        started_at = self._clock()
        checks: dict[str, ProbeResult] = {}
        for target in self._config.targets:
            try:
                tls_mode = self.health_resolve_tls_mode(target)
            except TLSMaterialError as error:
                checks[target.name] = ProbeResult(
                    ok=False,
                    error=str(error),
                    code=ProbeErrorCode.TLS_CA_UNREADABLE.value,
                )
                continue
            checks[target.name] = self._probe.db_probe(target, tls_mode, self._config.timeout_seconds)

        return health_build_report(
            checks=checks,
            resource_sampler=self._resource_sampler,
            started_at=started_at,
            metadata=self._config.metadata,
            process_started_at=self._process_started_at,
            clock=self._clock,
        )
