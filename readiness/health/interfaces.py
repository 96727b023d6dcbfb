"""Typed interfaces for health-layer services."""

from typing import Protocol

from readiness.domain import HealthReport


class HealthServicePort(Protocol):
    """Port definition for building one readiness report per request."""

    def health_check(self) -> HealthReport:
        """Probe dependencies and build a fresh readiness report.

        Returns:
            HealthReport: Report whose status is `ok` iff all checks passed.
        """
