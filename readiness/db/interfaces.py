"""Typed interfaces for database-layer services."""

from typing import Protocol

from readiness.domain import ConnectionTarget, ProbeResult, TLSMode


class DatabaseProbePort(Protocol):
    """Port definition for one-shot database connectivity verification."""

    def db_probe(self, target: ConnectionTarget, tls_mode: TLSMode, timeout_seconds: float) -> ProbeResult:
        """Open one connection, run a trivial round trip, and release it.

        Args:
            target: Database endpoint to dial.
            tls_mode: TLS policy for the handshake.
            timeout_seconds: Budget for connect and query.

        Returns:
            ProbeResult: Probe outcome; failures are reported, never raised.
        """
