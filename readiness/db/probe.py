"""Database readiness probe backed by one short-lived SQLAlchemy connection."""

import logging
import time
from datetime import datetime
from typing import Callable

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from readiness.domain import ConnectionTarget, ProbeResult, TLSMode

from .interfaces import DatabaseProbePort
from .probe_errors import ProbeErrorCode, db_classify_probe_error, db_describe_probe_error
from .session import db_create_probe_engine

logger = logging.getLogger(__name__)

PROBE_STATEMENT = "SELECT 1 AS health_check, now() AS db_time"

EngineFactory = Callable[[str, TLSMode, float], Engine]


class SQLAlchemyDatabaseProbe(DatabaseProbePort):
    """Readiness probe that dials a fresh, pool-less connection per call.

    The probe holds no per-call state, so one instance may serve concurrent
    requests.
    """

    def __init__(
        self,
        engine_factory: EngineFactory = db_create_probe_engine,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """Initialize database probe.

        Args:
            engine_factory: Builds the per-call engine from URL, TLS mode and timeout.
            clock: Monotonic clock in seconds used for latency measurement.

        Raises:
            ValueError: Raised when engine_factory is None.
        """

        if engine_factory is None:
            raise ValueError("engine_factory must not be None")
        self._engine_factory = engine_factory
        self._clock = clock

    def db_probe(self, target: ConnectionTarget, tls_mode: TLSMode, timeout_seconds: float) -> ProbeResult:
        """Verify connectivity with one round trip and release the connection.

        Latency covers connect plus query. The engine is disposed on every
        exit path, including cancellation.

        Args:
            target: Database endpoint to dial.
            tls_mode: TLS policy for the handshake.
            timeout_seconds: Budget for connect and query.

        Returns:
            ProbeResult: `ok=True` with latency and backend time, or `ok=False`
            with failure message and code.
        """

        engine: Engine | None = None
        try:
            engine = self._engine_factory(target.database_url, tls_mode, timeout_seconds)
            started = self._clock()
            with engine.connect() as connection:
                row = connection.execute(text(PROBE_STATEMENT)).one()
            latency_ms = round((self._clock() - started) * 1000, 1)
        except (SQLAlchemyError, OSError, ValueError) as error:
            return self._db_failure(target, error)
        except Exception as error:  # pylint: disable=broad-exception-caught
            logger.exception("Unexpected failure while probing %s", target.name)
            return self._db_failure(target, error, code=ProbeErrorCode.UNKNOWN.value)
        finally:
            if engine is not None:
                engine.dispose()

        if latency_ms > timeout_seconds * 1000:
            logger.warning("Database probe %s exceeded its %.0f ms budget", target.name, timeout_seconds * 1000)
            return ProbeResult(
                ok=False,
                latency_ms=latency_ms,
                error=f"probe exceeded timeout budget of {timeout_seconds * 1000:.0f} ms",
                code=ProbeErrorCode.TIMEOUT.value,
            )

        db_time = row.db_time.isoformat() if isinstance(row.db_time, datetime) else None
        return ProbeResult(ok=True, latency_ms=latency_ms, db_time=db_time)

    @staticmethod
    def _db_failure(target: ConnectionTarget, error: BaseException, code: str | None = None) -> ProbeResult:
        resolved_code = code or db_classify_probe_error(error)
        message = db_describe_probe_error(error)
        logger.warning("Database probe %s failed [%s]: %s", target.name, resolved_code, message)
        return ProbeResult(ok=False, error=message, code=resolved_code)
