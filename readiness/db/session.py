"""Database engine utilities for short-lived readiness connections.

This module centralizes SQLAlchemy engine construction so every probe dials
with an explicit TLS policy and no connection pool.
"""

import math
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.pool import NullPool

from readiness.domain import TLSMode

POSTGRES_DRIVER_NAME = "postgresql+psycopg"


def db_normalize_url(database_url: str) -> URL:
    """Parse a database URL and pin it to the psycopg driver.

    Args:
        database_url: SQLAlchemy or libpq style URL (`postgres://`, `postgresql://`).

    Returns:
        URL: Parsed URL using the `postgresql+psycopg` driver.

    Raises:
        ValueError: Raised when the database URL is blank.
        sqlalchemy.exc.ArgumentError: Raised when the URL cannot be parsed.
    """

    if not database_url.strip():
        raise ValueError("database_url must not be blank")

    parsed_url = make_url(database_url.strip())
    if parsed_url.drivername in ("postgres", "postgresql"):
        parsed_url = parsed_url.set(drivername=POSTGRES_DRIVER_NAME)
    return parsed_url


def db_tls_connect_args(tls_mode: TLSMode) -> dict[str, str]:
    """Translate a TLS decision into libpq connection parameters.

    Args:
        tls_mode: Resolved TLS mode for the target.

    Returns:
        dict[str, str]: `sslmode` and, for strict modes, `sslrootcert`.
    """

    if not tls_mode.reject_unauthorized:
        return {"sslmode": "require"}
    return {"sslmode": "verify-full", "sslrootcert": tls_mode.ca_path or "system"}


def db_create_probe_engine(database_url: str, tls_mode: TLSMode, timeout_seconds: float) -> Engine:
    """Create a pool-less engine for exactly one readiness probe.

    Args:
        database_url: Target database URL.
        tls_mode: TLS policy applied to the connection.
        timeout_seconds: Budget for connect and for the probe statement.

    Returns:
        Engine: SQLAlchemy engine backed by `NullPool`.

    Raises:
        ValueError: Raised when the URL is blank or the timeout is not positive.
    """

    if timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be positive")

    connect_args: dict[str, Any] = db_tls_connect_args(tls_mode)
    connect_args["connect_timeout"] = max(1, math.ceil(timeout_seconds))
    connect_args["options"] = f"-c statement_timeout={max(1, int(timeout_seconds * 1000))}"
    return create_engine(db_normalize_url(database_url), poolclass=NullPool, connect_args=connect_args)
