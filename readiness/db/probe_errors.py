"""Failure classification for database readiness probes."""

from __future__ import annotations

from enum import Enum
from typing import Final

from sqlalchemy.exc import ArgumentError, DBAPIError, SQLAlchemyError


class ProbeErrorCode(str, Enum):
    """Stable failure codes reported in degraded health checks."""

    TIMEOUT = "TIMEOUT"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    TLS_HANDSHAKE = "TLS_HANDSHAKE"
    TLS_CA_UNREADABLE = "TLS_CA_UNREADABLE"
    AUTHENTICATION = "AUTHENTICATION"
    QUERY_FAILED = "QUERY_FAILED"
    INVALID_TARGET = "INVALID_TARGET"
    UNKNOWN = "UNKNOWN"


# SQLSTATE values with a dedicated probe code.
SQLSTATE_PROBE_CODES: Final[dict[str, ProbeErrorCode]] = {
    "28000": ProbeErrorCode.AUTHENTICATION,
    "28P01": ProbeErrorCode.AUTHENTICATION,
    "57014": ProbeErrorCode.TIMEOUT,
}

_TIMEOUT_MARKERS: Final[tuple[str, ...]] = ("timeout expired", "timed out", "statement timeout", "canceling statement")
_REFUSED_MARKERS: Final[tuple[str, ...]] = ("connection refused", "could not connect", "no route to host")
_TLS_MARKERS: Final[tuple[str, ...]] = ("ssl", "certificate", "tls", "root.crt", "sslrootcert")
_AUTH_MARKERS: Final[tuple[str, ...]] = ("password authentication failed", "no pg_hba.conf entry")


def db_classify_probe_error(error: BaseException) -> str:
    """Classify one probe failure into a stable code.

    A backend SQLSTATE without a dedicated mapping is returned verbatim so
    callers keep the most specific code available.

    Args:
        error: Exception raised while connecting or querying.

    Returns:
        str: `ProbeErrorCode` value or backend SQLSTATE.
    """

    if isinstance(error, TimeoutError):
        return ProbeErrorCode.TIMEOUT.value
    if isinstance(error, ArgumentError):
        return ProbeErrorCode.INVALID_TARGET.value

    original_error = error.orig if isinstance(error, DBAPIError) else error
    sqlstate = getattr(original_error, "sqlstate", None)
    if sqlstate in SQLSTATE_PROBE_CODES:
        return SQLSTATE_PROBE_CODES[sqlstate].value

    message = str(original_error).lower()
    if any(marker in message for marker in _TIMEOUT_MARKERS):
        return ProbeErrorCode.TIMEOUT.value
    if any(marker in message for marker in _AUTH_MARKERS):
        return ProbeErrorCode.AUTHENTICATION.value
    if any(marker in message for marker in _TLS_MARKERS):
        return ProbeErrorCode.TLS_HANDSHAKE.value
    if any(marker in message for marker in _REFUSED_MARKERS):
        return ProbeErrorCode.CONNECTION_REFUSED.value
    if sqlstate:
        return str(sqlstate)
    if isinstance(error, SQLAlchemyError):
        return ProbeErrorCode.QUERY_FAILED.value
    return ProbeErrorCode.UNKNOWN.value


def db_describe_probe_error(error: BaseException) -> str:
    """Return a single-line failure description without SQLAlchemy boilerplate.

    Args:
        error: Exception raised while connecting or querying.

    Returns:
        str: First line of the underlying driver message, or the exception type name.
    """

    original_error = error.orig if isinstance(error, DBAPIError) else error
    message = str(original_error).strip().splitlines()
    return message[0] if message else type(original_error).__name__
