"""Database layer package for TLS policy and connectivity probes."""

from .interfaces import DatabaseProbePort
from .probe import PROBE_STATEMENT, SQLAlchemyDatabaseProbe
from .probe_errors import ProbeErrorCode, db_classify_probe_error, db_describe_probe_error
from .session import db_create_probe_engine, db_normalize_url, db_tls_connect_args
from .tls import (
    DEFAULT_CA_CANDIDATE_PATHS,
    TLSMaterialError,
    db_resolve_pinned_tls_mode,
    db_resolve_tls_mode,
)

__all__ = [
    "DEFAULT_CA_CANDIDATE_PATHS",
    "DatabaseProbePort",
    "PROBE_STATEMENT",
    "ProbeErrorCode",
    "SQLAlchemyDatabaseProbe",
    "TLSMaterialError",
    "db_classify_probe_error",
    "db_create_probe_engine",
    "db_describe_probe_error",
    "db_normalize_url",
    "db_resolve_pinned_tls_mode",
    "db_resolve_tls_mode",
    "db_tls_connect_args",
]
