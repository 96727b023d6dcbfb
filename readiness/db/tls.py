"""TLS trust resolution for database connection targets."""

from __future__ import annotations

import logging
from typing import Final, Sequence

from readiness.domain import TLSMode, TLSStrictness

logger = logging.getLogger(__name__)

DEFAULT_CA_CANDIDATE_PATHS: Final[tuple[str, ...]] = (
    "/etc/ssl/certs/ca-certificates.crt",
    "/etc/ssl/cert.pem",
    "/etc/pki/tls/certs/ca-bundle.crt",
    "/etc/ssl/ca-bundle.pem",
)


class TLSMaterialError(OSError):
    """Raised when pinned CA material cannot be read.

    Attributes:
        ca_path: Path of the unreadable CA file.
    """

    def __init__(self, message: str, ca_path: str):
        super().__init__(message)
        self.ca_path = ca_path


def db_resolve_tls_mode(relax: bool, candidate_ca_paths: Sequence[str] = DEFAULT_CA_CANDIDATE_PATHS) -> TLSMode:
    """Decide certificate validation strictness and locate a CA bundle.

    Args:
        relax: Explicit operator opt-out from certificate validation.
        candidate_ca_paths: CA bundle locations probed in order.

    Returns:
        TLSMode: Relaxed mode when `relax` is set; otherwise strict mode
        using the first readable candidate bundle, or the system trust store
        when no candidate is readable.
    """

    if relax:
        logger.warning("Database TLS certificate validation disabled by explicit relax flag")
        return TLSMode(strictness=TLSStrictness.RELAXED, source="relaxed")

    for ca_path in candidate_ca_paths:
        ca_pem = _db_read_ca_file(ca_path)
        if ca_pem:
            logger.debug("Using CA bundle %s", ca_path)
            return TLSMode(strictness=TLSStrictness.STRICT, source="candidate", ca_path=ca_path, ca_pem=ca_pem)

    logger.warning("No CA bundle found in %d candidate paths; using the system trust store", len(candidate_ca_paths))
    return TLSMode(strictness=TLSStrictness.STRICT, source="system")


def db_resolve_pinned_tls_mode(ca_path: str) -> TLSMode:
    """Load one explicit CA chain for a target with known certificates.

    Args:
        ca_path: Path of the pinned CA chain in PEM format.

    Returns:
        TLSMode: Strict mode trusting only the pinned material.

    Raises:
        TLSMaterialError: Raised when the file is missing, unreadable, or empty.
    """

    ca_pem = _db_read_ca_file(ca_path)
    if not ca_pem:
        raise TLSMaterialError(f"pinned CA file {ca_path} is missing, unreadable, or empty", ca_path=ca_path)
    return TLSMode(strictness=TLSStrictness.STRICT, source="pinned", ca_path=ca_path, ca_pem=ca_pem)


def _db_read_ca_file(ca_path: str) -> bytes | None:
    try:
        with open(ca_path, "rb") as ca_file:
            return ca_file.read()
    except OSError:
        return None
