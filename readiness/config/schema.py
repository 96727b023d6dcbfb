"""Declarative catalog of recognized environment keys."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Sequence


class EnvKeyKind(str, Enum):
    """Coercion family for one environment key."""

    BOOL = "bool"
    STRING = "string"
    NUMBER = "number"
    SECRET = "secret"


@dataclass(frozen=True)
class EnvKeySpec:
    """Definition of one recognized environment key.

    Attributes:
        name: Environment variable name.
        kind: Coercion family applied to the raw value.
        default: Value used when the key is absent, empty, or invalid but defaultable.
        required: Whether absence without a default is a fatal error.
        fatal_if_invalid: Whether an unparsable or out-of-range value is fatal.
        minimum: Inclusive lower bound for number keys.
        maximum: Inclusive upper bound for number keys.
        min_length: Minimum trimmed length for string and secret keys.
        integer_only: Whether number keys accept only whole-number literals.
        choices: Allowed values for string keys, matched case-insensitively.
        description: One-line operator-facing description.
    """

    name: str
    kind: EnvKeyKind
    default: bool | int | float | str | None = None
    required: bool = False
    fatal_if_invalid: bool = False
    minimum: float | None = None
    maximum: float | None = None
    min_length: int | None = None
    integer_only: bool = False
    choices: tuple[str, ...] | None = None
    description: str = ""


LOG_LEVEL_NAMES: Final[tuple[str, ...]] = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# Standard process and platform variables that are never application configuration.
PLATFORM_ENV_ALLOWLIST: Final[frozenset[str]] = frozenset(
    {
        "PATH",
        "HOME",
        "PWD",
        "OLDPWD",
        "SHELL",
        "SHLVL",
        "USER",
        "LOGNAME",
        "LANG",
        "LANGUAGE",
        "LC_ALL",
        "TERM",
        "TZ",
        "HOSTNAME",
        "TMPDIR",
        "TEMP",
        "TMP",
        "EDITOR",
        "PAGER",
        "MAIL",
        "_",
        "VIRTUAL_ENV",
        "PYTHONPATH",
        "PYTHONUNBUFFERED",
        "PYTHONDONTWRITEBYTECODE",
        "APPDATA",
        "SYSTEMROOT",
        "COMSPEC",
    }
)

CONFIG_SCHEMA: Final[tuple[EnvKeySpec, ...]] = (
    EnvKeySpec("APP_ENV", EnvKeyKind.STRING, default="development", description="Deployment environment name."),
    EnvKeySpec("APP_HOST", EnvKeyKind.STRING, default="0.0.0.0", description="HTTP bind interface."),
    EnvKeySpec(
        "APP_PORT",
        EnvKeyKind.NUMBER,
        default=8000,
        fatal_if_invalid=True,
        integer_only=True,
        minimum=1,
        maximum=65535,
        description="HTTP bind port.",
    ),
    EnvKeySpec("APP_BASE_URL", EnvKeyKind.STRING, description="Public base URL; required in production."),
    EnvKeySpec(
        "LOG_LEVEL",
        EnvKeyKind.STRING,
        default="INFO",
        choices=LOG_LEVEL_NAMES,
        description="Root logging level.",
    ),
    EnvKeySpec(
        "DATABASE_URL",
        EnvKeyKind.SECRET,
        required=True,
        fatal_if_invalid=True,
        description="Connection string for the datastore, usually through the connection pooler.",
    ),
    EnvKeySpec(
        "DATABASE_DIRECT_URL",
        EnvKeyKind.SECRET,
        fatal_if_invalid=True,
        description="Optional direct (non-pooled) connection string probed as a second check.",
    ),
    EnvKeySpec(
        "DATABASE_TLS_RELAXED",
        EnvKeyKind.BOOL,
        default=False,
        description="Disable certificate validation for database TLS. Absent means strict.",
    ),
    EnvKeySpec("DATABASE_CA_PATH", EnvKeyKind.STRING, description="CA bundle tried before the system locations."),
    EnvKeySpec(
        "DATABASE_CA_PINNED_PATH",
        EnvKeyKind.STRING,
        description="Exact CA chain trusted for the direct endpoint.",
    ),
    EnvKeySpec(
        "DATABASE_PROBE_TIMEOUT_MS",
        EnvKeyKind.NUMBER,
        default=5000,
        fatal_if_invalid=True,
        integer_only=True,
        minimum=100,
        maximum=60000,
        description="Time budget for one readiness probe.",
    ),
    EnvKeySpec(
        "EXPECTED_DB_HOST",
        EnvKeyKind.STRING,
        description="Host, or host:port, that DATABASE_URL must point at when set.",
    ),
    EnvKeySpec("ESCALATION_WORKER_ENABLED", EnvKeyKind.BOOL, default=False, description="Run the escalation worker."),
    EnvKeySpec("ESCALATION_V1", EnvKeyKind.BOOL, default=False, description="Enable v1 escalation rules."),
    EnvKeySpec(
        "ESC_CANARY_PCT",
        EnvKeyKind.NUMBER,
        default=100,
        fatal_if_invalid=True,
        integer_only=True,
        minimum=0,
        maximum=100,
        description="Percentage of traffic routed through escalations.",
    ),
    EnvKeySpec("ESC_DRY_RUN", EnvKeyKind.BOOL, default=True, description="Log escalations without sending them."),
    EnvKeySpec(
        "ESC_TICK_MS",
        EnvKeyKind.NUMBER,
        default=60000,
        fatal_if_invalid=True,
        integer_only=True,
        minimum=1000,
        maximum=600000,
        description="Escalation worker tick interval.",
    ),
    EnvKeySpec(
        "MAX_ESC_LEVEL",
        EnvKeyKind.NUMBER,
        default=7,
        fatal_if_invalid=True,
        integer_only=True,
        minimum=1,
        maximum=99,
        description="Highest escalation level.",
    ),
    EnvKeySpec(
        "ESC_SNOOZE_MIN",
        EnvKeyKind.NUMBER,
        default=30,
        fatal_if_invalid=True,
        integer_only=True,
        minimum=1,
        maximum=1440,
        description="Snooze duration in minutes.",
    ),
    EnvKeySpec(
        "OPS_ADMIN_ROLE",
        EnvKeyKind.STRING,
        default="ops_admin",
        min_length=3,
        description="Role name granted operational admin rights.",
    ),
    EnvKeySpec(
        "OPS_HMAC_SECRET",
        EnvKeyKind.SECRET,
        required=True,
        fatal_if_invalid=True,
        min_length=16,
        description="Shared secret for signed operational requests.",
    ),
    EnvKeySpec("SLACK_WEBHOOK_URL", EnvKeyKind.SECRET, description="Incoming webhook for operational notices."),
    EnvKeySpec("SLACK_VELOCITY_WEBHOOK", EnvKeyKind.SECRET, description="Incoming webhook for velocity notices."),
    EnvKeySpec("SLACK_SIGNING_SECRET", EnvKeyKind.SECRET, description="Signing secret for inbound Slack requests."),
    EnvKeySpec("SENTRY_DSN", EnvKeyKind.SECRET, description="Error reporting DSN."),
    EnvKeySpec("SENTRY_ENV", EnvKeyKind.STRING, description="Environment label reported in health payloads."),
    EnvKeySpec("RELEASE_SHA", EnvKeyKind.STRING, description="Release identifier reported as `version`."),
    EnvKeySpec("BUILD_TIME", EnvKeyKind.STRING, description="Build timestamp reported as `build_time`."),
)


def config_schema_prefixes(schema: Sequence[EnvKeySpec]) -> frozenset[str]:
    """Derive application key prefixes from schema key names.

    The prefix of a key is its text up to and including the first underscore;
    keys without an underscore contribute their full name.

    Args:
        schema: Declared environment keys.

    Returns:
        frozenset[str]: Application prefixes used for unknown-key detection.
    """

    return frozenset(config_key_prefix(spec.name) for spec in schema)


def config_key_prefix(key_name: str) -> str:
    """Return the family prefix of one key name, e.g. `ESC_` for `ESC_DRY_RUN`."""

    head, separator, _ = key_name.partition("_")
    return f"{head}{separator}" if separator else key_name
