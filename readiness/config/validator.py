"""Pure validation of the raw process environment against the key catalog.

Nothing in this module reads or writes process state: callers pass the raw
environment mapping in and decide what to do with the returned outcome.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Any, Final, Iterable, Mapping, Sequence

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from readiness.domain import ValidationIssue, ValidationOutcome

from .schema import PLATFORM_ENV_ALLOWLIST, EnvKeyKind, EnvKeySpec, config_key_prefix, config_schema_prefixes

ConfigSnapshot = Mapping[str, Any]

TRUTHY_LITERALS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
FALSY_LITERALS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})

NEAR_MISS_MAX_DISTANCE: Final[int] = 2
PRODUCTION_ENVIRONMENT: Final[str] = "production"
LOCAL_DATABASE_HOSTS: Final[frozenset[str]] = frozenset({"localhost", "127.0.0.1", "::1"})
DATABASE_URL_KEYS: Final[tuple[str, ...]] = ("DATABASE_URL", "DATABASE_DIRECT_URL")
LEGACY_DATABASE_KEYS: Final[tuple[str, ...]] = ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_SERVICE_ROLE_KEY")


class InvalidEnvValueError(ValueError):
    """Raised by coercion helpers when a present raw value cannot be used."""


def config_coerce_bool(raw_value: str | None, default: bool | None) -> bool | None:
    """Coerce one boolean-style environment value.

    Absence (None, empty, or whitespace) resolves to the declared default,
    which may be True.

    Args:
        raw_value: Raw environment text, or None when the key is absent.
        default: Declared default for the key.

    Returns:
        bool | None: Parsed boolean, or the default when absent.

    Raises:
        InvalidEnvValueError: Raised when the literal is neither truthy nor falsy.
    """

    if raw_value is None or not raw_value.strip():
        return default
    normalized_value = raw_value.strip().lower()
    if normalized_value in TRUTHY_LITERALS:
        return True
    if normalized_value in FALSY_LITERALS:
        return False
    raise InvalidEnvValueError(
        f"expected one of {', '.join(sorted(TRUTHY_LITERALS | FALSY_LITERALS))}, got {raw_value.strip()!r}"
    )


def config_coerce_number(
    raw_value: str,
    minimum: float | None = None,
    maximum: float | None = None,
    integer_only: bool = False,
) -> int | float:
    """Coerce one numeric environment value and check its bounds.

    Args:
        raw_value: Non-empty raw environment text.
        minimum: Optional inclusive lower bound.
        maximum: Optional inclusive upper bound.
        integer_only: Reject literals that are not whole numbers.

    Returns:
        int | float: Integer for integral literals, float otherwise.

    Raises:
        InvalidEnvValueError: Raised when parsing fails or bounds are violated.
    """

    text_value = raw_value.strip()
    try:
        number: int | float = int(text_value)
    except ValueError:
        if integer_only:
            raise InvalidEnvValueError(f"expected a whole number, got {text_value!r}") from None
        try:
            number = float(text_value)
        except ValueError as error:
            raise InvalidEnvValueError(f"expected a number, got {text_value!r}") from error
        if not math.isfinite(number):
            raise InvalidEnvValueError(f"expected a finite number, got {text_value!r}")

    if minimum is not None and number < minimum:
        raise InvalidEnvValueError(f"must be >= {_config_format_bound(minimum)}")
    if maximum is not None and number > maximum:
        raise InvalidEnvValueError(f"must be <= {_config_format_bound(maximum)}")
    return number


def config_levenshtein_distance(left: str, right: str) -> int:
    """Return the edit distance between two key names.

    Args:
        left: First key name.
        right: Second key name.

    Returns:
        int: Minimum number of single-character inserts, deletes, or substitutions.
    """

    if len(left) < len(right):
        left, right = right, left
    previous_row = list(range(len(right) + 1))
    for left_index, left_char in enumerate(left, start=1):
        current_row = [left_index]
        for right_index, right_char in enumerate(right, start=1):
            current_row.append(
                min(
                    previous_row[right_index] + 1,
                    current_row[right_index - 1] + 1,
                    previous_row[right_index - 1] + (left_char != right_char),
                )
            )
        previous_row = current_row
    return previous_row[-1]


def config_find_near_miss(candidate_key: str, known_keys: Iterable[str]) -> str | None:
    """Find the known key a candidate most plausibly misspells.

    A known key matches when its edit distance to the candidate is at most
    `NEAR_MISS_MAX_DISTANCE`, or when one name is a prefix of the other.
    The closest match wins; ties resolve alphabetically.

    Args:
        candidate_key: Unknown environment key.
        known_keys: Schema key names.

    Returns:
        str | None: Closest known key, or None when nothing is close.
    """

    best_match: tuple[int, str] | None = None
    for known_key in known_keys:
        distance = config_levenshtein_distance(candidate_key, known_key)
        is_prefix_related = known_key.startswith(candidate_key) or candidate_key.startswith(known_key)
        if distance > NEAR_MISS_MAX_DISTANCE and not is_prefix_related:
            continue
        if best_match is None or (distance, known_key) < best_match:
            best_match = (distance, known_key)
    return best_match[1] if best_match else None


def config_detect_unknown_keys(
    raw_keys: Iterable[str],
    schema_keys: Iterable[str],
    allowlist: Iterable[str] = PLATFORM_ENV_ALLOWLIST,
    prefixes: Iterable[str] | None = None,
) -> tuple[ValidationIssue, ...]:
    """Flag environment keys that look like misspelled application config.

    Args:
        raw_keys: Keys present in the raw environment.
        schema_keys: Keys declared by the schema.
        allowlist: Platform variables that are never application configuration.
        prefixes: Application prefixes; derived from `schema_keys` when omitted.

    Returns:
        tuple[ValidationIssue, ...]: One warning per unknown application-prefixed key, sorted by key.
    """

    known_keys = frozenset(schema_keys)
    if prefixes is None:
        prefixes = {config_key_prefix(key_name) for key_name in known_keys}
    application_prefixes = tuple(sorted(set(prefixes)))
    candidates = set(raw_keys) - known_keys - frozenset(allowlist)

    issues: list[ValidationIssue] = []
    for candidate_key in sorted(candidates):
        if not candidate_key.startswith(application_prefixes):
            continue
        near_miss = config_find_near_miss(candidate_key, known_keys)
        reason = f"Unknown env keys: {candidate_key}"
        if near_miss is not None:
            reason = f"{reason} (did you mean {near_miss}?)"
        issues.append(ValidationIssue(key=candidate_key, reason=reason))
    return tuple(issues)


def config_validate(
    raw_env: Mapping[str, str],
    schema: Sequence[EnvKeySpec],
) -> tuple[ConfigSnapshot, ValidationOutcome]:
    """Coerce the raw environment into a typed snapshot and collect issues.

    Args:
        raw_env: Raw environment mapping.
        schema: Declared environment keys.

    Returns:
        tuple[ConfigSnapshot, ValidationOutcome]: Read-only snapshot keyed by
        environment name, and ordered fatal errors plus non-fatal warnings.
    """

    values: dict[str, Any] = {}
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    for spec in schema:
        raw_value = raw_env.get(spec.name)
        try:
            values[spec.name] = _config_coerce_value(spec, raw_value)
        except InvalidEnvValueError as error:
            values[spec.name] = spec.default
            issue = ValidationIssue(key=spec.name, reason=str(error))
            if spec.fatal_if_invalid:
                errors.append(issue)
            else:
                warnings.append(
                    ValidationIssue(key=spec.name, reason=f"{issue.reason}; using default {spec.default!r}")
                )
            continue

        if values[spec.name] is None and spec.required:
            errors.append(ValidationIssue(key=spec.name, reason="missing required value"))

    for key_name in DATABASE_URL_KEYS:
        url_issue = _config_check_database_url(key_name, values.get(key_name))
        if url_issue is not None:
            errors.append(url_issue)

    errors.extend(config_check_expected_database_host(values, errors))
    warnings.extend(config_detect_legacy_database_keys(raw_env))

    guard_errors, guard_warnings = _config_check_environment_guards(values, errors)
    errors.extend(guard_errors)
    warnings.extend(guard_warnings)

    warnings.extend(
        config_detect_unknown_keys(
            raw_keys=raw_env.keys(),
            schema_keys=[spec.name for spec in schema],
            prefixes=config_schema_prefixes(schema),
        )
    )

    outcome = ValidationOutcome(errors=tuple(errors), warnings=tuple(warnings))
    return MappingProxyType(values), outcome


def config_check_expected_database_host(
    values: Mapping[str, Any],
    errors: Sequence[ValidationIssue] = (),
) -> tuple[ValidationIssue, ...]:
    """Pin DATABASE_URL to the host an operator expects.

    The comparison uses `host` when EXPECTED_DB_HOST has no port and
    `host:port` otherwise, case-insensitively.

    Args:
        values: Coerced values keyed by environment name.
        errors: Issues already recorded; an unparsable DATABASE_URL is not re-checked.

    Returns:
        tuple[ValidationIssue, ...]: One fatal issue on mismatch, otherwise empty.
    """

    expected_host = values.get("EXPECTED_DB_HOST")
    database_url = values.get("DATABASE_URL")
    if not expected_host or not database_url or any(issue.key == "DATABASE_URL" for issue in errors):
        return ()

    parsed_url = make_url(str(database_url))
    actual_host = parsed_url.host or ""
    if parsed_url.port is not None and ":" in expected_host:
        actual_host = f"{actual_host}:{parsed_url.port}"
    if actual_host.lower() == expected_host.lower():
        return ()
    return (
        ValidationIssue(
            key="DATABASE_URL",
            reason=f"database host mismatch: expected {expected_host}, got {actual_host or 'no host'}",
        ),
    )


def config_detect_legacy_database_keys(raw_env: Mapping[str, str]) -> tuple[ValidationIssue, ...]:
    """Warn about legacy datastore keys that must not be used for connections.

    Args:
        raw_env: Raw environment mapping.

    Returns:
        tuple[ValidationIssue, ...]: One warning per non-empty legacy key.
    """

    return tuple(
        ValidationIssue(
            key=key_name,
            reason="legacy environment variable present; use DATABASE_URL for database access",
        )
        for key_name in LEGACY_DATABASE_KEYS
        if (raw_env.get(key_name) or "").strip()
    )


def config_redacted_snapshot(snapshot: ConfigSnapshot, schema: Sequence[EnvKeySpec]) -> dict[str, Any]:
    """Render a snapshot safe for logs, hiding secret values.

    Args:
        snapshot: Validated configuration snapshot.
        schema: Declared environment keys.

    Returns:
        dict[str, Any]: Snapshot copy with secrets replaced by `set`/`unset`.
    """

    redacted: dict[str, Any] = {}
    for spec in schema:
        value = snapshot.get(spec.name)
        if spec.kind is EnvKeyKind.SECRET:
            redacted[spec.name] = "set" if value else "unset"
        else:
            redacted[spec.name] = value
    return redacted


def _config_coerce_value(spec: EnvKeySpec, raw_value: str | None) -> Any:
    if spec.kind is EnvKeyKind.BOOL:
        return config_coerce_bool(raw_value, spec.default)  # type: ignore[arg-type]

    if raw_value is None or not raw_value.strip():
        return spec.default

    if spec.kind is EnvKeyKind.NUMBER:
        return config_coerce_number(
            raw_value,
            minimum=spec.minimum,
            maximum=spec.maximum,
            integer_only=spec.integer_only,
        )

    text_value = raw_value.strip()
    if spec.min_length is not None and len(text_value) < spec.min_length:
        raise InvalidEnvValueError(f"must be at least {spec.min_length} characters")
    if spec.choices is not None:
        for choice in spec.choices:
            if text_value.lower() == choice.lower():
                return choice
        raise InvalidEnvValueError(f"must be one of {', '.join(spec.choices)}, got {text_value!r}")
    return text_value


def _config_check_database_url(key_name: str, value: Any) -> ValidationIssue | None:
    if not value:
        return None
    try:
        parsed_url = make_url(str(value))
    except (ArgumentError, ValueError):
        return ValidationIssue(key=key_name, reason="must be a valid database URL")
    if not parsed_url.drivername.startswith("postgresql") and parsed_url.drivername != "postgres":
        return ValidationIssue(key=key_name, reason=f"unsupported database scheme {parsed_url.drivername!r}")
    return None


def _config_check_environment_guards(
    values: Mapping[str, Any],
    errors: Sequence[ValidationIssue],
) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
    guard_errors: list[ValidationIssue] = []
    guard_warnings: list[ValidationIssue] = []
    if values.get("APP_ENV") != PRODUCTION_ENVIRONMENT:
        return guard_errors, guard_warnings

    if not values.get("APP_BASE_URL"):
        guard_errors.append(ValidationIssue(key="APP_BASE_URL", reason="APP_BASE_URL is required in production"))

    database_url = values.get("DATABASE_URL")
    if database_url and not any(issue.key == "DATABASE_URL" for issue in errors):
        if make_url(str(database_url)).host in LOCAL_DATABASE_HOSTS:
            guard_errors.append(
                ValidationIssue(key="DATABASE_URL", reason="DATABASE_URL must not point to localhost in production")
            )

    if values.get("ESC_DRY_RUN"):
        guard_warnings.append(
            ValidationIssue(key="ESC_DRY_RUN", reason="ESC_DRY_RUN=true in production; escalations will not send")
        )
    if values.get("DATABASE_TLS_RELAXED"):
        guard_warnings.append(
            ValidationIssue(
                key="DATABASE_TLS_RELAXED",
                reason="DATABASE_TLS_RELAXED=true in production; database certificates are not verified",
            )
        )
    return guard_errors, guard_warnings


def _config_format_bound(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)
