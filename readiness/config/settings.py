"""Typed runtime settings built from the validated environment snapshot."""

import logging
import os
from typing import Any, Mapping, Sequence

from dotenv import dotenv_values
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from readiness.domain import ValidationIssue, ValidationOutcome

from .schema import CONFIG_SCHEMA, LOG_LEVEL_NAMES, EnvKeySpec
from .validator import ConfigSnapshot, config_validate

logger = logging.getLogger(__name__)

DATABASE_SCHEMA: tuple[EnvKeySpec, ...] = tuple(
    spec for spec in CONFIG_SCHEMA if spec.name.startswith("DATABASE_") or spec.name == "EXPECTED_DB_HOST"
)


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated.

    Attributes:
        issues: Fatal configuration issues that blocked startup.
    """

    def __init__(self, message: str, issues: tuple[ValidationIssue, ...] = ()):
        super().__init__(message)
        self.issues = issues


class DatabaseSettings(BaseSettings):
    """Minimal settings model used by database tooling.

    This model validates only datastore connectivity inputs so smoke probes
    can run without the full application configuration. Instances are only
    built from a validated snapshot; environment variables are never read
    directly by this model.

    Attributes:
        database_url: Primary (pooler) database connection string.
        database_direct_url: Optional direct database connection string.
        database_tls_relaxed: Whether database certificate validation is disabled.
        database_ca_path: CA bundle tried before system bundle locations.
        database_ca_pinned_path: Exact CA chain trusted for the direct endpoint.
        database_probe_timeout_ms: Time budget for one readiness probe.
        expected_db_host: Host that database_url must point at, when pinned.
    """

    model_config = SettingsConfigDict(frozen=True, extra="ignore", case_sensitive=False)

    database_url: SecretStr
    database_direct_url: SecretStr | None = None
    database_tls_relaxed: bool = False
    database_ca_path: str | None = None
    database_ca_pinned_path: str | None = None
    database_probe_timeout_ms: int = Field(default=5000, ge=100, le=60000)
    expected_db_host: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Restrict settings sources to explicit init values.

        Returns:
            tuple[PydanticBaseSettingsSource, ...]: Only the init source.
        """

        return (init_settings,)


class AppSettings(DatabaseSettings):
    """Read-only application settings for the readiness service.

    Field names are the lowercase form of the environment keys declared in
    `CONFIG_SCHEMA`.

    Attributes:
        app_env: Deployment environment name.
        app_host: HTTP bind interface.
        app_port: HTTP bind port.
        app_base_url: Public base URL.
        log_level: Root logging level name.
        escalation_worker_enabled: Escalation worker switch.
        escalation_v1: Escalation v1 rules switch.
        esc_canary_pct: Escalation canary percentage.
        esc_dry_run: Escalation dry-run switch.
        esc_tick_ms: Escalation worker tick interval.
        max_esc_level: Highest escalation level.
        esc_snooze_min: Escalation snooze duration in minutes.
        ops_admin_role: Operational admin role name.
        ops_hmac_secret: Shared secret for signed operational requests.
        slack_webhook_url: Operational notice webhook.
        slack_velocity_webhook: Velocity notice webhook.
        slack_signing_secret: Signing secret for inbound Slack requests.
        sentry_dsn: Error reporting DSN.
        sentry_env: Environment label preferred in health payloads.
        release_sha: Release identifier.
        build_time: Build timestamp text.
    """

    app_env: str = Field(default="development")
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)
    app_base_url: str | None = None
    log_level: str = Field(default="INFO")
    escalation_worker_enabled: bool = False
    escalation_v1: bool = False
    esc_canary_pct: int = Field(default=100, ge=0, le=100)
    esc_dry_run: bool = True
    esc_tick_ms: int = Field(default=60000, ge=1000, le=600000)
    max_esc_level: int = Field(default=7, ge=1, le=99)
    esc_snooze_min: int = Field(default=30, ge=1, le=1440)
    ops_admin_role: str = Field(default="ops_admin", min_length=3)
    ops_hmac_secret: SecretStr
    slack_webhook_url: SecretStr | None = None
    slack_velocity_webhook: SecretStr | None = None
    slack_signing_secret: SecretStr | None = None
    sentry_dsn: SecretStr | None = None
    sentry_env: str | None = None
    release_sha: str | None = None
    build_time: str | None = None

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in LOG_LEVEL_NAMES:
            raise ValueError(f"log_level must be one of {', '.join(sorted(LOG_LEVEL_NAMES))}")
        return normalized_value


def config_collect_environment(env_file: str | None = ".env") -> dict[str, str]:
    """Merge dotenv file values with the process environment.

    Process environment values take precedence over dotenv values.

    Args:
        env_file: Optional dotenv path; missing files are ignored.

    Returns:
        dict[str, str]: Raw environment mapping.
    """

    raw_env: dict[str, str] = {}
    if env_file and os.path.isfile(env_file):
        raw_env.update({key: value for key, value in dotenv_values(env_file).items() if value is not None})
    raw_env.update(os.environ)
    return raw_env


def config_log_outcome(outcome: ValidationOutcome) -> None:
    """Log every validation issue once.

    Args:
        outcome: Validation outcome to report.
    """

    for issue in outcome.warnings:
        logger.warning("Config warning: %s: %s", issue.key, issue.reason)
    for issue in outcome.errors:
        logger.error("Config error: %s: %s", issue.key, issue.reason)


def config_settings_from_snapshot(snapshot: ConfigSnapshot, settings_cls: type[DatabaseSettings] = AppSettings):
    """Materialize typed settings from a validated snapshot.

    Args:
        snapshot: Snapshot produced by `config_validate` with no errors.
        settings_cls: Settings model to build.

    Returns:
        DatabaseSettings: Frozen settings instance of `settings_cls`.

    Raises:
        SettingsLoadError: Raised when the snapshot violates typed field constraints.
    """

    try:
        return settings_cls(**{key_name.lower(): value for key_name, value in snapshot.items()})
    except ValidationError as error:
        raise SettingsLoadError(f"Startup configuration validation failed. Details: {error}") from error


def config_load_settings(raw_env: Mapping[str, Any] | None = None, env_file: str | None = ".env") -> AppSettings:
    """Validate the environment and load runtime settings.

    Args:
        raw_env: Optional raw environment; collected from dotenv and
            `os.environ` when omitted.
        env_file: Dotenv path used when `raw_env` is omitted.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when any fatal configuration error is found.
    """

    snapshot = _config_validate_or_raise(raw_env, env_file, CONFIG_SCHEMA)
    return config_settings_from_snapshot(snapshot, AppSettings)


def config_load_database_settings(
    raw_env: Mapping[str, Any] | None = None,
    env_file: str | None = ".env",
) -> DatabaseSettings:
    """Validate and load only the datastore settings.

    Args:
        raw_env: Optional raw environment; collected from dotenv and
            `os.environ` when omitted.
        env_file: Dotenv path used when `raw_env` is omitted.

    Returns:
        DatabaseSettings: Validated datastore settings.

    Raises:
        SettingsLoadError: Raised when a datastore key is missing or invalid.
    """

    snapshot = _config_validate_or_raise(raw_env, env_file, DATABASE_SCHEMA)
    return config_settings_from_snapshot(snapshot, DatabaseSettings)


def _config_validate_or_raise(
    raw_env: Mapping[str, Any] | None,
    env_file: str | None,
    schema: Sequence[EnvKeySpec],
) -> ConfigSnapshot:
    environment = dict(raw_env) if raw_env is not None else config_collect_environment(env_file=env_file)
    snapshot, outcome = config_validate(environment, schema)
    config_log_outcome(outcome)
    if not outcome.is_valid:
        details = "\n".join(f"- {issue.key}: {issue.reason}" for issue in outcome.errors)
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables.\n{details}",
            issues=outcome.errors,
        )
    return snapshot
