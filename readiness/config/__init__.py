"""Configuration package for the key catalog, validation, and runtime settings."""

from .schema import CONFIG_SCHEMA, LOG_LEVEL_NAMES, PLATFORM_ENV_ALLOWLIST, EnvKeyKind, EnvKeySpec
from .settings import (
    DATABASE_SCHEMA,
    AppSettings,
    DatabaseSettings,
    SettingsLoadError,
    config_collect_environment,
    config_load_database_settings,
    config_load_settings,
    config_log_outcome,
    config_settings_from_snapshot,
)
from .validator import (
    ConfigSnapshot,
    config_check_expected_database_host,
    config_coerce_bool,
    config_detect_legacy_database_keys,
    config_detect_unknown_keys,
    config_redacted_snapshot,
    config_validate,
)

__all__ = [
    "AppSettings",
    "CONFIG_SCHEMA",
    "ConfigSnapshot",
    "DATABASE_SCHEMA",
    "DatabaseSettings",
    "EnvKeyKind",
    "EnvKeySpec",
    "LOG_LEVEL_NAMES",
    "PLATFORM_ENV_ALLOWLIST",
    "SettingsLoadError",
    "config_check_expected_database_host",
    "config_coerce_bool",
    "config_collect_environment",
    "config_detect_legacy_database_keys",
    "config_detect_unknown_keys",
    "config_load_database_settings",
    "config_load_settings",
    "config_log_outcome",
    "config_redacted_snapshot",
    "config_settings_from_snapshot",
    "config_validate",
]
