"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service,
or runs one of the operator commands (`config-check`, `db-smoke`).
"""

import argparse
import dataclasses
import json
import logging

import uvicorn

from readiness.bootstrap import bootstrap_create_application
from readiness.config import (
    CONFIG_SCHEMA,
    SettingsLoadError,
    config_collect_environment,
    config_load_database_settings,
    config_load_settings,
    config_redacted_snapshot,
    config_validate,
)
from readiness.db import SQLAlchemyDatabaseProbe, TLSMaterialError
from readiness.domain import DeploymentMetadata
from readiness.health import DIRECT_TARGET_KIND, ReadinessHealthService, health_config_from_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SystemExit: Raised with a non-zero code when a command fails.
    """

    argument_parser = argparse.ArgumentParser(description="Operational readiness runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "config-check", "db-smoke"),
        help="Runtime command: `api` starts server, `config-check` validates environment configuration, "
        "`db-smoke` probes each configured database target once",
        type=str,
    )
    argument_parser.add_argument(
        "--env-file",
        dest="env_file",
        default=".env",
        type=str,
        help="Optional dotenv file merged under the process environment",
    )
    argument_parser.add_argument(
        "--relaxed",
        action="store_true",
        help="Disable certificate validation for `db-smoke` regardless of DATABASE_TLS_RELAXED",
    )
    argument_parser.add_argument(
        "--pinned-ca",
        dest="pinned_ca",
        type=str,
        help="Pinned CA chain for the direct target in `db-smoke`",
    )
    parsed_arguments = argument_parser.parse_args()
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    if parsed_arguments.command == "config-check":
        raise SystemExit(main_run_config_check(env_file=parsed_arguments.env_file))

    if parsed_arguments.command == "db-smoke":
        raise SystemExit(
            main_run_db_smoke(
                env_file=parsed_arguments.env_file,
                relaxed=parsed_arguments.relaxed,
                pinned_ca=parsed_arguments.pinned_ca,
            )
        )

    try:
        settings = config_load_settings(env_file=parsed_arguments.env_file)
    except SettingsLoadError as error:
        logger.error("%s", error)
        raise SystemExit(1) from error

    logging.getLogger().setLevel(settings.log_level)
    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=settings.app_host,
        port=settings.app_port,
    )


def main_run_config_check(env_file: str | None = ".env") -> int:
    """Print the redacted configuration snapshot and every validation issue.

    Args:
        env_file: Dotenv path merged under the process environment.

    Returns:
        int: 0 when the configuration is valid, 1 when fatal errors exist.
    """

    snapshot, outcome = config_validate(config_collect_environment(env_file=env_file), CONFIG_SCHEMA)
    print(json.dumps(config_redacted_snapshot(snapshot, CONFIG_SCHEMA), indent=2, sort_keys=True))
    for issue in outcome.warnings:
        print(f"WARNING {issue.key}: {issue.reason}")
    for issue in outcome.errors:
        print(f"ERROR {issue.key}: {issue.reason}")
    return 0 if outcome.is_valid else 1


def main_run_db_smoke(env_file: str | None = ".env", relaxed: bool = False, pinned_ca: str | None = None) -> int:
    """Probe every configured database target once and print the outcome.

    Args:
        env_file: Dotenv path merged under the process environment.
        relaxed: Force relaxed TLS for every non-pinned target.
        pinned_ca: Pinned CA chain overriding DATABASE_CA_PINNED_PATH.

    Returns:
        int: 0 when every probe succeeded, 1 on any probe failure, 2 when
        datastore settings are missing or invalid.
    """

    try:
        database_settings = config_load_database_settings(env_file=env_file)
    except SettingsLoadError as error:
        logger.error("%s", error)
        return 2

    config = health_config_from_settings(
        database_settings,
        DeploymentMetadata(environment_name="smoke", version="dev"),
    )
    if relaxed:
        config = dataclasses.replace(config, tls_relaxed=True)
    if pinned_ca:
        if not any(target.kind == DIRECT_TARGET_KIND for target in config.targets):
            logger.warning("Ignoring pinned CA %s: DATABASE_DIRECT_URL is not set, no direct target to pin", pinned_ca)
        config = dataclasses.replace(config, pinned_ca_path=pinned_ca)

    probe = SQLAlchemyDatabaseProbe()
    service = ReadinessHealthService(probe=probe, config=config)
    exit_code = 0
    for target in config.targets:
        try:
            tls_mode = service.health_resolve_tls_mode(target)
        except TLSMaterialError as error:
            print(f"FAIL {target.name} ({target.kind}): {error}")
            exit_code = 1
            continue

        result = probe.db_probe(target, tls_mode, config.timeout_seconds)
        label = f"{target.name} ({target.kind}, {tls_mode.strictness.value} TLS, {tls_mode.source})"
        if result.ok:
            print(f"OK {label}: {result.latency_ms} ms, db_time={result.db_time}")
        else:
            print(f"FAIL {label} [{result.code}]: {result.error}")
            exit_code = 1
    return exit_code


if __name__ == "__main__":
    main()
