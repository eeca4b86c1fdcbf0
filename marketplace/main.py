"""Command-line entry point for marketplace-core maintenance tasks."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from marketplace.config.environment import EnvironmentConfig
from marketplace.config.exceptions import ConfigurationError
from marketplace.config.loader import load_config
from marketplace.config.models import AppConfig
from marketplace.identity import IdentityResolutionError, resolve_identity_info, supported_providers
from marketplace.logging import get_logger
from marketplace.logging.config import configure_logging
from marketplace.persistence.database import close_database, get_session, init_database
from marketplace.persistence.exceptions import PersistenceError
from marketplace.persistence.repositories import ListingRepository, UserRepository

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def cmd_init_db(env_config: EnvironmentConfig) -> int:
    """Create the schema and exit."""
    init_database(env_config.database_url)
    close_database()
    return 0


def cmd_audit_enum_columns(env_config: EnvironmentConfig) -> int:
    """Report stored enum tokens that no member claims.

    Reads map such values to a fallback member, so they never fail a request;
    this command is how they get noticed and migrated.

    Returns:
        0 when every enum column is clean, 1 otherwise
    """
    init_database(env_config.database_url)
    try:
        with get_session() as session:
            anomalies = {
                **UserRepository(session).find_unknown_tokens(),
                **ListingRepository(session).find_unknown_tokens(),
            }
    finally:
        close_database()

    found = 0
    for column, tokens in sorted(anomalies.items()):
        for token in tokens:
            found += 1
            logger.warning(
                f"Unknown token {token!r} stored in {column}",
                extra={"event": "codec.audit.unknown_token", "column": column, "token": token},
            )

    logger.info(
        "Enum column audit finished",
        extra={
            "event": "codec.audit.completed",
            "columns": len(anomalies),
            "unknown_tokens": found,
        },
    )
    return 1 if found else 0


def cmd_resolve_identity(provider: str, claims_file: Path) -> int:
    """Resolve a saved provider claims JSON file and print the canonical identity."""
    try:
        with open(claims_file, "r") as f:
            claims = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot read claims from {claims_file}: {e}", file=sys.stderr)
        return 1

    try:
        identity = resolve_identity_info(provider, claims).to_canonical()
    except IdentityResolutionError as e:
        print(f"Identity resolution failed: {e}", file=sys.stderr)
        return 1

    print(identity.model_dump_json(indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="marketplace-core - enum column and OAuth identity maintenance tools"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("init-db", help="Create database tables that do not exist yet")
    commands.add_parser(
        "audit-enum-columns",
        help="List stored enum tokens that no member claims (exit 1 if any)",
    )
    resolve = commands.add_parser(
        "resolve-identity", help="Normalize a provider claims JSON file"
    )
    resolve.add_argument("--provider", required=True, help=f"One of: {', '.join(supported_providers())}")
    resolve.add_argument("--claims", type=Path, required=True, help="Path to the claims JSON file")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "marketplace-core command starting",
            extra={"event": "cli.command.starting", "command": args.command},
        )

        if args.command == "init-db":
            return cmd_init_db(env_config)
        if args.command == "audit-enum-columns":
            return cmd_audit_enum_columns(env_config)
        return cmd_resolve_identity(args.provider, args.claims)

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except PersistenceError as e:
        print(f"Database Error: {e}", file=sys.stderr)
        logger.error(
            f"Database error: {e}",
            extra={"event": "cli.command.failed", "error_type": type(e).__name__},
        )
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
