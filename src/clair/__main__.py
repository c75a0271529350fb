from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from typing import Any, Optional, Sequence

import yaml

from clair.config import Config, ConfigError, load_config
from clair.config.durations import format_duration
from clair.logging import init_logging
from clair.pagination import FernetKeyCodec

logger = logging.getLogger(__name__)

_REDACTED = "<redacted>"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clair-config", description="Clair configuration loader")
    parser.add_argument(
        "--config",
        default="",
        help="Path to the YAML configuration file (default: none, environment and defaults only)",
    )
    parser.add_argument(
        "--env-prefix",
        default="CLAIR",
        help="Prefix of environment variable overrides (default: CLAIR)",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Optional .env file read beneath the process environment",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    # Command: check
    check_parser = subparsers.add_parser("check", help="Load and validate the configuration")
    check_parser.add_argument(
        "--require-datasource",
        action="store_true",
        help="Fail when no database source is configured",
    )

    # Command: show
    show_parser = subparsers.add_parser("show", help="Print the effective configuration as YAML")
    show_parser.add_argument(
        "--show-secrets",
        action="store_true",
        help="Print the pagination key instead of redacting it",
    )

    # Command: genkey
    subparsers.add_parser("genkey", help="Print a freshly generated pagination key")

    return parser


def _load(args: argparse.Namespace, *, require_datasource: bool = False) -> Config:
    return load_config(
        args.config,
        env_prefix=args.env_prefix,
        dotenv_path=args.dotenv,
        require_datasource=require_datasource,
    )


def _render_value(value: Any) -> Any:
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, tuple):
        return [_render_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _render_value(v) for k, v in value.items()}
    return value


def render_config(config: Config, *, show_secrets: bool = False) -> str:
    data = _render_value(config.model_dump(mode="python"))
    options = data["database"]["options"]
    if not show_secrets and "paginationkey" in options:
        options["paginationkey"] = _REDACTED
    return yaml.safe_dump({"clair": data}, sort_keys=False)


def _check(args: argparse.Namespace) -> int:
    config = _load(args, require_datasource=args.require_datasource)
    logger.info(
        "Configuration is valid. database_type=%s api_port=%s health_port=%s",
        config.database.type,
        config.api.port,
        config.api.health_port,
    )
    return 0


def _show(args: argparse.Namespace) -> int:
    config = _load(args)
    sys.stdout.write(render_config(config, show_secrets=args.show_secrets))
    return 0


def _genkey(args: argparse.Namespace) -> int:
    codec = FernetKeyCodec()
    sys.stdout.write(codec.encode(codec.generate()) + "\n")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    init_logging(args.log_level)

    commands = {"check": _check, "show": _show, "genkey": _genkey}
    try:
        return commands[args.command](args)
    except ConfigError as e:
        logger.error("Failed to load configuration: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
