"""
main.py — Hiven Client Entry Point

Connects to the gateway and logs every event until the server closes the
session.

Usage:
    python -m hiven                              # token from HIVEN_TOKEN / .env
    python -m hiven --token <token>
    python -m hiven --log-level DEBUG
    python -m hiven --config path/to/config.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from hiven.client import HivenClient
from hiven.config.settings import ConfigError, Settings, load_settings
from hiven.exceptions import HivenError
from hiven.gateway.handler import LoggingEventHandler
from hiven.observability.logger import get_logger, setup_logging

log = get_logger(__name__)

EXIT_OK = 0
EXIT_SESSION_ERROR = 1
EXIT_CONFIG_ERROR = 2


def _find_env_file() -> Path | None:
    """Walk up from CWD looking for .env file."""
    cwd = Path.cwd()
    for d in [cwd, *cwd.parents]:
        candidate = d / ".env"
        if candidate.is_file():
            return candidate
    return None


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hiven",
        description="Hiven gateway client — connects and logs incoming events",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: $HIVEN_CONFIG or config/config.yaml)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Session token (default: $HIVEN_TOKEN)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging.level from config",
    )
    return parser.parse_args(argv)


def bootstrap(args: argparse.Namespace) -> Settings:
    """Load settings, apply CLI overrides, validate. Raises ConfigError."""
    env_path = _find_env_file()
    if env_path:
        load_dotenv(dotenv_path=env_path)

    settings = load_settings(args.config)
    if args.token:
        settings.token = args.token
    if args.log_level:
        settings.logging.level = args.log_level
    settings.validate_all()
    return settings


async def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = bootstrap(args)
    except ConfigError as e:
        print(e)
        return EXIT_CONFIG_ERROR

    setup_logging(
        level=settings.log_level,
        log_dir=settings.log_dir,
        json_format=settings.logging.json_format,
        console_output=settings.logging.console_output,
        max_bytes=settings.logging.max_file_size_mb * 1024 * 1024,
        backup_count=settings.logging.backup_count,
    )
    log.info("hiven.start", gateway=settings.gateway_url, api=settings.api_base_url, pid=os.getpid())

    async with HivenClient.from_settings(settings) as client:
        try:
            await client.start_gateway(LoggingEventHandler())
        except HivenError as e:
            log.error("hiven.session_failed", error=str(e), error_type=type(e).__name__)
            return EXIT_SESSION_ERROR

    log.info("hiven.stop")
    return EXIT_OK


def cli() -> None:
    """Console-script entry point."""
    sys.exit(asyncio.run(main()))
