"""
observability/logger.py — Hiven Client Structured Logger

structlog routed through stdlib logging:
  - hiven.log: rotating file, always JSON
  - stdout: coloured key=value lines on a TTY, JSON when piped
  - every line carries timestamp, level, logger, event and, inside a
    gateway session, session_id
  - websockets / httpx frame-level chatter held at WARNING

The library modules only ever call get_logger(); setup_logging() belongs to
the application (the `hiven` command calls it once at startup).

Usage:
    from hiven.observability.logger import get_logger, setup_logging
    setup_logging(level="INFO", log_dir="./data/logs")
    log = get_logger(__name__)
    log.info("gateway.hello", heartbeat_interval_ms=30000)
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, ContextManager, Optional

import structlog

LOG_FILE_NAME = "hiven.log"

# Third-party loggers that log every frame / request at DEBUG.
_MUTED_LOGGERS = ("websockets", "httpx", "httpcore")


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _formatter(renderer: Any, pre_chain: list[Any]) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=pre_chain,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def setup_logging(
    level: str = "INFO",
    log_dir: str | Path = "./data/logs",
    json_format: Optional[bool] = None,
    console_output: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure structlog and stdlib logging. Safe to call again; the previous
    root handlers are replaced.

    Args:
        level:          DEBUG | INFO | WARNING | ERROR | CRITICAL
        log_dir:        Directory for hiven.log and its rotations.
        json_format:    Console format. None picks pretty on a TTY, JSON otherwise.
        console_output: Whether to log to stdout at all.
        max_bytes:      Rotation size of hiven.log.
        backup_count:   Rotated files kept.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    if json_format is None:
        json_format = not sys.stdout.isatty()

    pre_chain = _shared_processors()

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer(), pre_chain))
    handlers: list[logging.Handler] = [file_handler]

    if console_output:
        console_renderer = (
            structlog.processors.JSONRenderer()
            if json_format
            else structlog.dev.ConsoleRenderer(colors=True)
        )
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(_formatter(console_renderer, pre_chain))
        handlers.append(console_handler)

    for handler in handlers:
        handler.setLevel(numeric_level)
    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)
    for name in _MUTED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "hiven", **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a bound logger, optionally with context bound up front.

    Example:
        log = get_logger(__name__, room_id="42")
        log.debug("rest.request", method="POST")
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


def session_context(session_id: str) -> ContextManager[Any]:
    """
    Bind session_id to every line logged inside the block, including by
    tasks created inside it. Previous bindings come back on exit.

    Example:
        with session_context(session.id):
            log.info("gateway.session.start")
    """
    return structlog.contextvars.bound_contextvars(session_id=session_id)
