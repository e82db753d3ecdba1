"""Logging setup for the CLI.

Records flow through the standard library root logger to stderr, so
command output on stdout stays clean.  structlog adds the level, logger
name, timestamp and any bound context, then renders either a console line
or, with ``SALESLEDGER_LOG_FORMAT=json``, one JSON object per line.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import Any

import structlog

DEFAULT_LEVEL = "WARNING"


def log_level(environ: Mapping[str, str] | None = None) -> int:
    env = os.environ if environ is None else environ
    name = env.get("SALESLEDGER_LOG_LEVEL", DEFAULT_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.getLevelName(DEFAULT_LEVEL)


def wants_json(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get("SALESLEDGER_LOG_FORMAT", "console").strip().lower() == "json"


def configure_logging(environ: Mapping[str, str] | None = None) -> None:
    level = log_level(environ)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if wants_json(environ)
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def add_context(**kwargs: Any) -> None:
    """Bind values onto every later log line of the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)
