"""
Structured logging configuration using structlog wrapping stdlib.

Human-readable console output by default, JSON lines when
REFOCUS_LOG_FORMAT=json (useful when the loop runs under a supervisor).
A long-running loop can also append JSON lines to a file, which keeps a
replayable record of every intervention next to the activity database.

Usage:
    from refocus.logging_config import setup_logging, get_logger
    setup_logging(log_file=Path("data/refocus.log"))
    logger = get_logger(__name__)
    logger.info("intervention_shown", trigger="context_switch")

    with tick_context(tick=42):
        logger.info("pattern_detected")   # carries tick=42
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from pathlib import Path

import structlog

# Chatty third-party loggers kept at WARNING regardless of our level.
QUIET_LOGGERS = ("asyncio",)


def _formatter(renderer: structlog.types.Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    log_file: Path | None = None,
) -> None:
    if level is None:
        level = os.environ.get("REFOCUS_LOG_LEVEL", "INFO")

    if json_output is None:
        json_output = os.environ.get("REFOCUS_LOG_FORMAT", "").lower() == "json"

    if log_file is None and os.environ.get("REFOCUS_LOG_FILE"):
        log_file = Path(os.environ["REFOCUS_LOG_FILE"])

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        console_renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        console_renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_formatter(console_renderer))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(numeric_level)

    # File output is always JSON lines
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def tick_context(**values):
    """Bind values to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**values):
        yield


__all__ = ["get_logger", "setup_logging", "tick_context"]
