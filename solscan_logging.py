"""Structured logging configuration using structlog.

Call setup_logging() once at server startup. Logs go to stderr because
stdout carries the MCP stdio stream.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog


def setup_logging(*, json_output: bool | None = None, log_level: str | None = None) -> None:
    """Configure structlog for the server.

    Args:
        json_output: Render logs as JSON. Defaults to SOLSCAN_LOG_JSON.
        log_level: Minimum level to emit. Defaults to SOLSCAN_LOG_LEVEL or INFO.
    """
    if json_output is None:
        json_output = os.getenv("SOLSCAN_LOG_JSON", "").lower() in ("1", "true", "yes", "on")
    level_name = (log_level or os.getenv("SOLSCAN_LOG_LEVEL") or "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
