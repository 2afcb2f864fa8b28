# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Structured logging configuration.

Log records go to stderr (reports own stdout). Every record emitted during
a CLI run carries the run's `run_id` and `input_file` through structlog
contextvars.
"""

import logging
import sys
import uuid
from collections.abc import Callable, Sequence
from typing import Any, TextIO

import structlog
from structlog.typing import EventDict, WrappedLogger

VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _normalize_level(log_level: str) -> str:
    normalized_level = log_level.upper()
    if normalized_level not in VALID_LEVELS:
        logging.warning(
            f"Invalid log level '{log_level}', defaulting to INFO. "
            f"Valid levels: {', '.join(sorted(VALID_LEVELS))}"
        )
        return "INFO"
    return normalized_level


def configure_logging(
    log_level: str = "WARNING",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging.

    Args:
        log_level: Minimum level; unknown names fall back to INFO.
        json_output: One JSON object per record instead of console output.
        stream: Destination (default: the current sys.stderr). Loggers are
            not cached, so reconfiguring redirects existing module loggers.
    """
    level = getattr(logging, _normalize_level(log_level))
    target = stream if stream is not None else sys.stderr

    logging.basicConfig(format="%(message)s", stream=target, level=level)

    processors: Sequence[Callable[[WrappedLogger, str, EventDict], Any]]
    if json_output:
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=target),
        cache_logger_on_first_use=False,
    )


def bind_run_context(input_file: str) -> str:
    """Start a fresh log context for one simulation run.

    Returns:
        The generated run id.
    """
    run_id = uuid.uuid4().hex[:8]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(run_id=run_id, input_file=input_file)
    return run_id
