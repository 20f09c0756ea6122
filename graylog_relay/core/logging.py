"""Structured logging for the relay.

structlog renders either to the console or as JSON lines. Every webhook binds
the alert's event id into the context vars, so all log lines of one intake
(search, model turns, notification) can be correlated.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

SERVICE_NAME = "graylog-relay"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, json_output: bool = False, level: int | str = logging.INFO) -> None:
    """Set up structlog with console or JSON rendering."""
    log_level = _resolve_level(level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # uvicorn and httpx log through the stdlib
    logging.basicConfig(level=log_level, stream=sys.stderr, format="%(levelname)s %(name)s %(message)s")


def bind_alert_context(event_id: Optional[str], title: Optional[str] = None) -> None:
    """Attach the current alert to every log line emitted by this task."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        service=SERVICE_NAME,
        alert_event_id=event_id or "none",
        alert_title=title,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(component=name)
    return logger
