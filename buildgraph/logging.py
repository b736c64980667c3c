"""
Structured logging for buildgraph.

Console output by default, JSON when `BUILDGRAPH_LOG_FORMAT=json`. Call
`configure_logging()` once at startup, then log events with keyword fields:

    log = get_logger(__name__)
    log.info("task_started", task="Compile")
"""

import logging
import os
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:  # pragma: no cover
    from typing import Any

    from structlog.types import Processor

__all__ = ["bind_context", "clear_context", "configure_logging", "get_logger"]

LOG_FORMAT_ENV_VAR = "BUILDGRAPH_LOG_FORMAT"
LOG_LEVEL_ENV_VAR = "BUILDGRAPH_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def _get_log_level() -> int:
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def _is_json_output() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def _get_shared_processors() -> list["Processor"]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(*, force_json: bool = False, level: int | None = None) -> None:
    """
    Route structlog and stdlib logging through a single stderr handler. Calling it
    again reconfigures logging.
    """
    use_json = force_json or _is_json_output()
    log_level = level if level is not None else _get_log_level()

    # ConsoleRenderer formats exc_info itself, JSON needs it flattened first
    renderers: list["Processor"] = (
        [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        if use_json
        else [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]
    )

    structlog.configure(
        processors=[
            *_get_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *renderers,
            ],
            foreign_pre_chain=_get_shared_processors(),
        )
    )
    root_logger.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


def bind_context(**context: "Any") -> None:
    """Bind fields included in every log event until `clear_context` is called."""
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
