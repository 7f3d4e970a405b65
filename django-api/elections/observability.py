"""Structured logging configuration with structlog.

Production renders JSON lines; any other environment renders colored
console output. Call configure_structlog() once at startup, then use
structlog.get_logger() normally:

    log = structlog.get_logger(__name__)
    log.info("vote_cast", event_id="...", participant_id="...")
"""

import logging

import structlog
from structlog.typing import Processor


def _log_level(level_name: str) -> int:
    return getattr(logging, level_name.upper(), logging.INFO)


def configure_structlog(environment: str = "production", log_level: str = "INFO") -> None:
    """Configure structlog processors for the given environment."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        shared_processors.append(structlog.processors.format_exc_info)
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(_log_level(log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=environment == "production",
    )


def bind_request_context(**values: object) -> None:
    """Bind values (caller id, request path) to every log line of this request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)
