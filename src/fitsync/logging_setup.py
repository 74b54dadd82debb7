"""structlog configuration."""

import logging
import sys

import structlog
from structlog.contextvars import merge_contextvars


def _redact_authorization(logger, method_name, event_dict):
    headers = event_dict.get("headers")
    if isinstance(headers, dict) and headers.get("Authorization"):
        event_dict["headers"] = {**headers, "Authorization": "Bearer [REDACTED]"}
    return event_dict


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
        fmt: "console" for human-readable output, "json" for one JSON object per line
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = [
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        _redact_authorization,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    # Log to stderr so CLI output on stdout stays clean
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
