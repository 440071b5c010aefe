"""Structured logging configuration using structlog."""

import logging
import sys
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from pyrislive.config import settings

# Output key names, in the shape log collectors expect from RIS Live consumers
LOG_FIELD_MAP: Mapping[str, str] = {
    "event": "message",
    "level": "severity",
}


def add_log_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add log level to event dict."""
    event_dict["level"] = method_name.upper()
    return event_dict


def render_ris_values(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Render RIS Live values that JSON cannot carry directly.

    Datetimes (event times from converted timestamps) become RFC 3339 text
    and BGP communities become "asn:value" strings.
    """
    for key, value in event_dict.items():
        if isinstance(value, datetime):
            event_dict[key] = value.isoformat()

    communities = event_dict.get("communities")
    if communities:
        event_dict["communities"] = [f"{asn}:{value}" for asn, value in communities]

    return event_dict


def rename_fields(field_map: Mapping[str, str]) -> Processor:
    """
    Build a processor that renames event dict keys.

    Args:
        field_map: Mapping of structlog key to output key

    Returns:
        structlog processor
    """

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for source, target in field_map.items():
            if source in event_dict:
                event_dict[target] = event_dict.pop(source)
        return event_dict

    return processor


def configure_logging() -> structlog.BoundLogger:
    """
    Configure structured logging with JSON output to stdout.

    Decoded RIS Live events are logged one JSON object per line, keyed
    "message" and "severity" (see LOG_FIELD_MAP). When Sentry is enabled,
    INFO+ records become breadcrumbs and ERROR+ records become issues
    through Sentry's LoggingIntegration.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Sentry's LoggingIntegration must be installed before stdlib logging
    from pyrislive.monitoring.sentry_helper import init_sentry

    sentry_enabled = init_sentry()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        render_ris_values,
        rename_fields(LOG_FIELD_MAP),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger()
    if sentry_enabled:
        logger.info("sentry_logging_enabled", breadcrumbs="INFO+", issues="ERROR+")

    return logger  # type: ignore[no-any-return]


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]
