"""Sentry integration helper functions.

Sentry is configured with LoggingIntegration, which captures records from
Python's logging module (which structlog writes to):

1. structlog logs at INFO+ are sent to Sentry as breadcrumbs
2. structlog logs at ERROR+ are sent to Sentry as issues

The helpers below add structured context for RIS Live decode failures and
server-side ris_error messages.

Usage:
    from pyrislive.monitoring.sentry_helper import capture_decode_error

    try:
        envelope = decode(frame)
    except RISDecodeError as e:
        capture_decode_error(
            error_type=type(e).__name__,
            error_message=str(e),
            data_preview=frame[:256],
            exception=e,
        )
"""

import logging as stdlib_logging
from typing import Any

import sentry_sdk
import structlog
from sentry_sdk.integrations.logging import LoggingIntegration

from pyrislive.config import settings
from pyrislive.protocol.ris import RISError

logger = structlog.get_logger(__name__)

_sentry_enabled = False


def init_sentry() -> bool:
    """
    Initialize Sentry SDK if configured.

    Returns:
        True if Sentry was initialized, False otherwise
    """
    global _sentry_enabled

    if not settings.sentry_dsn:
        logger.debug("sentry_disabled")
        return False

    sentry_logging = LoggingIntegration(
        level=stdlib_logging.INFO,  # Capture INFO+ as breadcrumbs
        event_level=stdlib_logging.ERROR,  # Capture ERROR+ as events/issues
    )

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.sentry_environment,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        max_breadcrumbs=100,
        integrations=[sentry_logging],
    )

    _sentry_enabled = True
    logger.info("sentry_initialized", environment=settings.sentry_environment)
    return True


def is_sentry_enabled() -> bool:
    """
    Check if Sentry is enabled.

    Returns:
        True if Sentry is enabled
    """
    return _sentry_enabled


def get_sentry_sdk() -> Any:
    """
    Get Sentry SDK module for direct use (spans, transactions, etc.).

    Returns:
        Sentry SDK module or None if Sentry not enabled
    """
    return sentry_sdk if _sentry_enabled else None


def capture_decode_error(
    error_type: str,
    error_message: str,
    data_preview: str | None = None,
    exception: Exception | None = None,
) -> None:
    """
    Capture a RIS Live decode error to both stdout and Sentry.

    Args:
        error_type: Type of error (e.g. MissingFieldError)
        error_message: Error message
        data_preview: Start of the offending message (optional)
        exception: Exception object to capture in Sentry (optional)
    """
    log_data = {
        "error_type": error_type,
        "error": error_message,
    }
    if data_preview:
        # First 256 chars for stdout
        log_data["data"] = data_preview[:256]

    logger.error("ris_decode_error", **log_data)

    if not _sentry_enabled:
        return

    if exception:
        with sentry_sdk.new_scope() as scope:
            scope.set_tag("error_type", error_type)
            if data_preview:
                scope.set_context("ris_message", {"data": data_preview[:512]})
            sentry_sdk.capture_exception(exception)
    else:
        extras = {"error_type": error_type}
        if data_preview:
            extras["data"] = data_preview[:512]
        with sentry_sdk.new_scope() as scope:
            for key, value in extras.items():
                scope.set_extra(key, value)
            sentry_sdk.capture_message(
                f"{error_type}: {error_message}",
                level="error",
            )


def log_ris_error(error: RISError) -> None:
    """
    Log a ris_error message sent by the server.

    A rejected command is logged as a warning. A buffer_size error means the
    server is about to drop the connection for falling behind, which is
    logged as an error (and so becomes a Sentry issue).

    Args:
        error: Decoded ris_error payload
    """
    if error.buffer_size is not None:
        logger.error(
            "ris_error",
            message=error.message,
            buffer_size=error.buffer_size,
        )
    else:
        logger.warning(
            "ris_error",
            message=error.message,
            command_type=error.command_type,
        )
