"""Application entry point: stream RIS Live and log decoded messages."""

import asyncio
import functools
import signal
import sys
from typing import Any

import structlog

from pyrislive.client import run_client
from pyrislive.config import Settings, settings
from pyrislive.monitoring.logger import configure_logging

logger: structlog.BoundLogger | None = None


def startup_fields(config: Settings) -> dict[str, Any]:
    """
    Describe the stream about to be opened.

    Args:
        config: Application settings

    Returns:
        Fields for the startup log event
    """
    return {
        "url": config.ris_live_url,
        "client": config.ris_live_client,
        "subscription": config.build_filter().to_wire(),
        "workers": config.worker_count,
        "ping_interval": config.ping_interval,
        "log_level": config.log_level,
    }


def setup_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    """
    Cancel every task on SIGTERM or SIGINT so the client unsubscribes cleanly.

    Args:
        loop: Asyncio event loop
    """

    def signal_handler(sig: int) -> None:
        if logger:
            logger.info("signal_received", signal=signal.Signals(sig).name)
        for task in asyncio.all_tasks(loop):
            task.cancel()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, functools.partial(signal_handler, sig))


def _drain(loop: asyncio.AbstractEventLoop) -> None:
    pending = asyncio.all_tasks(loop)
    for task in pending:
        task.cancel()
    if pending:
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))


def main() -> None:
    """Run the RIS Live client until a shutdown signal arrives."""
    global logger

    try:
        logger = configure_logging()
        logger.info(
            "pyrislive_starting",
            version="0.1.0",
            python_version=sys.version.split()[0],
            **startup_fields(settings),
        )

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        setup_signal_handlers(loop)

        try:
            loop.run_until_complete(run_client())
        except (asyncio.CancelledError, KeyboardInterrupt):
            logger.info("shutdown_initiated")
        finally:
            _drain(loop)
            loop.close()
            logger.info("pyrislive_stopped")

    except Exception as e:
        if logger:
            logger.critical("startup_error", error=str(e), exc_info=True)
        else:
            print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
