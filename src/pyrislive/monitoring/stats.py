"""Statistics tracking for RIS Live collectors and BGP events."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

from pyrislive.protocol.ris import RISMessageType

logger = structlog.get_logger(__name__)

# Bucket for messages that carry no collector (pong, ris_error, decode errors)
UNKNOWN_HOST = "unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CollectorStats:
    """Statistics for a single route collector (RRC)."""

    host: str
    messages_received: int = 0
    opens: int = 0
    updates: int = 0
    keepalives: int = 0
    notifications: int = 0
    peer_states: int = 0
    announcements: int = 0
    withdrawals: int = 0
    errors: int = 0
    last_update: datetime = field(default_factory=_utcnow)

    def increment_received(self) -> None:
        """Increment messages received counter."""
        self.messages_received += 1
        self.last_update = _utcnow()

    def increment_message(self, bgp_type: RISMessageType) -> None:
        """
        Increment the counter for a BGP event type.

        Args:
            bgp_type: BGP event type
        """
        if bgp_type == RISMessageType.OPEN:
            self.opens += 1
        elif bgp_type == RISMessageType.UPDATE:
            self.updates += 1
        elif bgp_type == RISMessageType.KEEPALIVE:
            self.keepalives += 1
        elif bgp_type == RISMessageType.NOTIFICATION:
            self.notifications += 1
        elif bgp_type == RISMessageType.RIS_PEER_STATE:
            self.peer_states += 1

        self.last_update = _utcnow()

    def increment_routes(self, announced: int, withdrawn: int) -> None:
        """
        Add announced and withdrawn prefix counts.

        Args:
            announced: Number of announced prefixes
            withdrawn: Number of withdrawn prefixes
        """
        self.announcements += announced
        self.withdrawals += withdrawn
        self.last_update = _utcnow()

    def increment_error(self) -> None:
        """Increment error counter."""
        self.errors += 1
        self.last_update = _utcnow()

    def has_activity(self) -> bool:
        return self.messages_received > 0 or self.errors > 0

    def reset(self) -> None:
        """Reset all counters (for periodic reporting)."""
        self.messages_received = 0
        self.opens = 0
        self.updates = 0
        self.keepalives = 0
        self.notifications = 0
        self.peer_states = 0
        self.announcements = 0
        self.withdrawals = 0
        self.errors = 0
        self.last_update = _utcnow()


class StatisticsCollector:
    """Collect and report statistics for all route collectors."""

    def __init__(self, log_interval: float = 60.0) -> None:
        """
        Initialize statistics collector.

        Args:
            log_interval: Interval in seconds between log outputs (default: 60.0)
        """
        self.log_interval = log_interval
        self._stats: dict[str, CollectorStats] = {}
        self._logging_task: asyncio.Task[None] | None = None
        self._running = False

    def get_collector_stats(self, host: str) -> CollectorStats:
        """
        Get statistics for a collector (creates if doesn't exist).

        Args:
            host: Route collector name

        Returns:
            CollectorStats for the collector
        """
        if host not in self._stats:
            self._stats[host] = CollectorStats(host=host)
        return self._stats[host]

    def increment_received(self, host: str) -> None:
        self.get_collector_stats(host).increment_received()

    def increment_message(self, host: str, bgp_type: RISMessageType) -> None:
        self.get_collector_stats(host).increment_message(bgp_type)

    def increment_routes(self, host: str, announced: int, withdrawn: int) -> None:
        self.get_collector_stats(host).increment_routes(announced, withdrawn)

    def increment_error(self, host: str = UNKNOWN_HOST) -> None:
        self.get_collector_stats(host).increment_error()

    async def start(self) -> None:
        """Start periodic statistics logging."""
        if self._running:
            return

        self._running = True
        self._logging_task = asyncio.create_task(self._periodic_logging())
        logger.info("statistics_collector_started", interval_seconds=self.log_interval)

    async def stop(self) -> None:
        """Stop periodic statistics logging."""
        self._running = False

        if self._logging_task:
            self._logging_task.cancel()
            try:
                await self._logging_task
            except asyncio.CancelledError:
                pass
            self._logging_task = None

        logger.info("statistics_collector_stopped")

    def log_stats(self) -> None:
        """Log and reset statistics for every collector with activity."""
        for host, stats in self._stats.items():
            if not stats.has_activity():
                continue

            throughput_per_sec = int(stats.messages_received / self.log_interval)

            logger.info(
                "ris_stats",
                host=host,
                received=stats.messages_received,
                open=stats.opens,
                update=stats.updates,
                keepalive=stats.keepalives,
                notification=stats.notifications,
                peer_state=stats.peer_states,
                announcements=stats.announcements,
                withdrawals=stats.withdrawals,
                errors=stats.errors,
                throughput_per_sec=throughput_per_sec,
            )

            stats.reset()

    async def _periodic_logging(self) -> None:
        """Periodically log statistics for all collectors."""
        while self._running:
            try:
                await asyncio.sleep(self.log_interval)
                self.log_stats()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("stats_logging_error", error=str(e), exc_info=True)
