"""Unit tests for statistics collector.

Tests for tracking per-collector message counts with periodic logging.
"""

import asyncio
import logging
from datetime import datetime

import pytest
from pyrislive.monitoring.stats import UNKNOWN_HOST, CollectorStats, StatisticsCollector
from pyrislive.protocol.ris import RISMessageType


class TestCollectorStats:
    """Test CollectorStats dataclass functionality."""

    def test_create_collector_stats(self) -> None:
        """Test creating CollectorStats instance."""
        stats = CollectorStats(host="rrc00")

        assert stats.host == "rrc00"
        assert stats.messages_received == 0
        assert stats.updates == 0
        assert stats.announcements == 0
        assert stats.errors == 0
        assert isinstance(stats.last_update, datetime)
        assert stats.has_activity() is False

    def test_increment_received(self) -> None:
        """Test incrementing received counter."""
        stats = CollectorStats(host="rrc00")

        stats.increment_received()
        stats.increment_received()

        assert stats.messages_received == 2
        assert stats.has_activity() is True

    def test_increment_message_per_type(self) -> None:
        """Test each BGP type has its own counter."""
        stats = CollectorStats(host="rrc00")

        for bgp_type in RISMessageType:
            stats.increment_message(bgp_type)
        stats.increment_message(RISMessageType.UPDATE)

        assert stats.opens == 1
        assert stats.updates == 2
        assert stats.keepalives == 1
        assert stats.notifications == 1
        assert stats.peer_states == 1

    def test_increment_routes(self) -> None:
        """Test announced and withdrawn prefix counts accumulate."""
        stats = CollectorStats(host="rrc13")

        stats.increment_routes(announced=8, withdrawn=1)
        stats.increment_routes(announced=2, withdrawn=0)

        assert stats.announcements == 10
        assert stats.withdrawals == 1

    def test_increment_error(self) -> None:
        """Test incrementing error counter."""
        stats = CollectorStats(host="rrc00")

        stats.increment_error()

        assert stats.errors == 1
        assert stats.has_activity() is True

    def test_reset_counters(self) -> None:
        """Test resetting all counters."""
        stats = CollectorStats(host="rrc00")
        stats.increment_received()
        stats.increment_message(RISMessageType.OPEN)
        stats.increment_routes(announced=3, withdrawn=3)
        stats.increment_error()

        stats.reset()

        assert stats.messages_received == 0
        assert stats.opens == 0
        assert stats.announcements == 0
        assert stats.withdrawals == 0
        assert stats.errors == 0
        assert stats.host == "rrc00"


class TestStatisticsCollector:
    """Test StatisticsCollector functionality."""

    def test_get_collector_stats_creates_entry(self) -> None:
        """Test stats are created on first use and reused."""
        collector = StatisticsCollector()

        stats = collector.get_collector_stats("rrc00")

        assert stats.host == "rrc00"
        assert collector.get_collector_stats("rrc00") is stats

    def test_increment_methods(self) -> None:
        """Test collector-level increment helpers."""
        collector = StatisticsCollector()

        collector.increment_received("rrc13")
        collector.increment_message("rrc13", RISMessageType.UPDATE)
        collector.increment_routes("rrc13", announced=8, withdrawn=1)
        collector.increment_error("rrc13")

        stats = collector.get_collector_stats("rrc13")
        assert stats.messages_received == 1
        assert stats.updates == 1
        assert stats.announcements == 8
        assert stats.withdrawals == 1
        assert stats.errors == 1

    def test_increment_error_default_host(self) -> None:
        """Test errors without a collector go to the unknown bucket."""
        collector = StatisticsCollector()

        collector.increment_error()

        assert collector.get_collector_stats(UNKNOWN_HOST).errors == 1

    def test_log_stats_resets_active_collectors(self, caplog) -> None:
        """Test log_stats logs and resets collectors with activity."""
        collector = StatisticsCollector(log_interval=1.0)
        collector.increment_received("rrc00")
        collector.get_collector_stats("rrc01")

        with caplog.at_level(logging.INFO):
            collector.log_stats()

        assert collector.get_collector_stats("rrc00").messages_received == 0
        assert any("ris_stats" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_start_stop(self) -> None:
        """Test starting and stopping periodic logging."""
        collector = StatisticsCollector(log_interval=10.0)

        await collector.start()
        assert collector._logging_task is not None

        # Starting twice is a no-op
        task = collector._logging_task
        await collector.start()
        assert collector._logging_task is task

        await collector.stop()
        assert collector._logging_task is None

    @pytest.mark.asyncio
    async def test_periodic_logging_resets(self) -> None:
        """Test periodic logging resets counters after the interval."""
        collector = StatisticsCollector(log_interval=0.05)
        collector.increment_received("rrc00")

        await collector.start()
        await asyncio.sleep(0.15)
        await collector.stop()

        assert collector.get_collector_stats("rrc00").messages_received == 0
