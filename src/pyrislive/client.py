"""RIS Live websocket client with a pool of decode workers."""

import asyncio
from collections.abc import Callable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import structlog
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from pyrislive.config import settings
from pyrislive.models.route import routes_from_update
from pyrislive.monitoring.sentry_helper import capture_decode_error, log_ris_error
from pyrislive.monitoring.stats import UNKNOWN_HOST, StatisticsCollector
from pyrislive.protocol.requests import Filter, OutboundRequest, encode
from pyrislive.protocol.ris import (
    BGP_EVENT_TYPES,
    Envelope,
    MessageType,
    RISDecodeError,
    RISError,
    RISKeepalive,
    RISNotification,
    RISOpen,
    RISPeerState,
    RISRrcList,
    RISUpdate,
)
from pyrislive.protocol.ris_parser import decode

logger = structlog.get_logger(__name__)

EnvelopeHandler = Callable[[Envelope], None]


def _preview(raw: str | bytes) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw[:256]).decode("utf-8", errors="replace")
    return raw[:256]


def handle_envelope(envelope: Envelope) -> None:
    """
    Default handler: log one structured event per decoded message.

    Args:
        envelope: Decoded message
    """
    payload = envelope.payload

    if isinstance(payload, RISUpdate):
        common = payload.common
        logger.info(
            "ris_update",
            host=common.host,
            peer=common.peer,
            peer_asn=common.peer_asn,
            time=common.time,
            path=payload.path,
            origin=payload.origin,
            communities=payload.communities,
            announced=sum(len(a.prefixes) for a in payload.announcements),
            withdrawn=len(payload.withdrawals),
        )
        for route in routes_from_update(payload):
            logger.debug(
                "ris_route",
                time=route.time,
                host=route.collector,
                peer=route.peer,
                prefix=route.prefix,
                next_hop=route.next_hop,
                as_path=route.as_path,
                origin=route.origin,
                communities=route.communities,
                withdrawn=route.is_withdrawn,
            )
    elif isinstance(payload, RISOpen):
        logger.info(
            "ris_open",
            host=payload.common.host,
            peer=payload.common.peer,
            peer_asn=payload.common.peer_asn,
            direction=payload.direction,
            router_id=payload.router_id,
            hold_time=payload.hold_time,
        )
    elif isinstance(payload, RISKeepalive):
        logger.debug(
            "ris_keepalive", host=payload.common.host, peer=payload.common.peer
        )
    elif isinstance(payload, RISNotification):
        logger.info(
            "ris_notification",
            host=payload.common.host,
            peer=payload.common.peer,
            peer_asn=payload.common.peer_asn,
            code=payload.code,
            subcode=payload.subcode,
        )
    elif isinstance(payload, RISPeerState):
        logger.info(
            "ris_peer_state",
            host=payload.common.host,
            peer=payload.common.peer,
            peer_asn=payload.common.peer_asn,
            state=payload.state,
        )
    elif isinstance(payload, RISError):
        log_ris_error(payload)
    elif isinstance(payload, RISRrcList):
        logger.info("ris_rrc_list", collectors=payload.collectors)
    elif envelope.kind == MessageType.PONG:
        logger.debug("ris_pong")
    else:
        logger.debug("ris_message_ignored", kind=envelope.kind.value)


class RISLiveClient:
    """Websocket client that feeds raw RIS Live frames to decode workers."""

    def __init__(
        self,
        url: str,
        client_name: str,
        stats_collector: StatisticsCollector,
        subscribe_filter: Filter | None = None,
        handler: EnvelopeHandler = handle_envelope,
        worker_count: int = 1,
        queue_size: int = 0,
        reconnect_delay: float = 5.0,
        ping_interval: float = 30.0,
    ) -> None:
        """
        Initialize RIS Live client.

        Args:
            url: RIS Live websocket URL
            client_name: Client name sent as the "client" query parameter
            stats_collector: Statistics collector for monitoring
            subscribe_filter: Filter sent with ris_subscribe (None = everything)
            handler: Called with every decoded envelope
            worker_count: Number of decode workers
            queue_size: Raw message queue size (0 = unbounded)
            reconnect_delay: Seconds to wait before reconnecting
            ping_interval: Seconds between ping requests (0 disables)
        """
        self.url = url
        self.client_name = client_name
        self.stats_collector = stats_collector
        self.subscribe_filter = subscribe_filter
        self.handler = handler
        self.worker_count = worker_count
        self.reconnect_delay = reconnect_delay
        self.ping_interval = ping_interval
        self.queue: asyncio.Queue[str | bytes] = asyncio.Queue(maxsize=queue_size)
        self._workers: list[asyncio.Task[None]] = []

    @property
    def stream_url(self) -> str:
        """Websocket URL with the client name query parameter."""
        parts = urlsplit(self.url)
        query = [(k, v) for k, v in parse_qsl(parts.query) if k != "client"]
        query.append(("client", self.client_name))
        return urlunsplit(parts._replace(query=urlencode(query)))

    def process_message(self, raw: str | bytes) -> Envelope | None:
        """
        Decode one raw frame, update statistics and call the handler.

        Decode and handler failures are logged and counted; they never
        propagate, so one bad message cannot stop a worker.

        Args:
            raw: Raw websocket frame

        Returns:
            Decoded envelope, or None if decoding failed
        """
        try:
            envelope = decode(raw)
        except RISDecodeError as e:
            self.stats_collector.increment_error()
            capture_decode_error(
                error_type=type(e).__name__,
                error_message=str(e),
                data_preview=_preview(raw),
                exception=e,
            )
            return None

        host = self._record(envelope)

        try:
            self.handler(envelope)
        except Exception as e:
            self.stats_collector.increment_error(host)
            logger.error(
                "handler_error",
                kind=envelope.kind.value,
                error=str(e),
                exc_info=True,
            )

        return envelope

    def _record(self, envelope: Envelope) -> str:
        payload = envelope.payload
        if not isinstance(payload, BGP_EVENT_TYPES):
            self.stats_collector.increment_received(UNKNOWN_HOST)
            return UNKNOWN_HOST

        common = payload.common  # type: ignore[attr-defined]
        self.stats_collector.increment_received(common.host)
        self.stats_collector.increment_message(common.host, common.bgp_type)
        if isinstance(payload, RISUpdate):
            self.stats_collector.increment_routes(
                common.host,
                announced=sum(len(a.prefixes) for a in payload.announcements),
                withdrawn=len(payload.withdrawals),
            )
        return common.host  # type: ignore[no-any-return]

    async def _worker(self, worker_id: int) -> None:
        """Drain the raw message queue until cancelled."""
        logger.debug("worker_started", worker=worker_id)
        while True:
            raw = await self.queue.get()
            try:
                self.process_message(raw)
            finally:
                self.queue.task_done()

    async def start_workers(self) -> None:
        """Start decode workers."""
        for worker_id in range(self.worker_count):
            self._workers.append(asyncio.create_task(self._worker(worker_id)))
        logger.info("workers_started", count=self.worker_count)

    async def stop_workers(self) -> None:
        """Cancel decode workers and wait for them to exit."""
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers.clear()
        logger.info("workers_stopped")

    async def _pinger(self, ws: ClientConnection) -> None:
        """Send ping requests so idle subscriptions are not dropped."""
        ping = encode(OutboundRequest.ping()).decode("utf-8")
        while True:
            await asyncio.sleep(self.ping_interval)
            await ws.send(ping)

    async def _consume(self, ws: ClientConnection) -> None:
        """Subscribe and enqueue frames until the connection closes."""
        request = OutboundRequest.subscribe(self.subscribe_filter)
        await ws.send(encode(request).decode("utf-8"))
        logger.info(
            "ris_subscribed",
            filter=self.subscribe_filter.to_wire() if self.subscribe_filter else {},
        )

        ping_task: asyncio.Task[None] | None = None
        if self.ping_interval > 0:
            ping_task = asyncio.create_task(self._pinger(ws))

        try:
            async for message in ws:
                await self.queue.put(message)
        finally:
            if ping_task:
                ping_task.cancel()
                await asyncio.gather(ping_task, return_exceptions=True)

    async def run(self) -> None:
        """Connect, subscribe and stream, reconnecting until cancelled."""
        while True:
            url = self.stream_url
            logger.info("ris_connecting", url=url)
            try:
                async with connect(url) as ws:
                    logger.info("ris_connected", url=url)
                    await self._consume(ws)
                logger.info("ris_disconnected", reason="connection_closed")
            except ConnectionClosed as e:
                logger.warning("ris_disconnected", reason="connection_lost", error=str(e))
            except (WebSocketException, OSError) as e:
                logger.warning("ris_connection_error", url=url, error=str(e))

            logger.info("ris_reconnecting", delay_seconds=self.reconnect_delay)
            await asyncio.sleep(self.reconnect_delay)


async def run_client(
    stats_collector: StatisticsCollector | None = None,
    handler: EnvelopeHandler = handle_envelope,
) -> None:
    """
    Run the RIS Live client (main entry point for asyncio).

    Args:
        stats_collector: Optional statistics collector (for testing)
        handler: Called with every decoded envelope
    """
    if stats_collector is None:
        stats_collector = StatisticsCollector(log_interval=settings.stats_log_interval)
        await stats_collector.start()

    client = RISLiveClient(
        url=settings.ris_live_url,
        client_name=settings.ris_live_client,
        stats_collector=stats_collector,
        subscribe_filter=settings.build_filter(),
        handler=handler,
        worker_count=settings.worker_count,
        queue_size=settings.queue_size,
        reconnect_delay=settings.reconnect_delay,
        ping_interval=settings.ping_interval,
    )

    await client.start_workers()
    try:
        await client.run()
    except asyncio.CancelledError:
        logger.info("client_cancelled")
    finally:
        await client.stop_workers()
        await stats_collector.stop()
