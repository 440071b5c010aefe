"""Pydantic models for per-prefix route events flattened from RIS Live UPDATEs."""

from collections.abc import Iterator
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from pyrislive.protocol.ris import RISUpdate


class RouteEvent(BaseModel):
    """
    A single prefix announced or withdrawn by a BGP peer.

    One RIS Live UPDATE carries many prefixes; each becomes one RouteEvent.
    """

    model_config = ConfigDict(frozen=True)

    time: datetime = Field(..., description="Collector receive time (UTC)")
    collector: str = Field(..., description="Route collector name")
    peer: str = Field(..., description="BGP peer IP address")
    peer_asn: str = Field(..., description="BGP peer ASN")
    prefix: str = Field(..., description="IP prefix (CIDR notation)")
    next_hop: str | None = Field(None, description="BGP next hop")
    as_path: list[int] | None = Field(None, description="AS_PATH attribute")
    origin: str | None = Field(None, description="ORIGIN attribute")
    communities: list[tuple[int, int]] | None = Field(
        None, description="BGP communities"
    )
    is_withdrawn: bool = Field(False, description="Whether route is withdrawn")


def routes_from_update(update: RISUpdate) -> Iterator[RouteEvent]:
    """
    Flatten an UPDATE into one event per announced or withdrawn prefix.

    Announcements come first in message order, followed by withdrawals.

    Args:
        update: Decoded UPDATE event

    Yields:
        Route events
    """
    common = update.common
    time = common.time

    for announcement in update.announcements:
        for prefix in announcement.prefixes:
            yield RouteEvent(
                time=time,
                collector=common.host,
                peer=common.peer,
                peer_asn=common.peer_asn,
                prefix=prefix,
                next_hop=announcement.next_hop,
                as_path=update.path,
                origin=update.origin,
                communities=update.communities,
                is_withdrawn=False,
            )

    for prefix in update.withdrawals:
        yield RouteEvent(
            time=time,
            collector=common.host,
            peer=common.peer,
            peer_asn=common.peer_asn,
            prefix=prefix,
            is_withdrawn=True,
        )
