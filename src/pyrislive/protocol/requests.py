"""RIS Live outbound requests: subscription filter, request builder and encoder."""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pyrislive.protocol.ris import RISMessageType


class RequestType(str, Enum):
    """Requests a client can send to RIS Live."""

    SUBSCRIBE = "ris_subscribe"
    UNSUBSCRIBE = "ris_unsubscribe"
    REQUEST_RRC_LIST = "request_rrc_list"
    PING = "ping"


class SocketOptions(BaseModel):
    """Per-connection options sent with a subscription."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    include_raw: bool | None = Field(
        None, alias="includeRaw", description="Include hex-encoded raw BGP messages"
    )


class Filter(BaseModel):
    """
    Subscription filter.

    Every field starts absent and is only sent once a setter has been called,
    so an explicit False or empty string still reaches the server.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    host: str | None = Field(None, description="Only messages from this collector")
    msg_type: RISMessageType | None = Field(
        None, alias="type", description="Only this BGP message type"
    )
    require: str | None = Field(None, description="Only messages containing this key")
    peer: str | None = Field(None, description="Only messages from this BGP peer")
    path: str | None = Field(None, description="AS path pattern")
    prefix: str | None = Field(None, description="Only messages for this prefix")
    more_specific: bool | None = Field(None, alias="moreSpecific")
    less_specific: bool | None = Field(None, alias="lessSpecific")
    socket_options: SocketOptions | None = Field(None, alias="socketOptions")

    def set_host(self, host: str) -> "Filter":
        self.host = host
        return self

    def set_msg_type(self, msg_type: RISMessageType | str) -> "Filter":
        self.msg_type = RISMessageType(msg_type)
        return self

    def set_require(self, require: str) -> "Filter":
        self.require = require
        return self

    def set_peer(self, peer: str) -> "Filter":
        self.peer = peer
        return self

    def set_path(self, path: str) -> "Filter":
        self.path = path
        return self

    def set_prefix(
        self, prefix: str, more_specific: bool, less_specific: bool
    ) -> "Filter":
        """
        Filter on a prefix and control matching of covered/covering prefixes.

        Args:
            prefix: IPv4 or IPv6 prefix in CIDR notation
            more_specific: Also match more specific prefixes
            less_specific: Also match less specific prefixes

        Returns:
            This filter
        """
        self.prefix = prefix
        self.more_specific = more_specific
        self.less_specific = less_specific
        return self

    def set_socket_options(self, include_raw: bool) -> "Filter":
        self.socket_options = SocketOptions(include_raw=include_raw)
        return self

    def to_wire(self) -> dict[str, Any]:
        """Return the filter as a wire dict with absent fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OutboundRequest(BaseModel):
    """Request sent from the client to RIS Live."""

    model_config = ConfigDict(frozen=True)

    kind: RequestType
    filter: Filter | None = None

    @field_validator("filter")
    @classmethod
    def _snapshot_filter(cls, value: Filter | None) -> Filter | None:
        # Filter setters mutate in place; later changes must not reach a built request
        return value.model_copy(deep=True) if value is not None else None

    @model_validator(mode="after")
    def _check_filter_allowed(self) -> "OutboundRequest":
        if self.filter is not None and self.kind not in (
            RequestType.SUBSCRIBE,
            RequestType.UNSUBSCRIBE,
        ):
            raise ValueError(f"{self.kind.value} does not take a filter")
        return self

    @classmethod
    def subscribe(cls, filter: Filter | None = None) -> "OutboundRequest":
        return cls(kind=RequestType.SUBSCRIBE, filter=filter)

    @classmethod
    def unsubscribe(cls, filter: Filter | None = None) -> "OutboundRequest":
        return cls(kind=RequestType.UNSUBSCRIBE, filter=filter)

    @classmethod
    def request_rrc_list(cls) -> "OutboundRequest":
        return cls(kind=RequestType.REQUEST_RRC_LIST)

    @classmethod
    def ping(cls) -> "OutboundRequest":
        return cls(kind=RequestType.PING)

    def to_wire(self) -> dict[str, Any]:
        """Return the request as a wire dict."""
        message: dict[str, Any] = {"type": self.kind.value}
        if self.kind in (RequestType.SUBSCRIBE, RequestType.UNSUBSCRIBE):
            message["data"] = self.filter.to_wire() if self.filter else {}
        return message


def encode(request: OutboundRequest) -> bytes:
    """
    Serialize an outbound request to compact JSON.

    Args:
        request: Request to send

    Returns:
        UTF-8 encoded JSON message
    """
    return json.dumps(request.to_wire(), separators=(",", ":")).encode("utf-8")
