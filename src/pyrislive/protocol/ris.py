"""RIS Live protocol definitions: message types, payload models and errors."""

from datetime import datetime
from enum import Enum
from typing import Any, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    model_validator,
)

from pyrislive.utils.timestamp import timestamp_to_datetime


class MessageType(str, Enum):
    """Envelope message types (outer discriminator)."""

    RIS_MESSAGE = "ris_message"
    RIS_ERROR = "ris_error"
    RIS_RRC_LIST = "ris_rrc_list"
    PONG = "pong"
    RIS_SUBSCRIBE = "ris_subscribe"
    RIS_UNSUBSCRIBE = "ris_unsubscribe"
    REQUEST_RRC_LIST = "request_rrc_list"
    PING = "ping"


class RISMessageType(str, Enum):
    """BGP event types carried by ris_message (inner discriminator)."""

    OPEN = "OPEN"
    UPDATE = "UPDATE"
    KEEPALIVE = "KEEPALIVE"
    NOTIFICATION = "NOTIFICATION"
    RIS_PEER_STATE = "RIS_PEER_STATE"


class RISDecodeError(Exception):
    """Exception raised when a RIS Live message cannot be decoded."""

    pass


class MalformedInputError(RISDecodeError):
    """Input is not valid JSON or a value has the wrong JSON type."""

    def __init__(self, description: str, offset: int | None = None) -> None:
        self.description = description
        self.offset = offset
        if offset is None:
            super().__init__(f"Malformed input: {description}")
        else:
            super().__init__(f"Malformed input at byte {offset}: {description}")


class UnknownOuterDiscriminatorError(RISDecodeError):
    """Envelope type is not a known RIS Live message type."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unknown message type: {value!r}")


class UnknownInnerDiscriminatorError(RISDecodeError):
    """ris_message data type is not a known BGP event type."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unknown type in ris_message: {value!r}")


class MissingFieldError(RISDecodeError):
    """A required field is absent from the message."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing required field: {field}")


class BGPEventCommon(BaseModel):
    """Fields shared by every ris_message BGP event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bgp_type: RISMessageType = Field(..., alias="type", description="BGP event type")
    timestamp: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        strict=True,
        description="Seconds since the Unix epoch",
    )
    peer: str = Field(..., description="BGP peer IP address")
    peer_asn: str = Field(..., description="BGP peer ASN (decimal text)")
    id: str = Field(..., description="Collector-assigned message identifier")
    host: str = Field(..., description="Route collector name (e.g. rrc00)")
    raw: str | None = Field(None, description="Hex-encoded BGP wire message")

    @property
    def time(self) -> datetime:
        """Event time as an aware UTC datetime."""
        return timestamp_to_datetime(self.timestamp)


class RISOpen(BaseModel):
    """BGP OPEN event."""

    model_config = ConfigDict(frozen=True)

    common: BGPEventCommon
    direction: str
    router_id: str
    version: StrictInt
    hold_time: StrictInt
    # Capability shapes are open-ended upstream and carried untouched
    capabilities: dict[str, Any]


class Announcement(BaseModel):
    """Prefixes announced via a single next hop."""

    model_config = ConfigDict(frozen=True)

    next_hop: str
    prefixes: list[str]


class RISUpdate(BaseModel):
    """BGP UPDATE event."""

    model_config = ConfigDict(frozen=True)

    common: BGPEventCommon
    path: list[StrictInt] = Field(default_factory=list, description="AS path")
    communities: list[tuple[StrictInt, StrictInt]] = Field(
        default_factory=list,
        validation_alias="community",
        description="ASN:value pairs",
    )
    origin: str | None = Field(None, description="Origin (igp, egp, incomplete)")
    med: StrictInt | None = Field(None, ge=0, description="Multi-Exit Discriminator")
    announcements: list[Announcement] = Field(default_factory=list)
    withdrawals: list[str] = Field(default_factory=list)


class NotificationInfo(BaseModel):
    """BGP NOTIFICATION error code, subcode and data."""

    model_config = ConfigDict(frozen=True)

    code: StrictInt = Field(..., ge=0, le=255)
    subcode: StrictInt = Field(..., ge=0, le=255)
    data: str


class RISNotification(BaseModel):
    """BGP NOTIFICATION event."""

    model_config = ConfigDict(frozen=True)

    common: BGPEventCommon
    notification: NotificationInfo

    @property
    def code(self) -> int:
        return self.notification.code

    @property
    def subcode(self) -> int:
        return self.notification.subcode

    @property
    def data(self) -> str:
        return self.notification.data


class RISKeepalive(BaseModel):
    """BGP KEEPALIVE event."""

    model_config = ConfigDict(frozen=True)

    common: BGPEventCommon


class RISPeerState(BaseModel):
    """RIS peer session state change (e.g. connected, down)."""

    model_config = ConfigDict(frozen=True)

    common: BGPEventCommon
    state: str


class RISError(BaseModel):
    """
    Server-side error.

    The server sends two shapes under ris_error: a rejected command carries
    command_type, a slow-consumer disconnect carries buffer_size.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str
    command_type: str | None = None
    buffer_size: StrictInt | None = Field(
        None, validation_alias=AliasChoices("buffer_size", "bufferSize")
    )


class RISRrcList(BaseModel):
    """Route collectors currently available."""

    model_config = ConfigDict(frozen=True)

    collectors: list[str]


BGPEvent = Union[RISOpen, RISUpdate, RISNotification, RISKeepalive, RISPeerState]
Payload = Union[
    RISOpen,
    RISUpdate,
    RISNotification,
    RISKeepalive,
    RISPeerState,
    RISError,
    RISRrcList,
]

BGP_EVENT_TYPES: tuple[type[BaseModel], ...] = (
    RISOpen,
    RISUpdate,
    RISNotification,
    RISKeepalive,
    RISPeerState,
)


class Envelope(BaseModel):
    """Decoded RIS Live message."""

    model_config = ConfigDict(frozen=True)

    kind: MessageType
    payload: Payload | None = None

    @model_validator(mode="after")
    def _check_payload_matches_kind(self) -> "Envelope":
        payload = self.payload
        if self.kind == MessageType.RIS_MESSAGE:
            valid = isinstance(payload, BGP_EVENT_TYPES)
        elif self.kind == MessageType.RIS_ERROR:
            valid = isinstance(payload, RISError)
        elif self.kind == MessageType.RIS_RRC_LIST:
            valid = isinstance(payload, RISRrcList)
        else:
            valid = payload is None

        if not valid:
            raise ValueError(
                f"Payload {type(payload).__name__} is not valid for {self.kind.value}"
            )
        return self

    @property
    def bgp_msg_type(self) -> RISMessageType | None:
        """BGP event type for ris_message envelopes, None otherwise."""
        if isinstance(self.payload, BGP_EVENT_TYPES):
            return self.payload.common.bgp_type  # type: ignore[attr-defined]
        return None
