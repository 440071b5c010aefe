"""RIS Live envelope decoder implementation."""

import json
from collections.abc import Callable
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ValidationError

from pyrislive.protocol.ris import (
    BGPEvent,
    Envelope,
    MalformedInputError,
    MessageType,
    MissingFieldError,
    Payload,
    RISError,
    RISKeepalive,
    RISMessageType,
    RISNotification,
    RISOpen,
    RISPeerState,
    RISRrcList,
    RISUpdate,
    UnknownInnerDiscriminatorError,
    UnknownOuterDiscriminatorError,
)

# Sentinel for an absent "data" key (distinct from JSON null)
_MISSING = object()

BGP_EVENT_MODELS: MappingProxyType[RISMessageType, type[BaseModel]] = MappingProxyType(
    {
        RISMessageType.OPEN: RISOpen,
        RISMessageType.UPDATE: RISUpdate,
        RISMessageType.KEEPALIVE: RISKeepalive,
        RISMessageType.NOTIFICATION: RISNotification,
        RISMessageType.RIS_PEER_STATE: RISPeerState,
    }
)


def _validation_error(exc: ValidationError) -> MalformedInputError | MissingFieldError:
    """
    Convert a pydantic ValidationError into a decode error.

    A missing field wins over any other failure so that callers always learn
    which protocol field was absent.

    Args:
        exc: Validation error raised by a payload model

    Returns:
        MissingFieldError or MalformedInputError
    """
    errors = exc.errors()

    for error in errors:
        if error["type"] == "missing":
            # Composed common fields live under "common" but sit at the top
            # level of the wire object
            loc = [str(part) for part in error["loc"] if part != "common"]
            return MissingFieldError(".".join(loc) or "data")

    first = errors[0]
    loc = ".".join(str(part) for part in first["loc"] if part != "common")
    return MalformedInputError(f"{loc}: {first['msg']}" if loc else first["msg"])


def _validate(model: type[BaseModel], data: Any) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise _validation_error(e) from e


def parse_ris_message(data: Any) -> BGPEvent:
    """
    Parse ris_message data into the BGP event variant named by its type.

    Args:
        data: Decoded JSON value of the envelope "data" member

    Returns:
        Parsed BGP event

    Raises:
        MalformedInputError: If data is not an object or a field has the wrong type
        MissingFieldError: If a required field is absent
        UnknownInnerDiscriminatorError: If data.type is not a known BGP event type
    """
    if not isinstance(data, dict):
        raise MalformedInputError(
            f"ris_message data must be an object, got {type(data).__name__}"
        )

    if "type" not in data:
        raise MissingFieldError("type")

    bgp_type_raw = data["type"]
    if not isinstance(bgp_type_raw, str):
        raise MalformedInputError(
            f"ris_message type must be a string, got {type(bgp_type_raw).__name__}"
        )

    try:
        bgp_type = RISMessageType(bgp_type_raw)
    except ValueError as e:
        raise UnknownInnerDiscriminatorError(bgp_type_raw) from e

    model = BGP_EVENT_MODELS[bgp_type]

    # Common fields are validated as their own value and composed into the event
    return _validate(model, {**data, "common": data})  # type: ignore[no-any-return]


def parse_ris_error(data: Any) -> RISError:
    """
    Parse ris_error data (either the command_type or the buffer_size shape).

    Args:
        data: Decoded JSON value of the envelope "data" member

    Returns:
        Parsed error payload
    """
    if not isinstance(data, dict):
        raise MalformedInputError(
            f"ris_error data must be an object, got {type(data).__name__}"
        )
    return _validate(RISError, data)  # type: ignore[no-any-return]


def parse_ris_rrc_list(data: Any) -> RISRrcList:
    """
    Parse ris_rrc_list data (an array of collector names).

    Args:
        data: Decoded JSON value of the envelope "data" member

    Returns:
        Parsed collector list
    """
    if not isinstance(data, list):
        raise MalformedInputError(
            f"ris_rrc_list data must be an array, got {type(data).__name__}"
        )
    return _validate(RISRrcList, {"collectors": data})  # type: ignore[no-any-return]


def _no_payload(data: Any) -> None:
    return None


PAYLOAD_PARSERS: MappingProxyType[MessageType, Callable[[Any], Payload | None]] = (
    MappingProxyType(
        {
            MessageType.RIS_MESSAGE: parse_ris_message,
            MessageType.RIS_ERROR: parse_ris_error,
            MessageType.RIS_RRC_LIST: parse_ris_rrc_list,
            MessageType.PONG: _no_payload,
            MessageType.PING: _no_payload,
            MessageType.REQUEST_RRC_LIST: _no_payload,
            # Client requests echoed back are accepted without a payload
            MessageType.RIS_SUBSCRIBE: _no_payload,
            MessageType.RIS_UNSUBSCRIBE: _no_payload,
        }
    )
)

# Message types whose payload is read from "data"
_DATA_REQUIRED = frozenset(
    {MessageType.RIS_MESSAGE, MessageType.RIS_ERROR, MessageType.RIS_RRC_LIST}
)


def _load_json(data: bytes | bytearray | str) -> Any:
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise MalformedInputError(e.msg, offset=e.pos) from e
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"invalid text encoding: {e.reason}", offset=e.start) from e


def decode(data: bytes | bytearray | str) -> Envelope:
    """
    Decode a RIS Live message.

    The envelope is read first and its "data" member kept as a plain JSON
    value; only once the outer type (and, for ris_message, the BGP event
    type inside data) is known is data validated against a payload model.

    Args:
        data: Raw JSON message

    Returns:
        Decoded envelope

    Raises:
        MalformedInputError: If input is not valid JSON or has the wrong shape
        UnknownOuterDiscriminatorError: If type is not a known message type
        UnknownInnerDiscriminatorError: If ris_message data.type is unknown
        MissingFieldError: If a required field is absent
    """
    document = _load_json(data)

    if not isinstance(document, dict):
        raise MalformedInputError(
            f"message must be a JSON object, got {type(document).__name__}"
        )

    if "type" not in document:
        raise MissingFieldError("type")

    type_raw = document["type"]
    if not isinstance(type_raw, str):
        raise MalformedInputError(
            f"message type must be a string, got {type(type_raw).__name__}"
        )

    try:
        kind = MessageType(type_raw)
    except ValueError as e:
        raise UnknownOuterDiscriminatorError(type_raw) from e

    payload_data = document.get("data", _MISSING)
    if kind in _DATA_REQUIRED and payload_data is _MISSING:
        raise MissingFieldError("data")

    payload = PAYLOAD_PARSERS[kind](payload_data)

    return Envelope(kind=kind, payload=payload)
