#!/usr/bin/env python3
"""Decode RIS Live messages (one JSON object per line) from a file or stdin."""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from pyrislive.models.route import routes_from_update
from pyrislive.protocol.ris import (
    RISDecodeError,
    RISError,
    RISNotification,
    RISOpen,
    RISPeerState,
    RISRrcList,
    RISUpdate,
)
from pyrislive.protocol.ris_parser import decode


def decode_ris_message(line: str) -> None:
    """Decode and print RIS Live message details."""
    try:
        envelope = decode(line)
    except RISDecodeError as e:
        print(f"Error decoding message: {type(e).__name__}: {e}")
        return

    print(f"=== {envelope.kind.value} ===")
    payload = envelope.payload

    if envelope.bgp_msg_type is not None:
        common = payload.common  # type: ignore[union-attr]
        print(f"BGP Type: {common.bgp_type.value}")
        print(f"Time: {common.time.isoformat()}")
        print(f"Collector: {common.host}")
        print(f"Peer: {common.peer} (AS{common.peer_asn})")
        print(f"ID: {common.id}")
        if common.raw:
            print(f"Raw: {common.raw}")

    if isinstance(payload, RISUpdate):
        if payload.path:
            print(f"AS Path: {payload.path}")
        if payload.origin:
            print(f"Origin: {payload.origin}")
        if payload.med is not None:
            print(f"MED: {payload.med}")
        if payload.communities:
            print(f"Communities: {[f'{a}:{v}' for a, v in payload.communities]}")
        print("Routes:")
        for route in routes_from_update(payload):
            action = "withdraw" if route.is_withdrawn else f"via {route.next_hop}"
            print(f"  - {route.prefix} {action}")
    elif isinstance(payload, RISOpen):
        print(f"Direction: {payload.direction}")
        print(f"Router ID: {payload.router_id}")
        print(f"Version: {payload.version}")
        print(f"Hold Time: {payload.hold_time}")
        print(f"Capabilities: {sorted(payload.capabilities, key=int)}")
    elif isinstance(payload, RISNotification):
        print(f"Code: {payload.code}, Subcode: {payload.subcode}, Data: {payload.data}")
    elif isinstance(payload, RISPeerState):
        print(f"State: {payload.state}")
    elif isinstance(payload, RISError):
        print(f"Message: {payload.message}")
        if payload.command_type is not None:
            print(f"Command Type: {payload.command_type}")
        if payload.buffer_size is not None:
            print(f"Buffer Size: {payload.buffer_size}")
    elif isinstance(payload, RISRrcList):
        print(f"Collectors: {', '.join(payload.collectors)}")

    print()


if __name__ == "__main__":
    source = open(sys.argv[1], encoding="utf-8") if len(sys.argv) > 1 else sys.stdin
    with source:
        for line in source:
            if line.strip():
                decode_ris_message(line)
