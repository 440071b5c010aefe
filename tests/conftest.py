"""Pytest configuration and fixtures."""

import pytest
from pyrislive.monitoring.logger import configure_logging

OPEN_MESSAGE = b"""{
    "type": "ris_message",
    "data": {
        "timestamp": 1562841440.23,
        "peer": "2001:7f8:4::1ad2:1",
        "peer_asn": "6866",
        "id": "2001:7f8:4::1ad2:1-1562841440.23-403701",
        "raw": "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF004F01041AD200B4C30E986532020601040002000102028000020202000206410400001AD202084006007800020100020E050C000100010002000100020002",
        "host": "rrc01",
        "type": "OPEN",
        "direction": "received",
        "version": 4,
        "asn": 6866,
        "hold_time": 180,
        "router_id": "195.14.152.101",
        "capabilities": {
            "1": {"name": "multiprotocol", "families": ["ipv6/unicast"]},
            "2": {"name": "route-refresh", "variant": "RFC"},
            "5": {
                "name": "unknown",
                "iana": "unknown",
                "value": 5,
                "raw": "000100010002000100020002"
            },
            "64": {
                "name": "graceful restart",
                "time": 120,
                "address family flags": {"ipv6/unicast": []},
                "restart flags": []
            },
            "65": {"name": "asn4", "asn4": 6866},
            "128": {"name": "route-refresh", "variant": "RFC"}
        }
    }
}"""

UPDATE_MESSAGE = b"""{
    "type": "ris_message",
    "data": {
        "timestamp": 1562822233.68,
        "peer": "195.208.208.147",
        "peer_asn": "28917",
        "id": "195.208.208.147-1562822233.68-150306082",
        "raw": "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF006A020004148D8820002F400101004002160205000070F500000CB9000005130004155D000402ED400304C3D0D093C0080870F50FA070F50FA318B1177418B1177718B1177018A879C518B1260D18A879C718B1260A18B1260F",
        "host": "rrc13",
        "type": "UPDATE",
        "path": [28917, 3257, 1299, 267613, 262893],
        "community": [[28917, 4000], [28917, 4003]],
        "origin": "igp",
        "announcements": [
            {
                "next_hop": "195.208.208.147",
                "prefixes": [
                    "177.23.116.0/24", "177.23.119.0/24", "177.23.112.0/24",
                    "168.121.197.0/24", "177.38.13.0/24", "168.121.199.0/24",
                    "177.38.10.0/24", "177.38.15.0/24"
                ]
            }
        ],
        "withdrawals": ["141.136.32.0/20"]
    }
}"""

NOTIFICATION_MESSAGE = b"""{
    "type": "ris_message",
    "data": {
        "timestamp": 1562822895.4,
        "peer": "2606:6d00:eb0::254",
        "peer_asn": "1403",
        "id": "2606:6d00:eb0::254-1562822895.4-519878",
        "raw": "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF0015030605",
        "host": "rrc00",
        "type": "NOTIFICATION",
        "notification": {"code": 6, "subcode": 5, "data": "0605"}
    }
}"""

KEEPALIVE_MESSAGE = b"""{
    "type": "ris_message",
    "data": {
        "timestamp": 1562822767.1,
        "peer": "195.66.224.31",
        "peer_asn": "32787",
        "id": "195.66.224.31-1562822767.1-1248612",
        "raw": "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF001304",
        "host": "rrc01",
        "type": "KEEPALIVE"
    }
}"""

PEER_STATE_MESSAGE = b"""{
    "type": "ris_message",
    "data": {
        "timestamp": 1562823052.55,
        "peer": "2001:43f8:6d0::55",
        "peer_asn": "327991",
        "id": "2001:43f8:6d0::55-1562823052.55-1007659",
        "host": "rrc19",
        "type": "RIS_PEER_STATE",
        "state": "connected"
    }
}"""

RRC_LIST_MESSAGE = b"""{
    "type": "ris_rrc_list",
    "data": ["rrc00", "rrc01"]
}"""

COMMAND_ERROR_MESSAGE = b"""{
    "type": "ris_error",
    "data": {"message": "Unknown command type", "command_type": "wrong"}
}"""

PONG_MESSAGE = b"""{"type":"pong"}"""

BUFFER_ERROR_MESSAGE = b"""{
    "type": "ris_error",
    "data": {
        "message": "Closing connection after being behind by more than 262144000 bytes over 30 seconds",
        "bufferSize": 313026734
    }
}"""


@pytest.fixture(scope="session", autouse=True)
def structured_logging() -> None:
    """Route structlog output through stdlib logging so caplog sees it."""
    configure_logging()


@pytest.fixture
def open_message() -> bytes:
    """Return a ris_message(OPEN) from rrc01."""
    return OPEN_MESSAGE


@pytest.fixture
def update_message() -> bytes:
    """Return a ris_message(UPDATE) with announcements and a withdrawal."""
    return UPDATE_MESSAGE


@pytest.fixture
def notification_message() -> bytes:
    """Return a ris_message(NOTIFICATION) with code 6 (Cease)."""
    return NOTIFICATION_MESSAGE


@pytest.fixture
def keepalive_message() -> bytes:
    """Return a ris_message(KEEPALIVE)."""
    return KEEPALIVE_MESSAGE


@pytest.fixture
def peer_state_message() -> bytes:
    """Return a ris_message(RIS_PEER_STATE) without raw data."""
    return PEER_STATE_MESSAGE


@pytest.fixture
def rrc_list_message() -> bytes:
    """Return a ris_rrc_list message."""
    return RRC_LIST_MESSAGE


@pytest.fixture
def command_error_message() -> bytes:
    """Return a ris_error for a rejected command."""
    return COMMAND_ERROR_MESSAGE


@pytest.fixture
def pong_message() -> bytes:
    """Return a pong message."""
    return PONG_MESSAGE


@pytest.fixture
def buffer_error_message() -> bytes:
    """Return a ris_error sent before disconnecting a slow client."""
    return BUFFER_ERROR_MESSAGE
