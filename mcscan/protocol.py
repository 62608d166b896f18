"""Server-list-ping packets."""

from __future__ import annotations

from .codec import decode_string, encode_string, encode_u16
from .varint import decode_var_int, encode_var_int

PROTOCOL_VERSION = 757
STATUS_STATE = 1
_PACKET_ID = 0x00


def _frame(body: bytes) -> bytes:
    return encode_var_int(len(body)) + body


def create_handshake_packet(
    protocol_version: int, server_address: str, server_port: int, next_state: int
) -> bytes:
    """Build a length-prefixed handshake packet."""
    body = b"".join(
        (
            encode_var_int(_PACKET_ID),
            encode_var_int(protocol_version),
            encode_string(server_address),
            encode_u16(server_port),
            encode_var_int(next_state),
        )
    )
    return _frame(body)


def create_status_request() -> bytes:
    """Build a length-prefixed status request packet."""
    return _frame(encode_var_int(_PACKET_ID))


def parse_status_response(payload: bytes) -> tuple[int, str]:
    """Split a status response payload (without its length) into packet id and JSON text.

    Raises ``EOFError`` or ``UnicodeDecodeError`` if the string is malformed.
    """
    code, offset = decode_var_int(payload)
    text, _ = decode_string(payload, offset)
    return code, text