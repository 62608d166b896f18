"""Variable-length integer encoding used by the Minecraft wire protocol."""

from __future__ import annotations

import asyncio

_SEGMENT_BITS = 0x7F
_CONTINUE_BIT = 0x80

_MAX_VAR_INT_BYTES = 5


def _to_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _decode(data: bytes, offset: int, bits: int, name: str) -> tuple[int, int]:
    value = 0
    position = 0
    while offset < len(data):
        byte = data[offset]
        value |= (byte & _SEGMENT_BITS) << position
        if not byte & _CONTINUE_BIT:
            break
        position += 7
        offset += 1
        if position >= bits:
            raise ValueError(f"{name} is too big")
    return _to_signed(value, bits), offset + 1


def decode_var_int(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a signed 32-bit VarInt starting at ``offset``.

    Returns the value and the offset just past it. Input that ends before the
    final byte yields the bits read so far.
    """
    return _decode(data, offset, 32, "var_int")


def decode_var_long(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a signed 64-bit VarLong starting at ``offset``.

    Returns the value and the offset just past it.
    """
    return _decode(data, offset, 64, "var_long")


def _encode(value: int, bits: int) -> bytes:
    value &= (1 << bits) - 1
    out = bytearray()
    while value & ~_SEGMENT_BITS:
        out.append((value & _SEGMENT_BITS) | _CONTINUE_BIT)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_var_int(value: int) -> bytes:
    """Encode ``value`` as a 32-bit VarInt (negative values use two's complement)."""
    return _encode(value, 32)


def encode_var_long(value: int) -> bytes:
    """Encode ``value`` as a 64-bit VarLong (negative values use two's complement)."""
    return _encode(value, 64)


async def read_var_int_from_stream(reader: asyncio.StreamReader) -> int:
    """Read one VarInt from an asyncio stream.

    Raises ``asyncio.IncompleteReadError`` if the stream ends early and
    ``ValueError`` if the VarInt runs longer than five bytes.
    """
    value = 0
    for count in range(_MAX_VAR_INT_BYTES):
        (byte,) = await reader.readexactly(1)
        value |= (byte & _SEGMENT_BITS) << (7 * count)
        if not byte & _CONTINUE_BIT:
            return _to_signed(value, 32)
    raise ValueError("var_int is too big")