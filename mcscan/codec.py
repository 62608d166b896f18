"""Strings and unsigned shorts as they appear in Minecraft protocol packets."""

from __future__ import annotations

from .varint import decode_var_int, encode_var_int

MAX_STRING_UNITS = 32767


class StringTooLongError(ValueError):
    """Raised when a string exceeds the protocol's UTF-16 length limit."""


def _utf16_units(text: str) -> int:
    return sum(2 if ord(ch) > 0xFFFF else 1 for ch in text)


def encode_string(text: str) -> bytes:
    """Encode ``text`` as a UTF-16 length prefix followed by its UTF-8 bytes."""
    units = _utf16_units(text)
    if units > MAX_STRING_UNITS:
        raise StringTooLongError("String is too long for the Minecraft protocol!")
    return encode_var_int(units) + text.encode("utf-8")


def decode_string(data: bytes, offset: int = 0) -> tuple[str, int]:
    """Decode a length-prefixed UTF-8 string starting at ``offset``.

    Returns the text and the offset just past it. Raises ``EOFError`` if the
    declared length runs past the data and ``UnicodeDecodeError`` if the bytes
    are not valid UTF-8.
    """
    length, offset = decode_var_int(data, offset)
    end = offset + length
    if length < 0 or end > len(data):
        raise EOFError("Attempted to read beyond the buffer")
    return bytes(data[offset:end]).decode("utf-8"), end


def encode_u16(value: int) -> bytes:
    """Encode ``value`` as a big-endian unsigned 16-bit integer."""
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"value out of range for u16: {value}")
    return value.to_bytes(2, "big")


def decode_u16(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a big-endian unsigned 16-bit integer starting at ``offset``.

    Returns the value and the offset just past it.
    """
    end = offset + 2
    if end > len(data):
        raise EOFError("Not enough bytes to read u16")
    return int.from_bytes(data[offset:end], "big"), end