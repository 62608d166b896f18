import asyncio

import pytest

from mcscan.varint import (
    decode_var_int,
    decode_var_long,
    encode_var_int,
    encode_var_long,
    read_var_int_from_stream,
)

VARINT_VALUES = [0, 1, 2, 127, 128, 255, 25565, 2097151, 2147483647, -1, -2147483648]

VARLONG_VALUES = [
    0,
    1,
    2,
    127,
    128,
    255,
    2147483647,
    9223372036854775807,
    -1,
    -2147483648,
    -9223372036854775808,
]


@pytest.mark.parametrize("value", VARINT_VALUES)
def test_varint_roundtrip(value):
    encoded = encode_var_int(value)
    decoded, offset = decode_var_int(encoded)
    assert decoded == value
    assert offset == len(encoded)


@pytest.mark.parametrize("value", VARLONG_VALUES)
def test_varlong_roundtrip(value):
    encoded = encode_var_long(value)
    decoded, offset = decode_var_long(encoded)
    assert decoded == value
    assert offset == len(encoded)


def test_encode_var_int_known_bytes():
    assert encode_var_int(0) == b"\x00"
    assert encode_var_int(127) == b"\x7f"
    assert encode_var_int(128) == b"\x80\x01"
    assert encode_var_int(25565) == b"\xdd\xc7\x01"
    assert encode_var_int(-1) == b"\xff\xff\xff\xff\x0f"


def test_var_int_encodings_are_at_most_five_bytes():
    for value in VARINT_VALUES:
        assert 1 <= len(encode_var_int(value)) <= 5


def test_var_long_encodings_are_at_most_ten_bytes():
    for value in VARLONG_VALUES:
        assert 1 <= len(encode_var_long(value)) <= 10


def test_decode_var_int_at_offset_advances():
    data = encode_var_int(300) + encode_var_int(-5) + encode_var_int(25565)
    values = []
    offset = 0
    while offset < len(data):
        value, offset = decode_var_int(data, offset)
        values.append(value)
    assert values == [300, -5, 25565]
    assert offset == len(data)


def test_decode_var_int_too_big():
    with pytest.raises(ValueError):
        decode_var_int(b"\xff\xff\xff\xff\xff\x01")


def test_decode_var_long_too_big():
    with pytest.raises(ValueError):
        decode_var_long(b"\xff" * 10 + b"\x01")


@pytest.mark.asyncio
async def test_read_var_int_from_stream_roundtrip():
    reader = asyncio.StreamReader()
    for value in VARINT_VALUES:
        reader.feed_data(encode_var_int(value))
    reader.feed_eof()
    results = [await read_var_int_from_stream(reader) for _ in VARINT_VALUES]
    assert results == VARINT_VALUES


@pytest.mark.asyncio
async def test_read_var_int_from_stream_leaves_rest():
    reader = asyncio.StreamReader()
    reader.feed_data(encode_var_int(25565) + b"rest")
    reader.feed_eof()
    assert await read_var_int_from_stream(reader) == 25565
    assert await reader.read() == b"rest"


@pytest.mark.asyncio
async def test_read_var_int_from_stream_eof():
    reader = asyncio.StreamReader()
    reader.feed_data(b"\x80")
    reader.feed_eof()
    with pytest.raises(asyncio.IncompleteReadError):
        await read_var_int_from_stream(reader)


@pytest.mark.asyncio
async def test_read_var_int_from_stream_too_long():
    reader = asyncio.StreamReader()
    reader.feed_data(b"\xff" * 6)
    reader.feed_eof()
    with pytest.raises(ValueError):
        await read_var_int_from_stream(reader)