import pytest

from mcscan.codec import (
    StringTooLongError,
    decode_string,
    decode_u16,
    encode_string,
    encode_u16,
)
from mcscan.varint import decode_var_int


def test_encode_string_ascii_bytes():
    assert encode_string("abc") == b"\x03abc"


@pytest.mark.parametrize("text", ["", "localhost", "127.0.0.1", "a" * 300])
def test_string_roundtrip_ascii(text):
    encoded = encode_string(text)
    decoded, offset = decode_string(encoded)
    assert decoded == text
    assert offset == len(encoded)


def test_string_prefix_counts_utf16_units():
    text = "\U0001F600"
    encoded = encode_string(text)
    units, offset = decode_var_int(encoded)
    assert units == 2
    assert encoded[offset:] == text.encode("utf-8")


def test_string_max_length_accepted():
    encoded = encode_string("a" * 32767)
    units, offset = decode_var_int(encoded)
    assert units == 32767
    assert len(encoded) - offset == 32767


def test_string_too_long():
    with pytest.raises(StringTooLongError):
        encode_string("a" * 32768)


def test_string_too_long_counts_surrogate_pairs():
    with pytest.raises(StringTooLongError):
        encode_string("\U0001F600" * 16384)


def test_string_too_long_is_value_error():
    with pytest.raises(ValueError):
        encode_string("b" * 40000)


def test_decode_string_sequence_advances_offset():
    data = encode_string("first") + encode_string("second")
    first, offset = decode_string(data)
    second, end = decode_string(data, offset)
    assert (first, second) == ("first", "second")
    assert end == len(data)


def test_decode_string_beyond_buffer():
    with pytest.raises(EOFError):
        decode_string(b"\x05ab")


def test_decode_string_invalid_utf8():
    with pytest.raises(UnicodeDecodeError):
        decode_string(b"\x01\xff")


def test_encode_u16_port():
    assert encode_u16(25565) == b"\x63\xdd"


@pytest.mark.parametrize("value", [0, 1, 255, 256, 25565, 65535])
def test_u16_roundtrip(value):
    encoded = encode_u16(value)
    assert len(encoded) == 2
    assert decode_u16(encoded) == (value, 2)


def test_decode_u16_at_offset():
    data = b"x" + encode_u16(25565) + encode_u16(65535)
    value, offset = decode_u16(data, 1)
    assert value == 25565
    assert decode_u16(data, offset) == (65535, len(data))


@pytest.mark.parametrize("value", [-1, 65536])
def test_encode_u16_out_of_range(value):
    with pytest.raises(ValueError):
        encode_u16(value)


def test_decode_u16_not_enough_bytes():
    with pytest.raises(EOFError):
        decode_u16(b"\x01")


def test_decode_u16_not_enough_bytes_at_offset():
    with pytest.raises(EOFError):
        decode_u16(b"\x01\x02\x03", 2)