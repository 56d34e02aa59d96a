# tests/test_leb128.py
import pytest

from hexinspect.interpreter import (INCOMPLETE_LEB128, LEB128_TOO_LONG, OUT_OF_BOUNDS, Leb128Error,
                                    decode_leb128, encode_sleb128, encode_uleb128, interpret)


def test_known_encodings():
    assert encode_uleb128(624485) == bytes([0xE5, 0x8E, 0x26])
    assert encode_sleb128(-123456) == bytes([0xC0, 0xBB, 0x78])
    assert encode_sleb128(-1) == b"\x7F"
    assert encode_sleb128(63) == b"\x3F"
    assert encode_sleb128(64) == b"\xC0\x00"


@pytest.mark.parametrize("value", [0, 1, 127, 128, 300, 624485, 2 ** 32, 2 ** 63 - 1, 2 ** 64 - 1])
def test_unsigned_roundtrip(value):
    encoded = encode_uleb128(value)
    decoded = decode_leb128(encoded + b"\xAA", 0)
    assert decoded.value == value
    assert decoded.length == len(encoded)


@pytest.mark.parametrize("value", [0, 1, -1, 63, -64, 64, -65, -123456, 2 ** 40,
                                   -(2 ** 62), -(2 ** 63), 2 ** 63 - 1])
def test_signed_roundtrip(value):
    encoded = encode_sleb128(value)
    decoded = decode_leb128(b"\x00" + encoded, 1, signed=True)
    assert decoded.value == value
    assert decoded.length == len(encoded)


def test_negative_uleb_is_rejected():
    with pytest.raises(ValueError):
        encode_uleb128(-1)


def test_nine_groups_are_accepted():
    decoded = decode_leb128(b"\x80" * 8 + b"\x01", 0)
    assert decoded.value == 1 << 56
    assert decoded.length == 9


def test_ten_groups_cover_64_bit_values():
    assert interpret(encode_uleb128(2 ** 64 - 1), 0).leb128.u == "18446744073709551615 (10 bytes)"
    assert interpret(encode_sleb128(-(2 ** 63)), 0).leb128.i == "-9223372036854775808 (10 bytes)"
    decoded = decode_leb128(b"\x80" * 9 + b"\x01", 0)
    assert decoded.value == 1 << 63
    assert decoded.length == 10


def test_sequence_too_long():
    with pytest.raises(Leb128Error, match=LEB128_TOO_LONG):
        decode_leb128(b"\x80" * 10 + b"\x00", 0)


def test_incomplete_sequence():
    with pytest.raises(Leb128Error, match=INCOMPLETE_LEB128):
        decode_leb128(b"\x80\x80", 0)


def test_offset_outside_buffer():
    with pytest.raises(Leb128Error, match=OUT_OF_BOUNDS):
        decode_leb128(b"\x01", 1)


def test_inspector_strings():
    result = interpret(bytes([0xE5, 0x8E, 0x26]), 0)
    assert result.leb128.u == "624485 (3 bytes)"
    assert interpret(b"\x7F", 0).leb128.i == "-1 (1 bytes)"
    assert interpret(b"\x7F", 0).leb128.u == "127 (1 bytes)"
    assert interpret(b"\xFF\xFF", 0).leb128.u == INCOMPLETE_LEB128
    assert interpret(b"\xFF" * 12, 0).leb128.i == LEB128_TOO_LONG
