"""
Interpreter Module
==================

This module interprets the raw bytes at a cursor offset as every data type the
inspector knows about. It is a pure projection of ``(data, offset, endianness)``:
nothing is cached, nothing is written back and no field can break another one.

Supported interpretations:
- Integers: int8, uint8, int16, uint16, int24, uint24, int32, uint32, int64, uint64
- Floating-point: float16 (reported as N/A), float32, float64
- Variable-length integers: ULEB128 (unsigned), LEB128 (signed)
- Timestamps: MS-DOS time & date, OLETIME, Unix time_t (32 bit), Mac HFS time
- Text: first line of up to 64 bytes of strict UTF-8
- Binary: the byte at the cursor as eight bits, MSB first

Every field is a string. A field that needs more bytes than remain after the
offset reads ``"Out of Bounds"``; structurally broken content produces a
diagnostic string (``"Invalid date"``, ``"Incomplete LEB128 sequence"``, ...);
any other failure is reported with the exception message.
"""

import math
import struct
import unicodedata
from dataclasses import dataclass, field, fields

from . import timestamps

LITTLE = 'little'
BIG = 'big'
ENDIANNESS = (LITTLE, BIG)

NA = "N/A"
OUT_OF_BOUNDS = "Out of Bounds"
INCOMPLETE_LEB128 = "Incomplete LEB128 sequence"
LEB128_TOO_LONG = "LEB128 sequence too long"
INVALID_UTF8 = "Invalid UTF-8 sequence"
INVALID_DATE = timestamps.INVALID_DATE

TEXT_PREVIEW_BYTES = 64
LEB128_MAX_GROUPS = 10

# struct codes for the widths struct can unpack directly (24-bit is manual)
_INT_CODES = {1: 'b', 2: 'h', 4: 'i', 8: 'q'}
_FLOAT_CODES = {4: 'f', 8: 'd'}


class Leb128Error(ValueError):
    """Raised for LEB128 sequences that cannot be decoded at the offset."""


@dataclass(frozen=True)
class Leb128Value:
    value: int
    length: int

    def __str__(self):
        return f"{self.value} ({self.length} bytes)"


@dataclass(frozen=True)
class IntegerValues:
    u8: str = field(metadata={'label': "UInt8"})
    i8: str = field(metadata={'label': "Int8"})
    u16: str = field(metadata={'label': "UInt16"})
    i16: str = field(metadata={'label': "Int16"})
    u24: str = field(metadata={'label': "UInt24"})
    i24: str = field(metadata={'label': "Int24"})
    u32: str = field(metadata={'label': "UInt32"})
    i32: str = field(metadata={'label': "Int32"})
    u64: str = field(metadata={'label': "UInt64"})
    i64: str = field(metadata={'label': "Int64"})


@dataclass(frozen=True)
class FloatValues:
    f16: str = field(metadata={'label': "Half (float16)"})
    f32: str = field(metadata={'label': "Single (float32)"})
    f64: str = field(metadata={'label': "Double (float64)"})


@dataclass(frozen=True)
class Leb128Values:
    u: str = field(metadata={'label': "ULEB128"})
    i: str = field(metadata={'label': "LEB128"})


@dataclass(frozen=True)
class DateValues:
    ms_dos: str = field(metadata={'label': "DOS time & date"})
    ole: str = field(metadata={'label': "OLETIME"})
    unix32: str = field(metadata={'label': "time_t (32 bit)"})
    mac_hfs: str = field(metadata={'label': "Mac HFS time (BE)"})


@dataclass(frozen=True)
class TextValues:
    utf8: str = field(metadata={'label': "UTF-8"})


@dataclass(frozen=True)
class InterpretationResult:
    """
    Every interpretation of the bytes at one offset.

    Attributes:
        integers: Fixed-width integer views
        floats: IEEE-754 views (float16 is not computed)
        leb128: Variable-length integer views, "value (n bytes)"
        dates: Legacy timestamp views
        text: UTF-8 preview
        binary: The byte at the offset as a string of 8 bits
    """
    integers: IntegerValues
    floats: FloatValues
    leb128: Leb128Values
    dates: DateValues
    text: TextValues
    binary: str

    GROUPS = (
        ('integers', "Integers"),
        ('floats', "Floating point"),
        ('leb128', "Variable length"),
        ('dates', "Date & time"),
        ('text', "Text"),
    )

    def as_rows(self):
        """Yield ``(group title, label, value)`` in display order."""
        for attr, title in self.GROUPS:
            group = getattr(self, attr)
            for f in fields(group):
                yield title, f.metadata['label'], getattr(group, f.name)
        yield "Binary", "Bits", self.binary


def byte_order_prefix(endianness):
    """Return the struct byte-order prefix for 'little' or 'big'."""
    if endianness == LITTLE:
        return '<'
    if endianness == BIG:
        return '>'
    raise ValueError(f"endianness must be one of {ENDIANNESS}, got {endianness!r}")


def read_bytes(data, offset, count):
    """Read count bytes starting at offset, or None if out of bounds."""
    if offset < 0 or offset + count > len(data):
        return None
    return bytes(data[offset:offset + count])


def _safe_read(data, offset, count, decode, fmt=str):
    raw = read_bytes(data, offset, count)
    if raw is None:
        return OUT_OF_BOUNDS
    try:
        return fmt(decode(raw))
    except Exception as e:
        return str(e) or "Error"


# --- Integer decoders ---

def unpack_int(raw, endianness, signed):
    """Unpack a 1, 2, 4 or 8 byte integer."""
    code = _INT_CODES[len(raw)]
    if not signed:
        code = code.upper()
    return struct.unpack(byte_order_prefix(endianness) + code, raw)[0]


def unpack_uint24(raw, endianness):
    # Reconstruct 24-bit value based on endianness
    if endianness == LITTLE:
        return raw[0] | (raw[1] << 8) | (raw[2] << 16)
    return (raw[0] << 16) | (raw[1] << 8) | raw[2]


def unpack_int24(raw, endianness):
    value = unpack_uint24(raw, endianness)
    # Apply sign bit extension
    if value & 0x800000:
        value -= 0x1000000
    return value


# --- Float decoders ---

def unpack_float(raw, endianness):
    """Unpack a 4 or 8 byte IEEE-754 value."""
    return struct.unpack(byte_order_prefix(endianness) + _FLOAT_CODES[len(raw)], raw)[0]


def format_float(value):
    """Format a float the way the inspector shows numbers: 1, 0.5, NaN, -Infinity."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


# --- LEB128 ---

def decode_leb128(data, offset, signed=False):
    """
    Decode a LEB128 value starting at offset.

    Each byte carries 7 payload bits, least significant group first; the high
    bit marks that another byte follows. At most LEB128_MAX_GROUPS groups
    (enough for any 64-bit value) are accepted.

    Returns:
        Leb128Value with the decoded integer and the number of bytes consumed

    Raises:
        Leb128Error: offset outside the data, truncated or over-long sequence
    """
    if offset < 0 or offset >= len(data):
        raise Leb128Error(OUT_OF_BOUNDS)

    result = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(data):
            raise Leb128Error(INCOMPLETE_LEB128)
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            break
        shift += 7
        if shift >= 7 * LEB128_MAX_GROUPS:
            raise Leb128Error(LEB128_TOO_LONG)

    if signed and byte & 0x40:
        # Set every bit above the consumed width
        result |= -(1 << (shift + 7))
    return Leb128Value(result, pos - offset)


def encode_uleb128(value):
    """Encode a non-negative integer as ULEB128."""
    if value < 0:
        raise ValueError("ULEB128 cannot encode negative values")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_sleb128(value):
    """Encode a signed integer as LEB128."""
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        done = (value == 0 and not byte & 0x40) or (value == -1 and byte & 0x40)
        out.append(byte if done else byte | 0x80)
        if done:
            return bytes(out)


def _leb128_field(data, offset, signed):
    try:
        return str(decode_leb128(data, offset, signed))
    except Leb128Error as e:
        return str(e)
    except Exception as e:
        return str(e) or "Error"


# --- Text / binary ---

def decode_text(raw):
    """Strict UTF-8 decode; keep the first line and mask control characters."""
    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError:
        raise ValueError(INVALID_UTF8) from None
    first_line = text.split('\n', 1)[0]
    return ''.join('.' if unicodedata.category(ch).startswith('C') else ch for ch in first_line)


def format_bits(raw):
    return f"{raw[0]:08b}"


def interpret(data, offset, endianness=LITTLE):
    """
    Interpret the bytes at offset under every supported encoding.

    Args:
        data: bytes-like buffer (bytes, bytearray, memoryview, mmap); None is
            treated as an empty buffer
        offset: cursor offset; offsets at or past the end yield "Out of Bounds"
        endianness: 'little' or 'big' for multi-byte values

    Returns:
        InterpretationResult
    """
    byte_order_prefix(endianness)
    if data is None:
        data = b""

    def integer(size, signed):
        return _safe_read(data, offset, size, lambda raw: unpack_int(raw, endianness, signed))

    integers = IntegerValues(
        u8=integer(1, False),
        i8=integer(1, True),
        u16=integer(2, False),
        i16=integer(2, True),
        u24=_safe_read(data, offset, 3, lambda raw: unpack_uint24(raw, endianness)),
        i24=_safe_read(data, offset, 3, lambda raw: unpack_int24(raw, endianness)),
        u32=integer(4, False),
        i32=integer(4, True),
        u64=integer(8, False),
        i64=integer(8, True),
    )

    floats = FloatValues(
        # 16-bit floats are intentionally not decoded
        f16=NA,
        f32=_safe_read(data, offset, 4, lambda raw: unpack_float(raw, endianness), format_float),
        f64=_safe_read(data, offset, 8, lambda raw: unpack_float(raw, endianness), format_float),
    )

    leb128 = Leb128Values(
        u=_leb128_field(data, offset, signed=False),
        i=_leb128_field(data, offset, signed=True),
    )

    dates = DateValues(
        ms_dos=_safe_read(data, offset, 4, lambda raw: timestamps.decode_ms_dos(raw, endianness)),
        ole=_safe_read(data, offset, 8, lambda raw: timestamps.decode_ole(raw, endianness)),
        unix32=_safe_read(data, offset, 4, lambda raw: timestamps.decode_unix32(raw, endianness)),
        mac_hfs=_safe_read(data, offset, 4, timestamps.decode_mac_hfs),
    )

    text_size = max(1, min(TEXT_PREVIEW_BYTES, len(data) - offset))
    text = TextValues(utf8=_safe_read(data, offset, text_size, decode_text))

    return InterpretationResult(
        integers=integers,
        floats=floats,
        leb128=leb128,
        dates=dates,
        text=text,
        binary=_safe_read(data, offset, 1, format_bits),
    )
