"""
Timestamp Decoding
==================

Read-only interpretations of the legacy date/time layouts shown by the
data inspector. Every decoder receives exactly the bytes it needs and
returns a display string; calendar problems are reported as
``"Invalid date"`` instead of being turned into a bogus date.

Supported layouts:
- MS-DOS packed time + date (4 bytes, two 16-bit words)
- OLE Automation date (IEEE-754 double, days since 1899-12-30)
- Unix time_t (unsigned 32-bit seconds since 1970-01-01)
- Mac HFS time (unsigned 32-bit seconds since 1904-01-01, always big-endian)

All results are rendered in RFC 1123 form, e.g. ``Thu, 01 Jan 1970 00:00:00 GMT``.
"""

import math
import struct
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

INVALID_DATE = "Invalid date"

DOS_EPOCH_YEAR = 1980
MS_PER_DAY = 24 * 60 * 60 * 1000

OLE_EPOCH = datetime(1899, 12, 30, tzinfo=timezone.utc)
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
HFS_EPOCH = datetime(1904, 1, 1, tzinfo=timezone.utc)


def _prefix(endianness):
    return '<' if endianness == 'little' else '>'


def format_utc(value):
    """Format an aware UTC datetime the way the inspector displays dates."""
    return format_datetime(value, usegmt=True)


def decode_ms_dos(raw, endianness):
    """
    Decode a 4-byte MS-DOS time/date pair.

    The first word is the time ([hour:5][minute:6][second/2:5]), the second
    word is the date ([year-1980:7][month:4][day:5]). Both words are read in
    the requested byte order and interpreted as UTC wall time.
    """
    dos_time, dos_date = struct.unpack(_prefix(endianness) + 'HH', raw)

    year = ((dos_date >> 9) & 0x7F) + DOS_EPOCH_YEAR
    month = (dos_date >> 5) & 0x0F
    day = dos_date & 0x1F
    hours = (dos_time >> 11) & 0x1F
    minutes = (dos_time >> 5) & 0x3F
    seconds = (dos_time & 0x1F) * 2

    if month == 0 or day == 0:
        return INVALID_DATE

    try:
        value = datetime(year, month, day, hours, minutes, seconds, tzinfo=timezone.utc)
    except ValueError:
        # Feb 30, hour 31, second 62 ...
        return INVALID_DATE
    return format_utc(value)


def decode_ole(raw, endianness):
    """Decode an 8-byte OLE Automation date (fractional days since 1899-12-30)."""
    days = struct.unpack(_prefix(endianness) + 'd', raw)[0]
    if not math.isfinite(days):
        return INVALID_DATE

    try:
        value = OLE_EPOCH + timedelta(milliseconds=days * MS_PER_DAY)
    except (OverflowError, ValueError):
        return INVALID_DATE
    return format_utc(value)


def decode_unix32(raw, endianness):
    """Decode an unsigned 32-bit Unix timestamp."""
    seconds = struct.unpack(_prefix(endianness) + 'I', raw)[0]
    return format_utc(UNIX_EPOCH + timedelta(seconds=seconds))


def decode_mac_hfs(raw):
    """
    Decode a 4-byte Mac HFS timestamp.

    HFS stores its timestamps big-endian on disk, so this decoder takes no
    endianness argument: the inspector's byte-order toggle does not apply.
    """
    seconds = struct.unpack('>I', raw)[0]
    return format_utc(HFS_EPOCH + timedelta(seconds=seconds))
