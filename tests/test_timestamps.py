# tests/test_timestamps.py
import struct

import pytest

from hexinspect import timestamps
from hexinspect.interpreter import BIG, INVALID_DATE, LITTLE, interpret


def dos_bytes(year, month, day, hour, minute, second, endian='<'):
    dos_time = (hour << 11) | (minute << 5) | (second // 2)
    dos_date = ((year - 1980) << 9) | (month << 5) | day
    return struct.pack(endian + 'HH', dos_time, dos_date)


def test_ms_dos_date():
    raw = dos_bytes(2024, 3, 15, 13, 45, 30)
    assert timestamps.decode_ms_dos(raw, LITTLE) == "Fri, 15 Mar 2024 13:45:30 GMT"


def test_ms_dos_big_endian_words():
    raw = dos_bytes(1999, 12, 31, 23, 59, 58, '>')
    assert interpret(raw, 0, BIG).dates.ms_dos == "Fri, 31 Dec 1999 23:59:58 GMT"


@pytest.mark.parametrize("month,day", [(0, 1), (1, 0), (13, 1), (2, 30)])
def test_ms_dos_invalid_calendar(month, day):
    dos_date = (44 << 9) | (month << 5) | day
    raw = struct.pack('<HH', 0, dos_date)
    assert timestamps.decode_ms_dos(raw, LITTLE) == INVALID_DATE


def test_ms_dos_all_zero_is_invalid():
    assert interpret(b"\x00\x00\x00\x00", 0).dates.ms_dos == INVALID_DATE


def test_unix_epoch():
    assert interpret(b"\x00" * 4, 0).dates.unix32 == "Thu, 01 Jan 1970 00:00:00 GMT"


def test_unix_is_unsigned():
    assert interpret(b"\xFF\xFF\xFF\xFF", 0).dates.unix32 == "Sun, 07 Feb 2106 06:28:15 GMT"


def test_ole_epoch_and_days():
    assert interpret(struct.pack('<d', 0.0), 0).dates.ole == "Sat, 30 Dec 1899 00:00:00 GMT"
    assert interpret(struct.pack('>d', 25569.5), 0, BIG).dates.ole == "Thu, 01 Jan 1970 12:00:00 GMT"


@pytest.mark.parametrize("days", [float('nan'), float('inf'), 1e300])
def test_ole_invalid(days):
    assert interpret(struct.pack('<d', days), 0).dates.ole == INVALID_DATE


def test_mac_hfs_epoch():
    assert interpret(b"\x00" * 4, 0).dates.mac_hfs == "Fri, 01 Jan 1904 00:00:00 GMT"


def test_mac_hfs_ignores_endianness_toggle():
    data = bytes([0x7C, 0x25, 0xB0, 0x80])
    little = interpret(data, 0, LITTLE).dates.mac_hfs
    big = interpret(data, 0, BIG).dates.mac_hfs
    assert little == big
    assert little == timestamps.decode_mac_hfs(data)
