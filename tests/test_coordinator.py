# tests/test_coordinator.py
import pytest

from hexinspect.coordinator import OffsetCoordinator
from hexinspect.debounce import Debouncer
from hexinspect.interpreter import BIG, LITTLE


@pytest.fixture
def coordinator(clock):
    c = OffsetCoordinator(100, debouncer_factory=lambda delay, cb: Debouncer(delay, cb, clock=clock))
    c.offsets = []
    c.results = []
    c.add_offset_listener(c.offsets.append)
    c.add_result_listener(c.results.append)
    return c


def test_set_data_decodes_offset_zero(coordinator):
    coordinator.set_data(bytes([0x01, 0x00, 0x00, 0x00]))
    assert coordinator.offsets == [0]
    assert coordinator.settled_offset == 0
    assert coordinator.result.integers.u32 == "1"


def test_empty_data_has_no_result(coordinator):
    coordinator.set_data(b"")
    assert coordinator.offset is None
    assert coordinator.result is None
    assert coordinator.results == [None]


def test_highlight_is_immediate_decode_is_debounced(coordinator, clock):
    coordinator.set_data(bytes(range(32)))
    coordinator.set_offset(5)
    coordinator.set_offset(9)
    assert coordinator.offsets == [0, 5, 9]
    assert coordinator.settled_offset == 0

    clock.advance(150)
    assert coordinator.poll()
    assert coordinator.settled_offset == 9
    assert coordinator.result.integers.u8 == "9"
    assert len(coordinator.results) == 2


def test_unchanged_offset_is_ignored(coordinator):
    coordinator.set_data(bytes(4))
    coordinator.set_offset(0)
    assert coordinator.offsets == [0]
    assert not coordinator.debouncer.pending


def test_flush(coordinator):
    coordinator.set_data(bytes(range(8)))
    coordinator.set_offset(3)
    assert coordinator.flush()
    assert coordinator.result.integers.u8 == "3"


def test_endianness_change_redecodes_settled_offset(coordinator):
    coordinator.set_data(bytes([0x01, 0x00, 0x00, 0x00]))
    coordinator.set_endianness(BIG)
    assert coordinator.result.integers.u32 == "16777216"
    coordinator.set_endianness(BIG)
    assert len(coordinator.results) == 2
    coordinator.set_endianness(LITTLE)
    assert coordinator.result.integers.u32 == "1"


def test_invalid_endianness(coordinator):
    with pytest.raises(ValueError):
        coordinator.set_endianness("native")


def test_new_data_cancels_pending_decode(coordinator, clock):
    coordinator.set_data(bytes(range(16)))
    coordinator.set_offset(10)
    coordinator.set_data(bytes([0xAA]))
    clock.advance(500)
    assert not coordinator.poll()
    assert coordinator.settled_offset == 0
    assert coordinator.result.integers.u8 == "170"
