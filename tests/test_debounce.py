# tests/test_debounce.py
from hexinspect.debounce import Debouncer, QtDebouncer


def test_fires_once_after_delay(clock):
    fired = []
    d = Debouncer(100, fired.append, clock=clock)
    d.schedule(1)
    clock.advance(99)
    assert not d.poll()
    clock.advance(2)
    assert d.poll()
    assert fired == [1]
    assert not d.pending
    assert not d.poll()


def test_burst_fires_only_last_value(clock):
    fired = []
    d = Debouncer(100, fired.append, clock=clock)
    for value in range(10):
        d.schedule(value)
        clock.advance(50)
        d.poll()
    clock.advance(100)
    d.poll()
    assert fired == [9]


def test_stale_token_is_not_current(clock):
    d = Debouncer(100, lambda value: None, clock=clock)
    first = d.schedule("a")
    second = d.schedule("b")
    assert not d.is_current(first)
    assert d.is_current(second)
    d.cancel()
    assert not d.is_current(second)


def test_cancel_drops_pending_value(clock):
    fired = []
    d = Debouncer(100, fired.append, clock=clock)
    d.schedule(5)
    d.cancel()
    clock.advance(500)
    assert not d.poll()
    assert not d.flush()
    assert fired == []


def test_flush_fires_immediately(clock):
    fired = []
    d = Debouncer(100, fired.append, clock=clock)
    d.schedule(3)
    assert d.flush()
    assert fired == [3]


def test_qt_debouncer_flush_and_cancel(qapp):
    fired = []
    d = QtDebouncer(100, fired.append)
    d.schedule(1)
    d.schedule(2)
    assert d.pending
    assert d.timer.isActive()
    assert d.flush()
    assert fired == [2]
    d.schedule(3)
    d.cancel()
    assert not d.timer.isActive()
    assert not d.flush()
    assert fired == [2]
