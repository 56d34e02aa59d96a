# tests/test_hex_view.py
import pytest

from hexinspect import hex_view
from hexinspect.hex_view import (HexViewModel, ViewportWindow, build_row, format_offset, row_count,
                                 visible_row_range)


@pytest.fixture
def model():
    m = HexViewModel(row_height=24, overscan=5)
    m.set_data(bytes(range(256)) * 4)  # 1024 bytes, 64 rows
    m.set_viewport_height(240)         # 10 rows on screen
    return m


def test_visible_range_for_large_buffer():
    rows = row_count(1_000_000)
    assert rows == 62500
    assert visible_row_range(2400, 480, 24, rows, 5) == range(95, 125)
    assert ViewportWindow(2400, 480).row_range(rows) == range(95, 125)


def test_only_visible_rows_are_built(monkeypatch):
    built = []
    original = hex_view.build_row

    def counting_build_row(data, row_index, bytes_per_row=16):
        built.append(row_index)
        return original(data, row_index, bytes_per_row)

    monkeypatch.setattr(hex_view, "build_row", counting_build_row)
    m = HexViewModel(row_height=24, overscan=5)
    m.set_data(bytes(1_000_000))
    m.set_viewport_height(480)
    assert m.scroll_to(2400) == 2400
    rows = m.visible_rows()
    assert built == list(range(95, 125))
    assert rows[0].y == 95 * 24
    assert rows[-1].row.offset == 124 * 16


def test_visible_range_is_clamped():
    assert visible_row_range(0, 480, 24, 100, 5) == range(0, 25)
    assert visible_row_range(2280, 480, 24, 100, 5) == range(90, 100)
    assert visible_row_range(0, 480, 24, 0, 5) == range(0)


def test_build_row_formats_hex_and_ascii():
    row = build_row(b"AB\x00\x7F\x20~" + bytes(range(0x30, 0x3A)), 0)
    assert row.offset == 0
    assert row.hex[:6] == ("41", "42", "00", "7F", "20", "7E")
    assert row.ascii == "AB.. ~0123456789"


def test_build_row_clips_last_row():
    row = build_row(bytes(20), 1)
    assert row.offset == 16
    assert len(row.hex) == 4
    assert row.ascii == "...."


def test_format_offset():
    assert format_offset(0) == "00000000"
    assert format_offset(0x1F40) == "00001F40"


def test_empty_buffer_has_nothing_to_show():
    m = HexViewModel()
    m.set_viewport_height(480)
    for data in (None, b""):
        m.set_data(data)
        assert m.is_empty
        assert m.visible_rows() == []
        assert m.selected_offset is None
        assert m.content_height == 0


def test_visible_rows_are_placed(model):
    model.scroll_to(480)
    placed = model.visible_rows()
    assert [p.row.offset // 16 for p in placed] == list(range(15, 35))
    assert placed[0].y == 15 * 24
    assert placed[5].row.offset == 20 * 16


def test_scroll_is_clamped(model):
    assert model.content_height == 64 * 24
    assert model.scroll_to(-50) == 0
    assert model.scroll_to(10_000) == model.max_scroll == 64 * 24 - 240


def test_set_data_resets_scroll_and_selection(model):
    model.scroll_to(300)
    model.click(100)
    model.set_data(b"\x01\x02")
    assert model.scroll_top == 0
    assert model.selected_offset == 0


def test_select_on_screen_does_not_scroll(model):
    model.scroll_to(48)
    assert model.select(5 * 16 + 3) is None
    assert model.scroll_top == 48
    assert model.selected_offset == 83


def test_select_below_scrolls_minimally(model):
    target = model.select(20 * 16)
    assert target == 20 * 24 + 24 - 240
    assert model.scroll_top == target
    assert model.is_row_on_screen(20)
    # Already visible now: no second scroll
    assert model.select(20 * 16 + 1) is None


def test_select_above_scrolls_to_row_top(model):
    model.scroll_to(960)
    assert model.select(16 * 10) == 240
    assert model.scroll_top == 240


def test_partially_visible_row_scrolls(model):
    model.scroll_to(12)
    assert not model.is_row_on_screen(0)
    assert model.select(0) == 0


def test_row_taller_than_viewport_is_on_screen():
    m = HexViewModel(row_height=24)
    m.set_data(bytes(1024))
    m.set_viewport_height(10)
    assert m.select(5 * 16) == 5 * 24 + 24 - 10
    assert m.is_row_on_screen(5)
    assert m.select(5 * 16) is None
    assert m.select(5 * 16 + 7) is None
    assert m.scroll_top == 134


def test_select_outside_buffer_is_ignored(model):
    model.click(7)
    assert model.select(5000) is None
    assert model.selected_offset == 7


def test_click_notifies_listeners(model):
    seen = []
    model.add_offset_listener(seen.append)
    assert model.click(42)
    assert not model.click(-1)
    assert not model.click(None)
    model.remove_offset_listener(seen.append)
    model.click(43)
    assert seen == [42]
    assert model.selected_offset == 43


def test_offset_at_hit_testing(model):
    assert model.offset_at(2, 3) == 35
    assert model.offset_at(0, 16) is None
    assert model.offset_at(64, 0) is None
    model.scroll_to(240)
    assert model.row_at_y(30) == 11
