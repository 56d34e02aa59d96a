"""
Hex View Model
==============

Windowed (virtualized) layout of a byte buffer as 16-byte rows.

Only the rows that intersect the viewport, plus a small overscan margin, are
ever built. Rows are computed from buffer slices on demand each time they are
asked for, so the cost of a scroll is proportional to the number of visible
rows and never to the size of the file.

The model also owns the selected offset:
- click(offset) sets it immediately and notifies offset listeners
- select(offset) is used for programmatic jumps and scrolls only when the
  target row is not already fully on screen
"""

import math
from dataclasses import dataclass

BYTES_PER_ROW = 16
ROW_HEIGHT = 24
OVERSCAN_ROWS = 5

PRINTABLE_MIN = 0x20
PRINTABLE_MAX = 0x7E


@dataclass(frozen=True)
class VirtualRow:
    """One rendered line: first byte offset, hex tokens and ASCII column."""
    offset: int
    hex: tuple
    ascii: str


@dataclass(frozen=True)
class PlacedRow:
    """A VirtualRow together with its pixel position inside the content."""
    y: int
    row: VirtualRow


@dataclass(frozen=True)
class ViewportWindow:
    scroll_top: int
    viewport_height: int
    row_height: int = ROW_HEIGHT
    bytes_per_row: int = BYTES_PER_ROW
    overscan: int = OVERSCAN_ROWS

    def row_range(self, total_rows):
        return visible_row_range(self.scroll_top, self.viewport_height, self.row_height,
                                 total_rows, self.overscan)


def row_count(length, bytes_per_row=BYTES_PER_ROW):
    return (length + bytes_per_row - 1) // bytes_per_row


def format_offset(offset):
    return f"{offset:08X}"


def ascii_char(byte):
    return chr(byte) if PRINTABLE_MIN <= byte <= PRINTABLE_MAX else '.'


def build_row(data, row_index, bytes_per_row=BYTES_PER_ROW):
    """Build the row starting at row_index * bytes_per_row (clipped to the buffer end)."""
    start = row_index * bytes_per_row
    chunk = bytes(data[start:start + bytes_per_row])
    return VirtualRow(
        offset=start,
        hex=tuple(f"{byte:02X}" for byte in chunk),
        ascii=''.join(ascii_char(byte) for byte in chunk),
    )


def visible_row_range(scroll_top, viewport_height, row_height, total_rows, overscan=OVERSCAN_ROWS):
    """
    Index range of the rows to materialize for a viewport.

    Args:
        scroll_top: Pixel offset of the top edge of the viewport
        viewport_height: Pixel height of the viewport
        row_height: Fixed pixel height of one row
        total_rows: Number of rows in the whole buffer
        overscan: Extra rows kept above and below the viewport

    Returns:
        range of row indices
    """
    if total_rows <= 0 or row_height <= 0:
        return range(0)
    first = max(0, math.floor(scroll_top / row_height) - overscan)
    last = min(total_rows, math.ceil((scroll_top + viewport_height) / row_height) + overscan)
    return range(first, max(first, last))


class HexViewModel:
    """
    State behind the hex view: buffer, scroll position, viewport and selection.

    Attributes:
        data: Buffer being shown, or None when nothing is loaded
        scroll_top: Current vertical scroll position in pixels
        viewport_height: Height of the visible area in pixels
        selected_offset: Highlighted byte, or None
        row_height: Pixel height of one row
        bytes_per_row: Bytes shown per row (16)
        overscan: Rows materialized beyond each viewport edge
    """

    def __init__(self, row_height=ROW_HEIGHT, bytes_per_row=BYTES_PER_ROW, overscan=OVERSCAN_ROWS):
        self.data = None
        self.scroll_top = 0
        self.viewport_height = 0
        self.selected_offset = None
        self.row_height = row_height
        self.bytes_per_row = bytes_per_row
        self.overscan = overscan
        self._offset_listeners = []

    # --- listeners ---

    def add_offset_listener(self, callback):
        self._offset_listeners.append(callback)

    def remove_offset_listener(self, callback):
        self._offset_listeners.remove(callback)

    def _notify(self, offset):
        for callback in list(self._offset_listeners):
            callback(offset)

    # --- buffer / geometry ---

    @property
    def length(self):
        return len(self.data) if self.data is not None else 0

    @property
    def is_empty(self):
        return self.length == 0

    @property
    def total_rows(self):
        return row_count(self.length, self.bytes_per_row)

    @property
    def content_height(self):
        return self.total_rows * self.row_height

    @property
    def max_scroll(self):
        return max(0, self.content_height - self.viewport_height)

    def set_data(self, data):
        """Show a new buffer; scroll and selection are reset."""
        self.data = data
        self.scroll_top = 0
        self.selected_offset = 0 if not self.is_empty else None

    def set_viewport_height(self, height):
        self.viewport_height = max(0, int(height))
        self.scroll_top = min(self.scroll_top, self.max_scroll)

    def scroll_to(self, scroll_top):
        """Move the viewport, clamped to the scrollable range. Returns the applied value."""
        self.scroll_top = max(0, min(int(scroll_top), self.max_scroll))
        return self.scroll_top

    def window(self):
        return ViewportWindow(self.scroll_top, self.viewport_height, self.row_height,
                              self.bytes_per_row, self.overscan)

    def row_range(self):
        if self.is_empty:
            return range(0)
        return self.window().row_range(self.total_rows)

    def visible_rows(self):
        """Rows to paint for the current viewport, with their y positions."""
        return [
            PlacedRow(index * self.row_height, build_row(self.data, index, self.bytes_per_row))
            for index in self.row_range()
        ]

    def row_of(self, offset):
        return offset // self.bytes_per_row

    def offset_at(self, row_index, column):
        """Byte offset under a (row, column) hit, or None if there is no byte there."""
        if row_index < 0 or not 0 <= column < self.bytes_per_row:
            return None
        offset = row_index * self.bytes_per_row + column
        return offset if offset < self.length else None

    def row_at_y(self, y):
        """Row index under a viewport-relative y coordinate."""
        return math.floor((self.scroll_top + y) / self.row_height)

    def is_row_on_screen(self, row_index):
        """True when the row is fully visible, or fills a viewport shorter than itself."""
        top = row_index * self.row_height
        bottom = top + self.row_height
        view_bottom = self.scroll_top + self.viewport_height
        if top >= self.scroll_top and bottom <= view_bottom:
            return True
        return top <= self.scroll_top and bottom >= view_bottom

    # --- selection ---

    def click(self, offset):
        """Select a byte from user input; listeners are notified immediately."""
        if offset is None or not 0 <= offset < self.length:
            return False
        self.selected_offset = offset
        self._notify(offset)
        return True

    def scroll_needed_for(self, offset):
        """Scroll position that brings the row of offset fully into view, or None."""
        row_index = self.row_of(offset)
        if self.is_row_on_screen(row_index):
            return None
        top = row_index * self.row_height
        if top < self.scroll_top:
            target = top
        else:
            target = top + self.row_height - self.viewport_height
        return max(0, min(target, self.max_scroll))

    def select(self, offset):
        """
        Programmatic selection (e.g. "go to offset").

        The viewport only moves when the target row is not already fully on
        screen, and then by the smallest amount that shows the whole row.

        Returns:
            The requested scroll position, or None when no scroll was needed
            (or the offset has no data).
        """
        if offset is None or not 0 <= offset < self.length:
            return None
        self.selected_offset = offset
        target = self.scroll_needed_for(offset)
        if target is not None and target != self.scroll_top:
            self.scroll_to(target)
        else:
            target = None
        self._notify(offset)
        return target
