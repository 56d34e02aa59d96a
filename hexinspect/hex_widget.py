"""
Hex View Widget
===============

QAbstractScrollArea that paints a HexViewModel. Each paint asks the model for
the rows intersecting the viewport; nothing outside that window is formatted
or kept around.

Layout of one row (monospace columns):

    OOOOOOOO  HH HH HH ... HH  AAAAAAAAAAAAAAAA

Signals:
    offset_changed (int): relayed from the model whenever its selection moves
        (click, arrow keys or set_selected_offset)
"""

from PyQt5.QtCore import QRect, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QFont, QFontMetrics, QPainter
from PyQt5.QtWidgets import QAbstractScrollArea

from .hex_view import BYTES_PER_ROW, OVERSCAN_ROWS, ROW_HEIGHT, HexViewModel, format_offset
from .themes import DEFAULT_THEME, get_theme_colors

EMPTY_MESSAGE = "Nothing to show"
WHEEL_ROWS = 4
MARGIN = 8

# Column widths in characters
OFFSET_CHARS = 8
COLUMN_GAP = 2
HEX_CELL_CHARS = 3


class HexView(QAbstractScrollArea):
    offset_changed = pyqtSignal(int)

    def __init__(self, parent=None, row_height=ROW_HEIGHT, overscan=OVERSCAN_ROWS):
        super().__init__(parent)
        self.model = HexViewModel(row_height=row_height, bytes_per_row=BYTES_PER_ROW, overscan=overscan)
        self.colors = get_theme_colors(DEFAULT_THEME)

        font = QFont("Courier", 10)
        font.setStyleHint(QFont.Monospace)
        font.setFixedPitch(True)
        self.setFont(font)
        self.viewport().setFont(font)

        self.setFocusPolicy(Qt.StrongFocus)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.verticalScrollBar().valueChanged.connect(self._on_scrolled)
        self.model.add_offset_listener(self.offset_changed.emit)

    # --- geometry ---

    @property
    def char_width(self):
        return QFontMetrics(self.font()).horizontalAdvance('0')

    @property
    def hex_x(self):
        return MARGIN + (OFFSET_CHARS + COLUMN_GAP) * self.char_width

    @property
    def ascii_x(self):
        return self.hex_x + (BYTES_PER_ROW * HEX_CELL_CHARS + COLUMN_GAP) * self.char_width

    def column_at_x(self, x):
        """Byte column under a viewport x coordinate (hex or ASCII area), or None."""
        cw = self.char_width
        if self.hex_x <= x < self.hex_x + BYTES_PER_ROW * HEX_CELL_CHARS * cw:
            return int((x - self.hex_x) // (HEX_CELL_CHARS * cw))
        if self.ascii_x <= x < self.ascii_x + BYTES_PER_ROW * cw:
            return int((x - self.ascii_x) // cw)
        return None

    def offset_at_point(self, x, y):
        column = self.column_at_x(x)
        if column is None:
            return None
        return self.model.offset_at(self.model.row_at_y(y), column)

    def _sync_scrollbar(self):
        self.model.set_viewport_height(self.viewport().height())
        bar = self.verticalScrollBar()
        bar.blockSignals(True)
        bar.setRange(0, self.model.max_scroll)
        bar.setPageStep(max(1, self.model.viewport_height))
        bar.setSingleStep(self.model.row_height)
        bar.setValue(self.model.scroll_top)
        bar.blockSignals(False)

    # --- public API ---

    def set_data(self, data):
        """Show a new buffer (None or empty shows the placeholder)."""
        self.model.set_data(data)
        self._sync_scrollbar()
        self.viewport().update()

    def set_selected_offset(self, offset):
        """Highlight offset, scrolling only if its row is not fully visible."""
        if offset is None:
            self.model.selected_offset = None
        else:
            target = self.model.select(offset)
            if target is not None:
                self.verticalScrollBar().setValue(target)
        self.viewport().update()

    def set_theme(self, theme_name):
        self.colors = get_theme_colors(theme_name)
        self.viewport().update()

    # --- events ---

    def _on_scrolled(self, value):
        self.model.scroll_to(value)
        self.viewport().update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._sync_scrollbar()

    def wheelEvent(self, event):
        """Scroll by 4 rows per wheel step"""
        if self.model.is_empty:
            event.ignore()
            return
        rows_to_scroll = WHEEL_ROWS if event.angleDelta().y() < 0 else -WHEEL_ROWS
        bar = self.verticalScrollBar()
        bar.setValue(bar.value() + rows_to_scroll * self.model.row_height)
        event.accept()

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            offset = self.offset_at_point(event.pos().x(), event.pos().y())
            if self.model.click(offset):
                self.viewport().update()
        super().mousePressEvent(event)

    def keyPressEvent(self, event):
        steps = {
            Qt.Key_Left: -1,
            Qt.Key_Right: 1,
            Qt.Key_Up: -BYTES_PER_ROW,
            Qt.Key_Down: BYTES_PER_ROW,
        }
        current = self.model.selected_offset
        if event.key() not in steps or current is None:
            super().keyPressEvent(event)
            return
        target = current + steps[event.key()]
        if 0 <= target < self.model.length:
            self.set_selected_offset(target)
        event.accept()

    def paintEvent(self, event):
        painter = QPainter(self.viewport())
        painter.fillRect(self.viewport().rect(), QColor(self.colors["editor_bg"]))

        if self.model.is_empty:
            painter.setPen(QColor(self.colors["offset_fg"]))
            painter.drawText(self.viewport().rect(), Qt.AlignCenter, EMPTY_MESSAGE)
            painter.end()
            return

        cw = self.char_width
        row_height = self.model.row_height
        selected = self.model.selected_offset

        for placed in self.model.visible_rows():
            y = placed.y - self.model.scroll_top
            row = placed.row

            painter.setPen(QColor(self.colors["offset_fg"]))
            painter.drawText(QRect(MARGIN, y, OFFSET_CHARS * cw, row_height),
                             Qt.AlignVCenter, format_offset(row.offset))

            for column, token in enumerate(row.hex):
                hex_rect = QRect(self.hex_x + column * HEX_CELL_CHARS * cw, y, 2 * cw, row_height)
                ascii_rect = QRect(self.ascii_x + column * cw, y, cw, row_height)

                if row.offset + column == selected:
                    painter.fillRect(hex_rect, QColor(self.colors["selection_bg"]))
                    painter.fillRect(ascii_rect, QColor(self.colors["selection_bg"]))
                    painter.setPen(QColor(self.colors["selection_fg"]))
                    painter.drawText(hex_rect, Qt.AlignCenter, token)
                    painter.drawText(ascii_rect, Qt.AlignCenter, row.ascii[column])
                    continue

                painter.setPen(QColor(self.colors["editor_fg"]))
                painter.drawText(hex_rect, Qt.AlignCenter, token)
                painter.setPen(QColor(self.colors["ascii_fg"]))
                painter.drawText(ascii_rect, Qt.AlignCenter, row.ascii[column])

        painter.end()
