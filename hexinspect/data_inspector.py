"""
Data Inspector Panel
====================

Shows every interpretation of the bytes at the settled cursor offset.

The panel is a passive view: it receives InterpretationResult objects from the
OffsetCoordinator and never reads the buffer itself. Rows are created once,
one per (group, label) pair of InterpretationResult.as_rows(); updates only
change the text of the read-only value fields.

Signals:
    endianness_changed (str): 'little' or 'big' after the toggle was clicked
"""

from PyQt5.QtCore import pyqtSignal
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (QHBoxLayout, QLabel, QLineEdit, QPushButton, QScrollArea,
                             QVBoxLayout, QWidget)

from .interpreter import BIG, LITTLE, interpret
from .themes import DEFAULT_THEME, get_theme_colors

NO_SELECTION = "No byte selected"

ENDIAN_LABELS = {LITTLE: "Little Endian", BIG: "Big Endian"}


def offset_header(offset):
    if offset is None:
        return NO_SELECTION
    return f"Offset: 0x{offset:08X} ({offset})"


class DataInspectorPanel(QWidget):
    endianness_changed = pyqtSignal(str)

    def __init__(self, parent=None, endianness=LITTLE, theme_name=DEFAULT_THEME):
        super().__init__(parent)
        self.endianness = endianness
        self.theme_name = theme_name
        self.value_edits = {}
        self._row_widgets = []
        self._label_widgets = []
        self._group_labels = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        header = QHBoxLayout()
        title = QLabel("Data Inspector")
        title.setFont(QFont("Arial", 11, QFont.Bold))
        header.addWidget(title)
        header.addStretch()

        self.endian_button = QPushButton(ENDIAN_LABELS[endianness])
        self.endian_button.setFont(QFont("Arial", 8))
        self.endian_button.clicked.connect(self.toggle_endianness)
        header.addWidget(self.endian_button)
        layout.addLayout(header)

        self.offset_label = QLabel(NO_SELECTION)
        self.offset_label.setFont(QFont("Courier", 9))
        layout.addWidget(self.offset_label)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        content = QWidget()
        self.rows_layout = QVBoxLayout(content)
        self.rows_layout.setContentsMargins(0, 0, 0, 0)
        self.rows_layout.setSpacing(2)
        scroll.setWidget(content)
        layout.addWidget(scroll)

        # An empty buffer yields every row with a placeholder value
        self._build_rows(interpret(b"", 0))
        self.apply_theme(theme_name)
        self.clear()

    def _build_rows(self, template):
        current_group = None
        for group, label, _ in template.as_rows():
            if group != current_group:
                current_group = group
                group_label = QLabel(group)
                group_label.setObjectName("sectionTitle")
                group_label.setFont(QFont("Arial", 9, QFont.Bold))
                self._group_labels.append(group_label)
                self.rows_layout.addWidget(group_label)
            self.rows_layout.addWidget(self._add_inspector_row(group, label))
        self.rows_layout.addStretch()

    def _add_inspector_row(self, group, label):
        """Create one label + read-only value row."""
        widget = QWidget()
        layout = QHBoxLayout(widget)
        layout.setContentsMargins(8, 4, 8, 4)

        label_widget = QLabel(label)
        label_widget.setMinimumWidth(110)
        label_widget.setFont(QFont("Arial", 8))
        layout.addWidget(label_widget)

        value_edit = QLineEdit()
        value_edit.setReadOnly(True)
        value_edit.setFont(QFont("Courier", 8))
        value_edit.setMinimumWidth(150)
        layout.addWidget(value_edit)

        self.value_edits[(group, label)] = value_edit
        self._row_widgets.append(widget)
        self._label_widgets.append(label_widget)
        return widget

    def value(self, group, label):
        return self.value_edits[(group, label)].text()

    def set_result(self, result, offset=None):
        """Show result (an InterpretationResult), or clear the panel for None."""
        if result is None:
            self.clear()
            return
        self.offset_label.setText(offset_header(offset))
        for group, label, value in result.as_rows():
            edit = self.value_edits[(group, label)]
            edit.setText(value)
            edit.setCursorPosition(0)

    def clear(self):
        self.offset_label.setText(NO_SELECTION)
        for edit in self.value_edits.values():
            edit.clear()

    def set_endianness(self, endianness):
        self.endianness = endianness
        self.endian_button.setText(ENDIAN_LABELS[endianness])

    def toggle_endianness(self):
        self.set_endianness(BIG if self.endianness == LITTLE else LITTLE)
        self.endianness_changed.emit(self.endianness)

    def apply_theme(self, theme_name):
        self.theme_name = theme_name
        theme = get_theme_colors(theme_name)
        row_style = (f"background-color: {theme['panel_bg']}; border: 1px solid {theme['border']}; "
                     f"border-radius: 3px; margin: 1px;")
        for widget in self._row_widgets:
            widget.setStyleSheet(row_style)
        for label_widget in self._label_widgets:
            label_widget.setStyleSheet(f"color: {theme['label_fg']}; border: none;")
        for group_label in self._group_labels:
            group_label.setStyleSheet(f"color: {theme['selection_bg']};")
        for edit in self.value_edits.values():
            edit.setStyleSheet(
                f"border: 1px solid {theme['border']}; background-color: {theme['editor_bg']}; "
                f"color: {theme['editor_fg']}; padding: 2px;"
            )
