"""
Hex Inspector main window and entry point.

Wires the pieces together:
- SessionStore holds the loaded files and analysis status
- OffsetCoordinator owns the cursor; the HexView highlights every change and
  the DataInspectorPanel shows the debounced decode
- AnalysisManager runs AI requests in the background
"""

import argparse
import logging
import sys

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (QAction, QActionGroup, QApplication, QComboBox, QFileDialog,
                             QHBoxLayout, QLabel, QLineEdit, QListWidget, QListWidgetItem,
                             QMainWindow, QMessageBox, QPushButton, QSplitter, QTextEdit,
                             QVBoxLayout, QWidget)

from .analysis import AnalysisManager, get_analyzer
from .coordinator import OffsetCoordinator
from .data_inspector import DataInspectorPanel
from .debounce import QtDebouncer
from .file_loader import load_files
from .hex_widget import HexView
from .session import (AppendFiles, RemoveFile, Reset, SessionState, SessionStore,
                      SetActiveFile, SetAiProvider, SetFiles, StartReading)
from .settings import AI_PROVIDERS, load_settings, save_settings
from .themes import THEMES, get_theme_stylesheet

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

PROVIDER_LABELS = {"gemini": "Gemini", "openai": "OpenAI", "unconfigured": "None"}


def parse_offset(text):
    """Parse a go-to offset. Offsets are hex, with or without a 0x prefix."""
    return int(text.strip(), 16)


def format_size(size):
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / 1024 / 1024:.2f} MB"


def describe_analysis(loaded, state):
    """Plain-text analysis report for the active file and the cross-file result."""
    lines = []
    analysis = loaded.analysis if loaded else None
    if analysis is None:
        lines.append("Not analyzed yet.")
    elif analysis.is_loading:
        lines.append("Analyzing...")
    elif analysis.error:
        lines.append(f"Analysis Failed: {analysis.error}")
    elif analysis.result is not None:
        result = analysis.result
        lines.append(f"Type: {result.file_type}")
        lines.append("")
        lines.append(result.summary)
        if result.findings:
            lines.append("")
            lines.append("Findings:")
            lines.extend(f"  - {finding}" for finding in result.findings)

    if len(state.files) > 1:
        lines.append("")
        if state.is_cross_analyzing:
            lines.append("Relationships: analyzing...")
        elif state.cross_error:
            lines.append(f"Relationships: {state.cross_error}")
        elif state.cross_result is not None:
            cross = state.cross_result
            verdict = "Related" if cross.related else "Unrelated"
            lines.append(f"Relationships: {verdict} ({cross.relationship})")
            lines.append(cross.reasoning)
    return '\n'.join(lines)


class HexInspectorWindow(QMainWindow):
    def __init__(self, settings=None, settings_path=None, analyzer_factory=None):
        super().__init__()
        self.settings_path = settings_path
        self.settings = settings if settings is not None else load_settings(settings_path)
        self._shown_file_id = None

        self.store = SessionStore(SessionState(ai_provider=self.settings["ai_provider"]))
        self.coordinator = OffsetCoordinator(
            self.settings["debounce_ms"],
            debouncer_factory=lambda delay, callback: QtDebouncer(delay, callback, self),
            endianness=self.settings["endianness"],
        )
        self.analysis = AnalysisManager(
            self.store,
            analyzer_factory=analyzer_factory or (lambda provider: get_analyzer(provider, self.settings)),
            parent=self,
        )

        self.setWindowTitle("Hex Inspector")
        self.resize(1280, 800)
        self.create_menu()
        self.setup_ui()

        self.coordinator.add_offset_listener(self.hex_view.set_selected_offset)
        self.coordinator.add_offset_listener(self.update_status)
        self.coordinator.add_result_listener(self.on_result)
        self.store.subscribe(self.on_state_changed)

        self.apply_theme(self.settings["theme"])
        self.on_state_changed(self.store.state)

    # --- UI construction ---

    def create_menu(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu("File")

        open_action = QAction("Open...", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(lambda: self.open_files(append=False))
        file_menu.addAction(open_action)

        add_action = QAction("Add Files...", self)
        add_action.triggered.connect(lambda: self.open_files(append=True))
        file_menu.addAction(add_action)

        file_menu.addSeparator()

        close_all_action = QAction("Close All", self)
        close_all_action.triggered.connect(self.close_all_files)
        file_menu.addAction(close_all_action)

        file_menu.addSeparator()

        exit_action = QAction("Exit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        view_menu = menubar.addMenu("View")

        goto_action = QAction("Go to...", self)
        goto_action.setShortcut("Ctrl+G")
        goto_action.triggered.connect(lambda: self.goto_edit.setFocus())
        view_menu.addAction(goto_action)

        theme_menu = view_menu.addMenu("Theme")
        theme_group = QActionGroup(self)
        for name in THEMES:
            action = QAction(name, self, checkable=True)
            action.setChecked(name == self.settings["theme"])
            action.triggered.connect(lambda checked, n=name: self.apply_theme(n))
            theme_group.addAction(action)
            theme_menu.addAction(action)

    def setup_ui(self):
        splitter = QSplitter(Qt.Horizontal)

        # Left: loaded files
        files_panel = QWidget()
        files_layout = QVBoxLayout(files_panel)
        files_title = QLabel("Files")
        files_title.setFont(QFont("Arial", 11, QFont.Bold))
        files_layout.addWidget(files_title)

        self.file_list = QListWidget()
        self.file_list.currentItemChanged.connect(self.on_file_selected)
        files_layout.addWidget(self.file_list)

        buttons = QHBoxLayout()
        self.open_button = QPushButton("Open")
        self.open_button.clicked.connect(lambda: self.open_files(append=False))
        buttons.addWidget(self.open_button)
        self.add_button = QPushButton("Add")
        self.add_button.clicked.connect(lambda: self.open_files(append=True))
        buttons.addWidget(self.add_button)
        self.remove_button = QPushButton("Remove")
        self.remove_button.clicked.connect(self.remove_active_file)
        buttons.addWidget(self.remove_button)
        files_layout.addLayout(buttons)

        self.file_error_label = QLabel()
        self.file_error_label.setObjectName("error")
        self.file_error_label.setWordWrap(True)
        files_layout.addWidget(self.file_error_label)
        splitter.addWidget(files_panel)

        # Center: go-to bar and hex view
        center = QWidget()
        center_layout = QVBoxLayout(center)
        goto_layout = QHBoxLayout()
        goto_layout.addWidget(QLabel("Offset:"))
        self.goto_edit = QLineEdit()
        self.goto_edit.setPlaceholderText("hex, e.g. 1F40")
        self.goto_edit.returnPressed.connect(self.goto_from_input)
        goto_layout.addWidget(self.goto_edit)
        goto_button = QPushButton("Go")
        goto_button.clicked.connect(self.goto_from_input)
        goto_layout.addWidget(goto_button)
        center_layout.addLayout(goto_layout)

        self.hex_view = HexView(row_height=self.settings["row_height"],
                                overscan=self.settings["overscan_rows"])
        self.hex_view.offset_changed.connect(self.coordinator.set_offset)
        center_layout.addWidget(self.hex_view)
        splitter.addWidget(center)

        # Right: inspector and AI analysis
        right = QWidget()
        right_layout = QVBoxLayout(right)
        self.inspector = DataInspectorPanel(endianness=self.settings["endianness"],
                                            theme_name=self.settings["theme"])
        self.inspector.endianness_changed.connect(self.on_endianness_changed)
        right_layout.addWidget(self.inspector, 3)

        ai_title = QLabel("AI Analysis")
        ai_title.setFont(QFont("Arial", 11, QFont.Bold))
        right_layout.addWidget(ai_title)

        provider_layout = QHBoxLayout()
        self.provider_combo = QComboBox()
        for provider in AI_PROVIDERS:
            self.provider_combo.addItem(PROVIDER_LABELS[provider], provider)
        self.provider_combo.setCurrentIndex(AI_PROVIDERS.index(self.settings["ai_provider"]))
        self.provider_combo.currentIndexChanged.connect(self.on_provider_changed)
        provider_layout.addWidget(self.provider_combo)
        self.analyze_button = QPushButton("Analyze")
        self.analyze_button.clicked.connect(self.analysis.run_analysis)
        provider_layout.addWidget(self.analyze_button)
        right_layout.addLayout(provider_layout)

        self.analysis_text = QTextEdit()
        self.analysis_text.setReadOnly(True)
        right_layout.addWidget(self.analysis_text, 2)
        splitter.addWidget(right)

        splitter.setSizes([220, 700, 360])
        self.setCentralWidget(splitter)
        self.statusBar().showMessage("Ready")

    # --- file handling ---

    def open_files(self, append=False):
        paths, _ = QFileDialog.getOpenFileNames(self, "Add Files" if append else "Open Files")
        if paths:
            self.open_paths(paths, append=append)

    def open_paths(self, paths, append=False):
        """Load paths, replacing the loaded files unless append is set."""
        if append:
            self.analysis.cancel_relationships()
        else:
            self.analysis.cancel_all()
        self.store.dispatch(StartReading())
        files, error = load_files(paths, self.settings["max_file_size"], self.settings["max_total_size"])
        logger.info("Loaded %d of %d file(s)", len(files), len(paths))
        action = AppendFiles if append else SetFiles
        self.store.dispatch(action(tuple(files), error))

    def remove_active_file(self):
        active_id = self.store.state.active_file_id
        if active_id is not None:
            self.store.dispatch(RemoveFile(active_id))

    def close_all_files(self):
        self.analysis.cancel_all()
        self.store.dispatch(Reset())

    def on_file_selected(self, current, previous):
        if current is None:
            return
        file_id = current.data(Qt.UserRole)
        if file_id != self.store.state.active_file_id:
            self.store.dispatch(SetActiveFile(file_id))

    # --- navigation ---

    def goto_from_input(self):
        text = self.goto_edit.text()
        try:
            offset = parse_offset(text)
        except ValueError:
            QMessageBox.critical(self, "Error", "Invalid offset format")
            return
        if not self.go_to_offset(offset):
            QMessageBox.critical(self, "Error", "Offset out of range")

    def go_to_offset(self, offset):
        """Move the cursor to offset. Returns False if it is outside the active file."""
        data = self.coordinator.data
        if data is None or not 0 <= offset < len(data):
            return False
        self.coordinator.set_offset(offset)
        return True

    # --- state propagation ---

    def on_state_changed(self, state):
        self.refresh_file_list(state)
        self.file_error_label.setText(state.file_error or "")
        self.file_error_label.setVisible(bool(state.file_error))

        active = state.active_file
        active_id = active.id if active else None
        if active_id != self._shown_file_id:
            self._shown_file_id = active_id
            data = active.data if active else None
            self.hex_view.set_data(data)
            self.coordinator.set_data(data)

        self.remove_button.setEnabled(active is not None)
        self.analyze_button.setEnabled(bool(state.files) and not state.is_cross_analyzing
                                       and not state.is_reading)
        self.analysis_text.setPlainText(describe_analysis(active, state) if active else "")
        self.update_status(self.coordinator.offset)

    def refresh_file_list(self, state):
        self.file_list.blockSignals(True)
        self.file_list.clear()
        for loaded in state.files:
            item = QListWidgetItem(f"{loaded.name} ({format_size(loaded.size)})")
            item.setData(Qt.UserRole, loaded.id)
            self.file_list.addItem(item)
            if loaded.id == state.active_file_id:
                self.file_list.setCurrentItem(item)
        self.file_list.blockSignals(False)

    def on_result(self, result):
        self.inspector.set_result(result, self.coordinator.settled_offset)

    def on_endianness_changed(self, endianness):
        self.settings["endianness"] = endianness
        self.coordinator.set_endianness(endianness)

    def on_provider_changed(self, index):
        provider = self.provider_combo.itemData(index)
        self.settings["ai_provider"] = provider
        self.store.dispatch(SetAiProvider(provider))

    def update_status(self, offset=None):
        state = self.store.state
        if state.is_reading:
            self.statusBar().showMessage("Reading files...")
            return
        active = state.active_file
        if active is None:
            self.statusBar().showMessage("No file loaded")
            return
        message = f"{active.name} - {format_size(active.size)}"
        if offset is not None:
            message += f" - Offset: 0x{offset:08X} ({offset})"
        self.statusBar().showMessage(message)

    def apply_theme(self, theme_name):
        if theme_name not in THEMES:
            logger.warning("Unknown theme %s, using Dark", theme_name)
            theme_name = "Dark"
        self.settings["theme"] = theme_name
        self.setStyleSheet(get_theme_stylesheet(theme_name))
        self.hex_view.set_theme(theme_name)
        self.inspector.apply_theme(theme_name)

    def closeEvent(self, event):
        self.analysis.cancel_all()
        save_settings(self.settings, self.settings_path)
        event.accept()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="hexinspect",
                                     description="Inspect binary files as hex and decoded values.")
    parser.add_argument("files", nargs="*", help="Files to open")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    QApplication.setAttribute(Qt.AA_DisableHighDpiScaling, True)
    QApplication.setAttribute(Qt.AA_UseHighDpiPixmaps, True)

    app = QApplication(sys.argv[:1])
    app.setStyle('Fusion')

    window = HexInspectorWindow()
    if args.files:
        window.open_paths(args.files)
    window.show()

    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
