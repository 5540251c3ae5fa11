# ui/main_window.py
from __future__ import annotations
import logging

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QMenu, QToolButton, QPushButton, QFileDialog, QMessageBox
)
from PySide6.QtGui import QAction
from PySide6.QtCore import Qt

from app.calculation import Metrics
from app.errors import TextLoadError
from app.settings import Settings, load_settings
from app.themes import THEMES, load_custom_themes, theme_index
from ui.practice_ui import PracticeUI
from ui.session_summary import format_rate
from utils.file_handler import load_practice_text, load_snippet

log = logging.getLogger(__name__)

_BAR_QSS = """
QWidget#SnippetBar {{
    border: 1px solid {secondary};
    border-radius: 10px;
}}
QPushButton#BarBtn, QToolButton#BarBtn {{
    background: transparent;
    color: {secondary};
    border: none;
    padding: 6px 10px;
}}
QPushButton#BarBtn:hover, QToolButton#BarBtn:hover {{
    color: {primary};
}}
QToolButton#BarBtn::menu-indicator {{ image: none; width: 0px; }}
"""


class MainWindow(QMainWindow):
    def __init__(self, settings: Settings | None = None):
        super().__init__()
        self.settings = settings or load_settings()
        self.resize(1100, 720)

        added = load_custom_themes()
        if added:
            log.info("Loaded %d custom theme(s)", added)
        self.theme_idx = theme_index(self.settings.theme)
        self.text = load_practice_text(self.settings.snippet_path)

        central = QWidget(self)
        column = QVBoxLayout(central)
        column.setContentsMargins(16, 32, 16, 16)
        column.setSpacing(20)
        column.addWidget(self._snippet_bar())

        self.practice = PracticeUI(self.text, self.settings, self)
        self.practice.finished.connect(self._on_practice_finished)
        row = QHBoxLayout()
        row.addStretch(1)
        row.addWidget(self.practice, 4)
        row.addStretch(1)
        column.addLayout(row, 1)
        self.setCentralWidget(central)

        # keystrokes belong to PracticeUI
        self.setFocusPolicy(Qt.NoFocus)
        self.menuBar().setVisible(False)
        self._apply_theme(self.theme_idx)
        self.practice.setFocus()

    # ---------------- Snippet bar ----------------
    def _bar_button(self, cls, text, parent):
        btn = cls(parent)
        btn.setText(text)
        btn.setObjectName("BarBtn")
        btn.setFocusPolicy(Qt.NoFocus)
        return btn

    def _snippet_bar(self) -> QWidget:
        bar = QWidget(self)
        bar.setObjectName("SnippetBar")
        h = QHBoxLayout(bar)
        h.setContentsMargins(10, 6, 10, 6)

        self.theme_menu = QMenu(self)
        for i, t in enumerate(THEMES):
            act = QAction(t.name, self)
            act.triggered.connect(lambda _=False, idx=i: self._apply_theme(idx))
            self.theme_menu.addAction(act)
        theme_btn = self._bar_button(QToolButton, "Theme", bar)
        theme_btn.setMenu(self.theme_menu)
        theme_btn.setPopupMode(QToolButton.InstantPopup)
        h.addWidget(theme_btn)

        open_btn = self._bar_button(QPushButton, "Load snippet…", bar)
        open_btn.clicked.connect(self._open_snippet)
        h.addWidget(open_btn)

        reset_btn = self._bar_button(QPushButton, "Reset test", bar)
        reset_btn.clicked.connect(self._reset_practice)
        h.addWidget(reset_btn)

        h.addStretch(1)
        return bar

    # ---------------- Theme ----------------
    def _apply_theme(self, idx: int):
        theme = THEMES[idx]
        self.theme_idx = idx
        self.practice.set_theme(theme)
        self.setStyleSheet(
            f"QWidget {{ background: {theme.background}; color: {theme.primary}; }}\n"
            + _BAR_QSS.format(primary=theme.primary, secondary=theme.secondary)
        )
        self.setWindowTitle(f"Typesnippet — {theme.name}")

    # ---------------- Practice ----------------
    def _open_snippet(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Load snippet", "", "Source files (*.py *.js *.ts *.go *.rs *.c *.txt);;All files (*)"
        )
        if not path:
            return
        try:
            self.text = load_snippet(path)
        except TextLoadError as e:
            log.warning("%s", e)
            QMessageBox.warning(self, "Load snippet", str(e))
            return
        log.info("Loaded snippet from %s", path)
        self._reset_practice()

    def _reset_practice(self):
        self.practice.reset_test(self.text)
        self._apply_theme(self.theme_idx)

    def _on_practice_finished(self, metrics: Metrics):
        self.setWindowTitle(f"Typesnippet — {format_rate(metrics.cpm)} CPM")
