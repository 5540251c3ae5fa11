from __future__ import annotations

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtWidgets import QWidget, QLabel, QVBoxLayout, QHBoxLayout

from app.calculation import Metrics
from app.settings import Settings
from services.keymap import key_from_qt
from services.typing_engine import TypingEngine
from ui.session_summary import SessionSummary, format_pct, format_rate
from ui.widgets.snippet_view import SnippetView


def _get(theme, name, default):
    return getattr(theme, name, default)


class PracticeUI(QWidget):
    finished = Signal(object)  # Metrics

    def __init__(self, text: str, settings: Settings | None = None, parent=None):
        super().__init__(parent)
        self.setFocusPolicy(Qt.StrongFocus)
        self.settings = settings or Settings()
        self.engine = TypingEngine(text)
        self._theme = None
        self._reported = False

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 30, 0, 30)
        root.setSpacing(28)

        stats = QHBoxLayout()
        stats.setSpacing(40)
        self.lblTimer = QLabel("0.0 s", self)
        self.lblTimer.setObjectName("lblTimer")
        self.lblCPM = QLabel("— CPM", self)
        self.lblCPM.setObjectName("lblCPM")
        self.lblAcc = QLabel("0%", self)
        self.lblAcc.setObjectName("lblAcc")
        self.lblRaw = QLabel("raw 0%", self)
        self.lblRaw.setObjectName("lblRaw")
        for lab in (self.lblTimer, self.lblCPM, self.lblAcc, self.lblRaw):
            lab.setAlignment(Qt.AlignCenter)
            stats.addWidget(lab)
        root.addLayout(stats)

        self.view = SnippetView(
            lambda: self.engine.state,
            lambda: self._theme,
            font_size=self.settings.font_size,
            parent=self,
        )
        root.addWidget(self.view, stretch=1)

        self._ui_tick = QTimer(self)
        self._ui_tick.setInterval(100)
        self._ui_tick.timeout.connect(self.refresh_metrics)
        self._ui_tick.start()

    def set_theme(self, theme):
        self._theme = theme
        self.setStyleSheet(
            f"""
            QLabel#lblTimer, QLabel#lblRaw {{ color: {_get(theme, 'secondary', '#646669')}; }}
            QLabel#lblCPM {{ color: {_get(theme, 'accent', '#e2b714')}; }}
            QLabel#lblAcc {{ color: {_get(theme, 'primary', '#d1d0c5')}; }}
            """
        )
        self.view.update()

    def reset_test(self, text: str | None = None):
        self.engine.reset(text)
        self._reported = False
        self.view.updateGeometry()
        self.refresh_metrics()
        self.view.update()
        self.setFocus()

    def refresh_metrics(self):
        m = self.engine.metrics()
        state = self.engine.state
        if state.start_time is None:
            secs = 0.0
        elif state.end_time is None:
            secs = (self.engine.clock() - state.start_time) / 1000.0
        else:
            secs = m.elapsed_ms / 1000.0
        self.lblTimer.setText(f"{secs:0.1f} s")
        self.lblCPM.setText(f"{format_rate(m.cpm)} CPM")
        self.lblAcc.setText(format_pct(m.accuracy))
        self.lblRaw.setText(f"raw {format_pct(m.raw_accuracy)}")

    def focusInEvent(self, ev):
        self.view.set_caret_visible(True)
        super().focusInEvent(ev)

    def focusOutEvent(self, ev):
        self.view.set_caret_visible(False)
        super().focusOutEvent(ev)

    def keyPressEvent(self, ev):
        key = key_from_qt(ev.key(), ev.text(), ev.modifiers())
        if key is None:
            return super().keyPressEvent(ev)
        if self.engine.finished and self.settings.lock_after_finish:
            ev.accept()
            return
        ev.accept()
        if self.engine.process_key(key):
            self.view.update()
            self.refresh_metrics()
        if self.engine.finished and not self._reported:
            self._reported = True
            self._finish()

    def _finish(self):
        metrics: Metrics = self.engine.metrics()
        self.finished.emit(metrics)
        SessionSummary(metrics, parent=self).exec()
