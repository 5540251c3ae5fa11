# ui/session_summary.py
from __future__ import annotations
from PySide6.QtWidgets import QDialog, QVBoxLayout, QGridLayout, QLabel, QPushButton

from app.calculation import Metrics


def format_rate(value: float | None) -> str:
    return "—" if value is None else f"{value:.0f}"


def format_pct(value: float) -> str:
    return f"{value * 100:.0f}%"


def format_seconds(ms: float | None) -> str:
    return "—" if ms is None else f"{ms / 1000:.2f} s"


class SessionSummary(QDialog):
    """Final stats for a completed snippet."""

    def __init__(self, metrics: Metrics, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Session Summary")
        self.resize(420, 300)

        root = QVBoxLayout(self)
        grid = QGridLayout()
        rows = [
            ("Characters per minute", format_rate(metrics.cpm)),
            ("Raw characters per minute", format_rate(metrics.raw_cpm)),
            ("Accuracy", format_pct(metrics.accuracy)),
            ("Raw accuracy", format_pct(metrics.raw_accuracy)),
            ("Correct characters", f"{metrics.correct_count} / {metrics.total_count}"),
            ("Extra characters", str(metrics.extra_count)),
            ("Correct words", str(metrics.correct_words)),
            ("Space/Enter inputs", str(metrics.separator_count)),
            ("Time taken", format_seconds(metrics.elapsed_ms)),
        ]
        for r, (name, value) in enumerate(rows):
            grid.addWidget(QLabel(name, self), r, 0)
            grid.addWidget(QLabel(value, self), r, 1)
        root.addLayout(grid)

        btn = QPushButton("OK", self)
        btn.clicked.connect(self.accept)
        root.addWidget(btn)
