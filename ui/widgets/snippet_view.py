# ui/widgets/snippet_view.py
from PySide6.QtWidgets import QWidget, QSizePolicy
from PySide6.QtGui import QPainter, QFont, QColor, QPen, QPaintEvent, QFontMetricsF
from PySide6.QtCore import Qt, QTimer, QPointF, QSize

from services.char_status import (
    CORRECT, INCORRECT, EXTRA, EOL, glyph_lines,
)


def _pick(theme, attr, default):
    return getattr(theme, attr, default)


def _monospace_font(size: int) -> QFont:
    font = QFont("Space Mono", size)
    for family in ("Courier New", "Consolas", "Monaco"):
        if font.exactMatch():
            break
        font = QFont(family, size)
    font.setFixedPitch(True)
    font.setStyleHint(QFont.Monospace)
    return font


class SnippetView(QWidget):
    """
    Paints the practice snippet line by line from the glyph model:
    typed chars in the primary colour, mistakes and overflow in the error
    colours, untyped chars muted, skipped wrong words underlined.
    get_state() must return the current SessionState.
    """

    def __init__(self, get_state_fn, get_theme_fn, font_size: int = 18, parent=None):
        super().__init__(parent)
        self.get_state = get_state_fn
        self.get_theme = get_theme_fn
        # keys go to the owning PracticeUI
        self.setFocusPolicy(Qt.NoFocus)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

        self._font = _monospace_font(font_size)
        self._pad = 24
        self._show_caret = True

        self._blink = True
        self._blink_timer = QTimer(self)
        self._blink_timer.timeout.connect(self._toggle_blink)
        self._blink_timer.start(500)

    def set_caret_visible(self, visible: bool):
        self._show_caret = visible
        self._blink = True
        self.update()

    def _toggle_blink(self):
        self._blink = not self._blink
        self.update()

    def sizeHint(self) -> QSize:
        fm = QFontMetricsF(self._font)
        lines = self.get_state().index.lines
        widest = max((len(" ".join(words)) for words in lines), default=0) + 4
        return QSize(
            int(widest * fm.horizontalAdvance("M")) + 2 * self._pad,
            int(len(lines) * fm.lineSpacing()) + 2 * self._pad,
        )

    def paintEvent(self, e: QPaintEvent):
        theme = self.get_theme()
        colors = {
            CORRECT: QColor(_pick(theme, "primary", "#d1d0c5")),
            INCORRECT: QColor(_pick(theme, "error", "#ca4754")),
            EXTRA: QColor(_pick(theme, "extra", "#7e2a33")),
        }
        muted = QColor(_pick(theme, "secondary", "#646669"))
        caret = QColor(_pick(theme, "accent", "#e2b714"))
        underline_pen = QPen(QColor(_pick(theme, "error", "#ca4754")))
        underline_pen.setWidth(2)

        p = QPainter(self)
        p.setRenderHint(QPainter.Antialiasing)
        p.fillRect(self.rect(), QColor(_pick(theme, "background", "#323437")))
        p.setFont(self._font)
        fm = QFontMetricsF(self._font)
        line_h = fm.lineSpacing()

        y = self._pad + fm.ascent()
        for glyphs in glyph_lines(self.get_state()):
            x = float(self._pad)
            for g in glyphs:
                w = fm.horizontalAdvance(g.text) if g.text else 0.0
                if g.caret and self._show_caret and self._blink:
                    p.fillRect(int(x) - 1, int(y - fm.ascent()), 2, int(fm.height()), caret)
                if g.status != EOL:
                    p.setPen(colors.get(g.status, muted))
                    p.drawText(QPointF(x, y), g.text)
                if g.underline:
                    p.setPen(underline_pen)
                    p.drawLine(QPointF(x, y + 4), QPointF(x + w, y + 4))
                x += w
            y += line_h
        p.end()
