# services/keymap.py
from typing import Optional

from PySide6.QtCore import Qt

from services.typing_engine import BACKSPACE, ENTER, SPACE


def key_from_qt(key, text: str, modifiers=Qt.NoModifier) -> Optional[str]:
    """Map a Qt key press to an engine key name, or None for keys the engine never sees."""
    if modifiers & (Qt.ControlModifier | Qt.AltModifier | Qt.MetaModifier):
        return None
    if key == Qt.Key_Backspace:
        return BACKSPACE
    if key in (Qt.Key_Return, Qt.Key_Enter):
        return ENTER
    if key == Qt.Key_Space:
        return SPACE
    if text and len(text) == 1 and text.isprintable():
        return text
    return None
