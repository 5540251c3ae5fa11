# services/char_status.py
from dataclasses import dataclass
from typing import List

from app.state import SessionState

CORRECT = "correct"
INCORRECT = "incorrect"
PENDING = "pending"
EXTRA = "extra"
SEPARATOR = "separator"
EOL = "eol"


@dataclass(frozen=True)
class Glyph:
    text: str
    status: str
    underline: bool = False
    caret: bool = False  # caret is drawn just before this glyph


def _word_glyphs(state: SessionState, line: int, word: int) -> List[Glyph]:
    record = state.record_at(line, word)
    cur = state.cursor
    passed = (cur.line == line and cur.word > word) or cur.line > line
    underline = passed and not record.is_matching

    out: List[Glyph] = []
    for i, ch in enumerate(record.actual):
        if i >= len(record.typed):
            status = PENDING
        elif record.typed[i] == ch:
            status = CORRECT
        else:
            status = INCORRECT
        out.append(Glyph(ch, status, underline))
    for ch in record.typed[len(record.actual):]:
        out.append(Glyph(ch, EXTRA, underline))
    return out


def line_glyphs(state: SessionState, line: int) -> List[Glyph]:
    """
    Display model of one line: target chars coloured by what was typed,
    overflow chars appended after each word, blank tokens and spaces as
    separators, and a trailing end-of-line glyph the caret can rest on.
    """
    tokens = state.index.lines[line]
    cur = state.cursor
    glyphs: List[Glyph] = []
    caret_at = None

    for w, token in enumerate(tokens):
        if (line, w) in state.index.slots:
            word = _word_glyphs(state, line, w)
            if (cur.line, cur.word) == (line, w) and state.has_target:
                caret_at = len(glyphs) + min(cur.char, len(word))
            glyphs.extend(word)
        else:
            glyphs.extend(Glyph(ch, SEPARATOR) for ch in token)
        if w < len(tokens) - 1:
            glyphs.append(Glyph(" ", SEPARATOR))
    glyphs.append(Glyph("", EOL))

    if caret_at is not None:
        g = glyphs[caret_at]
        glyphs[caret_at] = Glyph(g.text, g.status, g.underline, caret=True)
    return glyphs


def glyph_lines(state: SessionState) -> List[List[Glyph]]:
    return [line_glyphs(state, i) for i in range(len(state.index.lines))]
