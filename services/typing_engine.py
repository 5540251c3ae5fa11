# services/typing_engine.py
from __future__ import annotations
import enum
import logging
import time
from dataclasses import replace
from typing import Callable, Optional

from app.calculation import Metrics, snapshot_metrics
from app.state import Cursor, SessionState, TextIndex, WordRecord

log = logging.getLogger(__name__)

SPACE = "Space"
ENTER = "Enter"
BACKSPACE = "Backspace"


class KeyKind(enum.Enum):
    CHARACTER = "character"
    SPACE = "space"
    ENTER = "enter"
    BACKSPACE = "backspace"
    OTHER = "other"


def classify_key(key) -> KeyKind:
    if not isinstance(key, str):
        return KeyKind.OTHER
    if key in (SPACE, " "):
        return KeyKind.SPACE
    if key in (ENTER, "\n", "\r"):
        return KeyKind.ENTER
    if key == BACKSPACE:
        return KeyKind.BACKSPACE
    if len(key) == 1 and key.isprintable() and not key.isspace():
        return KeyKind.CHARACTER
    return KeyKind.OTHER


def initialize(text: str) -> SessionState:
    index = TextIndex.build(text)
    records = tuple(
        WordRecord(line=line, word=word, actual=tuple(index.word(line, word)))
        for (line, word) in index.slots
    )
    first = index.first_slot
    cursor = Cursor(first[0], first[1], 0) if first else Cursor()
    return SessionState(
        index=index,
        records=records,
        cursor=cursor,
    )


def _final_word_completed(state: SessionState, before: Cursor) -> bool:
    record = state.record_at(before.line, before.word)
    if record is None or before.slot != state.index.last_slot:
        return False
    return record.is_matching


def _mark_finished(state: SessionState, before: Cursor, now: float) -> SessionState:
    if state.end_time is None and _final_word_completed(state, before):
        return replace(state, end_time=now)
    return state


def _type_char(state: SessionState, ch: str, now: float) -> SessionState:
    cur = state.cursor
    record = state.current_record()
    state = state.with_record(record.with_typed(record.typed + (ch,)))
    state = replace(state, cursor=replace(cur, char=cur.char + 1))
    if state.start_time is None:
        state = replace(state, start_time=now)
    return _mark_finished(state, cur, now)


def _space(state: SessionState) -> SessionState:
    cur = state.cursor
    if cur.char == 0:
        return state
    nxt = state.index.next_word(cur.line, cur.word)
    if nxt is None:
        return state
    return replace(
        state,
        cursor=Cursor(cur.line, nxt, 0),
        separator_count=state.separator_count + 1,
    )


def _enter(state: SessionState) -> SessionState:
    cur = state.cursor
    if cur.char == 0 or not state.index.is_last_word(cur.line, cur.word):
        return state
    line = state.index.next_line(cur.line)
    if line is None:
        return state
    return replace(
        state,
        cursor=Cursor(line, state.index.addressable[line][0], 0),
        separator_count=state.separator_count + 1,
    )


def _backspace(state: SessionState, now: float) -> SessionState:
    cur = state.cursor
    prev = state.index.previous_word(cur.line, cur.word)
    stepped_back = cur.char == 0 and prev is not None
    if stepped_back:
        # step back over the separator into the previous word of the line
        cur = Cursor(cur.line, prev, 0)
        state = replace(state, separator_count=state.separator_count - 1)
    else:
        cur = replace(cur, char=max(cur.char - 1, 0))

    record = state.record_at(cur.line, cur.word)
    popped = bool(record.typed)
    if popped:
        record = record.with_typed(record.typed[:-1])
        state = state.with_record(record)
    if stepped_back:
        # char stays an offset into what is left of the word
        cur = replace(cur, char=len(record.typed))
    state = replace(state, cursor=cur)
    if popped:
        state = _mark_finished(state, cur, now)
    return state


def handle_key(state: SessionState, key, now: Optional[float] = None) -> SessionState:
    """
    Apply one key event and return the next state.
    ``now`` is the event time in milliseconds. Keys that have no effect at the
    current cursor position return ``state`` unchanged.
    """
    if not state.has_target:
        return state
    kind = classify_key(key)
    if now is None:
        now = time.time() * 1000.0
    if kind is KeyKind.CHARACTER:
        return _type_char(state, key, now)
    if kind is KeyKind.SPACE:
        return _space(state)
    if kind is KeyKind.ENTER:
        return _enter(state)
    if kind is KeyKind.BACKSPACE:
        return _backspace(state, now)
    log.debug("Ignoring key %r", key)
    return state


class TypingEngine:
    def __init__(
        self,
        target_text: str = "",
        clock: Optional[Callable[[], float]] = None,
    ):
        self.clock = clock or (lambda: time.time() * 1000.0)
        self.set_text(target_text)

    def set_text(self, text: str):
        self.target = text or ""
        self.state = initialize(self.target)

    def reset(self, text: Optional[str] = None):
        self.set_text(self.target if text is None else text)
        log.info("Session reset (%d words)", len(self.state.records))

    @property
    def started(self) -> bool:
        return self.state.start_time is not None

    @property
    def finished(self) -> bool:
        return self.state.is_finished

    def process_key(self, key) -> bool:
        before = self.state
        self.state = handle_key(before, key, self.clock())
        if before.start_time is None and self.state.start_time is not None:
            log.info("Session started")
        if before.end_time is None and self.state.end_time is not None:
            log.info("Session finished in %.0f ms", self.state.elapsed_ms())
        return self.state != before

    def metrics(self) -> Metrics:
        return snapshot_metrics(self.state)
