from __future__ import annotations
import re
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

Slot = Tuple[int, int]  # (line index, word index)

TAB_WIDTH = 4
_INLINE_SPACE = re.compile(r"[^\S\n ]")


def is_blank(token: str) -> bool:
    return token.strip() == ""


def normalize_text(text: str) -> str:
    """
    Unify line endings and turn tabs (expanded to TAB_WIDTH columns) and any
    other in-line whitespace into plain spaces, so every word is typeable.
    """
    text = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    return _INLINE_SPACE.sub(" ", text.expandtabs(TAB_WIDTH))


@dataclass(frozen=True)
class TextIndex:
    """
    Line/word structure of a practice text, computed once.
    Words are the tokens of ``line.split(" ")`` so that word indices line up
    with the source (indentation yields blank tokens, which are never
    addressable).
    """
    lines: Tuple[Tuple[str, ...], ...] = ()
    addressable: Tuple[Tuple[int, ...], ...] = ()
    slots: Dict[Slot, int] = field(default_factory=dict, compare=False)

    @classmethod
    def build(cls, text: str) -> "TextIndex":
        lines = tuple(tuple(line.split(" ")) for line in normalize_text(text).split("\n"))
        addressable = tuple(
            tuple(i for i, token in enumerate(words) if not is_blank(token))
            for words in lines
        )
        slots: Dict[Slot, int] = {}
        for line_idx, word_indices in enumerate(addressable):
            for word_idx in word_indices:
                slots[(line_idx, word_idx)] = len(slots)
        return cls(lines=lines, addressable=addressable, slots=slots)

    @property
    def is_empty(self) -> bool:
        return not self.slots

    @property
    def first_slot(self) -> Optional[Slot]:
        for line_idx, word_indices in enumerate(self.addressable):
            if word_indices:
                return (line_idx, word_indices[0])
        return None

    @property
    def last_slot(self) -> Optional[Slot]:
        for line_idx in range(len(self.addressable) - 1, -1, -1):
            if self.addressable[line_idx]:
                return (line_idx, self.addressable[line_idx][-1])
        return None

    def word(self, line: int, word: int) -> str:
        return self.lines[line][word]

    def next_word(self, line: int, word: int) -> Optional[int]:
        for idx in self.addressable[line]:
            if idx > word:
                return idx
        return None

    def previous_word(self, line: int, word: int) -> Optional[int]:
        for idx in reversed(self.addressable[line]):
            if idx < word:
                return idx
        return None

    def is_last_word(self, line: int, word: int) -> bool:
        return self.next_word(line, word) is None

    def next_line(self, line: int) -> Optional[int]:
        """First line after ``line`` holding at least one non-blank word."""
        for idx in range(line + 1, len(self.addressable)):
            if self.addressable[idx]:
                return idx
        return None


@dataclass(frozen=True)
class WordRecord:
    line: int
    word: int
    actual: Tuple[str, ...]
    typed: Tuple[str, ...] = ()

    @property
    def is_matching(self) -> bool:
        return self.typed == self.actual

    def with_typed(self, typed: Tuple[str, ...]) -> "WordRecord":
        return replace(self, typed=typed)


@dataclass(frozen=True)
class Cursor:
    line: int = 0
    word: int = 0
    char: int = 0

    @property
    def slot(self) -> Slot:
        return (self.line, self.word)


@dataclass(frozen=True)
class SessionState:
    index: TextIndex = field(default_factory=TextIndex)
    records: Tuple[WordRecord, ...] = ()
    cursor: Cursor = field(default_factory=Cursor)
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    separator_count: int = 0

    @property
    def has_target(self) -> bool:
        return self.cursor.slot in self.index.slots

    @property
    def is_running(self) -> bool:
        return self.start_time is not None and self.end_time is None

    @property
    def is_finished(self) -> bool:
        return self.end_time is not None

    def record_at(self, line: int, word: int) -> Optional[WordRecord]:
        pos = self.index.slots.get((line, word))
        return self.records[pos] if pos is not None else None

    def current_record(self) -> Optional[WordRecord]:
        return self.record_at(self.cursor.line, self.cursor.word)

    def with_record(self, record: WordRecord) -> "SessionState":
        pos = self.index.slots[(record.line, record.word)]
        records = self.records[:pos] + (record,) + self.records[pos + 1:]
        return replace(self, records=records)

    def elapsed_ms(self) -> Optional[float]:
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time
