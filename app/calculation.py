from dataclasses import dataclass
from typing import Iterable, Optional

from app.state import SessionState, WordRecord

MS_PER_MINUTE = 60000.0


def correct_char_count(records: Iterable[WordRecord], include_incomplete: bool = False) -> int:
    """
    Characters typed at the right position.
    Only fully matching words count unless include_incomplete is set, in which
    case every word contributes the positions it got right so far.
    """
    total = 0
    for record in records:
        if not include_incomplete and not record.is_matching:
            continue
        total += sum(1 for typed, actual in zip(record.typed, record.actual) if typed == actual)
    return total


def extra_char_count(records: Iterable[WordRecord]) -> int:
    # overflow past the end of a word, capped at the word's own length
    return sum(
        min(max(len(r.typed) - len(r.actual), 0), len(r.actual)) for r in records
    )


def total_char_count(records: Iterable[WordRecord]) -> int:
    return sum(len(r.actual) for r in records)


def correct_word_count(records: Iterable[WordRecord]) -> int:
    return sum(1 for r in records if r.is_matching)


def accuracy(records: Iterable[WordRecord]) -> float:
    """Accuracy = correct chars of completed words / total chars."""
    records = list(records)
    total = total_char_count(records)
    return correct_char_count(records) / total if total else 0.0


def raw_accuracy(records: Iterable[WordRecord]) -> float:
    """Raw accuracy = (correct chars incl. partial words - extra chars) / total chars."""
    records = list(records)
    total = total_char_count(records)
    if not total:
        return 0.0
    return (correct_char_count(records, True) - extra_char_count(records)) / total


def _per_minute(count: int, start_time: Optional[float], end_time: Optional[float]) -> Optional[float]:
    if start_time is None or end_time is None:
        return None
    minutes = (end_time - start_time) / MS_PER_MINUTE
    if minutes <= 0:
        return 0.0
    return count / minutes


def chars_per_minute(
    records: Iterable[WordRecord],
    start_time: Optional[float],
    end_time: Optional[float],
    separator_count: int,
) -> Optional[float]:
    # CPM = (correct chars + space/enter inputs) / minutes; None until finished
    return _per_minute(correct_char_count(records) + separator_count, start_time, end_time)


def raw_chars_per_minute(
    records: Iterable[WordRecord],
    start_time: Optional[float],
    end_time: Optional[float],
    separator_count: int,
) -> Optional[float]:
    return _per_minute(correct_char_count(records, True) + separator_count, start_time, end_time)


@dataclass(frozen=True)
class Metrics:
    accuracy: float = 0.0
    raw_accuracy: float = 0.0
    correct_count: int = 0
    total_count: int = 0
    extra_count: int = 0
    correct_words: int = 0
    separator_count: int = 0
    cpm: Optional[float] = None
    raw_cpm: Optional[float] = None
    elapsed_ms: Optional[float] = None


def snapshot_metrics(state: SessionState) -> Metrics:
    records = state.records
    return Metrics(
        accuracy=accuracy(records),
        raw_accuracy=raw_accuracy(records),
        correct_count=correct_char_count(records),
        total_count=total_char_count(records),
        extra_count=extra_char_count(records),
        correct_words=correct_word_count(records),
        separator_count=state.separator_count,
        cpm=chars_per_minute(records, state.start_time, state.end_time, state.separator_count),
        raw_cpm=raw_chars_per_minute(records, state.start_time, state.end_time, state.separator_count),
        elapsed_ms=state.elapsed_ms(),
    )
