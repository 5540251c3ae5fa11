import logging

import pytest

from app import calculation
from app.state import Cursor
from services.typing_engine import (
    BACKSPACE, ENTER, SPACE, KeyKind, TypingEngine, classify_key, handle_key, initialize,
)
from utils.file_handler import DEFAULT_SNIPPET


def press(state, *keys, now=0.0):
    for key in keys:
        state = handle_key(state, key, now)
    return state


def keys_for(text):
    """Keystrokes that type ``text`` perfectly, Space between words and Enter between lines."""
    lines = [
        [w for w in line.split(" ") if w.strip()]
        for line in text.split("\n")
    ]
    lines = [words for words in lines if words]
    keys = []
    for li, words in enumerate(lines):
        for wi, word in enumerate(words):
            keys.extend(word)
            if wi < len(words) - 1:
                keys.append(SPACE)
        if li < len(lines) - 1:
            keys.append(ENTER)
    return keys


# ---------------------------------------------------------------------------
# key classification
# ---------------------------------------------------------------------------

class TestClassifyKey:
    @pytest.mark.parametrize("key", ["a", "Z", "0", "{", "[", ":", "é"])
    def test_printable_characters(self, key):
        assert classify_key(key) is KeyKind.CHARACTER

    def test_named_and_literal_separators(self):
        assert classify_key(SPACE) is KeyKind.SPACE
        assert classify_key(" ") is KeyKind.SPACE
        assert classify_key(ENTER) is KeyKind.ENTER
        assert classify_key("\n") is KeyKind.ENTER
        assert classify_key(BACKSPACE) is KeyKind.BACKSPACE

    @pytest.mark.parametrize("key", ["Tab", "\t", "Shift", "", None, "ab", 65, "\x1b"])
    def test_everything_else_is_other(self, key):
        assert classify_key(key) is KeyKind.OTHER


# ---------------------------------------------------------------------------
# initialize
# ---------------------------------------------------------------------------

class TestInitialize:
    def test_one_empty_record_per_token_in_document_order(self):
        state = initialize(DEFAULT_SNIPPET)
        expected = [
            (li, wi, word)
            for li, line in enumerate(DEFAULT_SNIPPET.split("\n"))
            for wi, word in enumerate(line.split(" "))
            if word.strip()
        ]
        assert [(r.line, r.word, "".join(r.actual)) for r in state.records] == expected
        assert all(r.typed == () for r in state.records)

    def test_tab_indented_text_splits_into_typeable_words(self):
        state = initialize("if x:\n\treturn y")
        assert ["".join(r.actual) for r in state.records] == ["if", "x:", "return", "y"]

        for i, key in enumerate(["i", "f", SPACE, "x", ":", ENTER, *"return", SPACE, "y"]):
            state = handle_key(state, key, float(i))
        assert state.is_finished

    def test_cursor_starts_on_first_non_blank_word(self):
        state = initialize("\n\n    foo bar\nbaz")
        assert state.cursor == Cursor(2, 4, 0)
        assert state.has_target

    def test_fresh_session(self):
        state = initialize("ab cd")
        assert state.start_time is None
        assert state.end_time is None
        assert state.separator_count == 0

    @pytest.mark.parametrize("text", ["", "   ", "\n \n\t"])
    def test_degenerate_text_has_no_target(self, text):
        state = initialize(text)
        assert state.records == ()
        assert not state.has_target
        for key in ("a", SPACE, ENTER, BACKSPACE, "Tab"):
            assert handle_key(state, key, 0.0) is state


# ---------------------------------------------------------------------------
# character keys
# ---------------------------------------------------------------------------

class TestCharacterKey:
    def test_appends_and_advances(self):
        state = press(initialize("ab cd"), "a", "b")
        assert state.cursor == Cursor(0, 0, 2)
        assert state.records[0].typed == ("a", "b")

    def test_overflow_keeps_appending(self):
        state = press(initialize("ab cd"), *"abxyz")
        assert state.cursor == Cursor(0, 0, 5)
        assert state.records[0].typed == tuple("abxyz")

    def test_start_time_set_once_on_first_character(self):
        state = initialize("ab cd")
        state = handle_key(state, SPACE, 1.0)
        assert state.start_time is None
        state = handle_key(state, "a", 5.0)
        state = handle_key(state, "b", 9.0)
        assert state.start_time == 5.0

    def test_start_time_set_even_when_first_char_is_wrong(self):
        state = handle_key(initialize("ab"), "x", 42.0)
        assert state.start_time == 42.0

    def test_end_time_on_correct_final_character(self):
        state = initialize("ab cd")
        state = handle_key(state, "a", 1000.0)
        state = press(state, "b", SPACE, "c", now=2000.0)
        assert state.end_time is None
        state = handle_key(state, "d", 3000.0)
        assert state.end_time == 3000.0
        assert state.elapsed_ms() == 2000.0

    def test_wrong_final_character_does_not_finish(self):
        state = press(initialize("ab"), "a", "x")
        assert state.end_time is None

    def test_correcting_wrong_final_character_finishes(self):
        state = press(initialize("ab"), "a", "x", now=1.0)
        state = handle_key(state, BACKSPACE, 2.0)
        assert state.end_time is None
        state = handle_key(state, "b", 3.0)
        assert state.end_time == 3.0

    def test_final_word_typed_out_of_place_does_not_finish_on_earlier_word(self):
        # the text of the last word typed into the first word is not completion
        state = press(initialize("cd cd"), "c", "d")
        assert state.end_time is None

    def test_end_time_is_never_reset(self):
        state = press(initialize("ab"), "a", now=0.0)
        state = handle_key(state, "b", 500.0)
        assert state.end_time == 500.0
        state = press(state, "x", BACKSPACE, BACKSPACE, "q", now=900.0)
        assert state.records[0].typed == ("a", "q")
        assert state.end_time == 500.0

    def test_keys_after_completion_still_apply(self):
        state = press(initialize("ab"), "a", "b", "c")
        assert state.records[0].typed == ("a", "b", "c")
        assert state.cursor == Cursor(0, 0, 3)


# ---------------------------------------------------------------------------
# space
# ---------------------------------------------------------------------------

class TestSpace:
    def test_moves_to_next_word(self):
        state = press(initialize("ab cd"), "a", "b", SPACE)
        assert state.cursor == Cursor(0, 1, 0)
        assert state.separator_count == 1

    def test_noop_on_empty_word(self):
        state = initialize("ab cd")
        assert handle_key(state, SPACE, 0.0) is state

    def test_noop_on_last_word_of_line(self):
        state = press(initialize("ab\ncd"), "a", "b")
        assert handle_key(state, SPACE, 0.0) is state

    def test_incomplete_word_keeps_typed_chars(self):
        state = press(initialize("abc de"), "a", SPACE)
        assert state.records[0].typed == ("a",)
        assert state.cursor == Cursor(0, 1, 0)

    def test_skips_blank_tokens(self):
        state = press(initialize("ab  cd"), "a", SPACE)
        assert state.cursor == Cursor(0, 2, 0)


# ---------------------------------------------------------------------------
# enter
# ---------------------------------------------------------------------------

class TestEnter:
    def test_moves_to_next_line(self):
        state = press(initialize("ab\ncd"), "a", "b", ENTER)
        assert state.cursor == Cursor(1, 0, 0)
        assert state.separator_count == 1

    def test_skips_blank_lines_and_indentation(self):
        state = press(initialize("ab\n\n   \n    cd"), "a", ENTER)
        assert state.cursor == Cursor(3, 4, 0)
        assert state.separator_count == 1

    def test_noop_unless_on_last_word_of_line(self):
        state = press(initialize("ab cd\nef"), "a", "b")
        assert handle_key(state, ENTER, 0.0) is state

    def test_noop_on_empty_word(self):
        state = press(initialize("ab cd\nef"), "a", SPACE)
        assert handle_key(state, ENTER, 0.0) is state

    def test_noop_without_following_line(self):
        state = press(initialize("ab\ncd\n\n  "), "a", ENTER, "c")
        assert state.cursor == Cursor(1, 0, 1)
        assert handle_key(state, ENTER, 0.0) is state


# ---------------------------------------------------------------------------
# backspace
# ---------------------------------------------------------------------------

class TestBackspace:
    def test_removes_last_character(self):
        state = press(initialize("abc"), "a", "x", BACKSPACE)
        assert state.cursor == Cursor(0, 0, 1)
        assert state.records[0].typed == ("a",)

    def test_at_start_of_text_is_noop(self):
        state = initialize("abc")
        after = handle_key(state, BACKSPACE, 0.0)
        assert after == state

    def test_moves_back_to_previous_word(self):
        state = press(initialize("ab cd"), "a", "b", SPACE, BACKSPACE)
        # the previous word loses its last char and the cursor sits right after what is left
        assert state.cursor == Cursor(0, 0, 1)
        assert state.records[0].typed == ("a",)
        assert state.separator_count == 0

    def test_cursor_matches_typed_length_after_stepping_back(self):
        state = press(initialize("ab cd ef"), "a", SPACE, BACKSPACE)
        assert state.cursor == Cursor(0, 0, 0)
        assert state.records[0].typed == ()
        assert state.separator_count == 0

    def test_space_still_refuses_emptied_word(self):
        state = press(initialize("ab cd ef"), "a", SPACE, BACKSPACE)
        assert handle_key(state, SPACE, 0.0) is state

    def test_stepping_back_then_retyping_continues_the_word(self):
        state = press(initialize("ab cd"), "a", "b", SPACE, BACKSPACE, "b", SPACE, "c")
        assert state.cursor == Cursor(0, 1, 1)
        assert state.records[0].typed == ("a", "b")
        assert state.separator_count == 1

    def test_moves_back_over_blank_tokens(self):
        state = press(initialize("ab  cd"), "a", SPACE, BACKSPACE)
        assert state.cursor.word == 0
        assert state.separator_count == 0

    def test_never_crosses_line_boundary(self):
        state = press(initialize("ab\ncd"), "a", "b", ENTER)
        after = handle_key(state, BACKSPACE, 0.0)
        assert after == state
        assert after.cursor == Cursor(1, 0, 0)
        assert after.separator_count == 1

    def test_indented_line_start_is_floor(self):
        state = press(initialize("ab\n    cd"), "a", ENTER)
        after = handle_key(state, BACKSPACE, 0.0)
        assert after.cursor == Cursor(1, 4, 0)

    def test_trims_overflow(self):
        state = press(initialize("ab cd"), *"abxy", BACKSPACE)
        assert state.records[0].typed == tuple("abx")
        assert state.cursor == Cursor(0, 0, 3)


# ---------------------------------------------------------------------------
# properties
# ---------------------------------------------------------------------------

class TestProperties:
    @pytest.mark.parametrize("text", [DEFAULT_SNIPPET, "ab cd", "x", "one two\n\n  three four\nfive"])
    def test_perfect_run(self, text):
        state = initialize(text)
        for i, key in enumerate(keys_for(text)):
            state = handle_key(state, key, 1000.0 + i * 100)

        records = state.records
        assert state.end_time is not None
        assert calculation.accuracy(records) == 1.0
        assert calculation.raw_accuracy(records) == 1.0
        assert calculation.correct_char_count(records) == calculation.total_char_count(records)
        assert state.separator_count == len(records) - 1

    @pytest.mark.parametrize("prefix", [
        ("a",),
        ("a", "b", SPACE),
        ("a", "b", SPACE, "c"),
        ("a", "b", "c", "d"),
    ])
    def test_type_then_delete_is_identity(self, prefix):
        state = press(initialize("ab cd"), *prefix, now=10.0)
        after = press(state, "q", BACKSPACE, now=20.0)
        assert after == state

    def test_wrong_then_corrected_equals_direct(self):
        direct = press(initialize("ab cd"), "a", "b", SPACE, "c", now=5.0)
        corrected = press(initialize("ab cd"), "a", "x", BACKSPACE, "b", SPACE, "c", now=5.0)
        assert corrected == direct

    def test_worked_example(self):
        state = press(initialize("ab cd"), "a", "b")
        assert state.cursor == Cursor(0, 0, 2)
        state = handle_key(state, SPACE, 0.0)
        assert state.cursor == Cursor(0, 1, 0)
        assert state.separator_count == 1
        state = press(state, "x", "d")
        assert state.records[1].typed == ("x", "d")
        assert state.records[1].actual == ("c", "d")
        assert calculation.accuracy(state.records) == 0.5
        assert calculation.raw_accuracy(state.records) == 0.75

    def test_unknown_keys_leave_state_untouched(self):
        state = press(initialize("ab cd"), "a")
        for key in ("Tab", "Shift", "ArrowLeft", "", None, "\t"):
            assert handle_key(state, key, 0.0) is state


# ---------------------------------------------------------------------------
# TypingEngine wrapper
# ---------------------------------------------------------------------------

class FakeClock:
    def __init__(self, start=0.0, step=100.0):
        self.now = start
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


class TestTypingEngine:
    def test_process_key_reports_changes(self):
        engine = TypingEngine("ab cd", clock=FakeClock())
        assert not engine.process_key(SPACE)
        assert engine.process_key("a")
        assert not engine.process_key("Tab")

    def test_full_run_and_metrics(self, caplog):
        caplog.set_level(logging.INFO, logger="services.typing_engine")
        engine = TypingEngine("ab cd", clock=FakeClock(start=0.0, step=15000.0))
        for key in ("a", "b", SPACE, "c", "d"):
            engine.process_key(key)

        assert engine.started
        assert engine.finished
        m = engine.metrics()
        # first char at 0 ms, last at 60000 ms: 4 correct chars + 1 space in one minute
        assert m.elapsed_ms == 60000.0
        assert m.cpm == pytest.approx(5.0)
        assert m.raw_cpm == pytest.approx(5.0)
        assert m.accuracy == 1.0
        assert "Session started" in caplog.text
        assert "Session finished" in caplog.text

    def test_reset_keeps_text_and_clears_progress(self):
        engine = TypingEngine("ab", clock=FakeClock())
        engine.process_key("a")
        engine.reset()
        assert engine.target == "ab"
        assert not engine.started
        assert engine.state.records[0].typed == ()

    def test_reset_with_new_text(self):
        engine = TypingEngine("ab", clock=FakeClock())
        engine.reset("xy z")
        assert [r.actual for r in engine.state.records] == [("x", "y"), ("z",)]
