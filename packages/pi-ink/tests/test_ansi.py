"""Tests for pi.ink.ansi -- escape recognition and SGR state tracking."""

from __future__ import annotations

from pi.ink.ansi import (
    RESET,
    AnsiCodeTracker,
    close_open_styles,
    is_sgr,
    split_ansi,
    strip_ansi,
)


# ---------------------------------------------------------------------------
# strip_ansi / split_ansi
# ---------------------------------------------------------------------------


class TestStripAnsi:
    def test_plain_text_unchanged(self) -> None:
        assert strip_ansi("hello") == "hello"

    def test_removes_sgr(self) -> None:
        assert strip_ansi("\x1b[1;31mhi\x1b[0m") == "hi"

    def test_removes_osc_hyperlink(self) -> None:
        text = "\x1b]8;;https://example.com\x07link\x1b]8;;\x07"
        assert strip_ansi(text) == "link"

    def test_removes_unterminated_csi(self) -> None:
        assert strip_ansi("ab\x1b[31") == "ab"

    def test_removes_lone_escape(self) -> None:
        assert strip_ansi("a\x1b") == "a"


class TestSplitAnsi:
    def test_chunks_reassemble_input(self) -> None:
        text = "\x1b[31mred\x1b[0m plain \x1b[1mbold"
        assert "".join(chunk for chunk, _ in split_ansi(text)) == text

    def test_flags_escapes(self) -> None:
        chunks = list(split_ansi("a\x1b[1mb"))
        assert chunks == [("a", False), ("\x1b[1m", True), ("b", False)]

    def test_empty_string(self) -> None:
        assert list(split_ansi("")) == []


class TestIsSgr:
    def test_sgr(self) -> None:
        assert is_sgr("\x1b[31m")

    def test_cursor_movement_is_not_sgr(self) -> None:
        assert not is_sgr("\x1b[2A")


# ---------------------------------------------------------------------------
# AnsiCodeTracker
# ---------------------------------------------------------------------------


class TestAnsiCodeTracker:
    def test_starts_empty(self) -> None:
        tracker = AnsiCodeTracker()
        assert not tracker.has_active_codes()
        assert tracker.get_active_codes() == ""
        assert tracker.get_line_end_reset() == ""
        assert tracker.get_reopen_codes() == ""

    def test_combined_parameters(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[1;31m")
        assert tracker.get_active_codes() == "\x1b[1m\x1b[31m"

    def test_attribute_off(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[1;31m")
        tracker.process("\x1b[22m")
        assert tracker.get_active_codes() == "\x1b[31m"

    def test_default_foreground_clears_color(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[32m")
        tracker.process("\x1b[39m")
        assert not tracker.has_active_codes()

    def test_256_color(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[38;5;208m")
        assert tracker.get_active_codes() == "\x1b[38;5;208m"

    def test_truecolor_background_then_bold(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[48;2;1;2;3;1m")
        assert tracker.get_active_codes() == "\x1b[1m\x1b[48;2;1;2;3m"

    def test_reset_clears(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[4m")
        tracker.process(RESET)
        assert not tracker.has_active_codes()

    def test_empty_sgr_is_reset(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[4m")
        tracker.process("\x1b[m")
        assert not tracker.has_active_codes()

    def test_non_sgr_ignored(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[2K")
        assert not tracker.has_active_codes()

    def test_reopen_codes(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[3m")
        assert tracker.get_reopen_codes() == RESET + "\x1b[3m"
        assert tracker.get_line_end_reset() == RESET

    def test_copy_is_independent(self) -> None:
        tracker = AnsiCodeTracker()
        tracker.process("\x1b[31m")
        clone = tracker.copy()
        clone.process(RESET)
        assert tracker.has_active_codes()
        assert not clone.has_active_codes()


class TestCloseOpenStyles:
    def test_appends_reset_when_open(self) -> None:
        assert close_open_styles("\x1b[31mred") == "\x1b[31mred" + RESET

    def test_closed_text_unchanged(self) -> None:
        assert close_open_styles("\x1b[31mred\x1b[0m") == "\x1b[31mred\x1b[0m"

    def test_plain_text_unchanged(self) -> None:
        assert close_open_styles("plain") == "plain"
