"""Tests for pi.ink.log_update -- frame diffing and terminal writes.

Uses the VirtualTerminal to capture the exact bytes each commit produces.
"""

from __future__ import annotations

import logging

import pytest

from pi.ink.log_update import (
    CURSOR_HIDE,
    EMPTY_FRAME,
    ERASE_DOWN,
    Frame,
    LogUpdate,
    cursor_up,
)
from pi.ink.output import Output

from .virtual_terminal import VirtualTerminal


# ---------------------------------------------------------------------------
# Frame
# ---------------------------------------------------------------------------


class TestFrame:
    def test_from_text_counts_lines(self) -> None:
        assert Frame.from_text("a\nb").line_count == 2

    def test_empty_text_has_no_lines(self) -> None:
        frame = Frame.from_text("")
        assert frame.line_count == 0
        assert frame.lines == []

    def test_from_output(self) -> None:
        output = Output(10, 3)
        output.write(0, 1, "hi")
        assert Frame.from_output(output) == Frame("\nhi", 2)
        assert Frame.from_output(output, max_height=3) == Frame("\nhi\n", 3)

    def test_physical_rows_count_soft_wrapped_lines(self) -> None:
        frame = Frame.from_text("abcdefghij\nx\n")
        assert frame.physical_rows(80) == 3
        assert frame.physical_rows(4) == 5

    def test_frames_compare_by_value(self) -> None:
        assert Frame.from_text("same") == Frame.from_text("same")


class TestCursorUp:
    def test_positive(self) -> None:
        assert cursor_up(3) == "\x1b[3A"

    def test_non_positive_is_empty(self) -> None:
        assert cursor_up(0) == ""
        assert cursor_up(-1) == ""


# ---------------------------------------------------------------------------
# LogUpdate.commit
# ---------------------------------------------------------------------------


class TestLogUpdateCommit:
    def test_first_commit_writes_frame_verbatim(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        assert log.commit(Frame.from_text("hello")) is True
        assert term.output == "hello"

    def test_identical_frame_writes_nothing(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("hello"))
        assert log.commit(Frame.from_text("hello")) is False
        assert term.write_count == 1

    def test_changed_frame_erases_previous_rows(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("a\nb"))
        term.clear_buffer()
        log.commit(Frame.from_text("c"))
        assert term.output == "\x1b[1A\r" + ERASE_DOWN + "c"

    def test_single_line_previous_needs_no_cursor_up(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("a"))
        term.clear_buffer()
        log.commit(Frame.from_text("b"))
        assert term.output == "\r" + ERASE_DOWN + "b"

    def test_one_write_per_commit(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("a\nb\nc"))
        log.commit(Frame.from_text("d\ne"))
        assert term.write_count == 2

    def test_soft_wrapped_previous_frame_is_fully_erased(self) -> None:
        term = VirtualTerminal(columns=5)
        log = LogUpdate(term)
        log.commit(Frame.from_text("abcdefghij"))
        assert log.height == 2
        term.clear_buffer()
        log.commit(Frame.from_text("x"))
        assert term.output == "\x1b[1A\r" + ERASE_DOWN + "x"

    def test_width_change_repaints_identical_frame(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("a"))
        term.clear_buffer()
        term.simulate_resize(columns=40)
        assert log.commit(Frame.from_text("a")) is True
        assert term.output == "\r" + ERASE_DOWN + "a"

    def test_empty_first_frame_writes_nothing(self) -> None:
        term = VirtualTerminal()
        log = LogUpdate(term)
        assert log.commit(EMPTY_FRAME) is False
        assert term.write_count == 0


class TestLogUpdateStatic:
    def test_static_written_before_live_frame(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("live"))
        term.clear_buffer()
        log.commit(Frame.from_text("live 2"), static_text="log line")
        assert term.output == "\r" + ERASE_DOWN + "log line\n" + "live 2"

    def test_static_not_part_of_next_baseline(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("live"), static_text="log line")
        assert log.previous_frame == Frame.from_text("live")
        term.clear_buffer()
        log.commit(Frame.from_text("next"))
        assert term.output == "\r" + ERASE_DOWN + "next"
        assert "log line" not in term.output

    def test_static_forces_repaint_of_unchanged_frame(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("live"))
        assert log.commit(Frame.from_text("live"), static_text="x") is True
        assert term.output.endswith("x\nlive")


class TestLogUpdateDebug:
    def test_frames_written_in_full_without_erasing(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term, debug=True)
        log.commit(Frame.from_text("a"))
        log.commit(Frame.from_text("b"))
        assert term.output == "a\nb\n"


# ---------------------------------------------------------------------------
# clear / done
# ---------------------------------------------------------------------------


class TestLogUpdateLifecycle:
    def test_clear_erases_and_forgets(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("a\nb"))
        term.clear_buffer()
        log.clear()
        assert term.output == "\x1b[1A\r" + ERASE_DOWN
        assert log.previous_frame == EMPTY_FRAME

    def test_clear_with_nothing_on_screen_writes_nothing(self) -> None:
        term = VirtualTerminal()
        log = LogUpdate(term)
        log.clear()
        assert term.write_count == 0

    def test_done_moves_below_and_starts_over(self) -> None:
        term = VirtualTerminal(columns=80)
        log = LogUpdate(term)
        log.commit(Frame.from_text("a"))
        log.done()
        assert term.output == "a\n"
        term.clear_buffer()
        log.commit(Frame.from_text("a"))
        assert term.output == "a"


# ---------------------------------------------------------------------------
# Broken sink
# ---------------------------------------------------------------------------


class TestLogUpdateBrokenSink:
    def test_failure_is_logged_once_and_suppressed(self, caplog: pytest.LogCaptureFixture) -> None:
        term = VirtualTerminal()
        log = LogUpdate(term)
        term.fail_writes()
        with caplog.at_level(logging.WARNING, logger="pi.ink.log_update"):
            log.commit(Frame.from_text("a"))
            log.commit(Frame.from_text("b"))
            log.write(CURSOR_HIDE)
        assert log.broken
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1

    def test_closed_stream_value_error_is_handled(self) -> None:
        class ClosedTerminal(VirtualTerminal):
            def write(self, data: str) -> None:
                raise ValueError("I/O operation on closed file")

        log = LogUpdate(ClosedTerminal())
        log.commit(Frame.from_text("a"))
        assert log.broken

    def test_unencodable_output_drops_only_that_write(self, caplog: pytest.LogCaptureFixture) -> None:
        class AsciiTerminal(VirtualTerminal):
            def write(self, data: str) -> None:
                data.encode("ascii")
                super().write(data)

        term = AsciiTerminal()
        log = LogUpdate(term)
        with caplog.at_level(logging.WARNING, logger="pi.ink.log_update"):
            log.commit(Frame.from_text("Hello …"))
        assert not log.broken
        assert "encode" in caplog.text
        log.commit(Frame.from_text("plain"))
        assert term.output.endswith("plain")

    def test_writes_stay_suppressed_after_recovery(self) -> None:
        term = VirtualTerminal()
        log = LogUpdate(term)
        term.fail_writes()
        log.commit(Frame.from_text("a"))
        term.fail_writes(False)
        log.commit(Frame.from_text("b"))
        assert term.write_count == 0
