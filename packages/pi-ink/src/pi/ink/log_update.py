"""Frame differ and terminal writer.

``LogUpdate`` owns the live region at the bottom of the terminal.  Each
:meth:`LogUpdate.commit` compares the new :class:`Frame` with the one on
screen and either does nothing (identical frame) or erases the old frame in
place and paints the new one.  Static text is flushed above the live region
exactly once, after which the diff baseline starts over.

All bytes for one commit are assembled first and handed to the terminal in a
single ``write`` call.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from pi.ink.output import Output
from pi.ink.terminal import Terminal
from pi.ink.utils import visible_width

logger = logging.getLogger(__name__)

CURSOR_HIDE = "\x1b[?25l"
CURSOR_SHOW = "\x1b[?25h"
ERASE_DOWN = "\x1b[J"


def cursor_up(count: int) -> str:
    """``ESC[<n>A``, or nothing for a non-positive *count*."""
    if count <= 0:
        return ""
    return f"\x1b[{count}A"


# ---------------------------------------------------------------------------
# Frame
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Frame:
    """A composited snapshot of the live region."""

    text: str
    line_count: int

    @classmethod
    def from_text(cls, text: str) -> Frame:
        return cls(text, text.count("\n") + 1 if text else 0)

    @classmethod
    def from_output(cls, output: Output, max_height: int | None = None) -> Frame:
        return cls.from_text(output.get(max_height))

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n") if self.text else []

    def physical_rows(self, columns: int) -> int:
        """Rows the frame occupies once lines wider than *columns* soft-wrap."""
        if columns <= 0:
            return self.line_count
        return sum(
            max(1, math.ceil(visible_width(line) / columns)) for line in self.lines
        )


EMPTY_FRAME = Frame("", 0)


# ---------------------------------------------------------------------------
# LogUpdate
# ---------------------------------------------------------------------------


class LogUpdate:
    """Writes frames to a terminal, redrawing only when something changed.

    Parameters
    ----------
    terminal:
        The byte sink.  Its ``columns`` are read on every commit so that a
        resize is noticed.
    debug:
        Write every changed frame in full followed by a newline, without
        erasing what came before.
    """

    def __init__(self, terminal: Terminal, debug: bool = False) -> None:
        self.terminal = terminal
        self.debug = debug
        self._previous: Frame = EMPTY_FRAME
        self._previous_columns: int = 0
        self._broken = False

    # -- properties ---------------------------------------------------------

    @property
    def broken(self) -> bool:
        """True once the sink has failed; later writes are dropped."""
        return self._broken

    @property
    def previous_frame(self) -> Frame:
        return self._previous

    @property
    def height(self) -> int:
        """Physical rows currently occupied by the live region."""
        return self._previous.physical_rows(self._previous_columns)

    # -- commit -------------------------------------------------------------

    def commit(self, frame: Frame, static_text: str = "") -> bool:
        """Bring the terminal up to date with *frame*.

        *static_text*, when given, is written once above the live region.
        Returns ``True`` if anything was written.
        """
        columns = self.terminal.columns
        out: list[str] = []

        if static_text:
            out.append(self._erase_previous(columns))
            out.append(static_text + "\n")
            self._previous = EMPTY_FRAME
        elif frame == self._previous and columns == self._previous_columns:
            logger.debug("Frame unchanged, skipping write")
            return False
        else:
            out.append(self._erase_previous(columns))

        out.append(frame.text)
        if self.debug and frame.text:
            out.append("\n")

        self._previous = frame
        self._previous_columns = columns

        data = "".join(out)
        if not data:
            return False
        self._write(data)
        return True

    def _erase_previous(self, columns: int) -> str:
        if self.debug:
            return ""
        rows = self._previous.physical_rows(columns)
        if rows <= 0:
            return ""
        return cursor_up(rows - 1) + "\r" + ERASE_DOWN

    # -- lifecycle ----------------------------------------------------------

    def clear(self) -> None:
        """Erase the live region and forget it."""
        data = self._erase_previous(self.terminal.columns)
        self._reset()
        if data:
            self._write(data)

    def done(self) -> None:
        """Leave the live region on screen and move the cursor below it."""
        had_content = self._previous.line_count > 0 and not self.debug
        self._reset()
        if had_content:
            self._write("\n")

    def _reset(self) -> None:
        self._previous = EMPTY_FRAME
        self._previous_columns = 0

    # -- raw output ---------------------------------------------------------

    def write(self, data: str) -> None:
        """Write control bytes (cursor visibility and the like) to the sink."""
        if data:
            self._write(data)

    def _write(self, data: str) -> None:
        if self._broken:
            return
        try:
            self.terminal.write(data)
        except UnicodeEncodeError as exc:
            logger.warning("Terminal cannot encode output, dropping write: %s", exc)
        except (OSError, ValueError) as exc:
            self._broken = True
            logger.warning("Terminal write failed, suppressing further output: %s", exc)
