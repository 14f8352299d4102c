"""Line-based output buffer that composites styled text at (x, y).

Rows are stored as complete styled strings rather than a grid of cells, so
colour runs survive compositing without re-deriving escape state per cell.
Writes are clipped against the fixed canvas: anything outside
``[0, width) x [0, height)`` is silently dropped.
"""

from __future__ import annotations

from pi.ink.ansi import close_open_styles, strip_ansi
from pi.ink.utils import slice_by_column, visible_width


class Output:
    """A fixed-size canvas of styled lines for one render pass."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._lines: list[str] = [""] * max(0, height)

    @property
    def lines(self) -> list[str]:
        """Copy of the raw rows, untrimmed."""
        return list(self._lines)

    def write(self, x: int, y: int, text: str) -> None:
        """Write *text* with its first line at column *x* of row *y*.

        Each further line of *text* lands on the next row.  Empty lines
        leave the row untouched.
        """
        for i, line_text in enumerate(text.split("\n")):
            row = y + i
            if row >= self.height:
                break
            if row < 0 or not line_text:
                continue
            self.insert_at(row, x, line_text)

    def insert_at(self, row: int, x: int, text: str) -> None:
        """Splice a single styled line into *row* at visual column *x*.

        Past the end of the existing content the row is padded with spaces.
        Otherwise the row is split at *x* and whatever *text* does not cover
        is re-attached after it, with style state re-emitted at both seams.
        """
        if row < 0 or row >= self.height:
            return

        if x < 0:
            text = slice_by_column(text, -x)
            x = 0
        if x >= self.width or not text:
            return

        text_width = visible_width(text)
        if x + text_width > self.width:
            text = slice_by_column(text, 0, self.width - x)
            text_width = self.width - x

        line = self._lines[row]
        line_width = visible_width(line)

        if x >= line_width:
            padding = " " * (x - line_width)
            self._lines[row] = close_open_styles(line) + padding + text
            return

        before = slice_by_column(line, 0, x)
        after_start = x + text_width
        after = (
            slice_by_column(line, after_start, line_width)
            if after_start < line_width
            else ""
        )
        if after:
            text = close_open_styles(text)

        self._lines[row] = before + text + after

    def _last_visible_row(self) -> int:
        for i in range(len(self._lines) - 1, -1, -1):
            if strip_ansi(self._lines[i]).strip():
                return i
        return -1

    def get(self, max_height: int | None = None) -> str:
        """Return the composited rows joined by newlines.

        Without *max_height* the result stops at the last row with visible
        content.  With it, exactly *max_height* rows come back: taller
        content is cut off and shorter content is padded with blank rows, so
        a reserved height survives.  Rows are right-trimmed.  A canvas with
        no visible content yields ``""``.
        """
        last = self._last_visible_row()
        if last < 0:
            return ""

        if max_height is not None and max_height > 0:
            rows = self._lines[:max_height]
            rows.extend([""] * (max_height - len(rows)))
        else:
            rows = self._lines[: last + 1]

        return "\n".join(row.rstrip() for row in rows)

    def get_height(self) -> int:
        """Index of the last row with visible content plus one; 0 if none."""
        return self._last_visible_row() + 1
