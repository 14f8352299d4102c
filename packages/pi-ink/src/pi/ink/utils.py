"""Terminal text metrics: width measurement, column slicing, wrapping, truncation.

Every function here understands ANSI escape sequences (zero columns) and
grapheme clusters (never split).  Widths follow the terminal: wide glyphs
take two columns, combining marks and control characters take none.

Slicing is a two-pass affair.  :func:`tokenize` turns a styled string into
escape markers and visible runs annotated with their starting column; the
slicing, wrapping and truncation helpers then pick split points among the
visible runs only, so an escape sequence can never be cut in half.
"""

from __future__ import annotations

import unicodedata
from typing import Callable, Iterator, Literal, NamedTuple

import grapheme
import wcwidth as _wcwidth

from pi.ink.ansi import RESET, AnsiCodeTracker, is_sgr, split_ansi, strip_ansi

ELLIPSIS = "…"

TruncatePosition = Literal["end", "start", "middle"]

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Rules:
    1. Control characters, combining marks and format characters -> 0
    2. Emoji (VS16, ZWJ sequences, skin tones, flags, pictographs) -> 2
    3. Otherwise delegate to wcwidth for the first codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # regional indicators
            return 2

    first = g[0]
    first_cp = ord(first)
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(first)
    if cat.startswith("M") or cat in ("Cf", "Cc"):
        return 0

    return max(_wcwidth.wcwidth(first), 0)


def _is_printable_ascii(text: str) -> bool:
    return all(0x20 <= ord(ch) <= 0x7E for ch in text)


def _run_width(run: str) -> int:
    """Width of an escape-free run of text."""
    if not run:
        return 0
    if _is_printable_ascii(run):
        return len(run)

    cached = _width_cache.get(run)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(run))
    return _cache_width(run, total)


# ---------------------------------------------------------------------------
# visible_width / tokenize
# ---------------------------------------------------------------------------


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    Escape sequences (including malformed ones) count as zero columns.

        >>> visible_width("\\x1b[31mHello\\x1b[0m")
        5
    """
    if not text:
        return 0
    return _run_width(strip_ansi(text))


class Segment(NamedTuple):
    """One token of a styled string: an escape marker or a visible run."""

    text: str
    is_escape: bool
    column: int
    width: int


def tokenize(text: str) -> list[Segment]:
    """Split *text* into escape markers and visible runs with column offsets."""
    segments: list[Segment] = []
    col = 0
    for chunk, is_escape in split_ansi(text):
        if is_escape:
            segments.append(Segment(chunk, True, col, 0))
            continue
        width = _run_width(chunk)
        segments.append(Segment(chunk, False, col, width))
        col += width
    return segments


def _segments_width(segments: list[Segment]) -> int:
    for seg in reversed(segments):
        if not seg.is_escape:
            return seg.column + seg.width
    return 0


def _iter_cells(segments: list[Segment]) -> Iterator[tuple[str, int, int]]:
    """Yield ``(grapheme, column, width)`` for every visible grapheme."""
    for seg in segments:
        if seg.is_escape:
            continue
        col = seg.column
        for g in grapheme.graphemes(seg.text):
            w = _grapheme_width(g)
            yield g, col, w
            col += w


# ---------------------------------------------------------------------------
# slice_by_column
# ---------------------------------------------------------------------------


def slice_by_column(text: str, start: int, end: int | None = None) -> str:
    """Return the part of *text* covering visual columns ``[start, end)``.

    Escapes seen before *start* are replayed, and the style they leave active
    is re-opened (reset + reapply) at the head of the fragment.  Escapes
    inside the range pass through untouched; escapes trailing the last
    visible glyph are kept when the range reaches the end of the string.  A
    wide glyph straddling either boundary is replaced by spaces for the
    columns it covers, so the fragment is exactly ``end - start`` columns
    wide whenever ``end <= visible_width(text)``.  If the fragment leaves a
    style open it ends with a reset.
    """
    start = max(0, start)
    segments = tokenize(text)
    total = _segments_width(segments)
    if end is None or end > total:
        end = total
    if end <= start:
        return ""

    tracker = AnsiCodeTracker()
    parts: list[str] = []
    opened = False
    # Whether a style was active on entering the range; None until known
    carried: bool | None = None
    # SGR codes met inside the range before its first glyph
    deferred: list[str] = []

    def _enter() -> None:
        nonlocal carried
        if carried is None:
            carried = tracker.has_active_codes()

    def _open() -> None:
        nonlocal opened
        if opened:
            return
        _enter()
        opened = True
        if not tracker.has_active_codes():
            return
        if carried:
            parts.append(tracker.get_reopen_codes())
        else:
            parts.extend(deferred)

    for seg in segments:
        if seg.is_escape:
            if seg.column < start:
                tracker.process(seg.text)
            elif seg.column < end or end >= total:
                if not opened and is_sgr(seg.text):
                    _enter()
                    deferred.append(seg.text)
                    tracker.process(seg.text)
                else:
                    _open()
                    tracker.process(seg.text)
                    parts.append(seg.text)
            continue

        if seg.column >= end:
            break
        if seg.width > 0 and seg.column + seg.width <= start:
            continue

        if start <= seg.column and seg.column + seg.width <= end:
            _open()
            parts.append(seg.text)
            continue

        # Partial run: walk its graphemes
        col = seg.column
        for g in grapheme.graphemes(seg.text):
            w = _grapheme_width(g)
            g_end = col + w
            if col >= end:
                break
            if col < start:
                if g_end > start:
                    _open()
                    parts.append(" " * (min(g_end, end) - start))
            elif g_end > end:
                _open()
                parts.append(" " * (end - col))
            else:
                _open()
                parts.append(g)
            col = g_end

    if opened:
        parts.append(tracker.get_line_end_reset())
    return "".join(parts)


# ---------------------------------------------------------------------------
# wrap_lines / wrap_text
# ---------------------------------------------------------------------------


def wrap_lines(text: str, max_width: int, hard: bool = False) -> Iterator[str]:
    """Lazily word-wrap *text* to *max_width* columns, preserving ANSI codes.

    Lines break at whitespace and the whitespace at a break point is dropped.
    A word wider than *max_width* is split mid-word only when *hard* is set;
    otherwise it overflows on a line of its own.  Embedded newlines are kept
    and style state carries across them.  A non-positive *max_width* yields
    *text* unchanged.
    """
    if max_width <= 0:
        yield text
        return

    tracker = AnsiCodeTracker()
    for physical in text.split("\n"):
        carried = tracker.get_active_codes()
        for chunk, is_escape in split_ansi(physical):
            if is_escape:
                tracker.process(chunk)
        yield from _wrap_physical_line(carried + physical, max_width, hard)


def wrap_text(text: str, max_width: int, hard: bool = False) -> str:
    """Newline-joined form of :func:`wrap_lines`."""
    if max_width <= 0:
        return text
    return "\n".join(wrap_lines(text, max_width, hard=hard))


def _wrap_physical_line(line: str, max_width: int, hard: bool) -> Iterator[str]:
    segments = tokenize(line)
    total = _segments_width(segments)

    if total <= max_width:
        yield slice_by_column(line, 0) if total else _close_escapes_only(line)
        return

    cells = list(_iter_cells(segments))

    words: list[tuple[int, int]] = []
    word_start: int | None = None
    for g, col, w in cells:
        if g.isspace():
            if word_start is not None:
                words.append((word_start, col))
                word_start = None
        elif word_start is None:
            word_start = col
    if word_start is not None:
        words.append((word_start, total))

    if not words:
        # Nothing but whitespace
        yield slice_by_column(line, 0, max_width)
        return

    ranges: list[tuple[int, int]] = []
    line_start: int | None = None
    line_end = 0

    for index, (w_start, w_end) in enumerate(words):
        if line_start is not None and w_end - line_start <= max_width:
            line_end = w_end
            continue

        if line_start is not None:
            ranges.append((line_start, line_end))

        # Keep leading indentation on the first line when it fits
        start = 0 if index == 0 and w_end <= max_width else w_start

        if hard and w_end - start > max_width:
            chunks = _chunk_columns(cells, start, w_end, max_width)
            ranges.extend(chunks[:-1])
            start = chunks[-1][0]

        line_start, line_end = start, w_end

    if line_start is not None:
        ranges.append((line_start, line_end))

    for a, b in ranges:
        yield slice_by_column(line, a, b)


def _chunk_columns(
    cells: list[tuple[str, int, int]],
    start: int,
    end: int,
    max_width: int,
) -> list[tuple[int, int]]:
    """Split columns ``[start, end)`` at grapheme boundaries into chunks."""
    chunks: list[tuple[int, int]] = []
    chunk_start = start
    for _g, col, w in cells:
        if col < start or col >= end:
            continue
        if col + w - chunk_start > max_width and col > chunk_start:
            chunks.append((chunk_start, col))
            chunk_start = col
    chunks.append((chunk_start, end))
    return chunks


def _close_escapes_only(line: str) -> str:
    """A line with no visible content; keep its escapes but close any style."""
    if not line:
        return line
    tracker = AnsiCodeTracker()
    for chunk, is_escape in split_ansi(line):
        if is_escape:
            tracker.process(chunk)
    return line + tracker.get_line_end_reset()


# ---------------------------------------------------------------------------
# truncate_text
# ---------------------------------------------------------------------------


def truncate_text(
    text: str,
    max_width: int,
    position: TruncatePosition = "end",
) -> str:
    """Shorten *text* to *max_width* columns with a single ``…``.

    ``end`` keeps the beginning, ``start`` keeps the end and ``middle`` keeps
    ``(max_width - 1) // 2`` leading columns plus the rest from the end.
    Text that already fits is returned as-is; otherwise a *max_width* of one
    or less yields just the ellipsis.

        >>> truncate_text("Hello World", 7, "middle")
        'Hel…rld'
    """
    width = visible_width(text)
    if width <= max_width:
        return text
    if max_width <= 1:
        return ELLIPSIS

    available = max_width - 1
    if position == "end":
        return slice_by_column(text, 0, available) + ELLIPSIS
    if position == "start":
        return ELLIPSIS + slice_by_column(text, width - available, width)
    if position == "middle":
        head = available // 2
        tail = available - head
        return (
            slice_by_column(text, 0, head)
            + ELLIPSIS
            + slice_by_column(text, width - tail, width)
        )
    raise ValueError(f"Unknown truncate position: {position!r}")


# ---------------------------------------------------------------------------
# apply_background_to_line
# ---------------------------------------------------------------------------


def apply_background_to_line(
    line: str,
    width: int,
    bg_fn: Callable[[str], str],
) -> str:
    """Apply a background style function to *line*, padding to *width*.

    *bg_fn* is called with the content (padded with spaces) and should return
    the string wrapped in its background codes.
    """
    line_width = visible_width(line)
    if line_width >= width:
        return bg_fn(line)
    return bg_fn(line + " " * (width - line_width))


__all__ = [
    "ELLIPSIS",
    "RESET",
    "Segment",
    "TruncatePosition",
    "apply_background_to_line",
    "slice_by_column",
    "strip_ansi",
    "tokenize",
    "truncate_text",
    "visible_width",
    "wrap_lines",
    "wrap_text",
]
