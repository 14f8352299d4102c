"""Text measurement for the layout engine.

The layout engine measures the same strings over and over while it solves a
tree, so results are memoised in a bounded dict that is dropped wholesale
once full.
"""

from __future__ import annotations

from typing import NamedTuple

from pi.ink.utils import visible_width


class MeasuredText(NamedTuple):
    width: int
    height: int


_measure_cache: dict[str, MeasuredText] = {}
_MEASURE_CACHE_MAX = 1024
_hits = 0
_misses = 0


def widest_line(text: str) -> int:
    """Visible width of the widest line in *text*."""
    return max((visible_width(line) for line in text.split("\n")), default=0)


def measure_text(text: str) -> MeasuredText:
    """Return the ``(width, height)`` box *text* occupies unwrapped.

        >>> measure_text("ab\\ncde")
        MeasuredText(width=3, height=2)
    """
    global _hits, _misses

    if not text:
        return MeasuredText(0, 0)

    cached = _measure_cache.get(text)
    if cached is not None:
        _hits += 1
        return cached

    _misses += 1
    result = MeasuredText(widest_line(text), text.count("\n") + 1)
    if len(_measure_cache) >= _MEASURE_CACHE_MAX:
        _measure_cache.clear()
    _measure_cache[text] = result
    return result


def clear_measure_cache() -> None:
    global _hits, _misses
    _measure_cache.clear()
    _hits = 0
    _misses = 0


def get_measure_cache_stats() -> dict[str, int]:
    """Return ``size``, ``max_size``, ``hits`` and ``misses`` of the cache."""
    return {
        "size": len(_measure_cache),
        "max_size": _MEASURE_CACHE_MAX,
        "hits": _hits,
        "misses": _misses,
    }
