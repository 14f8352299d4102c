"""Static region: output committed once above the live region.

Entries are append-only.  Once flushed to the terminal they scroll away with
the rest of the scrollback and never take part in live-frame diffing again.
"""

from __future__ import annotations


class StaticRegion:
    """Append-only log of static output with a flush cursor."""

    def __init__(self) -> None:
        self._entries: list[str] = []
        self._flushed = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    @property
    def has_pending(self) -> bool:
        return self._flushed < len(self._entries)

    def append(self, text: str) -> None:
        """Record *text* for the next flush.  Empty text is ignored."""
        if text:
            self._entries.append(text)

    def take_pending(self) -> str:
        """Return every entry not yet flushed, newline-joined, and mark them flushed."""
        pending = self._entries[self._flushed :]
        self._flushed = len(self._entries)
        return "\n".join(pending)

    def clear(self) -> None:
        self._entries.clear()
        self._flushed = 0
