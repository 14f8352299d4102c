"""Tests for pi.ink.static -- the append-only static region."""

from __future__ import annotations

from pi.ink.static import StaticRegion


class TestStaticRegion:
    def test_starts_empty(self) -> None:
        region = StaticRegion()
        assert len(region) == 0
        assert not region.has_pending
        assert region.take_pending() == ""

    def test_take_pending_joins_in_order(self) -> None:
        region = StaticRegion()
        region.append("first")
        region.append("second")
        assert region.has_pending
        assert region.take_pending() == "first\nsecond"

    def test_flushed_entries_are_not_returned_again(self) -> None:
        region = StaticRegion()
        region.append("one")
        region.take_pending()
        region.append("two")
        assert region.take_pending() == "two"
        assert not region.has_pending
        assert region.entries == ("one", "two")

    def test_empty_text_ignored(self) -> None:
        region = StaticRegion()
        region.append("")
        assert len(region) == 0

    def test_clear_resets_cursor(self) -> None:
        region = StaticRegion()
        region.append("one")
        region.take_pending()
        region.clear()
        region.append("two")
        assert region.take_pending() == "two"
        assert region.entries == ("two",)
