"""Frame-capturing renderer for tests of code that builds node trees.

    >>> result = render(tree, columns=40)
    >>> result.last_frame()
    'Hello'

Every render is synchronous, including inside a running event loop.
"""

from __future__ import annotations

from pi.ink.config import InkOptions
from pi.ink.dom import Node
from pi.ink.ink import Ink


class _CaptureTerminal:
    """A terminal that remembers raw writes and never fails."""

    def __init__(self, columns: int, rows: int = 24) -> None:
        self.columns = columns
        self.rows = rows
        self.writes: list[str] = []

    def write(self, data: str) -> None:
        self.writes.append(data)


class CapturedRender:
    """Handle returned by :func:`render`."""

    def __init__(self, columns: int, pin_height: bool) -> None:
        self.terminal = _CaptureTerminal(columns)
        self.frames: list[str] = []
        self.static_frames: list[str] = []
        self._ink = Ink(
            self.terminal,
            InkOptions(max_fps=0, hide_cursor=False, pin_height=pin_height),
        )
        self._ink.start()

    @property
    def stdout(self) -> str:
        """Every byte written to the terminal so far."""
        return "".join(self.terminal.writes)

    def last_frame(self) -> str:
        return self.frames[-1] if self.frames else ""

    def rerender(self, tree: Node) -> None:
        session = self._ink.session
        if session is None:
            return
        static_before = len(session.static)
        self._ink.update(tree)
        if self._ink.has_pending:
            self._ink.force_update()
        self.frames.append(self._ink.last_frame.text)
        self.static_frames.extend(session.static.entries[static_before:])

    def unmount(self) -> None:
        self._ink.stop()


def render(tree: Node, columns: int = 80, pin_height: bool = False) -> CapturedRender:
    """Render *tree* once on a *columns*-wide in-memory terminal."""
    captured = CapturedRender(columns, pin_height)
    captured.rerender(tree)
    return captured
