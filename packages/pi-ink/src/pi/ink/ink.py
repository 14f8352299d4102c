"""Render loop: keeps the terminal in sync with a changing node tree.

``Ink`` accepts new trees at any rate but repaints at most ``max_fps`` times
a second.  Pending trees live in a single slot, so a burst of updates
collapses into one repaint of the latest tree.  Each repaint composites the
tree, moves any static output into the :class:`StaticRegion`, and hands the
frame to :class:`LogUpdate`, which writes only when the frame changed.

Inside a running asyncio loop repaints are scheduled on that loop.  Without
one, every ``update`` repaints synchronously.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Iterable

from pi.ink.config import InkOptions
from pi.ink.dom import Node
from pi.ink.log_update import CURSOR_HIDE, CURSOR_SHOW, EMPTY_FRAME, Frame, LogUpdate
from pi.ink.render_node import StaticPart, render_to_string
from pi.ink.static import StaticRegion
from pi.ink.terminal import StreamTerminal, Terminal

logger = logging.getLogger(__name__)


@dataclass
class RenderInfo:
    """Passed to ``on_render`` after every repaint that wrote to the terminal."""

    render_time: float  # milliseconds
    render_count: int


@dataclass
class RenderSession:
    """State of one mounted tree, from :meth:`Ink.start` to :meth:`Ink.stop`."""

    columns: int
    rows: int
    tree: Node | None = None
    frame: Frame = EMPTY_FRAME
    static: StaticRegion = field(default_factory=StaticRegion)
    render_count: int = 0
    # Static nodes already moved to the static region, keyed by id()
    emitted_static: dict[int, Node] = field(default_factory=dict)

    def collect_static(self, parts: Iterable[StaticPart]) -> None:
        """Append the output of static nodes not seen before in this session."""
        for part in parts:
            key = id(part.node)
            if key in self.emitted_static:
                continue
            self.emitted_static[key] = part.node
            self.static.append(part.text)


class Ink:
    """Incremental renderer bound to one terminal.

    Parameters
    ----------
    terminal:
        Byte sink; defaults to a :class:`StreamTerminal` on stdout.
    options:
        Defaults to :meth:`InkOptions.from_env`.
    """

    def __init__(
        self,
        terminal: Terminal | None = None,
        options: InkOptions | None = None,
    ) -> None:
        self.terminal: Terminal = terminal if terminal is not None else StreamTerminal()
        self.options: InkOptions = options if options is not None else InkOptions.from_env()

        self._session: RenderSession | None = None
        self._log: LogUpdate | None = None

        # Render scheduling
        self._pending: Node | None = None
        self._needs_render: bool = False
        self._handle: asyncio.Handle | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def session(self) -> RenderSession | None:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._session is not None

    @property
    def has_pending(self) -> bool:
        """True while a repaint has been requested but not yet run."""
        return self._pending is not None or self._needs_render

    @property
    def render_count(self) -> int:
        return self._session.render_count if self._session is not None else 0

    @property
    def last_frame(self) -> Frame:
        return self._session.frame if self._session is not None else EMPTY_FRAME

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Mount a fresh session.  A running session is left alone."""
        if self._session is not None:
            return
        self._session = RenderSession(
            columns=self.terminal.columns,
            rows=self.terminal.rows,
        )
        self._log = LogUpdate(self.terminal, debug=self.options.debug)
        if self.options.hide_cursor and not self.options.debug:
            self._log.write(CURSOR_HIDE)

    def stop(self, clear: bool = False) -> None:
        """Paint any pending tree, then release the terminal.

        With *clear* the live region is erased; otherwise it stays on
        screen with the cursor below it.  Calling ``stop`` twice is harmless.
        """
        session, log = self._session, self._log
        if session is None or log is None:
            return

        self._cancel_tick()
        self._flush()

        if clear:
            log.clear()
        else:
            log.done()
        if self.options.hide_cursor and not self.options.debug:
            log.write(CURSOR_SHOW)

        self._session = None
        self._log = None
        self._pending = None
        self._needs_render = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def update(self, tree: Node) -> None:
        """Make *tree* the next thing painted.  Only the latest tree is kept."""
        if self._session is None:
            logger.debug("Ignoring update: renderer is not running")
            return
        self._pending = tree
        self._request_render()

    def write_static(self, text: str) -> None:
        """Commit *text* above the live region on the next repaint."""
        if self._session is None:
            logger.debug("Ignoring static write: renderer is not running")
            return
        if not text:
            return
        self._session.static.append(text)
        self._needs_render = True
        self._request_render()

    def force_update(self) -> None:
        """Repaint now, bypassing the frame-rate limit."""
        self._cancel_tick()
        session = self._session
        if session is None:
            return
        tree = self._pending if self._pending is not None else session.tree
        self._pending = None
        self._needs_render = False
        self._render(tree)

    def clear(self) -> None:
        """Erase the live region.  The next repaint draws from scratch."""
        if self._log is None or self._session is None:
            return
        self._log.clear()
        self._session.frame = EMPTY_FRAME

    # ------------------------------------------------------------------
    # Render scheduling
    # ------------------------------------------------------------------

    def _request_render(self) -> None:
        """Schedule a repaint tick; calls made before it fires coalesce."""
        if self._handle is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running event loop -- render synchronously
            self._flush()
            return

        interval = self.options.frame_interval
        if interval > 0:
            self._handle = loop.call_later(interval, self._on_frame_tick)
        else:
            self._handle = loop.call_soon(self._on_frame_tick)

    def _on_frame_tick(self) -> None:
        self._handle = None
        self._flush()

    def _cancel_tick(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _flush(self) -> None:
        session = self._session
        if session is None:
            return
        if self._pending is None and not self._needs_render:
            return
        tree = self._pending if self._pending is not None else session.tree
        self._pending = None
        self._needs_render = False
        self._render(tree)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, tree: Node | None) -> None:
        session, log = self._session, self._log
        if session is None or log is None:
            return

        started = time.perf_counter()
        session.columns = self.terminal.columns
        session.rows = self.terminal.rows

        frame = session.frame
        if tree is not None:
            result = render_to_string(tree, session.columns, pin_height=self.options.pin_height)
            session.collect_static(result.static_parts)
            frame = Frame.from_text(result.output)
            session.tree = tree

        static_text = session.static.take_pending()
        written = log.commit(frame, static_text)

        session.frame = frame
        session.render_count += 1

        if written:
            elapsed = (time.perf_counter() - started) * 1000.0
            self._notify(RenderInfo(render_time=elapsed, render_count=session.render_count))

    def _notify(self, info: RenderInfo) -> None:
        callback = self.options.on_render
        if callback is None:
            return
        try:
            callback(info)
        except Exception:
            logger.exception("on_render callback failed")


def render(
    tree: Node,
    terminal: Terminal | None = None,
    options: InkOptions | None = None,
) -> Ink:
    """Mount *tree* on *terminal* and return the running :class:`Ink`."""
    ink = Ink(terminal, options)
    ink.start()
    ink.update(tree)
    return ink
