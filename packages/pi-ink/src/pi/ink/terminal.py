"""Terminal byte sink.

Provides a ``Terminal`` protocol (the narrow surface the renderer needs) and
``StreamTerminal``, which writes to any text stream, by default
``sys.stdout``.  Write errors propagate to the caller so that the frame
writer can decide how to treat a closed or broken stream.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Protocol, TextIO

logger = logging.getLogger(__name__)

_DEFAULT_COLUMNS = 80
_DEFAULT_ROWS = 24


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal output."""

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...


# ---------------------------------------------------------------------------
# StreamTerminal implementation
# ---------------------------------------------------------------------------


class StreamTerminal:
    """Terminal backed by a text stream.

    The size is read from the stream's file descriptor and falls back to
    80x24 when the stream is not attached to a terminal.  When the
    ``PI_INK_WRITE_LOG`` environment variable names a file, every write is
    appended to it as well.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream: TextIO = stream if stream is not None else sys.stdout
        self._write_log_path: str = os.environ.get("PI_INK_WRITE_LOG", "")

    # -- properties ---------------------------------------------------------

    @property
    def stream(self) -> TextIO:
        return self._stream

    @property
    def columns(self) -> int:
        size = self._terminal_size()
        return size.columns if size is not None else _DEFAULT_COLUMNS

    @property
    def rows(self) -> int:
        size = self._terminal_size()
        return size.lines if size is not None else _DEFAULT_ROWS

    def _terminal_size(self) -> os.terminal_size | None:
        try:
            return os.get_terminal_size(self._stream.fileno())
        except (AttributeError, ValueError, OSError):
            return None

    # -- write --------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write *data* and flush.  Stream errors are raised to the caller."""
        self._stream.write(data)
        self._stream.flush()

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a", encoding="utf-8") as f:
                    f.write(data)
            except OSError:
                logger.debug("Could not append to write log %s", self._write_log_path)
