"""Configuration for the render loop."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from pi.ink.ink import RenderInfo

logger = logging.getLogger(__name__)


@dataclass
class InkOptions:
    """Render loop options.

    ``max_fps`` caps how often repaints run; ``0`` repaints on the next
    event-loop iteration.  ``pin_height`` keeps the live region at the root
    node's full height even when its bottom rows are blank.
    """

    max_fps: int = 60
    debug: bool = False
    hide_cursor: bool = True
    pin_height: bool = False
    on_render: Callable[[RenderInfo], None] | None = None

    @property
    def frame_interval(self) -> float:
        """Seconds between repaints."""
        return 1.0 / self.max_fps if self.max_fps > 0 else 0.0

    @classmethod
    def from_env(cls, **overrides: Any) -> InkOptions:
        """Build options from ``PI_INK_*`` environment variables, then *overrides*."""
        options = cls(
            debug=os.environ.get("PI_INK_DEBUG") == "1",
            hide_cursor=os.environ.get("PI_INK_SHOW_CURSOR") != "1",
        )

        raw_fps = os.environ.get("PI_INK_MAX_FPS")
        if raw_fps:
            try:
                options.max_fps = max(0, int(raw_fps))
            except ValueError:
                logger.warning("Ignoring invalid PI_INK_MAX_FPS=%r", raw_fps)

        return replace(options, **overrides)
