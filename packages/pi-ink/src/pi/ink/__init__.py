"""pi-ink: terminal compositing with incremental redraw."""

# ANSI handling
from pi.ink.ansi import RESET, AnsiCodeTracker, close_open_styles, split_ansi, strip_ansi

# Configuration
from pi.ink.config import InkOptions

# Node tree
from pi.ink.dom import Edges, Node, Styles

# Render loop
from pi.ink.ink import Ink, RenderInfo, RenderSession, render

# Frame writer
from pi.ink.log_update import Frame, LogUpdate

# Measurement
from pi.ink.measure_text import MeasuredText, measure_text, widest_line

# Output buffer
from pi.ink.output import Output

# Compositor
from pi.ink.render_node import BOX_STYLES, RenderResult, render_node, render_to_string

# Static region
from pi.ink.static import StaticRegion

# Terminal
from pi.ink.terminal import StreamTerminal, Terminal

# Text metrics
from pi.ink.utils import (
    ELLIPSIS,
    slice_by_column,
    truncate_text,
    visible_width,
    wrap_lines,
    wrap_text,
)

__all__ = [
    # ANSI handling
    "RESET",
    "AnsiCodeTracker",
    "close_open_styles",
    "split_ansi",
    "strip_ansi",
    # Configuration
    "InkOptions",
    # Node tree
    "Edges",
    "Node",
    "Styles",
    # Render loop
    "Ink",
    "RenderInfo",
    "RenderSession",
    "render",
    # Frame writer
    "Frame",
    "LogUpdate",
    # Measurement
    "MeasuredText",
    "measure_text",
    "widest_line",
    # Output buffer
    "Output",
    # Compositor
    "BOX_STYLES",
    "RenderResult",
    "render_node",
    "render_to_string",
    # Static region
    "StaticRegion",
    # Terminal
    "StreamTerminal",
    "Terminal",
    # Text metrics
    "ELLIPSIS",
    "slice_by_column",
    "truncate_text",
    "visible_width",
    "wrap_lines",
    "wrap_text",
]
