"""Composite a laid-out :class:`~pi.ink.dom.Node` tree into an :class:`Output`.

Nodes are painted parent first, children in order, so later siblings draw
over earlier ones.  Subtrees marked ``static`` are rendered on a canvas of
their own and handed back separately; they never enter the live grid.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from pi.ink.dom import Node, StyleFn
from pi.ink.output import Output
from pi.ink.utils import apply_background_to_line, truncate_text, wrap_text

logger = logging.getLogger(__name__)

_TAB = "   "


# ---------------------------------------------------------------------------
# Border glyphs
# ---------------------------------------------------------------------------


class BoxChars(NamedTuple):
    top_left: str
    top: str
    top_right: str
    right: str
    bottom_right: str
    bottom: str
    bottom_left: str
    left: str


BOX_STYLES: dict[str, BoxChars] = {
    "single": BoxChars("┌", "─", "┐", "│", "┘", "─", "└", "│"),
    "double": BoxChars("╔", "═", "╗", "║", "╝", "═", "╚", "║"),
    "round": BoxChars("╭", "─", "╮", "│", "╯", "─", "╰", "│"),
    "bold": BoxChars("┏", "━", "┓", "┃", "┛", "━", "┗", "┃"),
    "single_double": BoxChars("╓", "─", "╖", "║", "╜", "─", "╙", "║"),
    "double_single": BoxChars("╒", "═", "╕", "│", "╛", "═", "╘", "│"),
    "classic": BoxChars("+", "-", "+", "|", "+", "-", "+", "|"),
}


class StaticPart(NamedTuple):
    """Text rendered from one static subtree, with the node it came from."""

    node: Node
    text: str


class RenderResult(NamedTuple):
    output: str
    height: int
    static_output: str
    static_parts: tuple[StaticPart, ...] = ()


def _colorize(text: str, fn: StyleFn | None) -> str:
    return fn(text) if fn is not None and text else text


# ---------------------------------------------------------------------------
# Painting
# ---------------------------------------------------------------------------


def _border_sides(node: Node) -> tuple[bool, bool, bool, bool]:
    """``(top, right, bottom, left)`` visibility of the node's border."""
    style = node.style
    if not style.get("border_style"):
        return False, False, False, False
    return (
        style.get("border_top", True),
        style.get("border_right", True),
        style.get("border_bottom", True),
        style.get("border_left", True),
    )


def _paint_border(output: Output, node: Node, x: int, y: int) -> None:
    style = node.style
    name = style.get("border_style", "single")
    box = BOX_STYLES.get(name)
    if box is None:
        logger.debug("Unknown border style %r, using single", name)
        box = BOX_STYLES["single"]

    show_top, show_right, show_bottom, show_left = _border_sides(node)
    width, height = node.width, node.height
    if width <= 0 or height <= 0:
        return

    base_color = style.get("border_color")
    span = max(0, width - int(show_left) - int(show_right))

    def _edge(corner_left: str, fill: str, corner_right: str) -> str:
        return (
            (corner_left if show_left else "")
            + fill * span
            + (corner_right if show_right else "")
        )

    if show_top:
        line = _edge(box.top_left, box.top, box.top_right)
        output.write(x, y, _colorize(line, style.get("border_top_color", base_color)))

    first = 1 if show_top else 0
    last = height - 1 if show_bottom else height
    left_char = _colorize(box.left, style.get("border_left_color", base_color))
    right_char = _colorize(box.right, style.get("border_right_color", base_color))
    for row in range(first, last):
        if show_left:
            output.write(x, y + row, left_char)
        if show_right:
            output.write(x + width - 1, y + row, right_char)

    if show_bottom and (height > 1 or not show_top):
        line = _edge(box.bottom_left, box.bottom, box.bottom_right)
        output.write(
            x,
            y + height - 1,
            _colorize(line, style.get("border_bottom_color", base_color)),
        )


def _layout_text(node: Node, available: int) -> list[str]:
    text = node.text_content().replace("\t", _TAB)
    wrap = node.style.get("wrap", "wrap")

    if wrap.startswith("truncate"):
        position = "end" if wrap in ("truncate", "truncate-end") else wrap[len("truncate-") :]
        lines = [truncate_text(line, available, position) for line in text.split("\n")]  # type: ignore[arg-type]
    else:
        lines = wrap_text(text, available, hard=True).split("\n")

    color = node.style.get("color")
    return [_colorize(line, color) for line in lines]


def _paint(output: Output, node: Node, x: int, y: int, static_parts: list[StaticPart] | None) -> None:
    style = node.style

    background = style.get("background")
    if background is not None:
        fill = apply_background_to_line("", node.width, background)
        for row in range(node.height):
            output.write(x, y + row, fill)

    if style.get("border_style"):
        _paint_border(output, node, x, y)

    if node.kind == "text":
        show_top, show_right, _bottom, show_left = _border_sides(node)
        pad = node.padding
        inner_x = x + pad.left + int(show_left)
        inner_y = y + pad.top + int(show_top)
        available = node.width - pad.left - pad.right - int(show_left) - int(show_right)
        if available <= 0:
            return
        for i, line in enumerate(_layout_text(node, available)):
            output.write(inner_x, inner_y + i, line)
        return

    for child in node.children:
        render_node(child, output, x, y, static_parts)


def render_node(
    node: Node,
    output: Output,
    offset_x: int = 0,
    offset_y: int = 0,
    static_parts: list[StaticPart] | None = None,
) -> None:
    """Paint *node* and its subtree into *output*.

    *offset_x*/*offset_y* is the absolute position of the parent.  When
    *static_parts* is given, static subtrees are rendered separately and
    a :class:`StaticPart` appended to it for each one, even when it renders
    empty; otherwise they are skipped.
    """
    if node.style.get("display") == "none":
        return

    x = offset_x + node.left
    y = offset_y + node.top

    if node.style.get("static"):
        if static_parts is None:
            return
        canvas = Output(output.width, max(node.height, 1))
        _paint(canvas, node, x, 0, static_parts)
        static_parts.append(StaticPart(node, canvas.get()))
        return

    _paint(output, node, x, y, static_parts)


def render_to_string(root: Node, columns: int, pin_height: bool = False) -> RenderResult:
    """Composite *root* onto a canvas *columns* wide.

    With *pin_height* the output always has ``root.height`` rows, blank
    rows included.
    """
    output = Output(columns, max(root.height, 1))
    static_parts: list[StaticPart] = []
    render_node(root, output, static_parts=static_parts)

    max_height = root.height if pin_height and root.height > 0 else None
    text = output.get(max_height)
    height = text.count("\n") + 1 if text else 0
    static_output = "\n".join(part.text for part in static_parts if part.text)
    return RenderResult(text, height, static_output, tuple(static_parts))
