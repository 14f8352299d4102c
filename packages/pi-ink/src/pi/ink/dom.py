"""Positioned node tree handed over by the layout engine.

Positions and sizes are already solved, in character cells, relative to the
parent node.  Styling callables take a string and return it wrapped in SGR
codes, the same shape as the theme functions of the component toolkit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Literal, NamedTuple, TypedDict

NodeKind = Literal["root", "box", "text"]

WrapMode = Literal[
    "wrap",
    "truncate",
    "truncate-end",
    "truncate-start",
    "truncate-middle",
]

StyleFn = Callable[[str], str]


class Styles(TypedDict, total=False):
    display: Literal["flex", "none"]
    wrap: WrapMode
    color: StyleFn
    background: StyleFn
    border_style: str
    border_top: bool
    border_bottom: bool
    border_left: bool
    border_right: bool
    border_color: StyleFn
    border_top_color: StyleFn
    border_bottom_color: StyleFn
    border_left_color: StyleFn
    border_right_color: StyleFn
    static: bool


class Edges(NamedTuple):
    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0


@dataclass
class Node:
    """One laid-out element: a box, a run of text, or the root."""

    kind: NodeKind = "box"
    left: int = 0
    top: int = 0
    width: int = 0
    height: int = 0
    padding: Edges = field(default_factory=Edges)
    style: Styles = field(default_factory=dict)  # type: ignore[assignment]
    text: str = ""
    children: list[Node] = field(default_factory=list)

    def append_child(self, child: Node) -> Node:
        self.children.append(child)
        return child

    def text_content(self) -> str:
        """Own text followed by the text of every descendant, depth-first."""
        return self.text + "".join(child.text_content() for child in self.children)
