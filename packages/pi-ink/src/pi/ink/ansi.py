"""ANSI escape handling: recognising sequences and tracking SGR state.

Escape sequences are treated as opaque, zero-width markers.  Nothing here
re-encodes colours: the tracker only remembers the exact SGR fragments it has
seen so that a style can be closed before a splice point and re-opened after.
"""

from __future__ import annotations

import re
from typing import Iterator

RESET = "\x1b[0m"

# One alternative per family, most specific first.  The two trailing
# alternatives swallow truncated CSI sequences and stray ESC bytes so that
# malformed input still measures as zero-width instead of leaking into text.
_ESCAPE_RE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"  # CSI
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"  # OSC (hyperlinks, titles)
    r"|\x1b[P_^X][^\x07\x1b]*(?:\x07|\x1b\\)"  # DCS / APC / PM / SOS
    r"|\x1b[@-Z\\-_]"  # two-byte escapes
    r"|\x1b\[[0-?]*[ -/]*"  # unterminated CSI
    r"|\x1b"  # lone ESC
)


def strip_ansi(text: str) -> str:
    """Remove every escape sequence from *text*."""
    if "\x1b" not in text:
        return text
    return _ESCAPE_RE.sub("", text)


def split_ansi(text: str) -> Iterator[tuple[str, bool]]:
    """Yield ``(chunk, is_escape)`` pairs covering *text* in order.

    Visible chunks are maximal runs between escapes; each escape sequence is
    its own chunk.  Concatenating the chunks gives back *text* exactly.
    """
    pos = 0
    for match in _ESCAPE_RE.finditer(text):
        if match.start() > pos:
            yield text[pos : match.start()], False
        yield match.group(), True
        pos = match.end()
    if pos < len(text):
        yield text[pos:], False


def is_sgr(code: str) -> bool:
    return code.startswith("\x1b[") and code.endswith("m")


# ---------------------------------------------------------------------------
# AnsiCodeTracker
# ---------------------------------------------------------------------------

# SGR parameter -> attribute slot it switches on
_ATTRIBUTE_ON = {
    1: "bold",
    2: "dim",
    3: "italic",
    4: "underline",
    5: "blink",
    7: "inverse",
    8: "hidden",
    9: "strikethrough",
}

# SGR parameter -> attribute slots it switches off
_ATTRIBUTE_OFF = {
    22: ("bold", "dim"),
    23: ("italic",),
    24: ("underline",),
    25: ("blink",),
    27: ("inverse",),
    28: ("hidden",),
    29: ("strikethrough",),
    39: ("fg",),
    49: ("bg",),
}

_SLOT_ORDER = (
    "bold",
    "dim",
    "italic",
    "underline",
    "blink",
    "inverse",
    "hidden",
    "strikethrough",
    "fg",
    "bg",
)


def _param(value: str) -> int:
    try:
        return int(value) if value else 0
    except ValueError:
        return -1


class AnsiCodeTracker:
    """Track active SGR (Select Graphic Rendition) state.

    Feed it escape sequences with :meth:`process`; non-SGR sequences are
    ignored.  :meth:`get_active_codes` returns the sequences that re-create
    the current state on a fresh line or after a reset.
    """

    def __init__(self) -> None:
        self._slots: dict[str, str] = {}

    def copy(self) -> AnsiCodeTracker:
        clone = AnsiCodeTracker()
        clone._slots = dict(self._slots)
        return clone

    def process(self, code: str) -> None:
        """Update tracked state from an SGR sequence like ``\\x1b[1;31m``."""
        if not is_sgr(code):
            return

        body = code[2:-1]
        if not body:
            # ESC[m is a reset
            self.clear()
            return

        params = body.split(";")
        i = 0
        while i < len(params):
            val = _param(params[i])

            if val == 0:
                self.clear()
            elif val in _ATTRIBUTE_ON:
                self._slots[_ATTRIBUTE_ON[val]] = f"\x1b[{val}m"
            elif val in _ATTRIBUTE_OFF:
                for slot in _ATTRIBUTE_OFF[val]:
                    self._slots.pop(slot, None)
            elif 30 <= val <= 37 or 90 <= val <= 97:
                self._slots["fg"] = f"\x1b[{val}m"
            elif 40 <= val <= 47 or 100 <= val <= 107:
                self._slots["bg"] = f"\x1b[{val}m"
            elif val in (38, 48):
                i = self._process_extended_color(val, params, i)

            i += 1

    def _process_extended_color(self, val: int, params: list[str], i: int) -> int:
        """Handle ``38;5;N`` / ``38;2;R;G;B`` (and the 48 variants).

        Returns the index of the last parameter consumed.
        """
        slot = "fg" if val == 38 else "bg"
        if i + 1 >= len(params):
            return i
        mode = _param(params[i + 1])
        if mode == 5 and i + 2 < len(params):
            self._slots[slot] = f"\x1b[{val};5;{params[i + 2]}m"
            return i + 2
        if mode == 2 and i + 4 < len(params):
            r, g, b = params[i + 2 : i + 5]
            self._slots[slot] = f"\x1b[{val};2;{r};{g};{b}m"
            return i + 4
        return i + 1

    def clear(self) -> None:
        """Reset all tracked attributes to off."""
        self._slots.clear()

    def get_active_codes(self) -> str:
        """Return a string of ANSI codes that reactivate the current state."""
        return "".join(self._slots[s] for s in _SLOT_ORDER if s in self._slots)

    def has_active_codes(self) -> bool:
        return bool(self._slots)

    def get_line_end_reset(self) -> str:
        """Return a reset sequence if any attribute is active, else empty."""
        return RESET if self._slots else ""

    def get_reopen_codes(self) -> str:
        """Reset followed by the active codes, or empty when nothing is active."""
        if not self._slots:
            return ""
        return RESET + self.get_active_codes()


def close_open_styles(text: str) -> str:
    """Append a reset to *text* if it leaves an SGR attribute switched on."""
    if "\x1b[" not in text:
        return text
    tracker = AnsiCodeTracker()
    for chunk, is_escape in split_ansi(text):
        if is_escape:
            tracker.process(chunk)
    return text + tracker.get_line_end_reset()
