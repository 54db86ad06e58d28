"""Unicode cell-width helpers used by the curses renderer."""
from __future__ import annotations

from typing import List

from wcwidth import wcwidth


def char_width(ch: str) -> int:
    """Cell width of a single character; control characters count as zero."""
    return max(wcwidth(ch), 0)


def display_width(s: str) -> int:
    """Return the display width of *s* using :func:`wcwidth`.

    Negative widths from ``wcwidth`` are treated as zero.
    """
    return sum(char_width(ch) for ch in s)


def clip_to_cells(text: str, max_cells: int) -> str:
    """Clip ``text`` so it occupies at most ``max_cells`` display cells."""
    width = 0
    result_chars: List[str] = []
    for ch in text:
        w = char_width(ch)
        if width + w > max_cells:
            break
        result_chars.append(ch)
        width += w
    return "".join(result_chars)


def pad_to_cells(text: str, cells: int) -> str:
    """Clip or right-pad ``text`` with spaces to exactly ``cells`` cells."""
    clipped = clip_to_cells(text, cells)
    return clipped + " " * (cells - display_width(clipped))


def visible(text: str, tab_size: int = 4) -> str:
    """Expand tabs and replace other control characters with ``?``."""
    return "".join(ch if ch.isprintable() else "?" for ch in text.expandtabs(tab_size))


def visible_chars(text: str) -> str:
    """Replace each control character with one space, keeping indices aligned."""
    return "".join(ch if ch.isprintable() else " " for ch in text)


def wrap_to_cells(text: str, max_cells: int) -> List[str]:
    """Hard-wrap every line of ``text`` into rows of at most ``max_cells``.

    Words are kept together when they fit on a row; longer words are split.
    Empty lines are preserved as empty rows.  Tabs are expanded and
    control characters replaced, see :func:`visible`.
    """
    if max_cells <= 0:
        return []
    rows: List[str] = []
    for line in text.split("\n"):
        line = visible(line)
        row = ""
        width = 0
        for word in _split_keep_spaces(line):
            w = display_width(word)
            if width + w <= max_cells:
                row += word
                width += w
                continue
            if row and not word.isspace() and w <= max_cells:
                rows.append(row.rstrip(" "))
                row, width = word, w
                continue
            for ch in word:
                cw = char_width(ch)
                if width + cw > max_cells:
                    rows.append(row)
                    row, width = "", 0
                    if ch == " ":
                        continue
                row += ch
                width += cw
        rows.append(row)
    return rows


def _split_keep_spaces(line: str) -> List[str]:
    parts: List[str] = []
    current = ""
    for ch in line:
        if current and (ch == " ") != (current[-1] == " "):
            parts.append(current)
            current = ""
        current += ch
    if current:
        parts.append(current)
    return parts
