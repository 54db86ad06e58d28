"""Line-based text buffer behind the composer.

Every operation is total: motions and edits never fail, they clamp the
cursor to the buffer instead.  The cursor column may sit one past the last
character of a line so that text can be appended.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

INDENT_WIDTH = 4

SPACE, WORD, PUNCT = 0, 1, 2


def char_class(ch: str) -> int:
    if ch.isspace():
        return SPACE
    if ch.isalnum() or ch == "_":
        return WORD
    return PUNCT


def first_nonblank(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


@dataclass
class Register:
    text: str = ""
    linewise: bool = False


@dataclass
class TextBuffer:
    lines: List[str] = field(default_factory=lambda: [""])
    row: int = 0
    col: int = 0
    preferred_col: int = 0
    indent_width: int = INDENT_WIDTH
    register: Register = field(default_factory=Register)

    def __post_init__(self) -> None:
        if not self.lines:
            self.lines = [""]
        self.clamp()

    @classmethod
    def from_text(cls, text: str, **kwargs) -> "TextBuffer":
        return cls(lines=text.split("\n"), **kwargs)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def line(self) -> str:
        return self.lines[self.row]

    @property
    def cursor(self) -> Tuple[int, int]:
        return self.row, self.col

    def clamp(self) -> None:
        self.row = max(0, min(self.row, len(self.lines) - 1))
        self.col = max(0, min(self.col, len(self.lines[self.row])))

    def _set_col(self, col: int) -> None:
        self.col = col
        self.clamp()
        self.preferred_col = self.col

    def _set_line(self, text: str) -> None:
        self.lines[self.row] = text

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------
    def move_left(self) -> None:
        self._set_col(self.col - 1)

    def move_right(self) -> None:
        self._set_col(self.col + 1)

    def move_up(self) -> None:
        self.row -= 1
        self.col = self.preferred_col
        self.clamp()

    def move_down(self) -> None:
        self.row += 1
        self.col = self.preferred_col
        self.clamp()

    def move_line_start(self) -> None:
        self._set_col(0)

    def move_first_nonblank(self) -> None:
        self._set_col(first_nonblank(self.line))

    def move_line_end(self) -> None:
        self._set_col(len(self.line))

    def move_top(self) -> None:
        self.row = 0
        self._set_col(first_nonblank(self.line))

    def move_bottom(self) -> None:
        self.row = len(self.lines) - 1
        self._set_col(first_nonblank(self.line))

    def _word_forward_target(self) -> Tuple[int, int]:
        row, col = self.row, self.col
        line = self.lines[row]
        if col < len(line):
            cls = char_class(line[col])
            if cls != SPACE:
                while col < len(line) and char_class(line[col]) == cls:
                    col += 1
            while col < len(line) and line[col].isspace():
                col += 1
            if col < len(line):
                return row, col
        # past the last word of the line: continue on the next non-empty text
        while row + 1 < len(self.lines):
            row += 1
            line = self.lines[row]
            col = first_nonblank(line)
            if col < len(line) or not line:
                return row, col
        return row, len(self.lines[row])

    def word_forward(self) -> None:
        self.row, col = self._word_forward_target()
        self._set_col(col)

    def _word_back_target(self) -> Tuple[int, int]:
        row, col = self.row, self.col
        line = self.lines[row]
        while col > 0 and line[col - 1].isspace():
            col -= 1
        while col == 0 and row > 0:
            row -= 1
            line = self.lines[row]
            col = len(line)
            while col > 0 and line[col - 1].isspace():
                col -= 1
            if not line:
                return row, 0
        if col > 0:
            cls = char_class(line[col - 1])
            while col > 0 and char_class(line[col - 1]) == cls:
                col -= 1
        return row, col

    def word_back(self) -> None:
        self.row, col = self._word_back_target()
        self._set_col(col)

    def word_end(self) -> None:
        row, col = self.row, self.col + 1
        line = self.lines[row]
        while True:
            while col < len(line) and line[col].isspace():
                col += 1
            if col < len(line) or row + 1 >= len(self.lines):
                break
            row += 1
            line = self.lines[row]
            col = 0
        if col >= len(line):
            return
        cls = char_class(line[col])
        while col + 1 < len(line) and char_class(line[col + 1]) == cls:
            col += 1
        self.row = row
        self._set_col(col)

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------
    def insert_text(self, text: str) -> None:
        """Insert *text* at the cursor; embedded newlines split the line."""
        for i, chunk in enumerate(text.split("\n")):
            if i:
                self.insert_newline()
            line = self.line
            self._set_line(line[: self.col] + chunk + line[self.col :])
            self._set_col(self.col + len(chunk))

    def insert_newline(self) -> None:
        line = self.line
        self._set_line(line[: self.col])
        self.lines.insert(self.row + 1, line[self.col :])
        self.row += 1
        self._set_col(0)

    def insert_tab(self) -> None:
        self.insert_text(" " * self.indent_width)

    def open_below(self) -> None:
        self.lines.insert(self.row + 1, "")
        self.row += 1
        self._set_col(0)

    def open_above(self) -> None:
        self.lines.insert(self.row, "")
        self._set_col(0)

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------
    def _cut(self, start: int, end: int) -> None:
        line = self.line
        if start >= end:
            return
        self.register = Register(line[start:end])
        self._set_line(line[:start] + line[end:])
        self._set_col(start)

    def backspace(self) -> None:
        if self.col > 0:
            line = self.line
            self._set_line(line[: self.col - 1] + line[self.col :])
            self._set_col(self.col - 1)
            return
        if self.row == 0:
            return
        current = self.lines.pop(self.row)
        self.row -= 1
        col = len(self.line)
        self._set_line(self.line + current)
        self._set_col(col)

    def delete_char(self) -> None:
        self._cut(self.col, self.col + 1)

    def delete_line(self) -> None:
        removed = self.lines.pop(self.row)
        self.register = Register(removed, linewise=True)
        if not self.lines:
            self.lines = [""]
        self.clamp()
        self._set_col(first_nonblank(self.line))

    def delete_word_forward(self) -> None:
        row, col = self._word_forward_target()
        end = col if row == self.row else len(self.line)
        self._cut(self.col, end)

    def delete_word_back(self) -> None:
        row, col = self._word_back_target()
        start = col if row == self.row else 0
        self._cut(start, self.col)

    def delete_inner_word(self) -> None:
        line = self.line
        if not line:
            return
        col = min(self.col, len(line) - 1)
        cls = char_class(line[col])
        start = end = col
        while start > 0 and char_class(line[start - 1]) == cls:
            start -= 1
        while end < len(line) and char_class(line[end]) == cls:
            end += 1
        self._cut(start, end)

    # ------------------------------------------------------------------
    # Indentation and paste
    # ------------------------------------------------------------------
    def indent_line(self) -> None:
        self._set_line(" " * self.indent_width + self.line)
        self._set_col(self.col + self.indent_width)

    def dedent_line(self) -> None:
        line = self.line
        removed = min(self.indent_width, len(line) - len(line.lstrip(" ")))
        self._set_line(line[removed:])
        self._set_col(self.col - removed)

    def paste(self) -> None:
        """Paste the register after the cursor, or below the line if linewise."""
        reg = self.register
        if reg.linewise:
            pasted = reg.text.split("\n")
            self.lines[self.row + 1 : self.row + 1] = pasted
            self.row += 1
            self._set_col(first_nonblank(self.line))
            return
        if not reg.text:
            return
        if self.line:
            self._set_col(self.col + 1)
        self.insert_text(reg.text)
        self._set_col(self.col - 1)
