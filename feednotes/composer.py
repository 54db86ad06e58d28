"""Composer view: the modal editor used to write notes and filters."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from feednotes.buffer import INDENT_WIDTH, TextBuffer
from feednotes.keymap import BUFFER_COMMANDS, INSERT_BINDINGS, NAMED_KEYS, NORMAL_BINDINGS, KeyMap

logger = logging.getLogger(__name__)


class Mode(Enum):
    NORMAL = "Normal"
    INSERT = "Insert"
    FILTERING = "Filtering"


class Purpose(Enum):
    NEW = "New Note"
    EDIT = "Edit Note"
    FILTER = "Filtering"


@dataclass
class Commit:
    text: str


@dataclass
class Abort:
    pass


Result = Union[Commit, Abort]

# Commands that would add lines; a filter pattern is a single line.
MULTILINE_COMMANDS = frozenset(["insert_newline", "open_below", "open_above", "paste"])


class ComposerView:
    """Edit a buffer until the user saves (``W``) or aborts (Backspace)."""

    def __init__(
        self,
        purpose: Purpose,
        text: str = "",
        note_id: Optional[str] = None,
        normal_keys: Optional[KeyMap] = None,
        insert_keys: Optional[KeyMap] = None,
        start_mode: Mode = Mode.NORMAL,
        indent_width: int = INDENT_WIDTH,
    ) -> None:
        self.purpose = purpose
        self.note_id = note_id
        self.normal_keys = normal_keys or KeyMap(NORMAL_BINDINGS)
        self.insert_keys = insert_keys or KeyMap(INSERT_BINDINGS)
        self.normal_keys.reset()
        self.insert_keys.reset()
        if purpose is Purpose.FILTER:
            self.buffer = TextBuffer.from_text(text.replace("\n", " "), indent_width=indent_width)
            self.buffer.move_line_end()
            self.mode = Mode.FILTERING
        else:
            self.buffer = TextBuffer.from_text(text, indent_width=indent_width)
            self.mode = Mode.INSERT if start_mode is Mode.INSERT else Mode.NORMAL

    @property
    def title(self) -> str:
        return f"{self.purpose.value} ({self.mode.value})"

    @property
    def text(self) -> str:
        if self.purpose is Purpose.FILTER:
            return "".join(self.buffer.lines)
        return self.buffer.text

    # ------------------------------------------------------------------
    # Mode transitions
    # ------------------------------------------------------------------
    def enter_insert(self) -> None:
        self.mode = Mode.FILTERING if self.purpose is Purpose.FILTER else Mode.INSERT
        self.normal_keys.reset()
        self.insert_keys.reset()

    def enter_normal(self) -> None:
        self.mode = Mode.NORMAL
        self.normal_keys.reset()
        self.insert_keys.reset()

    # ------------------------------------------------------------------
    # Key handling
    # ------------------------------------------------------------------
    def handle_key(self, key: str) -> Optional[Result]:
        """Apply one key token; return a result when the composer is done."""
        if self.mode is Mode.NORMAL:
            command = self.normal_keys.feed(key)
            if command is None:
                return None
            return self.run(command)

        if self.mode is Mode.FILTERING and key == "ENTER":
            self._type(self.insert_keys.pending)
            self.insert_keys.reset()
            return Commit(self.text)

        prefix = self.insert_keys.pending
        command = self.insert_keys.feed(key)
        if command is None and prefix and not self.insert_keys.pending:
            # the typed prefix was text after all; retry the key on its own
            self._type(prefix)
            command = self.insert_keys.feed(key)
        if command is not None:
            return self.run(command)
        if not self.insert_keys.pending:
            self._type((key,))
        return None

    def _type(self, keys) -> None:
        for key in keys:
            if key not in NAMED_KEYS and key.isprintable():
                self.buffer.insert_text(key)

    def run(self, command: str) -> Optional[Result]:
        """Execute a named command from the command table."""
        buf = self.buffer
        if self.purpose is Purpose.FILTER and command in MULTILINE_COMMANDS:
            return None
        if command in BUFFER_COMMANDS:
            getattr(buf, command)()
            return None

        if command == "save":
            return Commit(self.text)
        if command == "abort":
            return Abort()
        if command == "apply":
            if self.purpose is Purpose.FILTER:
                return Commit(self.text)
            return None
        if command == "normal":
            self.enter_normal()
        elif command == "insert":
            self.enter_insert()
        elif command == "append":
            if buf.line:
                buf.move_right()
            self.enter_insert()
        elif command == "append_end":
            buf.move_line_end()
            self.enter_insert()
        elif command == "insert_head":
            buf.move_first_nonblank()
            self.enter_insert()
        elif command == "open_below":
            buf.open_below()
            self.enter_insert()
        elif command == "open_above":
            buf.open_above()
            self.enter_insert()
        else:
            logger.warning("Unhandled composer command %r", command)
        return None
