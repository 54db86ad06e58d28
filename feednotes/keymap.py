"""Key tokens and the composer's command tables.

Keys arrive as tokens: a single character, or one of the names in
:data:`NAMED_KEYS`.  A :class:`KeyMap` turns a stream of tokens into command
names, holding a pending prefix while a multi-key sequence such as ``dd``
or ``diw`` is being typed.
"""
from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

Sequence = Tuple[str, ...]

NAMED_KEYS = frozenset(
    ["ESC", "ENTER", "BACKSPACE", "DELETE", "TAB", "LEFT", "RIGHT", "UP", "DOWN", "HOME", "END"]
)

# Commands that act on the text buffer (method names on TextBuffer).
BUFFER_COMMANDS = frozenset(
    [
        "move_left",
        "move_right",
        "move_up",
        "move_down",
        "move_line_start",
        "move_first_nonblank",
        "move_line_end",
        "move_top",
        "move_bottom",
        "word_forward",
        "word_back",
        "word_end",
        "insert_newline",
        "insert_tab",
        "backspace",
        "delete_char",
        "delete_line",
        "delete_word_forward",
        "delete_word_back",
        "delete_inner_word",
        "indent_line",
        "dedent_line",
        "paste",
    ]
)

# Commands handled by the composer itself.
MODE_COMMANDS = frozenset(
    ["insert", "append", "append_end", "insert_head", "open_below", "open_above", "normal", "save", "abort", "apply"]
)

COMMANDS = BUFFER_COMMANDS | MODE_COMMANDS

NORMAL_BINDINGS: Dict[str, str] = {
    "h": "move_left",
    "LEFT": "move_left",
    "l": "move_right",
    "RIGHT": "move_right",
    "k": "move_up",
    "UP": "move_up",
    "j": "move_down",
    "DOWN": "move_down",
    "0": "move_line_start",
    "HOME": "move_line_start",
    "^": "move_first_nonblank",
    "$": "move_line_end",
    "END": "move_line_end",
    "gg": "move_top",
    "G": "move_bottom",
    "w": "word_forward",
    "b": "word_back",
    "e": "word_end",
    "x": "delete_char",
    "DELETE": "delete_char",
    "dd": "delete_line",
    "dw": "delete_word_forward",
    "db": "delete_word_back",
    "diw": "delete_inner_word",
    ">>": "indent_line",
    "<<": "dedent_line",
    "p": "paste",
    "i": "insert",
    "a": "append",
    "A": "append_end",
    "I": "insert_head",
    "o": "open_below",
    "O": "open_above",
    "W": "save",
    "BACKSPACE": "abort",
    "ENTER": "apply",
}

INSERT_BINDINGS: Dict[str, str] = {
    "ESC": "normal",
    "LEFT": "move_left",
    "RIGHT": "move_right",
    "UP": "move_up",
    "DOWN": "move_down",
    "HOME": "move_line_start",
    "END": "move_line_end",
    "BACKSPACE": "backspace",
    "DELETE": "delete_char",
    "ENTER": "insert_newline",
    "TAB": "insert_tab",
}


class KeyMapError(ValueError):
    """A binding names an unknown command or an empty key sequence."""


def parse_sequence(keys: str) -> Sequence:
    """``"dd"`` -> ``("d", "d")``; a named key is a single token."""
    if keys in NAMED_KEYS:
        return (keys,)
    return tuple(keys)


class KeyMap:
    """Resolve key tokens to command names."""

    def __init__(self, bindings: Mapping[str, str]) -> None:
        self.bindings: Dict[Sequence, str] = {}
        for keys, command in bindings.items():
            self.bind(keys, command)
        self.pending: Sequence = ()

    def bind(self, keys: str, command: str) -> None:
        seq = parse_sequence(keys)
        if not seq:
            raise KeyMapError("empty key sequence")
        if command not in COMMANDS:
            raise KeyMapError(f"unknown command {command!r} for key {keys!r}")
        self.bindings[seq] = command

    def unbind(self, keys: str) -> None:
        self.bindings.pop(parse_sequence(keys), None)

    def with_overrides(self, overrides: Optional[Mapping[str, Optional[str]]]) -> "KeyMap":
        """Copy of this keymap with *overrides* applied; ``None`` removes a key."""
        keymap = KeyMap({})
        keymap.bindings = dict(self.bindings)
        for keys, command in (overrides or {}).items():
            if command is None:
                keymap.unbind(keys)
            else:
                keymap.bind(keys, command)
        for seq in keymap.bindings:
            if keymap._is_prefix(seq):
                longer = next(b for b in keymap.bindings if len(b) > len(seq) and b[: len(seq)] == seq)
                raise KeyMapError(f"{''.join(seq)!r} can never fire: it starts the longer binding {''.join(longer)!r}")
        return keymap

    def _is_prefix(self, seq: Sequence) -> bool:
        return any(len(b) > len(seq) and b[: len(seq)] == seq for b in self.bindings)

    def feed(self, key: str) -> Optional[str]:
        """Consume one key; return a command once a sequence completes.

        Returns ``None`` while a prefix is pending and when the keys match
        nothing, in which case the pending prefix is dropped.
        """
        seq = self.pending + (key,)
        if self._is_prefix(seq):
            self.pending = seq
            return None
        self.pending = ()
        return self.bindings.get(seq)

    def reset(self) -> None:
        self.pending = ()

    def lookup(self, key: str) -> Optional[str]:
        """Single-key lookup without touching the pending prefix."""
        return self.bindings.get((key,))
