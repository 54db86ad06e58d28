from pathlib import Path
import sys

import pytest

# Ensure project root is on the import path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from feednotes.keymap import NORMAL_BINDINGS, KeyMap, KeyMapError, parse_sequence


def feed_all(keymap, keys):
    return [keymap.feed(k) for k in keys]


def test_parse_sequence():
    assert parse_sequence("dd") == ("d", "d")
    assert parse_sequence("BACKSPACE") == ("BACKSPACE",)
    assert parse_sequence(">>") == (">", ">")


def test_multi_key_sequences():
    keymap = KeyMap(NORMAL_BINDINGS)
    assert feed_all(keymap, ["d", "d"]) == [None, "delete_line"]
    assert feed_all(keymap, ["d", "i", "w"]) == [None, None, "delete_inner_word"]
    assert feed_all(keymap, ["g", "g"]) == [None, "move_top"]
    assert keymap.feed("BACKSPACE") == "abort"


def test_unmatched_key_clears_pending_prefix():
    keymap = KeyMap(NORMAL_BINDINGS)
    assert feed_all(keymap, ["d", "z"]) == [None, None]
    assert keymap.pending == ()
    assert keymap.feed("x") == "delete_char"


def test_overrides_add_replace_and_remove():
    keymap = KeyMap(NORMAL_BINDINGS).with_overrides({"Z": "delete_line", "x": None, "W": "abort"})
    assert keymap.feed("Z") == "delete_line"
    assert keymap.feed("x") is None
    assert keymap.feed("W") == "abort"
    # the original table is untouched
    assert KeyMap(NORMAL_BINDINGS).feed("x") == "delete_char"


def test_unknown_command_is_rejected():
    with pytest.raises(KeyMapError):
        KeyMap({"q": "launch_rockets"})


def test_override_shadowed_by_longer_binding_is_rejected():
    with pytest.raises(KeyMapError, match="can never fire"):
        KeyMap(NORMAL_BINDINGS).with_overrides({"d": "delete_char"})
    with pytest.raises(KeyMapError):
        KeyMap(NORMAL_BINDINGS).with_overrides({"xy": "delete_line"})
    # removing the longer bindings makes the single key usable
    keymap = KeyMap({"x": "delete_char", "xy": "delete_line"}).with_overrides({"xy": None})
    assert keymap.feed("x") == "delete_char"
