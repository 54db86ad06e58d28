from pathlib import Path
import sys

# Ensure project root is on the import path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from feednotes.composer import Abort, Commit, ComposerView, Mode, Purpose
from feednotes.keymap import INSERT_BINDINGS, KeyMap


def press(composer, *keys):
    result = None
    for key in keys:
        result = composer.handle_key(key)
    return result


def test_new_note_starts_in_normal_mode():
    composer = ComposerView(Purpose.NEW)
    assert composer.mode is Mode.NORMAL
    assert composer.title == "New Note (Normal)"


def test_insert_then_save():
    composer = ComposerView(Purpose.NEW)
    press(composer, "i", "h", "i", "ENTER", "y", "o")
    assert composer.mode is Mode.INSERT
    assert composer.text == "hi\nyo"
    assert press(composer, "W") is None  # W is text in Insert mode
    assert press(composer, "ESC") is None
    assert composer.mode is Mode.NORMAL
    assert press(composer, "W") == Commit("hi\nyoW")


def test_backspace_in_normal_aborts():
    composer = ComposerView(Purpose.EDIT, "keep", note_id="n1")
    press(composer, "A", "!", "ESC")
    assert composer.text == "keep!"
    assert press(composer, "BACKSPACE") == Abort()


def test_backspace_in_insert_deletes():
    composer = ComposerView(Purpose.EDIT, "abc", note_id="n1")
    assert press(composer, "A", "BACKSPACE") is None
    assert composer.text == "ab"
    assert composer.mode is Mode.INSERT


def test_normal_mode_commands():
    composer = ComposerView(Purpose.EDIT, "one\ntwo\nthree", note_id="n1")
    press(composer, "j", "d", "d")
    assert composer.text == "one\nthree"
    press(composer, "g", "g", "p")
    assert composer.text == "one\ntwo\nthree"
    press(composer, "o", "x", "ESC")
    assert composer.buffer.lines == ["one", "two", "x", "three"]
    press(composer, ">", ">")
    assert composer.buffer.lines[2] == "    x"


def test_insert_start_mode():
    composer = ComposerView(Purpose.NEW, start_mode=Mode.INSERT)
    press(composer, "a", "b")
    assert composer.mode is Mode.INSERT
    assert composer.text == "ab"


def test_filter_enters_filtering_mode_at_end():
    composer = ComposerView(Purpose.FILTER, "milk")
    assert composer.mode is Mode.FILTERING
    assert composer.title == "Filtering (Filtering)"
    assert press(composer, "s") is None
    assert press(composer, "ENTER") == Commit("milks")


def test_filter_normal_mode_round_trip():
    composer = ComposerView(Purpose.FILTER, "ab")
    press(composer, "ESC")
    assert composer.mode is Mode.NORMAL
    press(composer, "o", "0", "x")
    assert composer.buffer.lines == ["b"]
    press(composer, "i")
    assert composer.mode is Mode.FILTERING
    assert press(composer, "ESC", "BACKSPACE") == Abort()


def test_unknown_keys_are_ignored_in_normal_mode():
    composer = ComposerView(Purpose.EDIT, "text", note_id="n1")
    assert press(composer, "z", "Q", "RIGHT") is None
    assert composer.text == "text"
    assert composer.buffer.col == 1


def test_multi_key_insert_binding():
    insert_keys = KeyMap(INSERT_BINDINGS).with_overrides({"jk": "normal"})
    composer = ComposerView(Purpose.NEW, insert_keys=insert_keys)
    press(composer, "i", "h", "i", "j", "k")
    assert composer.mode is Mode.NORMAL
    assert composer.text == "hi"


def test_unfinished_insert_binding_is_typed_as_text():
    insert_keys = KeyMap(INSERT_BINDINGS).with_overrides({"jk": "normal"})
    composer = ComposerView(Purpose.NEW, insert_keys=insert_keys)
    press(composer, "i", "j", "x", "j", "j", "k")
    assert composer.mode is Mode.NORMAL
    assert composer.text == "jxj"
    press(composer, "A", "j", "ESC")
    assert composer.mode is Mode.NORMAL
    assert composer.text == "jxjj"


def test_filter_enter_flushes_pending_prefix():
    insert_keys = KeyMap(INSERT_BINDINGS).with_overrides({"jk": "normal"})
    composer = ComposerView(Purpose.FILTER, "ab", insert_keys=insert_keys)
    assert press(composer, "j", "ENTER") == Commit("abj")
