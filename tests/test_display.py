from pathlib import Path
import sys

# Ensure project root is on the import path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from feednotes.display import clip_to_cells, display_width, pad_to_cells, visible, visible_chars, wrap_to_cells


def test_wide_characters():
    assert display_width("abc") == 3
    assert display_width("日本") == 4
    assert clip_to_cells("日本語", 5) == "日本"
    assert pad_to_cells("日本", 5) == "日本 "


def test_wrap_keeps_words_together():
    assert wrap_to_cells("hello world", 5) == ["hello", "world"]
    assert wrap_to_cells("a b c", 3) == ["a b", "c"]


def test_wrap_splits_long_words_and_keeps_blank_lines():
    assert wrap_to_cells("abcdefgh", 3) == ["abc", "def", "gh"]
    assert wrap_to_cells("one\n\ntwo", 10) == ["one", "", "two"]


def test_tabs_and_control_characters_stay_inside_the_card():
    assert visible("a\tb") == "a   b"
    assert visible("bell\x07") == "bell?"
    assert wrap_to_cells("\tx\x1b[2J", 10) == ["    x?[2J"]
    assert visible_chars("a\tb") == "a b"
