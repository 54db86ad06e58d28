"""Curses front end for feednotes.

:class:`FeedNotes` owns the note store and whichever view is active, the
feed or a composer, and swaps between them as the views ask.  Key handling
goes through :meth:`FeedNotes.dispatch`, which works on key tokens and does
not need a terminal; everything below the "Curses UI" marker draws.
"""
from __future__ import annotations

import curses
import locale
import logging
import os
from typing import Any, Dict, List, Optional, Tuple, Union

from feednotes.composer import Abort, Commit, ComposerView, Mode, Purpose, Result
from feednotes.config import ConfigError, get_default_config
from feednotes.display import clip_to_cells, display_width, pad_to_cells, visible_chars, wrap_to_cells
from feednotes.feed import Changed, Compose, FeedView, Quit, SaveRequested
from feednotes.keymap import INSERT_BINDINGS, NORMAL_BINDINGS, KeyMap, KeyMapError
from feednotes.store import Note, NoteIOError, NoteStore

logger = logging.getLogger(__name__)

MIN_HEIGHT = 6
MIN_WIDTH = 30
COMPOSER_WIDTH = 60
COMPOSER_HEIGHT = 10
COMPOSER_TOP = 10

CURSES_KEYS = {
    curses.KEY_LEFT: "LEFT",
    curses.KEY_RIGHT: "RIGHT",
    curses.KEY_UP: "UP",
    curses.KEY_DOWN: "DOWN",
    curses.KEY_HOME: "HOME",
    curses.KEY_END: "END",
    curses.KEY_BACKSPACE: "BACKSPACE",
    curses.KEY_DC: "DELETE",
    curses.KEY_ENTER: "ENTER",
    curses.KEY_RESIZE: "RESIZE",
}

CHAR_KEYS = {
    "\x1b": "ESC",
    "\n": "ENTER",
    "\r": "ENTER",
    "\x7f": "BACKSPACE",
    "\x08": "BACKSPACE",
    "\t": "TAB",
}

FEED_HINTS = "feednotes: q quit  j/k move  n new  i edit  / filter  dd delete  J/K reorder  s save"
NOTE_HINTS = "W save+exit  Backspace abort  i insert  Esc normal"
FILTER_HINTS = "Enter apply  Esc normal  Backspace (normal) abort"


def translate_key(ch: Union[int, str]) -> Optional[str]:
    """Map a ``get_wch`` result to a key token, or ``None`` to ignore it."""
    if isinstance(ch, str):
        if ch in CHAR_KEYS:
            return CHAR_KEYS[ch]
        return ch if ch.isprintable() else None
    return CURSES_KEYS.get(ch)


def build_keymaps(config: Dict[str, Any]) -> Tuple[KeyMap, KeyMap]:
    """Normal and Insert keymaps with the config's ``keys`` overrides applied."""
    keys = config.get("keys") or {}
    try:
        normal = KeyMap(NORMAL_BINDINGS).with_overrides(keys.get("normal"))
        insert = KeyMap(INSERT_BINDINGS).with_overrides(keys.get("insert"))
    except KeyMapError as e:
        raise ConfigError(f"invalid key binding: {e}") from e
    return normal, insert


class FeedNotes:
    """Own the note store and route keys to the active view."""

    def __init__(self, store: NoteStore, config: Optional[Dict[str, Any]] = None) -> None:
        self.store = store
        self.config = config or get_default_config()
        self.normal_keys, self.insert_keys = build_keymaps(self.config)
        self.feed = FeedView(store)
        self.view: Union[FeedView, ComposerView] = self.feed
        self.status = ""
        self.scroll = 0
        self.edit_top = 0
        self.edit_left = 0

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def persist(self) -> bool:
        """Save the store, reporting failures in the status line.

        The store stays dirty after a failed save so it can be retried.
        """
        try:
            self.store.save()
        except NoteIOError as e:
            logger.exception("Saving %s failed", self.store.path)
            self.status = f"Save failed: {e} (press s to retry)"
            return False
        self.status = f"Saved {len(self.store)} notes"
        return True

    def quit(self, save: bool) -> bool:
        """Return True when it is fine to exit."""
        if save and self.store.dirty:
            return self.persist()
        if self.store.dirty:
            logger.warning("Quitting with unsaved changes")
        return True

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch(self, key: str) -> bool:
        """Feed one key token to the active view; False means exit."""
        if isinstance(self.view, ComposerView):
            result = self.view.handle_key(key)
            if result is not None:
                self.close_composer(result)
            return True

        action = self.feed.handle_key(key)
        if action is None:
            return True
        self.status = ""
        if isinstance(action, Quit):
            return not self.quit(action.save)
        if isinstance(action, Compose):
            self.open_composer(action)
        elif isinstance(action, SaveRequested):
            self.persist()
        elif isinstance(action, Changed):
            if self.persist() and action.message:
                self.status = action.message
        return True

    def open_composer(self, action: Compose) -> None:
        editor = self.config["editor"]
        start_mode = Mode.INSERT if editor["start_mode"] == "insert" else Mode.NORMAL
        self.view = ComposerView(
            action.purpose,
            action.text,
            action.note_id,
            normal_keys=self.normal_keys,
            insert_keys=self.insert_keys,
            start_mode=start_mode,
            indent_width=editor["indent_width"],
        )
        self.edit_top = self.edit_left = 0
        logger.debug("Opened composer: %s", self.view.title)

    def close_composer(self, result: Result) -> None:
        composer = self.view
        assert isinstance(composer, ComposerView)
        self.view = self.feed
        if isinstance(result, Abort):
            self.status = "Discarded"
            logger.debug("Composer aborted (%s)", composer.purpose.name)
            return
        assert isinstance(result, Commit)
        self.commit(composer, result.text)

    def commit(self, composer: ComposerView, text: str) -> None:
        if composer.purpose is Purpose.FILTER:
            self.feed.set_filter(text)
            self.status = f"{len(self.feed.refs)} matching" if text else ""
            return

        if composer.purpose is Purpose.NEW:
            if not text.strip():
                self.status = "Empty note discarded"
                return
            note = self.store.add(text)
            self.feed.refresh()
            self.feed.select_note(note.id)
            logger.info("Added note %s", note.id)
        else:
            assert composer.note_id is not None
            self.store.update(composer.note_id, text)
            self.feed.refresh()
            logger.info("Updated note %s", composer.note_id)

        if self.store.dirty:
            self.persist()

    # ------------------------------------------------------------------
    # Curses UI helpers
    # ------------------------------------------------------------------
    def run(self) -> None:
        locale.setlocale(locale.LC_ALL, "")
        os.environ.setdefault("ESCDELAY", "25")
        curses.wrapper(self._curses_main)

    def _card_width(self, w: int) -> int:
        return max(MIN_WIDTH - 2, min(self.config["feed"]["width"], w - 2))

    def _card_rows(self, note: Note, width: int) -> List[str]:
        return wrap_to_cells(note.text, width - 4) or [""]

    def _layout(self, width: int) -> List[Tuple[int, int]]:
        """(top row, height) of every visible card, in feed order."""
        spans = []
        row = 0
        for index in self.feed.refs:
            height = len(self._card_rows(self.store[index], width)) + 2
            spans.append((row, height))
            row += height
        return spans

    def _ensure_visible(self, spans: List[Tuple[int, int]], height: int) -> None:
        if self.feed.selected is None:
            self.scroll = 0
            return
        top, card_h = spans[self.feed.selected]
        if top < self.scroll or card_h > height:
            self.scroll = top
        elif top + card_h > self.scroll + height:
            self.scroll = top + card_h - height

    def _draw_header(self, win: curses.window, w: int) -> None:
        if isinstance(self.view, ComposerView):
            hints = FILTER_HINTS if self.view.purpose is Purpose.FILTER else NOTE_HINTS
        else:
            hints = FEED_HINTS
        win.addstr(0, 0, clip_to_cells(hints, w - 1), curses.A_BOLD)

    def _draw_footer(self, win: curses.window, h: int, w: int) -> None:
        parts = [f"{self.store.path}{' [+]' if self.store.dirty else ''}"]
        parts.append(f"{len(self.feed.refs)}/{len(self.store)} notes")
        if self.feed.pattern:
            parts.append(f"filter: {self.feed.pattern}")
        if self.status:
            parts.append(self.status)
        win.addstr(h - 1, 0, clip_to_cells(" | ".join(parts), w - 1))

    def _draw_card(self, win, note: Note, y: int, x: int, width: int, top: int, bottom: int, selected: bool) -> None:
        title = note.created.strftime(self.config["feed"]["date_format"])
        title = clip_to_cells(f" {title} ", width - 4)
        inner = width - 2
        lines = ["╭─" + title + "─" * (inner - 1 - display_width(title)) + "╮"]
        lines += ["│ " + pad_to_cells(row, width - 4) + " │" for row in self._card_rows(note, width)]
        lines.append("╰" + "─" * inner + "╯")
        attr = curses.A_REVERSE if selected else 0
        for offset, line in enumerate(lines):
            if top <= y + offset < bottom:
                win.addstr(y + offset, x, line, attr)

    def _draw_feed(self, win: curses.window, h: int, w: int) -> None:
        width = self._card_width(w)
        x = max(0, (w - width) // 2)
        body = h - 2
        if not self.feed.refs:
            msg = "No notes match the filter." if self.feed.pattern else "No notes yet. Press n to write one."
            win.addstr(h // 2, max(0, (w - display_width(msg)) // 2), clip_to_cells(msg, w - 1))
            return
        spans = self._layout(width)
        self._ensure_visible(spans, body)
        for position, (top, card_h) in enumerate(spans):
            if top + card_h <= self.scroll:
                continue
            y = 1 + top - self.scroll
            if y >= h - 1:
                break
            note = self.store[self.feed.refs[position]]
            self._draw_card(win, note, y, x, width, 1, h - 1, position == self.feed.selected)

    def _draw_composer(self, win: curses.window, h: int, w: int) -> Tuple[int, int]:
        """Draw the composer box; return the screen position of the cursor."""
        composer = self.view
        assert isinstance(composer, ComposerView)
        box_h = 3 if composer.purpose is Purpose.FILTER else min(COMPOSER_HEIGHT, h - 2)
        box_w = min(COMPOSER_WIDTH, w - 2)
        y0 = max(1, min(COMPOSER_TOP, h - 1 - box_h))
        x0 = (w - box_w) // 2
        inner_h, inner_w = box_h - 2, box_w - 2

        buf = composer.buffer
        if buf.row < self.edit_top:
            self.edit_top = buf.row
        elif buf.row >= self.edit_top + inner_h:
            self.edit_top = buf.row - inner_h + 1
        if buf.col < self.edit_left:
            self.edit_left = buf.col
        while display_width(visible_chars(buf.line[self.edit_left : buf.col])) >= inner_w:
            self.edit_left += 1

        title = clip_to_cells(f" {composer.title} ", inner_w - 1)
        win.addstr(y0, x0, "╭─" + title + "─" * (inner_w - 1 - display_width(title)) + "╮")
        for i in range(inner_h):
            row = self.edit_top + i
            text = visible_chars(buf.lines[row][self.edit_left :]) if row < len(buf.lines) else ""
            win.addstr(y0 + 1 + i, x0, "│" + pad_to_cells(text, inner_w) + "│")
        win.addstr(y0 + box_h - 1, x0, "╰" + "─" * inner_w + "╯")

        cursor_x = x0 + 1 + display_width(visible_chars(buf.line[self.edit_left : buf.col]))
        return y0 + 1 + buf.row - self.edit_top, cursor_x

    def draw(self, win: curses.window, h: int, w: int) -> None:
        self._draw_header(win, w)
        self._draw_footer(win, h, w)
        if isinstance(self.view, ComposerView):
            curses.curs_set(1)
            y, x = self._draw_composer(win, h, w)
            win.move(y, x)
        else:
            curses.curs_set(0)
            self._draw_feed(win, h, w)

    def _curses_main(self, stdscr: curses.window) -> None:
        curses.curs_set(0)
        stdscr.keypad(True)
        curses.use_default_colors()

        while True:
            h, w = stdscr.getmaxyx()
            stdscr.erase()
            if h < MIN_HEIGHT or w < MIN_WIDTH:
                msg = f"Window too small ({w}x{h}). Enlarge to continue."
                stdscr.addstr(h // 2, max(0, (w - display_width(msg)) // 2), clip_to_cells(msg, w - 1))
                stdscr.refresh()
                key = translate_key(stdscr.get_wch())
                if key == "Q":
                    break
                continue

            self.draw(stdscr, h, w)
            stdscr.refresh()

            key = translate_key(stdscr.get_wch())
            if key is None or key == "RESIZE":
                continue
            if not self.dispatch(key):
                break
