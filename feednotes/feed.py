"""Feed view: the scrollable list of notes."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from feednotes.composer import Purpose
from feednotes.store import Note, NoteStore

logger = logging.getLogger(__name__)


@dataclass
class Quit:
    save: bool = True


@dataclass
class Compose:
    purpose: Purpose
    text: str = ""
    note_id: Optional[str] = None


@dataclass
class SaveRequested:
    pass


@dataclass
class Changed:
    """The store was mutated from the feed and should be persisted."""

    message: str = ""


Action = Union[Quit, Compose, SaveRequested, Changed]


class FeedView:
    """Filtered, selectable view over a :class:`NoteStore`.

    ``refs`` holds the store indices visible under the current filter and
    ``selected`` indexes into ``refs``; it is ``None`` only when nothing is
    visible.
    """

    def __init__(self, store: NoteStore, pattern: str = "") -> None:
        self.store = store
        self.pattern = pattern
        self.refs: List[int] = []
        self.selected: Optional[int] = None
        self._pending = ""
        self.refresh()

    def refresh(self) -> None:
        self.refs = self.store.matching(self.pattern)
        if not self.refs:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        else:
            self.selected = max(0, min(self.selected, len(self.refs) - 1))

    def set_filter(self, pattern: str) -> None:
        self.pattern = pattern
        self.selected = None
        self.refresh()
        logger.debug("Filter %r matches %d notes", pattern, len(self.refs))

    @property
    def selected_note(self) -> Optional[Note]:
        if self.selected is None:
            return None
        return self.store[self.refs[self.selected]]

    def select_note(self, note_id: str) -> None:
        """Move the selection onto *note_id* if it is visible."""
        index = self.store.index_of(note_id)
        if index in self.refs:
            self.selected = self.refs.index(index)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def next(self) -> None:
        if self.selected is not None:
            self.selected = min(self.selected + 1, len(self.refs) - 1)

    def previous(self) -> None:
        if self.selected is not None:
            self.selected = max(self.selected - 1, 0)

    def first(self) -> None:
        if self.selected is not None:
            self.selected = 0

    def last(self) -> None:
        if self.selected is not None:
            self.selected = len(self.refs) - 1

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def delete_selected(self) -> Optional[Note]:
        note = self.selected_note
        if note is None:
            return None
        self.store.remove(note.id)
        self.refresh()
        return note

    def move_selected(self, delta: int) -> bool:
        """Reorder the selected note in the store; only without a filter."""
        note = self.selected_note
        if note is None or self.pattern:
            return False
        before = self.store.index_of(note.id)
        after = self.store.move(note.id, delta)
        self.refresh()
        self.select_note(note.id)
        return after != before

    def handle_key(self, key: str) -> Optional[Action]:
        if self._pending == "d":
            self._pending = ""
            if key == "d" and self.delete_selected() is not None:
                return Changed("Note deleted")
            return None

        if key == "q":
            return Quit(save=True)
        if key == "Q":
            return Quit(save=False)
        if key in ("j", "DOWN"):
            self.next()
        elif key in ("k", "UP"):
            self.previous()
        elif key in ("g", "HOME"):
            self.first()
        elif key in ("G", "END"):
            self.last()
        elif key == "n":
            return Compose(Purpose.NEW)
        elif key in ("i", "ENTER"):
            note = self.selected_note
            if note is not None:
                return Compose(Purpose.EDIT, note.text, note.id)
        elif key == "/":
            return Compose(Purpose.FILTER, self.pattern)
        elif key == "ESC":
            if self.pattern:
                self.set_filter("")
        elif key == "d":
            if self.selected is not None:
                self._pending = "d"
        elif key == "J":
            if self.move_selected(1):
                return Changed()
        elif key == "K":
            if self.move_selected(-1):
                return Changed()
        elif key == "s":
            return SaveRequested()
        return None
