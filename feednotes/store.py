"""JSON-backed note store.

The whole feed lives in one JSON file: an array of note objects, newest
first.  The file is read wholesale at startup and written wholesale, and
atomically, on every save.  Loading never creates the file and never
recovers partially: a single bad record fails the whole load.
"""
from __future__ import annotations

import json
import logging
import os
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Older files carry nanosecond timestamps; datetime keeps microseconds.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class NoteStoreError(Exception):
    """Base class for note store failures."""


class NoteIOError(NoteStoreError):
    """The notes file is missing, unreadable or unwritable."""


class NoteParseError(NoteStoreError):
    """The notes file is not a valid JSON array of notes."""


def new_id() -> str:
    return uuid.uuid4().hex


def now() -> datetime:
    return datetime.now().astimezone()


def parse_timestamp(value: str) -> datetime:
    stamp = _FRACTION_RE.sub(r"\1", value.strip())
    if stamp.endswith("Z"):
        stamp = stamp[:-1] + "+00:00"
    parsed = datetime.fromisoformat(stamp)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


@dataclass
class Note:
    """A single note entry."""

    text: str
    id: str = field(default_factory=new_id)
    created: datetime = field(default_factory=now)
    modified: Optional[datetime] = None

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "id": self.id,
            "text": self.text,
            "date": self.created.isoformat(),
        }
        if self.modified is not None:
            data["modified"] = self.modified.isoformat()
        return data

    @classmethod
    def from_dict(cls, item: object) -> "Note":
        """Build a note from one decoded JSON record.

        Raises :class:`NoteParseError` when the record is malformed.
        """
        if not isinstance(item, dict):
            raise NoteParseError(f"expected a note object, got {type(item).__name__}")
        text = item.get("text")
        if not isinstance(text, str):
            raise NoteParseError("note is missing a string 'text' field")
        note_id = item.get("id")
        if note_id is None:
            note_id = new_id()
        elif not isinstance(note_id, (str, int)):
            raise NoteParseError(f"invalid note id: {note_id!r}")
        try:
            created = parse_timestamp(item["date"]) if "date" in item else now()
            modified = parse_timestamp(item["modified"]) if item.get("modified") else None
        except (TypeError, AttributeError, ValueError) as e:
            raise NoteParseError(f"invalid timestamp in note {note_id}: {e}") from e
        return cls(text=text, id=str(note_id), created=created, modified=modified)


def load_notes(path: PathLike) -> List[Note]:
    """Read every note from *path*, in file order.

    Both the canonical array and the older ``{"notes": [...]}`` wrapper are
    accepted.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise NoteIOError(f"notes file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise NoteParseError(f"notes file is not valid UTF-8: {path}") from e
    except json.JSONDecodeError as e:
        raise NoteParseError(f"malformed JSON in {path}: {e}") from e
    except OSError as e:
        raise NoteIOError(f"cannot read {path}: {e.strerror or e}") from e

    if isinstance(data, dict) and "notes" in data:
        data = data["notes"]
    if not isinstance(data, list):
        raise NoteParseError(f"{path} does not contain a list of notes")

    notes = []
    for position, item in enumerate(data):
        try:
            notes.append(Note.from_dict(item))
        except NoteParseError as e:
            raise NoteParseError(f"{path}: record {position}: {e}") from e

    ids = [n.id for n in notes]
    if len(set(ids)) != len(ids):
        raise NoteParseError(f"{path} contains duplicate note ids")
    logger.info("Loaded %d notes from %s", len(notes), path)
    return notes


def save_notes(path: PathLike, notes: List[Note]) -> None:
    """Save *notes* atomically to *path*.

    The array is written to a temporary file next to *path* and moved into
    place, so a failed save never leaves a truncated file behind.
    """
    path = os.fspath(path)
    data = [n.to_dict() for n in notes]
    tmp = path + ".tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.replace(tmp, path)
    except OSError as e:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise NoteIOError(f"cannot write {path}: {e.strerror or e}") from e
    logger.info("Saved %d notes to %s", len(notes), path)


class NoteStore:
    """Ordered, in-memory collection of notes bound to a file."""

    def __init__(self, path: PathLike, notes: Optional[List[Note]] = None) -> None:
        self.path = Path(path)
        self.notes: List[Note] = list(notes or [])
        self.dirty = False

    @classmethod
    def load(cls, path: PathLike) -> "NoteStore":
        return cls(path, load_notes(path))

    def save(self, path: Optional[PathLike] = None) -> None:
        """Write the store to *path*, defaulting to :attr:`path`."""
        save_notes(path if path is not None else self.path, self.notes)
        self.dirty = False

    def __len__(self) -> int:
        return len(self.notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self.notes)

    def __getitem__(self, index: int) -> Note:
        return self.notes[index]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def index_of(self, note_id: str) -> int:
        for i, note in enumerate(self.notes):
            if note.id == note_id:
                return i
        raise KeyError(note_id)

    def get(self, note_id: str) -> Note:
        return self.notes[self.index_of(note_id)]

    def matching(self, pattern: str) -> List[int]:
        """Indices of the notes whose text contains *pattern*."""
        if not pattern:
            return list(range(len(self.notes)))
        return [i for i, n in enumerate(self.notes) if pattern in n.text]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add(self, text: str) -> Note:
        """Insert a new note at the top of the feed."""
        note = Note(text)
        self.notes.insert(0, note)
        self.dirty = True
        return note

    def update(self, note_id: str, text: str) -> Note:
        note = self.get(note_id)
        if note.text != text:
            note.text = text
            note.modified = now()
            self.dirty = True
        return note

    def remove(self, note_id: str) -> Note:
        note = self.notes.pop(self.index_of(note_id))
        self.dirty = True
        return note

    def move(self, note_id: str, delta: int) -> int:
        """Move a note *delta* places, clamped to the list; return its new index."""
        index = self.index_of(note_id)
        target = max(0, min(len(self.notes) - 1, index + delta))
        if target != index:
            self.notes.insert(target, self.notes.pop(index))
            self.dirty = True
        return target
