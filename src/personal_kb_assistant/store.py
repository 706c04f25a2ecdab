from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from .errors import NoteNotFoundError
from .models import Note, NoteType
from .vectorizer import Vectorizer

logger = logging.getLogger(__name__)

_FINGERPRINT_FIELDS = {"title", "content", "extracted_text"}
_UPDATABLE_FIELDS = _FINGERPRINT_FIELDS | {"type", "tags", "url", "is_favorite"}


class NoteStore(Protocol):
    def find_notes_by_owner(self, owner_id: str, note_ids: Optional[Sequence[str]] = None) -> List[Note]:
        ...

    def fingerprint_dimension(self) -> int:
        ...


class InMemoryNoteStore:
    """
    Notes kept in insertion order, fingerprinted on every write.

    A note is fingerprinted before it is inserted (or before an update is
    applied), so searches never see a note whose fingerprint is stale.
    Writers are serialised by `_write_lock`; `_lock` only guards the dict,
    so reads never wait on a fingerprint being computed.
    """

    def __init__(self, vectorizer: Vectorizer) -> None:
        self.vectorizer = vectorizer
        self._notes: Dict[str, Note] = {}
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

    def fingerprint_dimension(self) -> int:
        return self.vectorizer.dimension

    def _fingerprint(self, note: Note) -> List[float] | None:
        text = note.fingerprint_source
        if not text.strip():
            return None
        return self.vectorizer.vectorize(text).tolist()

    def add(self, note: Note) -> Note:
        with self._write_lock:
            note.fingerprint = self._fingerprint(note)
            with self._lock:
                self._notes[note.id] = note
        return note

    def create(
        self,
        owner_id: str,
        title: str,
        content: str = "",
        type: NoteType = NoteType.TEXT,
        tags: Iterable[str] = (),
        extracted_text: str | None = None,
        url: str | None = None,
        is_favorite: bool = False,
    ) -> Note:
        note = Note(
            owner_id=owner_id,
            title=title.strip(),
            content=content,
            type=NoteType(type),
            tags=[t.strip() for t in tags if t.strip()],
            extracted_text=extracted_text,
            url=url,
            is_favorite=is_favorite,
        )
        return self.add(note)

    def get(self, note_id: str, owner_id: str) -> Note:
        with self._lock:
            note = self._notes.get(note_id)
        if note is None or note.owner_id != owner_id:
            raise NoteNotFoundError(note_id)
        return note

    def update(self, note_id: str, owner_id: str, **changes) -> Note:
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot update note fields: {', '.join(sorted(unknown))}")

        if "type" in changes:
            changes["type"] = NoteType(changes["type"])
        if "tags" in changes:
            changes["tags"] = [t.strip() for t in changes["tags"] if t.strip()]

        with self._write_lock:
            current = self.get(note_id, owner_id)
            updated = replace(current, **changes, updated_at=datetime.now(timezone.utc))
            if _FINGERPRINT_FIELDS & set(changes):
                updated.fingerprint = self._fingerprint(updated)
            with self._lock:
                self._notes[note_id] = updated
        return updated

    def delete(self, note_id: str, owner_id: str) -> None:
        with self._write_lock:
            self.get(note_id, owner_id)
            with self._lock:
                del self._notes[note_id]

    def _owned(self, owner_id: str) -> List[Note]:
        with self._lock:
            return [n for n in self._notes.values() if n.owner_id == owner_id]

    def find_notes_by_owner(self, owner_id: str, note_ids: Optional[Sequence[str]] = None) -> List[Note]:
        notes = self._owned(owner_id)
        if note_ids:
            wanted = set(note_ids)
            notes = [n for n in notes if n.id in wanted]
        return notes

    def list_notes(
        self,
        owner_id: str,
        tag: str | None = None,
        note_type: NoteType | str | None = None,
        favorite: bool | None = None,
    ) -> List[Note]:
        notes = self._owned(owner_id)
        if tag is not None:
            notes = [n for n in notes if tag in n.tags]
        if note_type is not None:
            wanted_type = NoteType(note_type)
            notes = [n for n in notes if n.type is wanted_type]
        if favorite is not None:
            notes = [n for n in notes if n.is_favorite == favorite]
        return sorted(notes, key=lambda n: n.created_at, reverse=True)

    def all_tags(self, owner_id: str) -> List[str]:
        """Distinct non-empty tags across the owner's notes, sorted."""
        return sorted({tag for note in self._owned(owner_id) for tag in note.tags if tag})

    def text_search(self, owner_id: str, query: str, limit: int = 10) -> List[Note]:
        """Case-insensitive substring search over title, content, tags and extracted text."""
        needle = query.lower().strip()
        if not needle:
            return []
        hits = []
        for note in self.list_notes(owner_id):
            fields = [note.title, note.content or "", note.extracted_text or "", *note.tags]
            if any(needle in f.lower() for f in fields):
                hits.append(note)
                if len(hits) >= limit:
                    break
        return hits

    def __len__(self) -> int:
        with self._lock:
            return len(self._notes)

    def save(self, path: Path) -> None:
        with self._lock:
            payload = [n.to_dict() for n in self._notes.values()]
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump({"dimension": self.fingerprint_dimension(), "notes": payload}, f, indent=2)
        logger.debug("Saved %d notes to %s", len(payload), path)

    @classmethod
    def load(cls, path: Path, vectorizer: Vectorizer) -> "InMemoryNoteStore":
        store = cls(vectorizer)
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)

        dimension = raw.get("dimension")
        refingerprint = dimension != vectorizer.dimension
        if refingerprint:
            logger.warning(
                "Snapshot %s was fingerprinted with dimension %s, recomputing for %d",
                path,
                dimension,
                vectorizer.dimension,
            )

        for item in raw.get("notes", []):
            note = Note.from_dict(item)
            if refingerprint:
                store.add(note)
            else:
                store._notes[note.id] = note
        return store


__all__ = ["InMemoryNoteStore", "NoteStore"]
