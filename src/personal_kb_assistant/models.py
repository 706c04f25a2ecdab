from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List


class NoteType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    PDF = "pdf"
    URL = "url"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Note:
    owner_id: str
    title: str
    content: str = ""
    type: NoteType = NoteType.TEXT
    tags: List[str] = field(default_factory=list)
    extracted_text: str | None = None
    url: str | None = None
    is_favorite: bool = False
    fingerprint: List[float] | None = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @property
    def fingerprint_source(self) -> str:
        """Text the fingerprint is derived from: extracted text, then content, then title."""
        return self.extracted_text or self.content or self.title or ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "content": self.content,
            "type": self.type.value,
            "tags": list(self.tags),
            "extracted_text": self.extracted_text,
            "url": self.url,
            "is_favorite": self.is_favorite,
            "fingerprint": self.fingerprint,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Note":
        return cls(
            id=raw["id"],
            owner_id=raw["owner_id"],
            title=raw["title"],
            content=raw.get("content") or "",
            type=NoteType(raw.get("type", NoteType.TEXT.value)),
            tags=list(raw.get("tags") or []),
            extracted_text=raw.get("extracted_text"),
            url=raw.get("url"),
            is_favorite=bool(raw.get("is_favorite", False)),
            fingerprint=raw.get("fingerprint"),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )


@dataclass
class ScoredNote:
    note: Note
    similarity: float
    keyword_score: float = 0.0
    combined_score: float = 0.0
    title_matches: int = 0
    fallback: bool = False


@dataclass
class SourceCitation:
    note_id: str
    title: str
    type: NoteType
    similarity: float
    snippet: str


class AnswerStrategy(str, Enum):
    INFORMATIVE = "informative"
    GREETING = "greeting"
    NO_CONTEXT = "no_context"
    DEGRADED = "degraded"


@dataclass
class AnswerResult:
    query: str
    text: str
    strategy: AnswerStrategy
    sources: List[SourceCitation] = field(default_factory=list)


__all__ = [
    "AnswerResult",
    "AnswerStrategy",
    "Note",
    "NoteType",
    "ScoredNote",
    "SourceCitation",
]
