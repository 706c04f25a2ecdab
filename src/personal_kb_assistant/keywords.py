from __future__ import annotations

import string
from dataclasses import dataclass
from typing import List

from .config import RankingConfig
from .models import Note


@dataclass(frozen=True)
class KeywordMatch:
    score: float
    title_matches: int


def query_keywords(query: str, min_length: int = 3) -> List[str]:
    """Lowercase whitespace tokens of `query`, edge punctuation stripped, shorter ones dropped."""
    keywords: List[str] = []
    for raw in query.lower().split():
        token = raw.strip(string.punctuation)
        if len(token) >= min_length:
            keywords.append(token)
    return keywords


def _body_text(note: Note) -> str:
    return f"{note.content or ''} {note.extracted_text or ''}".lower()


def keyword_score(
    keywords: List[str],
    note: Note,
    cfg: RankingConfig | None = None,
) -> KeywordMatch:
    """
    Lexical relevance of `note` for the given query keywords.

    Each keyword is checked by substring containment against the title,
    the joined tags and the body (content plus extracted text, one bucket).
    """
    if cfg is None:
        cfg = RankingConfig()

    title = (note.title or "").lower()
    tags = " ".join(note.tags or []).lower()
    body = _body_text(note)

    score = 0.0
    title_matches = 0
    for keyword in keywords:
        if keyword in title:
            score += cfg.title_weight
            title_matches += 1
        if keyword in tags:
            score += cfg.tag_weight
        if keyword in body:
            score += cfg.content_weight

    return KeywordMatch(score=score, title_matches=title_matches)


def mentions_any(keywords: List[str], note: Note) -> bool:
    haystack = f"{note.title or ''} {note.content or ''} {note.extracted_text or ''}".lower()
    return any(keyword in haystack for keyword in keywords)


__all__ = ["KeywordMatch", "keyword_score", "mentions_any", "query_keywords"]
