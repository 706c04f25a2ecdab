from __future__ import annotations

import logging
from typing import Iterable, List

from .config import RankingConfig
from .keywords import keyword_score, mentions_any, query_keywords
from .models import Note, ScoredNote
from .similarity import cosine_similarity
from .vectorizer import HashingVectorizer, Vectorizer

logger = logging.getLogger(__name__)

_DEFAULT_FLOOR = object()


def score_note(
    note: Note,
    query_vector,
    keywords: List[str],
    cfg: RankingConfig,
) -> ScoredNote:
    similarity = cosine_similarity(query_vector, note.fingerprint)
    match = keyword_score(keywords, note, cfg)
    title_bonus = match.title_matches * cfg.title_bonus if match.title_matches > 0 else 0.0
    combined = (
        similarity * cfg.embedding_weight
        + match.score * cfg.keyword_weight
        + title_bonus
    )
    return ScoredNote(
        note=note,
        similarity=similarity,
        keyword_score=match.score,
        combined_score=combined,
        title_matches=match.title_matches,
    )


def _fallback(
    notes: List[Note],
    keywords: List[str],
    limit: int,
    cfg: RankingConfig,
) -> List[ScoredNote]:
    if not keywords:
        return []
    matched = [n for n in notes if mentions_any(keywords, n)][:limit]
    return [
        ScoredNote(note=n, similarity=cfg.fallback_similarity, fallback=True)
        for n in matched
    ]


def rank_notes(
    query: str,
    notes: Iterable[Note],
    limit: int,
    cfg: RankingConfig | None = None,
    vectorizer: Vectorizer | None = None,
    min_score=_DEFAULT_FLOOR,
) -> List[ScoredNote]:
    """
    Order `notes` by relevance to `query`, returning at most `limit` entries.

    Notes whose combined score does not exceed `min_score` are dropped
    (`None` keeps everything; the default is `cfg.chat_min_score`). Equal
    scores keep the input order. When nothing survives, notes mentioning any
    query keyword are returned unscored with `cfg.fallback_similarity`.
    """
    if cfg is None:
        cfg = RankingConfig()
    if vectorizer is None:
        vectorizer = HashingVectorizer()
    if min_score is _DEFAULT_FLOOR:
        min_score = cfg.chat_min_score

    candidates = list(notes)
    if limit <= 0 or not candidates:
        return []

    query_vector = vectorizer.vectorize(query)
    keywords = query_keywords(query, cfg.min_token_length)

    scored = [score_note(note, query_vector, keywords, cfg) for note in candidates]
    if min_score is not None:
        scored = [s for s in scored if s.combined_score > min_score]

    # list.sort is stable with reverse=True, so ties keep input order.
    scored.sort(key=lambda s: s.combined_score, reverse=True)
    results = scored[:limit]

    _log_trace(query, keywords, len(candidates), results)

    if not results:
        results = _fallback(candidates, keywords, limit, cfg)
        logger.debug("No note cleared the floor; substring fallback returned %d", len(results))

    return results


def search_notes(
    query: str,
    notes: Iterable[Note],
    limit: int,
    cfg: RankingConfig | None = None,
    vectorizer: Vectorizer | None = None,
) -> List[ScoredNote]:
    """
    Plain search: ranking against `cfg.search_min_score`, with no synthesis step.

    The floor is compared with the combined score (weighted similarity plus
    keyword score and title bonus), not with the raw cosine similarity.
    """
    if cfg is None:
        cfg = RankingConfig()
    return rank_notes(query, notes, limit, cfg, vectorizer, min_score=cfg.search_min_score)


def _log_trace(query: str, keywords: List[str], total: int, results: List[ScoredNote]) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("Query %r, keywords %s, %d candidate notes", query, keywords, total)
    for i, s in enumerate(results[:10], start=1):
        logger.debug(
            "%d. %r combined=%.4f keywords=%.1f similarity=%.4f",
            i,
            s.note.title,
            s.combined_score,
            s.keyword_score,
            s.similarity,
        )


__all__ = ["rank_notes", "score_note", "search_notes"]
