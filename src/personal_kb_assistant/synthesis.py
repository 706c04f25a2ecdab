"""
Answer synthesis over ranked notes.

`AnswerSynthesizer.synthesize` picks one of three prompts (no-context,
greeting, informative), asks the generative backend for text and, when the
backend fails for any reason, falls back to a fixed message. It never
raises to its caller.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from .backend import GenerativeBackend
from .config import SynthesisConfig
from .errors import QueryValidationError
from .models import AnswerResult, AnswerStrategy, Note, ScoredNote, SourceCitation

logger = logging.getLogger(__name__)

NO_PREVIEW = "No content preview available"
ELLIPSIS = "..."
CONTEXT_SEPARATOR = "\n\n---\n\n"

INSIGHT_KINDS = ("summarize", "flashcards")


def is_greeting(query: str, greetings: Iterable[str]) -> bool:
    text = query.lower().strip()
    for greeting in greetings:
        g = greeting.lower()
        if text == g or text.startswith(g + " ") or text.startswith(g + ","):
            return True
    return False


def make_snippet(note: Note, length: int = 150) -> str:
    if note.content:
        return note.content[:length] + ELLIPSIS
    if note.extracted_text:
        return note.extracted_text[:length] + ELLIPSIS
    return NO_PREVIEW


def build_citations(scored: List[ScoredNote], snippet_chars: int = 150) -> List[SourceCitation]:
    return [
        SourceCitation(
            note_id=s.note.id,
            title=s.note.title,
            type=s.note.type,
            similarity=round(s.similarity, 2),
            snippet=make_snippet(s.note, snippet_chars),
        )
        for s in scored
    ]


def build_context(scored: List[ScoredNote], max_chars: int = 1000) -> str:
    blocks = []
    for s in scored:
        note = s.note
        content = note.content or note.extracted_text or "No content"
        if len(content) > max_chars:
            content = content[:max_chars] + ELLIPSIS
        tags = ", ".join(note.tags) if note.tags else "No tags"
        blocks.append(f"Title: {note.title}\nContent: {content}\nTags: {tags}")
    return CONTEXT_SEPARATOR.join(blocks)


def no_context_prompt(query: str) -> str:
    return (
        f'The user asked: "{query}"\n\n'
        "I don't have specific notes from their knowledge base to reference. "
        "Please provide a helpful, friendly response that:\n"
        "1. Acknowledges their question\n"
        "2. Provides a brief, general answer if possible\n"
        "3. Suggests they create notes about this topic for future reference\n\n"
        "Keep the response concise and helpful."
    )


def greeting_prompt(query: str) -> str:
    return (
        f'The user said: "{query}"\n\n'
        "Please provide a friendly, helpful greeting and briefly explain what you can help them with. "
        "Mention that you can:\n"
        "- Answer questions based on their notes\n"
        "- Help them search through their knowledge base\n"
        "- Provide summaries and insights\n"
        "- Create flashcards from their notes\n\n"
        "Keep it warm and concise."
    )


def informative_prompt(query: str, context: str) -> str:
    return (
        f'Based on the following notes from the user\'s knowledge base, please answer their question: "{query}"\n\n'
        f"Context from user's notes:\n{context}\n\n"
        "Instructions:\n"
        "1. Answer the specific question asked - do not repeat the entire note content\n"
        "2. Extract only the relevant information that answers the question\n"
        "3. Be concise and direct\n"
        "4. If the answer is a specific fact (like a date, name, or event), provide just that fact\n"
        "5. If the notes don't contain the answer, say so clearly\n\n"
        "Use only the context above."
    )


def insight_prompt(kind: str, title: str, content: str) -> str:
    if kind == "summarize":
        return (
            "Please provide a concise summary of the following note:\n\n"
            f"Title: {title}\nContent: {content}\n\nSummary:"
        )
    return (
        "Based on the following note, create 3-5 flashcard questions and answers "
        "that would help someone study this material:\n\n"
        f"Title: {title}\nContent: {content}\n\n"
        "Please format as:\nQ: [Question]\nA: [Answer]\n\nFlashcards:"
    )


def degraded_answer(query: str, scored: List[ScoredNote]) -> str:
    if not scored:
        return (
            f'I couldn\'t find any relevant notes for "{query}". '
            "Try creating some notes first, or use different search terms."
        )
    top = scored[0].note
    return (
        f'I found information in your note "{top.title}", but I\'m having trouble processing it right now. '
        "Please check the note directly or try rephrasing your question.\n\n"
        "Note: AI features are experiencing issues. Please ensure your OpenAI API key is configured correctly."
    )


class AnswerSynthesizer:
    def __init__(self, backend: GenerativeBackend, cfg: SynthesisConfig | None = None) -> None:
        self.backend = backend
        self.cfg = cfg or SynthesisConfig()

    def choose_strategy(self, query: str, scored: List[ScoredNote]) -> AnswerStrategy:
        greeting = is_greeting(query, self.cfg.greetings)
        if not scored and not greeting:
            return AnswerStrategy.NO_CONTEXT
        if greeting or not scored:
            return AnswerStrategy.GREETING
        return AnswerStrategy.INFORMATIVE

    def build_prompt(self, query: str, scored: List[ScoredNote], strategy: AnswerStrategy) -> str:
        if strategy is AnswerStrategy.NO_CONTEXT:
            return no_context_prompt(query)
        if strategy is AnswerStrategy.GREETING:
            return greeting_prompt(query)
        return informative_prompt(query, build_context(scored, self.cfg.context_chars))

    def synthesize(self, query: str, scored: List[ScoredNote]) -> AnswerResult:
        sources = build_citations(scored, self.cfg.snippet_chars)
        strategy = self.choose_strategy(query, scored)
        prompt = self.build_prompt(query, scored, strategy)

        try:
            text = self.backend.generate(prompt)
        except Exception as exc:  # any backend failure degrades to fixed text
            logger.warning("Answer generation failed (%s): %s", type(exc).__name__, exc)
            return AnswerResult(
                query=query,
                text=degraded_answer(query, scored),
                strategy=AnswerStrategy.DEGRADED,
                sources=sources,
            )

        return AnswerResult(query=query, text=text, strategy=strategy, sources=sources)

    def insight(self, kind: str, title: str, content: str) -> str:
        if kind not in INSIGHT_KINDS:
            raise QueryValidationError(f"Unknown insight kind {kind!r}; expected one of {', '.join(INSIGHT_KINDS)}")
        try:
            return self.backend.generate(insight_prompt(kind, title, content))
        except Exception as exc:
            logger.warning("Insight generation failed (%s): %s", type(exc).__name__, exc)
            return (
                f'I couldn\'t generate {"a summary" if kind == "summarize" else "flashcards"} '
                f'for "{title}" right now. Please try again later.'
            )


__all__ = [
    "AnswerSynthesizer",
    "INSIGHT_KINDS",
    "build_citations",
    "build_context",
    "degraded_answer",
    "is_greeting",
    "make_snippet",
]
