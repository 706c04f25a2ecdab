from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .backend import GenerativeBackend, OpenAIBackend
from .config import AppConfig, load_config
from .errors import NoteNotFoundError, QueryValidationError
from .models import AnswerResult, ScoredNote
from .ranking import rank_notes, search_notes
from .store import InMemoryNoteStore, NoteStore
from .synthesis import AnswerSynthesizer
from .vectorizer import Vectorizer, build_vectorizer

logger = logging.getLogger(__name__)

console = Console()


class NotesAssistant:
    """Entry point for chat and search over one owner's notes."""

    def __init__(
        self,
        store: NoteStore,
        vectorizer: Vectorizer,
        backend: GenerativeBackend,
        cfg: AppConfig | None = None,
    ) -> None:
        self.store = store
        self.vectorizer = vectorizer
        self.cfg = cfg or AppConfig()
        self.synthesizer = AnswerSynthesizer(backend, self.cfg.synthesis)

    def _validate(self, query: str, owner_id: str, limit: Optional[int]) -> None:
        if not query or not query.strip():
            raise QueryValidationError("Query is required")
        if not owner_id:
            raise QueryValidationError("Owner is required")
        if limit is not None and limit < 1:
            raise QueryValidationError(f"Limit must be positive, got {limit}")

    def rank(
        self,
        query: str,
        owner_id: str,
        note_ids: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[ScoredNote]:
        self._validate(query, owner_id, limit)
        ranking = self.cfg.ranking
        notes = self.store.find_notes_by_owner(owner_id, note_ids)
        logger.debug("Ranking %d notes for owner %s", len(notes), owner_id)
        return rank_notes(
            query,
            notes,
            limit or ranking.chat_limit,
            ranking,
            self.vectorizer,
            min_score=ranking.chat_min_score,
        )

    def search(self, query: str, owner_id: str, limit: Optional[int] = None) -> List[ScoredNote]:
        self._validate(query, owner_id, limit)
        ranking = self.cfg.ranking
        notes = self.store.find_notes_by_owner(owner_id)
        return search_notes(query, notes, limit or ranking.search_limit, ranking, self.vectorizer)

    def answer(
        self,
        query: str,
        owner_id: str,
        note_ids: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> AnswerResult:
        scored = self.rank(query, owner_id, note_ids, limit)
        return self.synthesizer.synthesize(query, scored)

    def insight(self, note_id: str, owner_id: str, kind: str) -> str:
        if not owner_id:
            raise QueryValidationError("Owner is required")
        found = self.store.find_notes_by_owner(owner_id, [note_id])
        if not found:
            raise NoteNotFoundError(note_id)
        note = found[0]
        return self.synthesizer.insight(kind, note.title, note.content or note.extracted_text or note.title)


def open_assistant(cfg: AppConfig | None = None) -> NotesAssistant:
    if cfg is None:
        cfg = load_config()

    vectorizer = build_vectorizer(cfg.vectorizer)
    if cfg.notes_path.exists():
        store = InMemoryNoteStore.load(cfg.notes_path, vectorizer)
    else:
        store = InMemoryNoteStore(vectorizer)
    backend = OpenAIBackend(
        model=cfg.openai_model,
        timeout=cfg.generation_timeout,
        max_retries=cfg.generation_max_retries,
    )
    return NotesAssistant(store, vectorizer, backend, cfg)


def print_sources(result: AnswerResult) -> None:
    if not result.sources:
        return
    console.rule("[bold blue]Sources[/bold blue]")
    for source in result.sources:
        console.print(
            Panel(
                source.snippet,
                title=f"{source.title} ({source.type.value})",
                subtitle=f"similarity={source.similarity:.2f}",
                expand=False,
            )
        )


def print_results(query: str, results: List[ScoredNote]) -> None:
    if not results:
        console.print(f"[yellow]No notes matched {query!r}.[/yellow]")
        return
    table = Table(title=f"Results for {query!r}")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Combined", justify="right")
    table.add_column("Similarity", justify="right")
    table.add_column("Id", style="dim")
    for i, s in enumerate(results, start=1):
        table.add_row(
            str(i),
            s.note.title,
            s.note.type.value,
            f"{s.combined_score:.3f}",
            f"{s.similarity:.2f}",
            s.note.id,
        )
    console.print(table)


def answer_question(
    question: str,
    cfg: AppConfig | None = None,
    owner_id: str | None = None,
    assistant: NotesAssistant | None = None,
) -> AnswerResult:
    if cfg is None:
        cfg = load_config()
    if assistant is None:
        assistant = open_assistant(cfg)

    result = assistant.answer(question, owner_id or cfg.owner_id)

    console.rule("[bold green]Answer[/bold green]")
    console.print(result.text.strip())
    print_sources(result)
    return result


__all__ = ["NotesAssistant", "answer_question", "open_assistant", "print_results", "print_sources"]
