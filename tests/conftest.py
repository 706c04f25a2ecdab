from __future__ import annotations

from typing import List

import pytest

from personal_kb_assistant.backend import GenerationError
from personal_kb_assistant.config import AppConfig
from personal_kb_assistant.query import NotesAssistant
from personal_kb_assistant.store import InMemoryNoteStore
from personal_kb_assistant.vectorizer import HashingVectorizer


class FakeBackend:
    """Records prompts and answers with a fixed reply."""

    def __init__(self, reply: str = "generated answer") -> None:
        self.reply = reply
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


class FailingBackend:
    def __init__(self, exc: Exception | None = None) -> None:
        self.exc = exc or GenerationError("quota exceeded")
        self.calls = 0

    def generate(self, prompt: str) -> str:
        self.calls += 1
        raise self.exc


@pytest.fixture
def vectorizer() -> HashingVectorizer:
    return HashingVectorizer(384)


@pytest.fixture
def store(vectorizer) -> InMemoryNoteStore:
    return InMemoryNoteStore(vectorizer)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def paris_notes(store):
    trip = store.create(
        "alice",
        title="Paris Trip",
        content="Visited the Louvre in 2019",
        tags=["travel"],
    )
    recipe = store.create("alice", title="Recipe", content="Paris is mentioned once")
    return trip, recipe


@pytest.fixture
def assistant(store, vectorizer, backend) -> NotesAssistant:
    return NotesAssistant(store, vectorizer, backend, AppConfig())
