import pytest

from personal_kb_assistant.config import AppConfig, RankingConfig
from personal_kb_assistant.errors import NoteNotFoundError, QueryValidationError
from personal_kb_assistant.models import AnswerStrategy
from personal_kb_assistant.query import NotesAssistant, answer_question

from conftest import FailingBackend


@pytest.mark.parametrize("query, owner", [("", "alice"), ("   ", "alice"), ("paris", ""), ("paris", None)])
def test_invalid_input_rejected(assistant, query, owner):
    with pytest.raises(QueryValidationError):
        assistant.rank(query, owner)
    with pytest.raises(QueryValidationError):
        assistant.answer(query, owner)


def test_non_positive_limit_rejected(assistant):
    with pytest.raises(QueryValidationError):
        assistant.rank("paris", "alice", limit=0)


def test_answer_end_to_end(assistant, backend, paris_notes):
    trip, recipe = paris_notes
    result = assistant.answer("When did I visit Paris?", "alice")

    assert result.strategy is AnswerStrategy.INFORMATIVE
    assert result.text == "generated answer"
    assert [s.note_id for s in result.sources] == [trip.id, recipe.id]
    assert result.sources[0].snippet.startswith("Visited the Louvre in 2019")
    assert "Paris Trip" in backend.prompts[0]


def test_answer_restricted_to_note_ids(assistant, paris_notes):
    trip, recipe = paris_notes
    result = assistant.answer("When did I visit Paris?", "alice", note_ids=[recipe.id])
    assert [s.note_id for s in result.sources] == [recipe.id]


def test_answer_only_sees_owner_notes(assistant, store, paris_notes):
    store.create("bob", title="Paris apartment")
    result = assistant.answer("paris", "bob")
    assert [s.title for s in result.sources] == ["Paris apartment"]


def test_answer_never_raises_on_backend_failure(store, vectorizer, paris_notes):
    assistant = NotesAssistant(store, vectorizer, FailingBackend())

    with_notes = assistant.answer("When did I visit Paris?", "alice")
    assert with_notes.strategy is AnswerStrategy.DEGRADED
    assert '"Paris Trip"' in with_notes.text
    assert len(with_notes.sources) == 2

    without_notes = assistant.answer("volcanoes", "nobody")
    assert without_notes.strategy is AnswerStrategy.DEGRADED
    assert 'relevant notes for "volcanoes"' in without_notes.text
    assert without_notes.sources == []


def test_chat_limit_from_config(store, vectorizer, backend):
    for i in range(5):
        store.create("u", title=f"garden {i}")
    cfg = AppConfig(ranking=RankingConfig(chat_limit=2))
    assistant = NotesAssistant(store, vectorizer, backend, cfg)
    assert len(assistant.rank("garden", "u")) == 2
    assert len(assistant.rank("garden", "u", limit=4)) == 4


def test_search_uses_search_floor(store, vectorizer, backend):
    store.create("u", title="Knife sharpening")
    store.create("u", title="Kitchen", content="knife")
    cfg = AppConfig(ranking=RankingConfig(search_min_score=1.0))
    results = NotesAssistant(store, vectorizer, backend, cfg).search("knife", "u")
    assert [s.note.title for s in results] == ["Knife sharpening"]
    assert backend.prompts == []


def test_insight(assistant, backend, paris_notes):
    trip, _ = paris_notes
    assert assistant.insight(trip.id, "alice", "summarize") == "generated answer"
    assert "Visited the Louvre in 2019" in backend.prompts[0]

    with pytest.raises(NoteNotFoundError):
        assistant.insight(trip.id, "bob", "summarize")


def test_answer_question_prints(assistant, paris_notes, capsys):
    result = answer_question("When did I visit Paris?", AppConfig(), owner_id="alice", assistant=assistant)
    out = capsys.readouterr().out
    assert result.text in out
    assert "Paris Trip" in out


def test_insight_prefers_typed_content_over_extracted_text(assistant, store, backend):
    note = store.create(
        "alice",
        title="Scanned receipt",
        content="my typed summary",
        extracted_text="raw ocr dump",
        type="image",
    )
    assistant.insight(note.id, "alice", "summarize")
    assert "Content: my typed summary" in backend.prompts[0]
    assert "raw ocr dump" not in backend.prompts[0]


def test_insight_falls_back_to_extracted_text(assistant, store, backend):
    note = store.create("alice", title="Scan", extracted_text="raw ocr dump", type="pdf")
    assistant.insight(note.id, "alice", "flashcards")
    assert "Content: raw ocr dump" in backend.prompts[0]
