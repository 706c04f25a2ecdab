import io

import pytest
from pypdf import PdfWriter

from personal_kb_assistant.errors import UnsupportedDocumentError
from personal_kb_assistant.ingest import extract_text, ingest_directory, iter_files
from personal_kb_assistant.models import NoteType


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def test_extract_plain_text():
    assert extract_text(b"line one\r\nline two\n", "text/plain; charset=utf-8") == "line one\nline two"
    assert extract_text("# Café".encode("utf-8"), "text/markdown") == "# Café"


def test_extract_blank_pdf_is_empty():
    assert extract_text(_blank_pdf(), "application/pdf") == ""


@pytest.mark.parametrize("mime", ["image/png", "application/vnd.openxmlformats-officedocument.wordprocessingml.document", ""])
def test_unsupported_types(mime):
    with pytest.raises(UnsupportedDocumentError):
        extract_text(b"\x89PNG", mime)


def test_ingest_directory(tmp_path, store):
    (tmp_path / "paris.md").write_text("Visited the Louvre in 2019", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "todo.txt").write_text("buy milk", encoding="utf-8")
    (tmp_path / "scan.pdf").write_bytes(_blank_pdf())
    (tmp_path / "photo.png").write_bytes(b"\x89PNG")

    assert {p.name for p in iter_files(tmp_path)} == {"paris.md", "todo.txt", "scan.pdf"}

    notes = ingest_directory(store, "u", tmp_path)
    by_title = {n.title: n for n in notes}

    assert set(by_title) == {"paris", "todo", "scan"}
    assert by_title["paris"].content == "Visited the Louvre in 2019"
    assert by_title["paris"].fingerprint is not None
    assert by_title["scan"].type is NoteType.PDF
    assert by_title["scan"].extracted_text == ""
    assert len(store.find_notes_by_owner("u")) == 3


def test_ingest_missing_directory(tmp_path, store):
    assert ingest_directory(store, "u", tmp_path / "nope") == []
