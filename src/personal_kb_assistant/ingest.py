from __future__ import annotations

import io
import mimetypes
from pathlib import Path
from typing import Iterable, List

from pypdf import PdfReader
from pypdf.errors import PyPdfError
from rich.console import Console
from rich.progress import Progress

from .errors import UnsupportedDocumentError
from .models import Note, NoteType
from .store import InMemoryNoteStore

console = Console()

TEXT_TYPES = {"text/plain", "text/markdown", "text/x-markdown"}
PDF_TYPE = "application/pdf"
SUFFIX_TYPES = {".md": "text/markdown", ".txt": "text/plain", ".pdf": PDF_TYPE}


def load_pdf(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    pages = []
    for page in reader.pages:
        try:
            pages.append(page.extract_text() or "")
        except PyPdfError:
            pages.append("")
    return "\n\n".join(p for p in pages if p.strip())


def extract_text(data: bytes, mime_type: str) -> str:
    """Plain text of an uploaded document. Only text, markdown and PDF payloads are readable."""
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if mime in TEXT_TYPES:
        return data.decode("utf-8", errors="replace").replace("\r\n", "\n").strip()
    if mime == PDF_TYPE:
        return load_pdf(data).strip()
    raise UnsupportedDocumentError(f"Cannot extract text from {mime_type!r} documents")


def guess_mime_type(path: Path) -> str:
    mime = SUFFIX_TYPES.get(path.suffix.lower())
    if mime is None:
        mime, _ = mimetypes.guess_type(path.name)
    return mime or "application/octet-stream"


def iter_files(data_dir: Path) -> Iterable[Path]:
    for path in sorted(data_dir.rglob("*")):
        if path.is_file() and path.suffix.lower() in SUFFIX_TYPES:
            yield path


def ingest_file(store: InMemoryNoteStore, owner_id: str, path: Path) -> Note:
    mime = guess_mime_type(path)
    text = extract_text(path.read_bytes(), mime)
    if mime == PDF_TYPE:
        return store.create(owner_id, title=path.stem, type=NoteType.PDF, extracted_text=text)
    return store.create(owner_id, title=path.stem, content=text)


def ingest_directory(store: InMemoryNoteStore, owner_id: str, data_dir: Path) -> List[Note]:
    if not data_dir.exists():
        console.print(f"[red]Data directory not found:[/red] {data_dir}")
        return []

    files = list(iter_files(data_dir))
    if not files:
        console.print(f"[yellow]No .md, .txt or .pdf files found in {data_dir}[/yellow]")
        return []

    notes: List[Note] = []
    console.print(f"[green]Loading documents from:[/green] {data_dir}")
    with Progress(console=console) as progress:
        task = progress.add_task("Reading documents...", total=len(files))
        for path in files:
            progress.update(task, description=f"Processing {path.name}")
            try:
                notes.append(ingest_file(store, owner_id, path))
            except (OSError, PyPdfError, UnsupportedDocumentError) as exc:
                console.print(f"[red]Failed to process {path}: {exc}[/red]")
            finally:
                progress.update(task, advance=1)

    console.print(f"[green]Created {len(notes)} notes.[/green]")
    return notes


__all__ = ["extract_text", "ingest_directory", "ingest_file", "iter_files"]
