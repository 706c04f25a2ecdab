from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .config import AppConfig, load_config
from .errors import NoteNotFoundError, QueryValidationError
from .ingest import ingest_directory
from .query import answer_question, open_assistant, print_results
from .synthesis import INSIGHT_KINDS

console = Console()


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to a config YAML file (default: config.yaml).",
    )
    parser.add_argument(
        "--owner",
        type=str,
        default=None,
        help="Owner whose notes are used (default: owner_id from the config).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log ranking details.")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _ingest(cfg: AppConfig, owner_id: str) -> None:
    assistant = open_assistant(cfg)
    console.print("[bold green]Ingesting notes...[/bold green]")
    notes = ingest_directory(assistant.store, owner_id, cfg.data_dir_resolved)
    if not notes:
        console.print("[yellow]No notes created. Nothing saved.[/yellow]")
        return
    assistant.store.save(cfg.notes_path)
    console.print(f"[bold green]Saved {len(assistant.store)} notes to {cfg.notes_path}[/bold green]")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Personal knowledge base assistant - ingest notes, search them and ask questions."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest_parser = subparsers.add_parser("ingest", help="Create notes from the documents in data_dir.")
    _add_common(ingest_parser)

    ask_parser = subparsers.add_parser("ask", help="Ask a question answered from your notes.")
    ask_parser.add_argument("question", type=str, help="Question to ask over your notes.")
    _add_common(ask_parser)

    search_parser = subparsers.add_parser("search", help="Rank notes for a query without generating an answer.")
    search_parser.add_argument("query", type=str)
    search_parser.add_argument("--limit", type=int, default=None)
    _add_common(search_parser)

    insight_parser = subparsers.add_parser("insight", help="Summarize a note or make flashcards from it.")
    insight_parser.add_argument("note_id", type=str)
    insight_parser.add_argument("--kind", choices=INSIGHT_KINDS, default="summarize")
    _add_common(insight_parser)

    args = parser.parse_args()
    _setup_logging(args.verbose)

    cfg = load_config(Path(args.config))
    owner_id = args.owner or cfg.owner_id

    try:
        if args.command == "ingest":
            _ingest(cfg, owner_id)
        elif args.command == "ask":
            answer_question(args.question, cfg, owner_id=owner_id)
        elif args.command == "search":
            results = open_assistant(cfg).search(args.query, owner_id, limit=args.limit)
            print_results(args.query, results)
        elif args.command == "insight":
            text = open_assistant(cfg).insight(args.note_id, owner_id, args.kind)
            console.rule(f"[bold green]{args.kind.capitalize()}[/bold green]")
            console.print(text.strip())
        else:  # pragma: no cover - defensive
            parser.print_help()
    except QueryValidationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(2) from exc
    except NoteNotFoundError as exc:
        console.print(f"[red]Note not found: {exc.args[0]}[/red]")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
