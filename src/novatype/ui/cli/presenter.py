"""Rich renderers for reference index and metadata results."""

from __future__ import annotations

from collections.abc import Sequence
import json
from pathlib import Path

from rich import box
from rich.table import Table

from novatype.core.bibliography import BibEntry, CrossRefWork, InsertResult
from novatype.core.completion import CandidateItem
from novatype.core.labels import LabelOccurrence

from .state import get_cli_state


def present_labels(occurrences: Sequence[LabelOccurrence]) -> None:
    """Print label occurrences as a table."""
    console = get_cli_state().console
    if not occurrences:
        console.print("[dim]No labels found.[/]")
        return
    table = Table(title="Labels", box=box.SQUARE, header_style="bold cyan")
    table.add_column("Line", justify="right")
    table.add_column("Label", style="bold")
    table.add_column("Type")
    for occurrence in occurrences:
        table.add_row(str(occurrence.line + 1), occurrence.name, occurrence.type)
    console.print(table)


def present_bibliography(files: Sequence[Path], entries: Sequence[BibEntry]) -> None:
    """Print the resolved bibliography files followed by their entries."""
    console = get_cli_state().console
    if not files:
        console.print("[dim]No bibliography files referenced.[/]")
        return

    counts: dict[Path, int] = {}
    for entry in entries:
        counts[entry.source_file] = counts.get(entry.source_file, 0) + 1

    files_table = Table(title="Bibliography Files", box=box.SQUARE, header_style="bold cyan")
    files_table.add_column("File", overflow="fold")
    files_table.add_column("Entries", justify="right")
    for path in files:
        files_table.add_row(str(path), str(counts.get(path, 0)))
    console.print(files_table)

    if not entries:
        console.print("[dim]No references found.[/]")
        return

    table = Table(title="Entries", box=box.SQUARE, header_style="bold cyan")
    table.add_column("Key", style="bold green", no_wrap=True)
    table.add_column("Type")
    table.add_column("Title", overflow="fold")
    table.add_column("Authors", overflow="fold")
    table.add_column("Year", justify="right")
    for entry in entries:
        table.add_row(
            entry.key,
            entry.type,
            entry.title or "",
            entry.author or "",
            entry.year or "",
        )
    console.print(table)


def candidates_payload(candidates: Sequence[CandidateItem]) -> list[dict[str, object]]:
    """Return JSON-serialisable dictionaries for completion candidates."""
    return [
        {
            "kind": candidate.kind.value,
            "label": candidate.label,
            "detail": candidate.detail,
            "documentation": candidate.documentation,
            "insertText": candidate.insert_text,
            "sortKey": list(candidate.sort_key),
            "icon": candidate.icon.value,
        }
        for candidate in candidates
    ]


def present_candidates(candidates: Sequence[CandidateItem], *, as_json: bool = False) -> None:
    """Print completion candidates in their ranked order."""
    console = get_cli_state().console
    if as_json:
        console.print_json(json.dumps(candidates_payload(candidates)))
        return
    if not candidates:
        console.print("[dim]No candidates.[/]")
        return
    table = Table(title="Completion Candidates", box=box.SQUARE, header_style="bold cyan")
    table.add_column("Kind")
    table.add_column("Label", style="bold", no_wrap=True)
    table.add_column("Detail", overflow="fold")
    for candidate in candidates:
        table.add_row(candidate.kind.value, candidate.label, candidate.detail)
    console.print(table)


def present_works(works: Sequence[CrossRefWork]) -> None:
    """Print search hits with their DOIs."""
    console = get_cli_state().console
    if not works:
        console.print("[dim]No results.[/]")
        return
    table = Table(title="Search Results", box=box.SQUARE, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Title", overflow="fold")
    table.add_column("Authors", overflow="fold")
    table.add_column("Venue", overflow="fold")
    table.add_column("Year", justify="right")
    table.add_column("DOI", style="green", no_wrap=True)
    for index, work in enumerate(works, start=1):
        table.add_row(
            str(index),
            work.display_title,
            work.author_summary,
            work.venue or "",
            str(work.published_year) if work.published_year else "",
            work.doi,
        )
    console.print(table)


def present_insert_result(result: InsertResult) -> None:
    """Print the outcome of an insert request."""
    console = get_cli_state().console
    style = "green" if result.inserted else "yellow"
    console.print(f"[{style}]{result.message}[/]")


__all__ = [
    "candidates_payload",
    "present_bibliography",
    "present_candidates",
    "present_insert_result",
    "present_labels",
    "present_works",
]
