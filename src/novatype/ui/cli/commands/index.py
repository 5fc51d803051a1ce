"""Commands that inspect the reference index of a document."""

from __future__ import annotations

from novatype.core.bibliography import locate_bibliographies
from novatype.core.completion import build_candidates, collect_bibliography_entries
from novatype.core.labels import extract_labels

from .._options import DocumentArgument, JsonOption
from ..diagnostics import CliEmitter
from ..presenter import present_bibliography, present_candidates, present_labels
from ..utils import load_cli_config, read_document


def labels(document: DocumentArgument) -> None:
    """List the labels declared in DOCUMENT."""
    present_labels(extract_labels(read_document(document)))


def bibliography(document: DocumentArgument) -> None:
    """List the bibliography files and entries DOCUMENT references."""
    config = load_cli_config()
    text = read_document(document)
    files = locate_bibliographies(text, document.parent, extension=config.bibliography_extension)
    entries = collect_bibliography_entries(
        text,
        document.parent,
        extension=config.bibliography_extension,
        emitter=CliEmitter(),
    )
    present_bibliography(files, entries)


def complete(document: DocumentArgument, as_json: JsonOption = False) -> None:
    """Print the ranked completion candidates for DOCUMENT."""
    config = load_cli_config()
    candidates = build_candidates(
        read_document(document),
        document.parent,
        extension=config.bibliography_extension,
        emitter=CliEmitter(),
    )
    present_candidates(candidates, as_json=as_json)


__all__ = ["bibliography", "complete", "labels"]
