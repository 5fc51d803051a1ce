"""Fetch a DOI and append it to the document's bibliography."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import click
import typer

from novatype.core.bibliography import (
    MetadataService,
    TargetSelection,
    discover_targets,
    normalise_doi,
    resolve_target,
)
from novatype.core.exceptions import (
    BibliographyWriteError,
    MetadataServiceError,
    QueryValidationError,
    TargetSelectionError,
)
from novatype.core.session import ReferenceSession

from .._options import AssumeYesOption, DocumentOption, TargetOption
from ..diagnostics import EXIT_USAGE, CliEmitter
from ..presenter import present_insert_result
from ..state import get_cli_state
from ..utils import load_cli_config


class PromptChooser:
    """Resolve bibliography target selections through terminal prompts."""

    def __init__(self, *, assume_yes: bool = False) -> None:
        self._assume_yes = assume_yes

    def confirm_create(self, path: Path) -> bool:
        if self._assume_yes:
            return True
        return typer.confirm(f"No bibliography found. Create {path.name}?", default=True)

    def choose(self, candidates: Sequence[Path]) -> Path | None:
        console = get_cli_state().console
        for index, candidate in enumerate(candidates, start=1):
            console.print(f"  [bold]{index}[/]. {candidate.name}")
        choice = typer.prompt(
            "Select a bibliography file",
            type=click.IntRange(1, len(candidates)),
        )
        return candidates[choice - 1]


def _select_target(
    document: Path, target: Path | None, chooser: PromptChooser, extension: str
) -> Path:
    if target is not None:
        return target
    selection: TargetSelection = discover_targets(document, extension=extension)
    return resolve_target(selection, chooser)


def add(
    doi: Annotated[str, typer.Argument(metavar="DOI", help="DOI or doi.org URL to fetch.")],
    document: DocumentOption,
    target: TargetOption = None,
    assume_yes: AssumeYesOption = False,
) -> None:
    """Resolve DOI to BibTeX and insert it unless it is already present."""
    emitter = CliEmitter()
    config = load_cli_config()
    try:
        normalise_doi(doi)
    except QueryValidationError as exc:
        raise emitter.fail(exc, code=EXIT_USAGE) from exc

    try:
        destination = _select_target(
            document, target, PromptChooser(assume_yes=assume_yes), config.bibliography_extension
        )
    except (TargetSelectionError, BibliographyWriteError) as exc:
        raise emitter.fail(exc) from exc

    with ReferenceSession(config, emitter=emitter) as session:
        try:
            result = asyncio.run(MetadataService(session).add(doi, target=destination))
        except QueryValidationError as exc:
            raise emitter.fail(exc, code=EXIT_USAGE) from exc
        except (MetadataServiceError, BibliographyWriteError) as exc:
            raise emitter.fail(exc) from exc
    present_insert_result(result)


__all__ = ["PromptChooser", "add"]
