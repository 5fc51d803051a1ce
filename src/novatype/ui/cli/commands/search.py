"""Search the scholarly-works API from the command line."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from novatype.core.bibliography import MetadataService
from novatype.core.exceptions import MetadataServiceError, QueryValidationError
from novatype.core.session import ReferenceSession

from ..diagnostics import EXIT_USAGE, CliEmitter
from ..presenter import present_works
from ..utils import load_cli_config


def search(
    query: Annotated[
        list[str],
        typer.Argument(metavar="QUERY...", help="Free-text search terms."),
    ],
) -> None:
    """Search for works matching QUERY and list their DOIs."""
    emitter = CliEmitter()
    text = " ".join(query)
    with ReferenceSession(load_cli_config(), emitter=emitter) as session:
        try:
            works = asyncio.run(MetadataService(session).search(text))
        except QueryValidationError as exc:
            raise emitter.fail(exc, code=EXIT_USAGE) from exc
        except MetadataServiceError as exc:
            raise emitter.fail(exc) from exc
    present_works(works)


__all__ = ["search"]
