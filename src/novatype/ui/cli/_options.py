"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

DocumentArgument = Annotated[
    Path,
    typer.Argument(
        metavar="DOCUMENT",
        help="NovaType source document (.typ) to index.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

DocumentOption = Annotated[
    Path,
    typer.Option(
        "--document",
        "-d",
        help="Document whose directory receives the bibliography entry.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

TargetOption = Annotated[
    Path | None,
    typer.Option(
        "--target",
        "-t",
        help="Bibliography file to update, bypassing the interactive selection.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Emit machine-readable JSON instead of a table.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

AssumeYesOption = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Create a missing bibliography file without asking.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

VerbosityOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase diagnostic output (repeat for more detail).",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        help="YAML configuration file (defaults to $NOVATYPE_CONFIG).",
        exists=True,
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]


__all__ = [
    "DIAGNOSTICS_PANEL",
    "INPUTS_PANEL",
    "OUTPUT_PANEL",
    "AssumeYesOption",
    "ConfigOption",
    "DebugOption",
    "DocumentArgument",
    "DocumentOption",
    "JsonOption",
    "TargetOption",
    "VerbosityOption",
]
