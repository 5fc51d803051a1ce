"""Utility helpers shared by CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer

from novatype.core.config import NovatypeConfig, load_config
from novatype.core.exceptions import ConfigError

from .diagnostics import EXIT_FAILURE, CliEmitter
from .state import get_cli_state


def load_cli_config() -> NovatypeConfig:
    """Load the configuration selected by ``--config`` or the environment."""
    state = get_cli_state()
    try:
        return load_config(state.config_path)
    except ConfigError as exc:
        raise CliEmitter(state).fail(exc) from exc


def read_document(path: Path) -> str:
    """Read a document as UTF-8, exiting with a readable error on failure."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        CliEmitter().error(f"Unable to read '{path}': {exc}", exc)
        raise typer.Exit(code=EXIT_FAILURE) from exc


__all__ = ["load_cli_config", "read_document"]
