"""Route reference-core diagnostics and command failures to the terminal."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import typer

from novatype.core.diagnostics import DiagnosticEmitter, format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state, render_message


# Events that mean some input was skipped; everything else is progress.
WARNING_EVENTS = frozenset({"bibliography_unreadable"})

EXIT_FAILURE = 1
EXIT_USAGE = 2


class CliEmitter(DiagnosticEmitter):
    """Emitter bound to the state of one CLI run."""

    def __init__(self, state: CLIState | None = None) -> None:
        self._state = state or get_cli_state()
        self.debug_enabled = self._state.show_tracebacks

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if name in WARNING_EVENTS:
            self.warning(message or name)
        elif message:
            render_message("info", message)

    def fail(self, exc: BaseException, *, code: int = EXIT_FAILURE) -> typer.Exit:
        """Report ``exc`` as an error and return the exit to raise."""
        self.error(str(exc), exc)
        return typer.Exit(code=code)


__all__ = ["EXIT_FAILURE", "EXIT_USAGE", "WARNING_EVENTS", "CliEmitter"]
