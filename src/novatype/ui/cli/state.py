"""Per-invocation CLI state and message rendering.

Every run of the application installs a fresh `CLIState` from the root
callback. The state lives on the Typer context object; the context variable
only mirrors the current run so helpers called outside a command body, such
as `main()` error handling, can still find it.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
import sys
from typing import TYPE_CHECKING, Any

import click
import typer


if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "render_message",
    "set_cli_state",
]


@dataclass(slots=True)
class CLIState:
    """Diagnostics and configuration settings of one CLI run."""

    verbosity: int = 0
    show_tracebacks: bool = False
    config_path: str | None = None
    _console: Console | None = field(default=None, init=False, repr=False)
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def console(self) -> Console:
        """Return a lazily instantiated stdout console."""
        from rich.console import Console

        current = getattr(self._console, "file", None)
        if self._console is None or current is not sys.stdout:
            self._console = Console(file=sys.stdout)
        return self._console

    @property
    def err_console(self) -> Console:
        """Return a lazily instantiated stderr console."""
        from rich.console import Console

        current = getattr(self._err_console, "file", None)
        if self._err_console is None or current is not sys.stderr:
            self._err_console = Console(file=sys.stderr, highlight=False)
        return self._err_console


_CURRENT_STATE: ContextVar[CLIState | None] = ContextVar("novatype_cli_state", default=None)


def _state_from_context(ctx: Any) -> CLIState | None:
    # Typer and click contexts both expose ``obj`` and ``parent``.
    current = ctx
    while current is not None:
        obj = getattr(current, "obj", None)
        if isinstance(obj, CLIState):
            return obj
        current = getattr(current, "parent", None)
    return None


def get_cli_state(
    ctx: typer.Context | click.Context | None = None,
    *,
    create: bool = True,
) -> CLIState:
    """Return the state of the active run.

    Outside a run a throwaway default state is returned, or `RuntimeError` is
    raised when `create` is false.
    """
    state = _state_from_context(ctx)
    if state is None:
        state = _state_from_context(click.get_current_context(silent=True))
    if state is None:
        state = _CURRENT_STATE.get()
    if state is None:
        if not create:
            raise RuntimeError("CLI state is not initialised for this run.")
        state = CLIState()
    return state


def set_cli_state(
    *,
    ctx: typer.Context | click.Context | None = None,
    verbosity: int = 0,
    debug: bool = False,
    config_path: str | None = None,
) -> CLIState:
    """Install a fresh state for the current run and return it."""
    state = CLIState(
        verbosity=max(0, verbosity),
        show_tracebacks=debug,
        config_path=config_path,
    )
    if ctx is not None:
        ctx.obj = state
    _CURRENT_STATE.set(state)
    return state


def _exception_chain(exc: BaseException) -> list[str]:
    chain: list[str] = []
    visited: set[int] = set()
    current = exc.__cause__ or exc.__context__
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        chain.append(f"{type(current).__name__}: {current}")
        current = current.__cause__ or current.__context__
    return chain


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
) -> None:
    """Render a formatted message to the console, including optional diagnostics."""
    state = get_cli_state()

    if level == "info":
        if state.verbosity >= 1:
            state.err_console.log(message)
        return

    from rich.text import Text

    style = "red" if level == "error" else "yellow"
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))
    extra_lines: list[str] = []
    if exception is not None and state.verbosity >= 1:
        detail = str(exception).strip()
        if detail and detail not in message:
            extra_lines.append(detail)
        extra_lines.append(f"type: {type(exception).__name__}")
        if state.verbosity >= 2:
            chain = _exception_chain(exception)
            if chain:
                extra_lines.append("caused by:")
                extra_lines.extend(f"  {entry}" for entry in chain)

    if extra_lines:
        text.append("\n")
        text.append("\n".join(extra_lines), style=style)

    state.err_console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    """Log a warning-level message to stderr respecting verbosity settings."""
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    """Log an error-level message to stderr respecting verbosity settings."""
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Return whether full tracebacks should be displayed."""
    try:
        return get_cli_state(create=False).show_tracebacks
    except RuntimeError:
        return False
