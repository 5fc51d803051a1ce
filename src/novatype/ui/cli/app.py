"""Typer application wiring for the NovaType reference CLI."""

from __future__ import annotations

import logging

import typer

from ._options import ConfigOption, DebugOption, VerbosityOption
from .commands import add, bibliography, complete, labels, search
from .state import debug_enabled, emit_error, set_cli_state


app = typer.Typer(
    help="Inspect labels and bibliographies of NovaType documents and fetch references.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


@app.callback()
def configure(
    ctx: typer.Context,
    verbose: VerbosityOption = 0,
    debug: DebugOption = False,
    config: ConfigOption = None,
) -> None:
    """Install the diagnostics and configuration state of this run."""
    set_cli_state(
        ctx=ctx,
        verbosity=verbose,
        debug=debug,
        config_path=str(config) if config is not None else None,
    )
    level = logging.DEBUG if verbose >= 2 else logging.INFO if verbose == 1 else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


app.command("labels")(labels)
app.command("bibliography")(bibliography)
app.command("complete")(complete)
app.command("search")(search)
app.command("add")(add)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover
        from .state import get_cli_state

        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
