"""Typer application and CLI entry point for wskauth.

The CLI is a thin diagnostic shell over :class:`~wskauth.provider.WhiskProvider`:
it shows which credentials resolve from the provider config, the ``OW_*``
environment and ``.wskprops``, checks them, prints the Authorization header
the client would send, and lists actions as a live smoke test.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled :class:`~wskauth.exceptions.WskAuthError`
instances exit with the error's code; anything else is written to a crash
log under the data directory.

See Also:
    :mod:`wskauth.commands.creds`: The command implementations.
    :mod:`wskauth.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from wskauth import __version__
from wskauth.commands.creds import actions_app, creds_app, token_command
from wskauth.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="wskauth",
    help="Resolve and check OpenWhisk credentials.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(creds_app, name="creds", help="Inspect resolved credentials.")
app.add_typer(actions_app, name="actions", help="Work with actions.")
app.command("token")(token_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"wskauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Provider config JSON file."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Trace credential resolution on stderr."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~wskauth.output.OutputManager` from the CLI
    flags and stores ``config_path`` in ``ctx.obj`` for the commands.
    """
    from wskauth.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from wskauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``wskauth`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from wskauth.exceptions import WskAuthError
        from wskauth.output import error

        if isinstance(exc, WskAuthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
