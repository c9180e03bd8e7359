"""Typer application and CLI entry point for postfetch.

This module wires together the top-level Typer application and registers
the post commands (``random``, ``get``, ``list``) and the ``config`` group.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, invokes the Typer app and
writes unexpected exceptions to a crash log under the data directory.

See Also:
    :mod:`postfetch.config`: Configuration resolution.
    :mod:`postfetch.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from postfetch import __version__
from postfetch.commands.config import config_app
from postfetch.commands.posts import get_command, list_command, random_command
from postfetch.exit_codes import EXIT_GENERIC_FAILURE
from postfetch.output import OutputFormat, OutputManager, set_output


app = typer.Typer(
    name="postfetch",
    help="Fetch posts through an interceptor-driven HTTP client.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("random")(random_command)
app.command("get")(get_command)
app.command("list")(list_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"postfetch {__version__}")
        raise typer.Exit()


def _configured_format() -> OutputFormat:
    """Default output format from the config file, ``AUTO`` if unreadable."""
    from postfetch.config import load_global_config
    from postfetch.exceptions import ConfigError

    try:
        return OutputFormat(load_global_config().output.format)
    except (ConfigError, ValueError):
        # Commands that need the config report the problem themselves.
        return OutputFormat.AUTO


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
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the API base URL."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Network log level: none, basic, headers, body."
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
        False, "--verbose", "-v", help="Show network logs and debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~postfetch.output.OutputManager` from
    CLI flags and stores the overrides (``base_url``, ``log_level``) in
    ``ctx.obj`` for the commands. Existing ``ctx.obj`` entries (such as a
    test transport) are preserved.
    """
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["base_url"] = base_url
    ctx.obj["log_level"] = log_level
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from postfetch.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``postfetch`` console script.

    Unhandled :class:`~postfetch.exceptions.PostfetchError` instances cause
    a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

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
        from postfetch.exceptions import PostfetchError
        from postfetch.output import error

        if isinstance(exc, PostfetchError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
