"""
Taskfold CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from taskfold import __version__
from taskfold.cli import task, thoughts
from taskfold.cli.errors import ExitCode, print_error
from taskfold.core.config import load_config, load_layered_env

app = typer.Typer(
    name="taskfold",
    help="Flat-file task tracking with a thought inbox",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def configure_logging(debug: bool) -> None:
    """
    Configure logging for this invocation.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"taskfold {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Taskfold - tasks as Markdown files, plus a thought inbox.

    Quick Start:
        taskfold task create "Fix login bug" --project auth
        taskfold task next
        taskfold thoughts process --project auth
    """
    configure_logging(debug)

    # Precedence: OS env > project .env > user .env
    load_layered_env()

    try:
        config = load_config()
    except PydanticValidationError as e:
        print_error("Invalid configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR) from e

    ctx.obj = {"debug": debug, "config": config}


app.add_typer(task.app, name="task")
app.add_typer(thoughts.app, name="thoughts")


__all__ = ["app", "main"]
