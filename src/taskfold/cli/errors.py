"""
Standardized error handling and exit codes for the taskfold CLI.

Core operations raise TaskfoldError subclasses; commands turn them into a
printed message and an exit code here.
"""

from enum import IntEnum

import typer
from rich.console import Console

from taskfold.core.errors import (
    MalformedRecordError,
    NotFoundError,
    StorageIOError,
    TaskfoldError,
    ValidationError,
)

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for taskfold CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Storage failure or other unexpected error."""

    USER_ERROR = 2
    """Invalid input or missing task/note (actionable by user)."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Task not found: AUTH-007",
        ...     solution="taskfold task list",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_invalid_option_error(value: str, valid_options: list[str]) -> None:
    """Print error when an invalid option value is provided."""
    print_error(
        f"Invalid value: {value}",
        reason=f"Valid options are: {', '.join(valid_options)}",
    )


def exit_for(error: TaskfoldError) -> typer.Exit:
    """
    Report a core failure and build the matching typer.Exit.

    Usage:
        except TaskfoldError as e:
            raise exit_for(e) from e
    """
    if isinstance(error, NotFoundError):
        solution = (
            "taskfold thoughts list" if error.kind == "Thought" else "taskfold task list"
        )
        print_error(error.message, solution=solution)
        return typer.Exit(ExitCode.USER_ERROR)

    if isinstance(error, ValidationError):
        reason = f"Field: {error.field}" if error.field else None
        print_error(error.message, reason=reason)
        return typer.Exit(ExitCode.USER_ERROR)

    if isinstance(error, MalformedRecordError):
        print_error(error.message, reason=f"Fix or remove {error.path}")
        return typer.Exit(ExitCode.GENERAL_ERROR)

    if isinstance(error, StorageIOError):
        print_error(error.message, reason="Check permissions and free space")
        return typer.Exit(ExitCode.GENERAL_ERROR)

    print_error(error.message)
    return typer.Exit(ExitCode.GENERAL_ERROR)
