"""Shared CLI utilities.

This module provides common utilities used by the CLI commands:
- Standardized exit codes
- Mapping of template errors to exit codes
- Console utilities for error handling
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Never

from rich.markup import escape

from stache.exceptions import (
    BackendError,
    ConfigError,
    RecursivePartialError,
    StacheError,
    TemplateNotFoundError,
    TemplateParseError,
)

if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "ExitCode",
    "exit_code_for",
    "exit_with_error",
    "get_error_console",
]


class ExitCode(IntEnum):
    """Standard exit codes for Stache CLI commands."""

    SUCCESS = 0
    LOAD_ERROR = 1
    TEMPLATE_ERROR = 2
    NOT_FOUND = 3
    IO_ERROR = 4
    INTERNAL_ERROR = 5


def exit_code_for(error: StacheError) -> ExitCode:
    """Return the exit code reporting an error.

    Args:
        error: The error to report.

    Returns:
        The matching exit code.
    """
    if isinstance(error, ConfigError):
        return ExitCode.LOAD_ERROR
    if isinstance(error, TemplateNotFoundError):
        return ExitCode.NOT_FOUND
    if isinstance(error, (TemplateParseError, RecursivePartialError)):
        return ExitCode.TEMPLATE_ERROR
    if isinstance(error, BackendError):
        return ExitCode.IO_ERROR
    return ExitCode.INTERNAL_ERROR


def get_error_console() -> Console:
    """Get a Rich console configured for error output to stderr.

    Returns:
        Console instance writing to stderr.
    """
    from rich.console import Console  # noqa: PLC0415

    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Args:
        message: The error message to display.
        code: The exit code to use (defaults to INTERNAL_ERROR).
        console: Optional Rich console for output. If not provided,
            a new stderr console will be created.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    raise SystemExit(code)
