"""The Stache command-line interface."""

from ._app import app, create_app, main
from ._shared import ExitCode, exit_code_for, exit_with_error

__all__ = ["ExitCode", "app", "create_app", "exit_code_for", "exit_with_error", "main"]
