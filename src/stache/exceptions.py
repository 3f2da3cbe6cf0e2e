"""Stache exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Hashable
    from pathlib import Path


class StacheError(Exception):
    """Base exception for Stache errors."""


# =============================================================================
# Template Exceptions
# =============================================================================


class TemplateError(StacheError):
    """Base exception for template loading and compilation errors.

    Attributes:
        name: The template or partial name involved, if known.
        template_id: The template ID involved, if known.
        cause: The underlying exception, if any.
        trail: IDs of the enclosing templates that were being compiled when
            the error occurred, outermost first.
    """

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        template_id: Hashable | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize with error message and template context."""
        super().__init__(message)
        self.message: str = message
        self.name: str | None = name
        self.template_id: Hashable | None = template_id
        self.cause: BaseException | None = cause
        self.trail: tuple[Hashable, ...] = ()

    def add_frame(self, template_id: Hashable) -> None:
        """Prepend the ID of an enclosing template to the diagnostic trail.

        Args:
            template_id: ID of the template whose compilation is unwinding.
        """
        self.trail = (template_id, *self.trail)

    def __str__(self) -> str:
        if not self.trail:
            return self.message
        chain = " -> ".join(str(frame) for frame in self.trail)
        return f"{self.message} (in {chain})"


class TemplateNotFoundError(TemplateError, LookupError):
    """Raised when a name has no template ID, or an ID has no content."""


class RecursivePartialError(TemplateError):
    """Raised when a partial refers back to a template being compiled."""


class TemplateParseError(TemplateError):
    """Raised when template text is not valid Mustache."""

    def __init__(
        self,
        message: str,
        *,
        template_id: Hashable | None = None,
        line: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize with error message and source location."""
        super().__init__(message, template_id=template_id, cause=cause)
        self.line: int | None = line


class BackendError(TemplateError):
    """Raised when a data source fails to provide template content."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(StacheError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
