# ruff: noqa: TC003  # Hashable needed at runtime for dataclass fields
"""Fake data source for testing.

This module provides a FakeDataSource class that implements the DataSource
protocol over an in-memory mapping and records every call made to it, for
use in tests of repositories and compilers.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field


@dataclass(slots=True)
class FakeDataSource:
    """Spying in-memory data source.

    Template IDs are ``"id:<name>"`` strings so tests can tell names and IDs
    apart. The enclosing template is ignored for resolution but recorded.

    The fake maintains state that can be manipulated for testing:
    - templates maps names to template text
    - id_calls and content_calls record every call in order
    - failures maps IDs to exceptions raised when their content is requested
    - lookup_failures maps names to exceptions raised when their ID is requested
    - missing_content lists IDs whose content is reported as None

    Example:
        >>> source = FakeDataSource({"a": "Hello {{>b}}", "b": "World"})
        >>> source.template_id_for("a", None)
        'id:a'
        >>> source.id_calls
        [('a', None)]
    """

    templates: dict[str, str] = field(default_factory=dict)
    id_calls: list[tuple[str, Hashable | None]] = field(default_factory=list)
    content_calls: list[Hashable] = field(default_factory=list)
    failures: dict[Hashable, Exception] = field(default_factory=dict)
    lookup_failures: dict[str, Exception] = field(default_factory=dict)
    missing_content: set[Hashable] = field(default_factory=set)

    # =========================================================================
    # DataSource Protocol Methods
    # =========================================================================

    def template_id_for(self, name: str, base_id: Hashable | None) -> str | None:
        """Return ``id:<name>`` for known names.

        Args:
            name: The template name.
            base_id: The enclosing template ID (recorded only).

        Returns:
            The template ID, or None for unknown names.

        Raises:
            Exception: The exception registered in lookup_failures for the name.
        """
        self.id_calls.append((name, base_id))
        if name in self.lookup_failures:
            raise self.lookup_failures[name]
        if name not in self.templates:
            return None
        return self.id_of(name)

    def template_string_for(self, template_id: Hashable) -> str | None:
        """Return the text of a template.

        Args:
            template_id: A template ID.

        Returns:
            The template text, or None if the ID is unknown or listed in
            missing_content.

        Raises:
            Exception: The exception registered in failures for the ID.
        """
        self.content_calls.append(template_id)
        if template_id in self.failures:
            raise self.failures[template_id]
        if template_id in self.missing_content:
            return None
        name = str(template_id).removeprefix("id:")
        return self.templates.get(name)

    # =========================================================================
    # Test Helpers
    # =========================================================================

    @staticmethod
    def id_of(name: str) -> str:
        """Return the ID the fake assigns to a name."""
        return f"id:{name}"

    @property
    def call_count(self) -> int:
        """Total number of protocol calls received."""
        return len(self.id_calls) + len(self.content_calls)

    def fail(self, name: str, error: Exception) -> None:
        """Make content requests for ``name`` raise ``error``."""
        self.failures[self.id_of(name)] = error

    def fail_lookup(self, name: str, error: Exception) -> None:
        """Make ID requests for ``name`` raise ``error``."""
        self.lookup_failures[name] = error

    def reset_calls(self) -> None:
        """Forget all recorded calls."""
        self.id_calls.clear()
        self.content_calls.clear()
