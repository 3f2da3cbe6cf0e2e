"""Protocols connecting the template repository to its collaborators.

The repository sits between two pluggable parts:

- a ``DataSource`` that maps template names to template IDs and template IDs
  to raw Mustache text;
- a ``Compiler`` that turns raw text into a ``Template``, calling back into a
  ``PartialResolver`` (the repository) for every partial tag it parses.

Keeping resolution behind the narrow ``PartialResolver`` capability lets the
compiler and the repository be tested with fakes of each other, while the
repository's cycle guard stays the single point every partial goes through.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stache.compiler import Template


@runtime_checkable
class DataSource(Protocol):
    """Protocol for template storage backends.

    Template IDs are opaque to the repository: a data source picks whatever
    hashable value identifies a template in its own storage (a path, a URL,
    a dictionary key). IDs appear in error messages, so human-readable values
    are preferable.

    Example:
        >>> class Inline:
        ...     def template_id_for(self, name, base_id):
        ...         return name if name == "greeting" else None
        ...
        ...     def template_string_for(self, template_id):
        ...         return "Hello {{name}}"
        >>> isinstance(Inline(), DataSource)
        True
    """

    def template_id_for(self, name: str, base_id: Hashable | None) -> Hashable | None:
        """Return the ID of the template a name refers to.

        Hierarchical sources resolve ``name`` relative to ``base_id``, the ID
        of the enclosing template. Sources without hierarchies may ignore it.

        Args:
            name: The template or partial name.
            base_id: ID of the enclosing template, or None when the name is
                looked up at the top level or from a raw template string.

        Returns:
            The template ID, or None if no template has that name.
        """
        ...

    def template_string_for(self, template_id: Hashable) -> str | None:
        """Return the raw template text for an ID.

        Args:
            template_id: An ID previously returned by ``template_id_for``.

        Returns:
            The template text. None means the content could not be loaded;
            the repository then reports a ``TemplateNotFoundError`` for the ID.

        Raises:
            TemplateError: To report a specific failure. Any other exception is
                wrapped into a ``BackendError`` by the repository.
        """
        ...


@runtime_checkable
class PartialResolver(Protocol):
    """Capability handed to compilers for loading partials."""

    def resolve(self, name: str, base_id: Hashable | None) -> Template:
        """Return the compiled template a partial name refers to.

        Args:
            name: The partial name as written in the partial tag.
            base_id: ID of the template containing the partial tag.

        Returns:
            The compiled partial.
        """
        ...


@runtime_checkable
class Compiler(Protocol):
    """Protocol for turning raw template text into compiled templates."""

    def compile(
        self,
        text: str,
        resolver: PartialResolver,
        base_id: Hashable | None,
    ) -> Template:
        """Compile template text.

        Args:
            text: Raw template text.
            resolver: Used to load every partial the text refers to.
            base_id: ID of the template being compiled, or None for a raw
                template string. Passed on to the resolver for partials.

        Returns:
            The compiled template.

        Raises:
            TemplateParseError: If the text is not a valid template.
            TemplateError: Errors raised by the resolver propagate unchanged.
        """
        ...
