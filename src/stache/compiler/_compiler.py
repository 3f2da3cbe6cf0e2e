"""Default Mustache compiler."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._parser import MustacheParser
from ._template import Template

if TYPE_CHECKING:
    from collections.abc import Hashable

    from stache.repository import PartialResolver


class MustacheCompiler:
    """Compiles Mustache text into ``Template`` objects.

    Satisfies the repository's ``Compiler`` protocol. Partial tags are
    resolved through the given resolver while parsing, so a compiled
    template never needs the repository again to render.
    """

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
            base_id: ID of the template being compiled, or None.

        Returns:
            The compiled template.

        Raises:
            TemplateParseError: If the text is not valid Mustache.
        """
        nodes = MustacheParser(text, resolver, base_id).parse()
        return Template(nodes=nodes, template_id=base_id)
