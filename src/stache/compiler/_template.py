# ruff: noqa: TC003  # Hashable needed at runtime for dataclass fields
"""Compiled templates and their node types."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass
from typing import Union

from markupsafe import escape

from ._context import ContextStack


@dataclass(frozen=True, slots=True)
class TextNode:
    """Literal text copied to the output."""

    text: str

    def render(self, stack: ContextStack, out: list[str]) -> None:
        out.append(self.text)


@dataclass(frozen=True, slots=True)
class VariableNode:
    """``{{name}}``, or ``{{{name}}}`` / ``{{&name}}`` when not escaped."""

    name: str
    escaped: bool = True

    def render(self, stack: ContextStack, out: list[str]) -> None:
        value = stack.lookup(self.name)
        if value is None:
            return
        out.append(str(escape(value)) if self.escaped else str(value))


@dataclass(frozen=True, slots=True)
class SectionNode:
    """``{{#name}}...{{/name}}``, or ``{{^name}}...{{/name}}`` when inverted."""

    name: str
    children: tuple[Node, ...]
    inverted: bool = False

    def render(self, stack: ContextStack, out: list[str]) -> None:
        value = stack.lookup(self.name)
        if self.inverted:
            if not value:
                _render_nodes(self.children, stack, out)
            return
        if not value:
            return

        if isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping)):
            for item in value:  # pyright: ignore[reportUnknownVariableType]
                _render_nodes(self.children, stack.push(item), out)
        elif value is True:
            _render_nodes(self.children, stack, out)
        else:
            _render_nodes(self.children, stack.push(value), out)


@dataclass(frozen=True, slots=True)
class PartialNode:
    """``{{>name}}``, holding the partial compiled at parse time."""

    name: str
    template: Template

    def render(self, stack: ContextStack, out: list[str]) -> None:
        _render_nodes(self.template.nodes, stack, out)


Node = Union[TextNode, VariableNode, SectionNode, PartialNode]  # noqa: UP007


def _render_nodes(nodes: tuple[Node, ...], stack: ContextStack, out: list[str]) -> None:
    for node in nodes:
        node.render(stack, out)


@dataclass(frozen=True, slots=True, eq=False)
class Template:
    """A compiled template, ready to render.

    Templates are immutable and compared by identity: a repository hands out
    the same instance for every reference to the same template ID.

    Attributes:
        nodes: The parsed template body.
        template_id: ID of the template, or None for a compiled string.
    """

    nodes: tuple[Node, ...]
    template_id: Hashable | None = None

    def render(self, context: object = None, /, **values: object) -> str:
        """Render the template.

        Args:
            context: Mapping or object providing values for tags.
            **values: Extra values, looked up before ``context``.

        Returns:
            The rendered text.
        """
        stack = ContextStack()
        if context is not None:
            stack = stack.push(context)
        if values:
            stack = stack.push(values)

        out: list[str] = []
        _render_nodes(self.nodes, stack, out)
        return "".join(out)

    @property
    def partials(self) -> tuple[Template, ...]:
        """Partials referenced directly by this template, in source order."""
        found: list[Template] = []
        pending: list[Node] = list(self.nodes)
        while pending:
            node = pending.pop(0)
            if isinstance(node, PartialNode):
                found.append(node.template)
            elif isinstance(node, SectionNode):
                pending[:0] = node.children
        return tuple(found)
