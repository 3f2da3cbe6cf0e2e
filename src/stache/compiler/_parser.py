# ruff: noqa: TC003  # Hashable needed at runtime for dataclass fields
"""Mustache parser.

Partials are resolved while parsing: every ``{{>name}}`` tag is handed to the
resolver with the ID of the template being parsed, and the compiled partial
is embedded in the resulting node tree.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stache.exceptions import TemplateParseError

from ._template import Node, PartialNode, SectionNode, TextNode, VariableNode

if TYPE_CHECKING:
    from stache.repository import PartialResolver

DEFAULT_DELIMITERS = ("{{", "}}")

# Tags that can stand alone on a line and then consume that line
_STANDALONE_SIGILS = frozenset("#^/!>=")
_SIGILS = frozenset("#^/!>&={")


@dataclass(slots=True)
class _OpenSection:
    name: str
    inverted: bool
    line: int
    parent: list[Node]
    children: list[Node] = field(default_factory=list)


class MustacheParser:
    """Parses one template text into nodes.

    Args:
        text: The template text.
        resolver: Resolver for partial tags.
        base_id: ID of the template being parsed, or None for a raw string.
    """

    def __init__(
        self,
        text: str,
        resolver: PartialResolver,
        base_id: Hashable | None,
    ) -> None:
        self._text = text
        self._resolver = resolver
        self._base_id = base_id
        self._otag, self._ctag = DEFAULT_DELIMITERS

    def parse(self) -> tuple[Node, ...]:
        """Parse the whole text.

        Returns:
            The top-level nodes.

        Raises:
            TemplateParseError: If the text is not valid Mustache.
        """
        text = self._text
        root: list[Node] = []
        current = root
        sections: list[_OpenSection] = []
        pos = 0

        while True:
            start = text.find(self._otag, pos)
            if start == -1:
                _append_text(current, text[pos:])
                break

            line = text.count("\n", 0, start) + 1
            content_start = start + len(self._otag)
            triple = text.startswith("{", content_start)
            closing = "}" + self._ctag if triple else self._ctag
            end = text.find(closing, content_start + (1 if triple else 0))
            if end == -1:
                msg = f"Unclosed tag at line {line}"
                raise self._error(msg, line)
            tag_end = end + len(closing)

            content = text[content_start:end].strip()
            sigil = content[:1] if content[:1] in _SIGILS else ""
            body = content[1:].strip() if sigil else content

            standalone = sigil in _STANDALONE_SIGILS
            line_start = text.rfind("\n", 0, start) + 1
            line_end = text.find("\n", tag_end)
            rest_end = len(text) if line_end == -1 else line_end
            if (
                standalone
                and line_start >= pos
                and _is_blank(text[line_start:start])
                and _is_blank(text[tag_end:rest_end])
            ):
                _append_text(current, text[pos:line_start])
                pos = len(text) if line_end == -1 else line_end + 1
            else:
                _append_text(current, text[pos:start])
                pos = tag_end

            if sigil == "!":
                continue
            if sigil == "=":
                self._set_delimiters(body, line)
                continue

            if not body:
                msg = f"Empty tag at line {line}"
                raise self._error(msg, line)

            if sigil in ("#", "^"):
                section = _OpenSection(
                    name=body, inverted=sigil == "^", line=line, parent=current
                )
                sections.append(section)
                current = section.children
            elif sigil == "/":
                if not sections:
                    msg = f"Unexpected closing tag {body!r} at line {line}"
                    raise self._error(msg, line)
                section = sections.pop()
                if section.name != body:
                    msg = (
                        f"Closing tag {body!r} at line {line} does not match "
                        f"{section.name!r} opened at line {section.line}"
                    )
                    raise self._error(msg, line)
                current = section.parent
                current.append(
                    SectionNode(
                        name=section.name,
                        children=tuple(section.children),
                        inverted=section.inverted,
                    )
                )
            elif sigil == ">":
                template = self._resolver.resolve(body, self._base_id)
                current.append(PartialNode(name=body, template=template))
            else:
                current.append(VariableNode(name=body, escaped=sigil == ""))

        if sections:
            section = sections[-1]
            msg = f"Unclosed section {section.name!r} opened at line {section.line}"
            raise self._error(msg, section.line)

        return tuple(root)

    def _set_delimiters(self, body: str, line: int) -> None:
        parts = body.removesuffix("=").split()
        if not body.endswith("=") or len(parts) != 2 or any("=" in p for p in parts):  # noqa: PLR2004
            msg = f"Invalid delimiter tag at line {line}"
            raise self._error(msg, line)
        self._otag, self._ctag = parts

    def _error(self, message: str, line: int) -> TemplateParseError:
        if self._base_id is not None:
            message = f"{message} in template {self._base_id}"
        return TemplateParseError(message, template_id=self._base_id, line=line)


def _is_blank(segment: str) -> bool:
    return segment.strip(" \t\r") == ""


def _append_text(nodes: list[Node], text: str) -> None:
    if text:
        nodes.append(TextNode(text))
