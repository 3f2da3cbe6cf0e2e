"""Mustache compilation and rendering.

Usage:
    from stache.compiler import MustacheCompiler

    template = MustacheCompiler().compile("Hello {{name}}!", resolver, None)
    template.render({"name": "World"})  # "Hello World!"

The resolver is whatever loads partials, normally a TemplateRepository.
"""

from ._compiler import MustacheCompiler
from ._context import ContextStack
from ._parser import DEFAULT_DELIMITERS, MustacheParser
from ._template import (
    Node,
    PartialNode,
    SectionNode,
    Template,
    TextNode,
    VariableNode,
)

__all__ = [
    "DEFAULT_DELIMITERS",
    "ContextStack",
    "MustacheCompiler",
    "MustacheParser",
    "Node",
    "PartialNode",
    "SectionNode",
    "Template",
    "TextNode",
    "VariableNode",
]
