"""Context stack used while rendering templates."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

_MISSING = object()


def _lookup_key(value: object, key: str) -> object:
    """Look up one name component on a context value.

    Mappings are searched by key; other objects by non-callable public
    attribute.
    """
    if isinstance(value, Mapping):
        return value.get(key, _MISSING)  # pyright: ignore[reportUnknownMemberType]
    if key.startswith("_"):
        return _MISSING
    attribute = getattr(value, key, _MISSING)
    if callable(attribute):
        return _MISSING
    return attribute


@dataclass(frozen=True, slots=True)
class ContextStack:
    """Immutable stack of context values, innermost last.

    Attributes:
        frames: Context values from outermost to innermost.
    """

    frames: tuple[object, ...] = ()

    def push(self, value: object) -> ContextStack:
        """Return a new stack with ``value`` as the innermost frame."""
        return ContextStack((*self.frames, value))

    def lookup(self, name: str) -> object:
        """Resolve a tag name against the stack.

        ``.`` is the innermost frame. Dotted names resolve their first
        component against the whole stack (innermost first) and the remaining
        components against the value found.

        Args:
            name: The tag name.

        Returns:
            The value found, or None.
        """
        if name == ".":
            return self.frames[-1] if self.frames else None

        first, *rest = name.split(".")
        value: object = _MISSING
        for frame in reversed(self.frames):
            value = _lookup_key(frame, first)
            if value is not _MISSING:
                break
        if value is _MISSING:
            return None

        for part in rest:
            value = _lookup_key(value, part)
            if value is _MISSING:
                return None
        return value
