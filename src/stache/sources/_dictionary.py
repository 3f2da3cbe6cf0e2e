"""Data source serving templates from an in-memory mapping."""

from collections.abc import Hashable, Mapping


class DictionaryDataSource:
    """Serves template text keyed by name.

    Template IDs are the names themselves and the enclosing template is
    ignored. The mapping is copied, so later changes to it are not seen.

    Example:
        >>> source = DictionaryDataSource({"partial": "It works."})
        >>> source.template_id_for("partial", None)
        'partial'
    """

    def __init__(self, templates: Mapping[str, str]) -> None:
        self.templates: dict[str, str] = dict(templates)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({sorted(self.templates)!r})"

    def template_id_for(self, name: str, base_id: Hashable | None) -> str | None:
        return name if name in self.templates else None

    def template_string_for(self, template_id: Hashable) -> str | None:
        return self.templates.get(str(template_id))
