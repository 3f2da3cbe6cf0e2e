"""Template repositories.

A ``TemplateRepository`` resolves template names into compiled templates,
loading raw text and partials from a pluggable ``DataSource`` and caching
every compiled template for the repository's lifetime.

Basic usage:
    from stache.repository import TemplateRepository

    repository = TemplateRepository.from_directory("templates")
    template = repository.template_named("profile")
    template.render({"name": "Arthur"})

Custom data sources implement the ``DataSource`` protocol:
    repository = TemplateRepository()
    repository.data_source = MyDataSource()
"""

from ._factory import create_repository
from ._fake import FakeDataSource
from ._protocol import Compiler, DataSource, PartialResolver
from ._repository import DEFAULT_ENCODING, DEFAULT_EXTENSION, TemplateRepository

__all__ = [
    "DEFAULT_ENCODING",
    "DEFAULT_EXTENSION",
    "Compiler",
    "DataSource",
    "FakeDataSource",
    "PartialResolver",
    "TemplateRepository",
    "create_repository",
]
