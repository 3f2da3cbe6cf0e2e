r"""Stache: Mustache templates with a caching, cycle-safe template repository.

Basic usage:
    from stache import TemplateRepository

    # Templates in /path/to/templates/*.mustache
    repository = TemplateRepository.from_directory("/path/to/templates")

    # Compiles profile.mustache and every partial it refers to
    template = repository.template_named("profile")
    result = template.render({"name": "Arthur"})

With an in-memory source:
    repository = TemplateRepository.from_dict({"partial": "It works."})
    repository.template_named("partial").render()          # "It works."
    repository.template_from_string("{{>partial}}").render()  # "It works."

Without a data source, only template strings without partials compile:
    repository = TemplateRepository()
    repository.template_from_string("Hello {{name}}!").render(name="World")
"""

from .compiler import MustacheCompiler, Template
from .exceptions import (
    BackendError,
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    RecursivePartialError,
    StacheError,
    TemplateError,
    TemplateNotFoundError,
    TemplateParseError,
)
from .repository import (
    Compiler,
    DataSource,
    FakeDataSource,
    PartialResolver,
    TemplateRepository,
    create_repository,
)
from .sources import (
    DictionaryDataSource,
    DirectoryDataSource,
    PackageDataSource,
    ResourceID,
    UrlDataSource,
)

__all__ = [
    "BackendError",
    "Compiler",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "DataSource",
    "DictionaryDataSource",
    "DirectoryDataSource",
    "FakeDataSource",
    "MustacheCompiler",
    "PackageDataSource",
    "PartialResolver",
    "RecursivePartialError",
    "ResourceID",
    "StacheError",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateParseError",
    "TemplateRepository",
    "UrlDataSource",
    "create_repository",
]
