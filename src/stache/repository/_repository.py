# ruff: noqa: TC003  # Hashable and Path needed at runtime for method signatures
"""Template repository: name resolution, cycle detection and caching.

A ``TemplateRepository`` turns template names and raw template strings into
compiled ``Template`` objects. Raw text comes from a pluggable data source;
partials found while compiling are loaded from the same data source,
relative to the template that contains them.

Every template ID is compiled at most once per repository. IDs currently
being compiled are tracked on a resolution stack so that a partial which
refers back to one of its enclosing templates fails with a
``RecursivePartialError`` instead of recursing forever.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Self

from stache.exceptions import (
    BackendError,
    RecursivePartialError,
    TemplateError,
    TemplateNotFoundError,
    TemplateParseError,
)
from stache.utils import create_null_logger

if TYPE_CHECKING:
    import httpx
    from structlog.typing import FilteringBoundLogger

    from stache.compiler import Template

    from ._protocol import Compiler, DataSource

DEFAULT_EXTENSION = "mustache"
DEFAULT_ENCODING = "utf-8"


class TemplateRepository:
    """Loads, compiles and caches templates from a data source.

    The repository owns its cache and resolution stack; both live as long as
    the repository. The data source is not owned: it is read at the start of
    every resolution and may be replaced by the owner between calls. Replacing
    it while a resolution is in progress on another thread is not supported.

    A repository without a data source can still compile template strings
    that contain no partials. Any partial tag then fails with a
    ``TemplateNotFoundError``.

    Calls on one repository are serialized by a re-entrant lock held for the
    whole partial chain of a top-level call. Distinct repositories share no
    state.

    Example:
        >>> repository = TemplateRepository.from_dict({"b": "World"})
        >>> repository.template_from_string("Hello {{>b}}").render()
        'Hello World'
    """

    def __init__(
        self,
        data_source: DataSource | None = None,
        *,
        compiler: Compiler | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            data_source: Source of template IDs and text. May be set later
                through the ``data_source`` property.
            compiler: Compiler for template text. Defaults to MustacheCompiler.
            logger: Logger for resolution diagnostics. Defaults to a logger
                that discards everything.
        """
        if compiler is None:
            from stache.compiler import MustacheCompiler  # noqa: PLC0415

            compiler = MustacheCompiler()

        self._data_source: DataSource | None = data_source
        self._compiler: Compiler = compiler
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else create_null_logger()
        )
        self._templates: dict[Hashable, Template] = {}
        self._resolving: list[Hashable] = []
        self._lock = threading.RLock()

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def from_directory(
        cls,
        directory: Path | str,
        *,
        extension: str = DEFAULT_EXTENSION,
        encoding: str = DEFAULT_ENCODING,
        logger: FilteringBoundLogger | None = None,
    ) -> Self:
        """Create a repository loading template files from a directory.

        ``{{>partial}}`` loads ``partial.<extension>`` from the directory of
        the enclosing template. ``/`` and ``..`` navigate the hierarchy, and a
        leading ``/`` starts from ``directory``. Partials of template strings
        are looked up in ``directory``.

        Args:
            directory: Root directory of the templates.
            extension: Extension of template files, without the dot.
            encoding: Text encoding of template files.
            logger: Optional logger for resolution diagnostics.

        Returns:
            A repository backed by a DirectoryDataSource.
        """
        from stache.sources import DirectoryDataSource  # noqa: PLC0415

        source = DirectoryDataSource(directory, extension=extension, encoding=encoding)
        return cls(source, logger=logger)

    @classmethod
    def from_package(
        cls,
        package: str | ModuleType,
        *,
        extension: str = DEFAULT_EXTENSION,
        encoding: str = DEFAULT_ENCODING,
        logger: FilteringBoundLogger | None = None,
    ) -> Self:
        """Create a repository loading templates shipped as package resources.

        Args:
            package: Package (or its dotted name) holding the templates.
            extension: Extension of template resources, without the dot.
            encoding: Text encoding of template resources.
            logger: Optional logger for resolution diagnostics.

        Returns:
            A repository backed by a PackageDataSource.
        """
        from stache.sources import PackageDataSource  # noqa: PLC0415

        source = PackageDataSource(package, extension=extension, encoding=encoding)
        return cls(source, logger=logger)

    @classmethod
    def from_url(
        cls,
        base_url: str,
        *,
        extension: str = DEFAULT_EXTENSION,
        encoding: str = DEFAULT_ENCODING,
        client: httpx.Client | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> Self:
        """Create a repository loading templates over HTTP.

        Args:
            base_url: URL of the template root.
            extension: Extension of template documents, without the dot.
            encoding: Text encoding of template documents.
            client: Optional httpx client to issue requests with.
            logger: Optional logger for resolution diagnostics.

        Returns:
            A repository backed by a UrlDataSource.
        """
        from stache.sources import UrlDataSource  # noqa: PLC0415

        source = UrlDataSource(
            base_url, extension=extension, encoding=encoding, client=client
        )
        return cls(source, logger=logger)

    @classmethod
    def from_dict(
        cls,
        templates: Mapping[str, str],
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> Self:
        """Create a repository serving templates from a name to text mapping.

        Args:
            templates: Template text keyed by template name.
            logger: Optional logger for resolution diagnostics.

        Returns:
            A repository backed by a DictionaryDataSource.
        """
        from stache.sources import DictionaryDataSource  # noqa: PLC0415

        return cls(DictionaryDataSource(templates), logger=logger)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def data_source(self) -> DataSource | None:
        """The data source templates and partials are loaded from."""
        return self._data_source

    @data_source.setter
    def data_source(self, value: DataSource | None) -> None:
        self._data_source = value

    @property
    def compiler(self) -> Compiler:
        """The compiler used for template text."""
        return self._compiler

    @property
    def cached_template_ids(self) -> frozenset[Hashable]:
        """IDs of all templates compiled so far."""
        with self._lock:
            return frozenset(self._templates)

    @property
    def is_resolving(self) -> bool:
        """Whether a resolution is in progress."""
        with self._lock:
            return bool(self._resolving)

    # =========================================================================
    # Public API
    # =========================================================================

    def template_named(self, name: str) -> Template:
        """Return the template with the given name.

        Args:
            name: Template name, interpreted by the data source.

        Returns:
            The compiled template. Repeated calls return the same instance.

        Raises:
            TemplateNotFoundError: If the template or one of its partials
                does not exist.
            RecursivePartialError: If a partial refers back to an enclosing
                template.
            TemplateParseError: If the template or a partial is invalid.
            BackendError: If the data source fails to look up or load a
                template.
        """
        with self._lock:
            try:
                return self.resolve(name, None)
            except TemplateError as e:
                self._log_failure(e)
                raise

    def template_from_string(self, text: str) -> Template:
        """Compile a raw template string.

        The string itself is not cached. Its partials are looked up with no
        enclosing template ID, so hierarchical sources resolve them from
        their root, and they are cached like any other template.

        Args:
            text: Mustache template text.

        Returns:
            The compiled template.

        Raises:
            TemplateError: See ``template_named``.
        """
        with self._lock:
            try:
                return self._compile(text, None)
            except TemplateError as e:
                self._log_failure(e)
                raise

    def resolve(self, name: str, base_id: Hashable | None) -> Template:
        """Return the compiled template a name refers to.

        This is the entry point for both top-level lookups and partial tags
        met by the compiler.

        Args:
            name: Template or partial name.
            base_id: ID of the enclosing template, or None.

        Returns:
            The compiled template.

        Raises:
            TemplateError: See ``template_named``.
        """
        with self._lock:
            data_source = self._data_source
            template_id = (
                self._lookup_id(data_source, name, base_id)
                if data_source is not None
                else None
            )
            if data_source is None or template_id is None:
                self._logger.warning(
                    "template_not_found", name=name, base_id=_loggable(base_id)
                )
                msg = f"No template named {name!r}"
                raise TemplateNotFoundError(msg, name=name)

            template = self._templates.get(template_id)
            if template is not None:
                self._logger.debug(
                    "template_cache_hit", name=name, template_id=_loggable(template_id)
                )
                return template

            if template_id in self._resolving:
                self._logger.warning(
                    "recursive_partial_detected",
                    name=name,
                    template_id=_loggable(template_id),
                    stack=[_loggable(frame) for frame in self._resolving],
                )
                msg = f"Recursive partial {name!r} ({template_id})"
                raise RecursivePartialError(msg, name=name, template_id=template_id)

            with self._resolving_frame(template_id):
                text = self._load_text(data_source, template_id)
                template = self._compile(text, template_id)

            self._templates[template_id] = template
            self._logger.debug(
                "template_compiled", name=name, template_id=_loggable(template_id)
            )
            return template

    # =========================================================================
    # Internals
    # =========================================================================

    @contextmanager
    def _resolving_frame(self, template_id: Hashable) -> Iterator[None]:
        """Track ``template_id`` on the resolution stack for the block.

        Errors leaving the block get ``template_id`` prepended to their trail.
        """
        self._resolving.append(template_id)
        try:
            yield
        except TemplateError as e:
            e.add_frame(template_id)
            raise
        finally:
            _ = self._resolving.pop()

    def _log_failure(self, error: TemplateError) -> None:
        self._logger.warning(
            "template_resolution_failed",
            error=type(error).__name__,
            message=error.message,
            name=error.name,
            template_id=_loggable(error.template_id),
            trail=[_loggable(frame) for frame in error.trail],
        )

    def _compile(self, text: str, template_id: Hashable | None) -> Template:
        try:
            return self._compiler.compile(text, self, template_id)
        except TemplateError:
            raise
        except Exception as e:
            msg = f"Failed to compile template {template_id}: {e}"
            raise TemplateParseError(msg, template_id=template_id, cause=e) from e

    @staticmethod
    def _lookup_id(
        data_source: DataSource, name: str, base_id: Hashable | None
    ) -> Hashable | None:
        try:
            return data_source.template_id_for(name, base_id)
        except TemplateError:
            raise
        except Exception as e:
            msg = f"Failed to look up template {name!r}: {e}"
            raise BackendError(msg, name=name, cause=e) from e

    @staticmethod
    def _load_text(data_source: DataSource, template_id: Hashable) -> str:
        try:
            text = data_source.template_string_for(template_id)
        except TemplateError:
            raise
        except Exception as e:
            msg = f"Failed to load template {template_id}: {e}"
            raise BackendError(msg, template_id=template_id, cause=e) from e

        if text is None:
            msg = f"No content for template {template_id}"
            raise TemplateNotFoundError(msg, template_id=template_id)
        return text


def _loggable(value: Hashable | None) -> str | None:
    return None if value is None else str(value)
