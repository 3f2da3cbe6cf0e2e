"""Build repositories from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stache.config import SourceKind
from stache.exceptions import ConfigValidationError

from ._repository import TemplateRepository

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from stache.config import TemplatesConfig


def create_repository(
    config: TemplatesConfig,
    *,
    logger: FilteringBoundLogger | None = None,
) -> TemplateRepository:
    """Create a repository for the configured template source.

    Args:
        config: The ``[templates]`` configuration section.
        logger: Optional logger for resolution diagnostics.

    Returns:
        A repository bound to the configured data source, or with no data
        source when ``source = "none"``.

    Raises:
        ConfigValidationError: If the setting the source needs is empty.
    """
    match config.source:
        case SourceKind.DIRECTORY:
            _require(config.directory, "templates.directory", config.source)
            return TemplateRepository.from_directory(
                config.directory,
                extension=config.extension,
                encoding=config.encoding,
                logger=logger,
            )
        case SourceKind.PACKAGE:
            _require(config.package, "templates.package", config.source)
            return TemplateRepository.from_package(
                config.package,
                extension=config.extension,
                encoding=config.encoding,
                logger=logger,
            )
        case SourceKind.URL:
            _require(config.url, "templates.url", config.source)
            return TemplateRepository.from_url(
                config.url,
                extension=config.extension,
                encoding=config.encoding,
                logger=logger,
            )
        case SourceKind.NONE:
            return TemplateRepository(logger=logger)


def _require(value: str, key: str, source: SourceKind) -> None:
    if not value:
        msg = f"{key} must be set when templates.source is {source.value!r}"
        raise ConfigValidationError(msg, key=key, value=value, expected="non-empty string")
