"""Configuration models.

Pydantic models for the ``[templates]`` and ``[logging]`` sections and the
enums they use.
"""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class SourceKind(StrEnum):
    """Kinds of template data sources."""

    NONE = "none"
    DIRECTORY = "directory"
    PACKAGE = "package"
    URL = "url"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.TEXT
    file: str = ""


class TemplatesConfig(BaseModel):
    """Template source configuration section.

    Attributes:
        source: Which kind of data source to create.
        directory: Template root for the directory source.
        package: Dotted package name for the package source.
        url: Base URL for the url source.
        extension: Extension of template files, without the dot.
        encoding: Text encoding of template files.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    source: SourceKind = SourceKind.NONE
    directory: str = ""
    package: str = ""
    url: str = ""
    extension: str = "mustache"
    encoding: str = "utf-8"


class StacheConfig(BaseModel):
    """Complete Stache configuration.

    Attributes:
        templates: Template source settings.
        logging: Logging settings.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
