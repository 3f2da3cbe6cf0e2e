"""Stache configuration.

Configuration lives in a ``stache.toml`` file:

    [templates]
    source = "directory"
    directory = "templates"
    extension = "mustache"

    [logging]
    level = "debug"

Any key can be overridden with an environment variable such as
``STACHE_TEMPLATES__EXTENSION=txt``.

Example:
    >>> from stache.config import load_config
    >>> config = load_config()
    >>> config.templates.source
    <SourceKind.NONE: 'none'>
"""

from stache.exceptions import ConfigError, ConfigLoadError, ConfigValidationError

from ._defaults import CONFIG_FILENAME, DEFAULT_CONFIG, ENV_PREFIX
from ._load import config_from_dict, find_config_file, load_config
from ._loader import deep_merge, parse_env_vars, read_toml_file, set_nested_key
from ._models import (
    LogFormat,
    LoggingConfig,
    LogLevel,
    SourceKind,
    StacheConfig,
    TemplatesConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "SourceKind",
    "StacheConfig",
    "TemplatesConfig",
    "config_from_dict",
    "deep_merge",
    "find_config_file",
    "load_config",
    "parse_env_vars",
    "read_toml_file",
    "set_nested_key",
]
