"""Configuration loading with precedence-based merging."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from stache.exceptions import ConfigLoadError, ConfigValidationError

from ._defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from ._loader import deep_merge, parse_env_vars, read_toml_file
from ._models import StacheConfig

if TYPE_CHECKING:
    from collections.abc import Mapping


def find_config_file(start: Path | None = None) -> Path | None:
    """Find the nearest stache.toml in a directory or its parents.

    Args:
        start: Directory to start from. Defaults to the current directory.

    Returns:
        Path to the config file, or None if there is none.
    """
    current = (start if start is not None else Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def config_from_dict(
    data: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
) -> StacheConfig:
    """Build a validated configuration from a dictionary.

    Args:
        data: Configuration values, merged over the defaults.

    Returns:
        The validated configuration.

    Raises:
        ConfigValidationError: If a value is invalid or a key is unknown.
    """
    merged = deep_merge(DEFAULT_CONFIG, data)
    try:
        return StacheConfig.model_validate(merged)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error["loc"])
        msg = f"Invalid configuration value for {key!r}: {error['msg']}"
        raise ConfigValidationError(
            msg,
            key=key,
            value=error.get("input"),
            expected=error["type"],
        ) from e


def load_config(
    *,
    config_path: Path | None = None,
    search_dir: Path | None = None,
    include_env: bool = True,
    overrides: Mapping[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> StacheConfig:
    """Load configuration from all sources.

    Sources are merged in order (later values override earlier):
    1. Built-in defaults
    2. Config file (explicit path, or nearest stache.toml)
    3. STACHE_ environment variables
    4. Explicit overrides (e.g. from CLI flags)

    A relative ``templates.directory`` read from a config file is taken
    relative to the file's directory.

    Args:
        config_path: Explicit config file. Must exist.
        search_dir: Directory to start the stache.toml search from.
        include_env: Whether to read environment variables.
        overrides: Highest-precedence values.

    Returns:
        The validated configuration.

    Raises:
        ConfigLoadError: If the explicit file is missing or unparsable.
        ConfigValidationError: If the merged configuration is invalid.
    """
    if config_path is not None and not config_path.is_file():
        msg = f"Config file not found: {config_path}"
        raise ConfigLoadError(msg, path=config_path)

    path = config_path if config_path is not None else find_config_file(search_dir)

    data: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    if path is not None:
        data = read_toml_file(path)
        templates = data.get("templates")
        if isinstance(templates, dict) and templates.get("directory"):
            directory = Path(str(templates["directory"]))  # pyright: ignore[reportUnknownArgumentType]
            if not directory.is_absolute():
                templates["directory"] = str(path.parent / directory)

    if include_env:
        data = deep_merge(data, parse_env_vars())
    if overrides:
        data = deep_merge(data, overrides)

    return config_from_dict(data)
