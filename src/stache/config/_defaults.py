"""Default configuration values.

DEFAULT_CONFIG is a plain dict for use with deep_merge, which copies its
inputs.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "templates": {
        "source": "none",
        "directory": "",
        "package": "",
        "url": "",
        "extension": "mustache",
        "encoding": "utf-8",
    },
    "logging": {
        "level": "warning",
        "format": "text",
        "file": "",
    },
}

CONFIG_FILENAME = "stache.toml"
ENV_PREFIX = "STACHE_"
