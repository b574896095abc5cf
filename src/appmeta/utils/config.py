"""Helpers for loading the user configuration file (~/.appmeta/config.json)."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

CONFIG_ENV_VAR = "APPMETA_CONFIG"
CONFIG_DIR = Path.home() / ".appmeta"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULTS: dict[str, Any] = {
    # ResTableConfig density requested when resolving Android icons.
    "icon_density": 720,
    "store_region": "cn",
    "lookup_url": "https://itunes.apple.com/lookup",
    "http_timeout": 10,
    "http_retries": 3,
}


def config_path() -> Path:
    """Return the configuration file path, honouring $APPMETA_CONFIG."""

    if value := os.environ.get(CONFIG_ENV_VAR):
        return Path(value).expanduser()
    return CONFIG_FILE


@lru_cache(maxsize=1)
def load_config() -> dict[str, Any]:
    """Load configuration data from disk (cached)."""

    path = config_path()
    if not path.exists():
        return {}

    try:
        raw = path.read_text()
    except OSError:
        return {}

    try:
        data = json.loads(raw)
    except ValueError:
        return {}

    if isinstance(data, dict):
        return data

    return {}


def get_config_value(key: str, default: Any | None = None) -> Any | None:
    """Fetch a configuration value by key, falling back to built-in defaults."""

    if default is None:
        default = DEFAULTS.get(key)
    return load_config().get(key, default)


def reload_config() -> None:
    """Force the cached configuration to be reloaded on next access."""

    load_config.cache_clear()
