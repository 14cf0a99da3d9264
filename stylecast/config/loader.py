"""Layered TOML configuration files.

Files are read from the config directory in precedence order, lowest first:
default.toml, then {STYLECAST_ENV}.toml. Either may be absent, in which case
the Settings model defaults cover the missing values.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "STYLECAST_CONFIG_DIR"
ENVIRONMENT_ENV = "STYLECAST_ENV"
DEFAULT_ENVIRONMENT = "development"

# How many directories up from cwd to look for config/
_SEARCH_DEPTH = 5


def find_config_dir() -> Path | None:
    """Locate the config directory.

    STYLECAST_CONFIG_DIR wins when set and must exist. Otherwise the first
    config/ found walking up from cwd is used, or None.

    Raises:
        FileNotFoundError: If STYLECAST_CONFIG_DIR names a missing directory
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for directory in [cwd, *cwd.parents][:_SEARCH_DEPTH]:
        candidate = directory / "config"
        if candidate.is_dir():
            return candidate
    return None


def config_files(config_dir: Path, environment: str | None = None) -> list[Path]:
    """Config file paths for an environment, lowest precedence first."""
    environment = environment or os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)
    return [config_dir / "default.toml", config_dir / f"{environment}.toml"]


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override onto base; tables merge, anything else is replaced."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_dir: Path | None = None) -> dict[str, Any]:
    """Read and merge the config files that exist.

    Raises:
        tomllib.TOMLDecodeError: If a file is not valid TOML
    """
    config_dir = config_dir or find_config_dir()
    if config_dir is None:
        return {}

    config: dict[str, Any] = {}
    for path in config_files(config_dir):
        if not path.is_file():
            continue
        with path.open("rb") as f:
            config = deep_merge(config, tomllib.load(f))
    return config
