"""Configuration loading for TradeMind.

Settings live in a TOML file at ``~/.config/trademind/config.toml``; set
``TRADEMIND_CONFIG`` to point somewhere else. Missing keys fall back to
``DEFAULT_CONFIG``.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Optional

import toml


logger = logging.getLogger(__name__)


CONFIG_ENV_VAR = "TRADEMIND_CONFIG"
CONFIG_DIR = Path.home() / ".config" / "trademind"

DEFAULT_CONFIG = {
    "market": {
        "tick_interval": 3.0,
        "seed": 0,  # 0 = unseeded
        "catalog_path": "",  # empty = built-in catalog
    },
    "openai": {
        "api_key": "",  # Leave empty to use OPENAI_API_KEY env var
        "model": "",  # Leave empty to use OPENAI_MODEL env var or default
    },
    "storage": {
        "db_path": "",  # empty = ~/.config/trademind/trademind.db
    },
}


def get_config_path() -> Path:
    """Get the configuration file path."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_DIR / "config.toml"


def _merge(base: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Path] = None) -> dict:
    """Load configuration merged over the defaults.

    Args:
        path: Config file. Uses ``get_config_path()`` if None.

    Returns:
        Configuration dictionary. Defaults only if the file is missing or
        unreadable.
    """
    path = path or get_config_path()

    if not path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        return _merge(DEFAULT_CONFIG, toml.load(path))
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return copy.deepcopy(DEFAULT_CONFIG)


def create_template_config(path: Optional[Path] = None) -> Path:
    """Write a template configuration file.

    Returns:
        Path of the written file.
    """
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        toml.dump(DEFAULT_CONFIG, f)

    return path


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of problems.

    Args:
        config: Configuration dictionary.

    Returns:
        List of missing or invalid keys.
    """
    problems = []

    interval = config.get("market", {}).get("tick_interval", 3.0)
    if not isinstance(interval, (int, float)) or interval <= 0:
        problems.append("market.tick_interval (must be a positive number)")

    # OpenAI - check config first, then env var
    if not get_openai_key(config):
        problems.append("openai.api_key (or set OPENAI_API_KEY env var)")

    return problems


def get_openai_key(config: dict) -> Optional[str]:
    """Resolve the OpenAI API key from config or environment."""
    key = config.get("openai", {}).get("api_key")
    if key and key != "your-openai-api-key":
        return key
    return os.environ.get("OPENAI_API_KEY")


def get_db_path(config: dict) -> Path:
    """Resolve the SQLite database path."""
    db_path = config.get("storage", {}).get("db_path")
    if db_path:
        return Path(db_path).expanduser()
    return CONFIG_DIR / "trademind.db"


def get_tick_interval(config: dict) -> float:
    return float(config.get("market", {}).get("tick_interval", 3.0))


def get_seed(config: dict) -> Optional[int]:
    """Random seed for the simulation, or None for an unseeded run."""
    seed = config.get("market", {}).get("seed", 0)
    return int(seed) if seed else None


def get_catalog_path(config: dict) -> Optional[Path]:
    catalog_path = config.get("market", {}).get("catalog_path")
    return Path(catalog_path).expanduser() if catalog_path else None
