"""
Configuration management for media log stores.

The configuration is stored as a TOML file in the store directory.
It names the storage key for the entry collection and display defaults.
"""

import os
import tomllib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import tomli_w


CONFIG_FILENAME = "stacks.toml"
CONFIG_VERSION = 1

# Key the browser version used in localStorage
DEFAULT_STORAGE_KEY = "storyStacksEntries"

# The entry form's rating slider starts here
DEFAULT_RATING = 4.0


@dataclass
class StoreConfig:
    """Complete store configuration."""
    path: Path
    version: int = CONFIG_VERSION
    created: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    storage_key: str = DEFAULT_STORAGE_KEY
    default_rating: float = DEFAULT_RATING

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.path / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.config_path.exists()


def get_default_store_path() -> Path:
    """Store directory: STACKS_STORE_PATH if set, else ~/.stacks."""
    env = os.environ.get("STACKS_STORE_PATH")
    if env:
        return Path(env).expanduser().resolve()
    return Path.home() / ".stacks"


def load_config(store_path: Path) -> StoreConfig:
    """
    Load configuration from a store directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = store_path / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    store = data.get("store", {})
    version = store.get("version", 1)
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    storage = data.get("storage", {})
    display = data.get("display", {})
    try:
        default_rating = float(display.get("default_rating", DEFAULT_RATING))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid display.default_rating in {config_path}")

    return StoreConfig(
        path=store_path,
        version=version,
        created=store.get("created", ""),
        storage_key=storage.get("key", DEFAULT_STORAGE_KEY) or DEFAULT_STORAGE_KEY,
        default_rating=default_rating,
    )


def save_config(config: StoreConfig) -> None:
    """
    Save configuration to the store directory.

    Creates the directory if it doesn't exist.
    """
    config.path.mkdir(parents=True, exist_ok=True)

    data = {
        "store": {
            "version": config.version,
            "created": config.created,
        },
        "storage": {
            "key": config.storage_key,
        },
        "display": {
            "default_rating": config.default_rating,
        },
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def load_or_create_config(store_path: Path) -> StoreConfig:
    """
    Load existing config or create a new one with defaults.

    This is the main entry point for config management.
    """
    if (store_path / CONFIG_FILENAME).exists():
        return load_config(store_path)
    config = StoreConfig(path=store_path)
    save_config(config)
    return config
