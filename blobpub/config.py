"""Configuration loading for blobpub."""

from pathlib import Path
from typing import Any

from .core.models.config import BlobpubConfig
from .core.settings import find_config_file, load_settings

__all__ = ["config_get", "find_config_file", "load_config"]


def load_config(
    config_path: Path | None = None,
    start_dir: str | None = None,
    **overrides: Any,
) -> BlobpubConfig:
    """
    Load configuration from TOML and environment.

    Uses pydantic-settings for loading with priority:
    overrides > env vars > config file > defaults.

    Args:
        config_path: Explicit config file (otherwise searched from start_dir)
        start_dir: Directory to start the config file search from
        **overrides: Top-level values that win over every other source

    Raises:
        ConfigFileError: If the config file is unreadable or invalid
    """
    return load_settings(config_path, start_dir, **overrides).to_config()


def config_get(key: str, start_dir: str | None = None) -> Any:
    """Get a config value by dotted key, e.g. ``publish.parallelism``."""
    return load_config(start_dir=start_dir).get(key)
