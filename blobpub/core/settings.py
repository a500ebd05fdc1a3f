"""
Pydantic Settings for blobpub configuration.

Provides settings loading from TOML files, environment variables, and defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .di import resolve_or_default
from .exceptions import ConfigFileError
from .interfaces.logger import ILogger
from .models.config import BlobConfig, BlobpubConfig, LoggingConfig, PublishConfig

CONFIG_FILE_NAMES = (".blobpub.toml", "blobpub.toml")


def _get_logger() -> ILogger:
    from ..services.logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]


def find_config_file(start_dir: str | None = None) -> Path | None:
    """
    Find a config file by walking up from start_dir (or cwd).

    Checks .blobpub.toml, blobpub.toml, then pyproject.toml with a
    [tool.blobpub] section, in each directory.

    Returns:
        Path to config file, or None if not found.
    """
    start = Path(start_dir) if start_dir else Path.cwd()

    for parent in [start, *list(start.parents)]:
        for name in CONFIG_FILE_NAMES:
            config_path = parent / name
            if config_path.is_file():
                return config_path

        pyproject = parent / "pyproject.toml"
        if pyproject.is_file():
            try:
                with open(pyproject, "rb") as f:
                    data = tomllib.load(f)
            except (tomllib.TOMLDecodeError, OSError):
                continue
            if "blobpub" in data.get("tool", {}):
                return pyproject

    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Read a TOML config file.

    For pyproject.toml only the [tool.blobpub] table is returned.

    Raises:
        ConfigFileError: If the file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigFileError(
            f"Failed to parse config file: {e}", file_path=str(path), cause=e
        ) from e
    except OSError as e:
        raise ConfigFileError(
            f"Failed to read config file: {e}", file_path=str(path), cause=e
        ) from e

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("blobpub", {})
    return data


class TomlConfigSource(PydanticBaseSettingsSource):
    """Settings source returning already-parsed TOML data."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]):
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get field value from TOML data."""
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all TOML data for settings initialization."""
        return dict(self._data)


class BlobpubSettings(BaseSettings):
    """blobpub configuration settings with TOML and environment variable support.

    Priority (highest to lowest):
    1. Explicit init values
    2. Environment variables (BLOBPUB_<section>__<field>)
    3. TOML config file (.blobpub.toml or pyproject.toml [tool.blobpub])
    4. Model defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOBPUB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    project_name: str | None = None
    dist: str = "dist"
    blobs: list[BlobConfig] = Field(default_factory=list)
    publish: PublishConfig = Field(default_factory=PublishConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Internal fields (not from config)
    _config_file: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to add TOML loading.

        Note: The TOML data cannot be passed in here, so load_settings()
        hands it over through a module-level variable.
        """
        return (
            init_settings,
            env_settings,
            TomlConfigSource(settings_cls, _current_toml_data),
        )

    @property
    def config_file(self) -> str | None:
        return self._config_file

    def to_config(self) -> BlobpubConfig:
        """Convert settings to the plain configuration model."""
        return BlobpubConfig(
            project_name=self.project_name,
            dist=self.dist,
            blobs=list(self.blobs),
            publish=self.publish,
            logging=self.logging,
        )


# Module-level variable for passing to settings_customise_sources
_current_toml_data: dict[str, Any] = {}


def load_settings(
    config_path: Path | None = None,
    start_dir: str | None = None,
    **overrides: Any,
) -> BlobpubSettings:
    """Load blobpub settings from config file and environment.

    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching from (if config_path not given)
        **overrides: Explicit values taking precedence over every source

    Returns:
        BlobpubSettings instance with all sources merged

    Raises:
        ConfigFileError: If the config file is unreadable or invalid
    """
    global _current_toml_data

    path = config_path or find_config_file(start_dir)
    try:
        _current_toml_data = read_config_file(path) if path else {}
    except ConfigFileError as e:
        _get_logger().error("Could not load config file %s: %s", path, e.message)
        raise

    try:
        settings = BlobpubSettings(**overrides)
    except ValidationError as e:
        _get_logger().error("Invalid configuration in %s", path or "environment")
        raise ConfigFileError(
            f"Invalid configuration: {e}",
            file_path=str(path) if path else None,
            cause=e,
        ) from e
    finally:
        _current_toml_data = {}

    if path:
        settings._config_file = str(path)
    return settings
