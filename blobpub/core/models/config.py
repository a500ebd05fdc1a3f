"""
Configuration models.

Provides Pydantic models for blobpub configuration with validation.
Template strings (bucket, endpoint, folder, region) are kept verbatim
here; they are only evaluated when a publish run resolves its targets.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Type aliases
LogLevel = Literal["debug", "info", "warning", "error"]

DEFAULT_FOLDER = "{{ .ProjectName }}/{{ .Tag }}"


class ConfigBaseModel(BaseModel):
    """Base model for config sections with relaxed strict mode for TOML loading."""

    model_config = ConfigDict(
        strict=False,  # Allow coercion from TOML types
        validate_assignment=True,
        extra="ignore",  # Ignore unknown fields in config files
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="never",
    )


class BlobConfig(ConfigBaseModel):
    """One publish target.

    ``provider`` is not checked against the registered backends here:
    an unknown provider fails its own target at resolution time instead
    of rejecting the whole configuration.
    """

    provider: Annotated[str, Field(min_length=1)] = "s3"
    bucket: str
    region: str | None = None
    endpoint: str | None = None
    folder: str = DEFAULT_FOLDER
    ids: list[str] = Field(default_factory=list)
    disable_ssl: bool = False
    kms_key: str | None = None
    acl: str | None = None
    cache_control: str | None = None
    extra_files: list[str] = Field(default_factory=list)

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("region", "endpoint", "kms_key", "acl", "cache_control", mode="before")
    @classmethod
    def empty_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("folder", mode="before")
    @classmethod
    def default_folder(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_FOLDER
        return v

    @field_validator("ids", "extra_files", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: Any) -> list[str]:
        """Parse comma-separated string to list."""
        if isinstance(v, str):
            return [x.strip() for x in v.split(",") if x.strip()]
        return v if v else []


class PublishConfig(ConfigBaseModel):
    """Concurrency and cancellation settings for a publish run."""

    parallelism: Annotated[int, Field(ge=1, le=64)] = 4
    target_parallelism: Annotated[int, Field(ge=1, le=64)] = 2
    timeout: Annotated[float, Field(gt=0)] | None = None


class LoggingConfig(ConfigBaseModel):
    """Logging configuration section."""

    level: LogLevel = "warning"
    console: bool = False
    file: bool = False


class BlobpubConfig(ConfigBaseModel):
    """Complete blobpub configuration.

    This model represents the full configuration with all sections.
    It can be loaded from TOML files or constructed programmatically.
    """

    project_name: str | None = None
    dist: str = "dist"
    blobs: list[BlobConfig] = Field(default_factory=list)
    publish: PublishConfig = Field(default_factory=PublishConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'publish.parallelism')
            default: Default value if key not found

        Returns:
            Config value or default
        """
        parts = key.split(".")
        obj: Any = self
        for part in parts:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            elif isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return default
        return obj
