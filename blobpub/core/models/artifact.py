"""
Artifact domain models.

Artifacts are produced by the build and packaging stages; blobpub only
reads them. They are loaded from the ``artifacts.json`` manifest written
into the dist directory.
"""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import ConfigFileError


class ArtifactType(str, Enum):
    """Kinds of artifacts a release can produce.

    Values match the ``type`` strings found in ``artifacts.json``.
    """

    UPLOADABLE_ARCHIVE = "Archive"
    UPLOADABLE_BINARY = "Uploadable Binary"
    UPLOADABLE_SOURCE_ARCHIVE = "Source"
    UPLOADABLE_FILE = "File"
    LINUX_PACKAGE = "Linux Package"
    CHECKSUM = "Checksum"
    SIGNATURE = "Signature"
    BINARY = "Binary"
    DOCKER_IMAGE = "Docker Image"
    PUBLISHED_DOCKER_IMAGE = "Published Docker Image"
    BREW_TAP = "Brew Tap"
    SCOOP_MANIFEST = "Scoop Manifest"
    SNAPCRAFT = "Snap"
    PUBLISHED_SNAPCRAFT = "Published Snap"

    @classmethod
    def parse(cls, value: Any) -> Any:
        """Accept either a value (``"Linux Package"``) or a name (``LinuxPackage``)."""
        if isinstance(value, cls) or not isinstance(value, str):
            return value
        for member in cls:
            if value == member.value:
                return member
        normalized = value.replace("_", "").replace(" ", "").lower()
        for member in cls:
            if member.name.replace("_", "").lower() == normalized:
                return member
        return value


class Artifact(BaseModel):
    """A file produced by the build pipeline.

    ``extra`` carries free-form metadata; ``ID`` names the build or
    packaging step that produced the artifact and ``Format`` the archive
    format.
    """

    model_config = ConfigDict(
        frozen=True,
        strict=False,
        extra="ignore",
        populate_by_name=True,
        use_enum_values=True,
    )

    name: Annotated[str, Field(min_length=1)]
    path: Annotated[str, Field(min_length=1)]
    type: ArtifactType
    extra: dict[str, Any] = Field(default_factory=dict)

    @field_validator("path", mode="before")
    @classmethod
    def coerce_path(cls, v: Any) -> Any:
        """Allow pathlib paths."""
        if isinstance(v, os.PathLike):
            return os.fspath(v)
        return v

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> Any:
        return ArtifactType.parse(v)

    @field_validator("extra", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def id(self) -> str | None:
        """The producing step's ID, if the artifact carries one."""
        value = self.extra.get("ID")
        return str(value) if value is not None else None


def load_artifacts(manifest_path: Path) -> list[Artifact]:
    """
    Load artifacts from a JSON manifest.

    The manifest is a list of objects with ``name``, ``path``, ``type``
    and optional ``extra`` keys. Relative paths are kept as written;
    they are resolved against the working directory at upload time.

    Args:
        manifest_path: Path to artifacts.json

    Returns:
        Artifacts in manifest order

    Raises:
        ConfigFileError: If the manifest cannot be read or is malformed
    """
    try:
        raw = json.loads(manifest_path.read_text())
    except OSError as e:
        raise ConfigFileError(
            "Failed to read artifacts manifest", file_path=str(manifest_path), cause=e
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigFileError(
            f"Invalid JSON in artifacts manifest: {e}", file_path=str(manifest_path), cause=e
        ) from e

    if not isinstance(raw, list):
        raise ConfigFileError(
            "Artifacts manifest must be a JSON list", file_path=str(manifest_path)
        )

    try:
        return [Artifact.model_validate(item) for item in raw]
    except ValidationError as e:
        raise ConfigFileError(
            f"Invalid artifact entry: {e}", file_path=str(manifest_path), cause=e
        ) from e
