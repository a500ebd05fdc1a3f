"""
Domain models for blobpub.

Pydantic models for configuration and artifacts, dataclasses for the
per-run publish state.
"""

from .artifact import Artifact, ArtifactType, load_artifacts
from .config import (
    DEFAULT_FOLDER,
    BlobConfig,
    BlobpubConfig,
    ConfigBaseModel,
    LoggingConfig,
    PublishConfig,
)
from .publish import PublishReport, ResolvedTarget, TargetOutcome, TargetState
from .release import ReleaseContext

__all__ = [
    "DEFAULT_FOLDER",
    "Artifact",
    "ArtifactType",
    "BlobConfig",
    "BlobpubConfig",
    "ConfigBaseModel",
    "LoggingConfig",
    "PublishConfig",
    "PublishReport",
    "ReleaseContext",
    "ResolvedTarget",
    "TargetOutcome",
    "TargetState",
    "load_artifacts",
]
