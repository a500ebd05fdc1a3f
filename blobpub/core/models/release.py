"""
Release context passed to a publish run.

Everything the publish stage reads (release metadata, artifacts, target
declarations and an environment snapshot) lives here and stays read-only
for the whole run.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType

from .artifact import Artifact
from .config import BlobConfig, PublishConfig


def _freeze_env(env: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(env or {}))


@dataclass(frozen=True)
class ReleaseContext:
    """Read-only input of one publish run.

    Attributes:
        project_name: Project name used in keys and templates
        current_tag: Git tag being released (e.g. v1.0.0)
        artifacts: Artifacts produced upstream, in build order
        blobs: Configured publish targets
        env: Snapshot of environment variables visible to templates
        commit: Full git commit hash, if known
        date: Release timestamp (UTC)
        skip_publish: When set, no backend is contacted at all
        publish: Concurrency and timeout settings
    """

    project_name: str
    current_tag: str
    artifacts: tuple[Artifact, ...] = ()
    blobs: tuple[BlobConfig, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    commit: str = ""
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    skip_publish: bool = False
    publish: PublishConfig = field(default_factory=PublishConfig)

    def __post_init__(self) -> None:
        # Accept any iterable/mapping but store immutable snapshots.
        object.__setattr__(self, "artifacts", tuple(self.artifacts))
        object.__setattr__(self, "blobs", tuple(self.blobs))
        object.__setattr__(self, "env", _freeze_env(self.env))

    @classmethod
    def create(
        cls,
        project_name: str,
        current_tag: str,
        *,
        artifacts: Iterable[Artifact] = (),
        blobs: Iterable[BlobConfig] = (),
        env: Mapping[str, str] | None = None,
        **kwargs,
    ) -> ReleaseContext:
        """Build a context from loose collections."""
        return cls(
            project_name=project_name,
            current_tag=current_tag,
            artifacts=tuple(artifacts),
            blobs=tuple(blobs),
            env=_freeze_env(env),
            **kwargs,
        )
