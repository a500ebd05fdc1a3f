"""
Artifact selection for a publish target.
"""

from __future__ import annotations

import glob
import os
from collections.abc import Iterable

from ...core.exceptions import ConfigError
from ...core.models.artifact import Artifact, ArtifactType
from ...core.models.publish import ResolvedTarget

#: Artifact kinds that are worth uploading to a bucket.
PUBLISHABLE_TYPES = frozenset(
    {
        ArtifactType.UPLOADABLE_ARCHIVE,
        ArtifactType.UPLOADABLE_BINARY,
        ArtifactType.UPLOADABLE_SOURCE_ARCHIVE,
        ArtifactType.CHECKSUM,
        ArtifactType.SIGNATURE,
        ArtifactType.LINUX_PACKAGE,
    }
)

#: Kinds that never carry an ID and so pass any ID allow-list.
ID_EXEMPT_TYPES = frozenset(
    {
        ArtifactType.CHECKSUM,
        ArtifactType.SIGNATURE,
        ArtifactType.UPLOADABLE_SOURCE_ARCHIVE,
    }
)


def _kind(artifact: Artifact) -> ArtifactType:
    # Models store enum values; hashing needs the member itself.
    return ArtifactType(artifact.type)


def is_publishable(artifact: Artifact, ids: frozenset[str] | set[str] = frozenset()) -> bool:
    """Check whether one artifact should go to a target with the given ID allow-list."""
    kind = _kind(artifact)
    if kind not in PUBLISHABLE_TYPES:
        return False
    if not ids or kind in ID_EXEMPT_TYPES:
        return True
    return artifact.id in ids


def filter_artifacts(artifacts: Iterable[Artifact], target: ResolvedTarget) -> list[Artifact]:
    """
    Select the artifacts to upload to a target.

    Input order is preserved and the result depends only on the
    arguments.

    Args:
        artifacts: Every artifact produced by the release
        target: Resolved target (its ``ids`` is the allow-list)

    Returns:
        Eligible artifacts
    """
    return [a for a in artifacts if is_publishable(a, target.ids)]


def collect_extra_files(patterns: Iterable[str]) -> list[Artifact]:
    """
    Expand extra-file glob patterns into uploadable artifacts.

    Each match is uploaded under its base name.

    Raises:
        ConfigError: If a pattern matches no file
    """
    files: list[Artifact] = []
    seen: set[str] = set()
    for pattern in patterns:
        matches = sorted(p for p in glob.glob(pattern, recursive=True) if os.path.isfile(p))
        if not matches:
            raise ConfigError(
                f"globbing failed for pattern {pattern}: no files matched",
                key="extra_files",
                value=pattern,
            )
        for path in matches:
            if path in seen:
                continue
            seen.add(path)
            files.append(
                Artifact(
                    name=os.path.basename(path),
                    path=path,
                    type=ArtifactType.UPLOADABLE_FILE,
                )
            )
    return files
