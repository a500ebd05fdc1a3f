"""
Shared release assembly for the publish and targets commands.

Both commands turn the loaded configuration and their command-line
options into the same ReleaseContext.
"""

from __future__ import annotations

from pathlib import Path

import click

from ...core.exceptions import ConfigFileError
from ...core.models.artifact import Artifact, load_artifacts
from ...core.models.config import BlobpubConfig
from ...core.models.release import ReleaseContext
from ..context import BlobpubContext

MANIFEST_NAME = "artifacts.json"


def read_artifacts(
    ctx: BlobpubContext,
    config: BlobpubConfig,
    dist: Path | None,
    artifacts_file: Path | None,
) -> list[Artifact]:
    """Load the artifacts manifest.

    An explicitly given manifest must exist; a missing default manifest
    only means the build produced nothing.
    """
    if artifacts_file is None:
        dist_dir = dist or ctx.cwd / config.dist
        manifest = dist_dir / MANIFEST_NAME
        if not manifest.exists():
            click.echo(f"No artifacts manifest at {manifest}; nothing to select from.", err=True)
            return []
    else:
        manifest = artifacts_file

    try:
        return load_artifacts(manifest)
    except ConfigFileError as e:
        raise click.ClickException(str(e)) from e


def build_release(
    ctx: BlobpubContext,
    config: BlobpubConfig,
    *,
    dist: Path | None = None,
    artifacts_file: Path | None = None,
    tag: str | None = None,
    skip_publish: bool = False,
) -> ReleaseContext:
    """Assemble the release context from configuration, git and options.

    A skipped release needs neither a tag nor the artifacts manifest.
    """
    tag = tag or ctx.current_tag()
    if skip_publish:
        return ReleaseContext.create(
            ctx.project_name(config),
            tag or "",
            blobs=config.blobs,
            env=ctx.env,
            skip_publish=True,
            publish=config.publish,
        )
    if not tag:
        raise click.ClickException("Could not determine the release tag; pass --tag.")

    return ReleaseContext.create(
        ctx.project_name(config),
        tag,
        artifacts=read_artifacts(ctx, config, dist, artifacts_file),
        blobs=config.blobs,
        env=ctx.env,
        commit=ctx.current_commit(),
        skip_publish=skip_publish,
        publish=config.publish,
    )
