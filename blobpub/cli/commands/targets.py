"""
Native Click implementation of the targets command.

Usage: blobpub targets [--tag TAG]

Shows where a publish would upload without contacting any backend.
"""

from __future__ import annotations

from pathlib import Path

import click

from ...core.bootstrap import bootstrap
from ...core.exceptions import BlobpubException
from ...services.publish import build_template_context, plan_uploads, render_template
from ...services.publish.targets import resolve_target, target_label
from ..context import BlobpubContext
from ._release import build_release


@click.command("targets")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (default: search for .blobpub.toml or pyproject.toml)",
)
@click.option(
    "--dist",
    type=click.Path(file_okay=False, path_type=Path),
    help="Distribution directory holding artifacts.json",
)
@click.option("--tag", help="Release tag (default: latest git tag)")
@click.pass_obj
def targets(
    ctx: BlobpubContext,
    config_path: Path | None,
    dist: Path | None,
    tag: str | None,
) -> None:
    """List resolved targets and the keys a publish would write."""
    config = ctx.load_config(config_path)
    bootstrap(config.logging)
    release = build_release(ctx, config, dist=dist, tag=tag)

    if not release.blobs:
        click.echo("No blob targets configured.")
        return

    values = build_template_context(release)
    failed = 0
    for index, blob in enumerate(release.blobs):
        try:
            target = resolve_target(index, blob, render_template, values)
        except BlobpubException as e:
            failed += 1
            click.echo(f"{target_label(index, blob)}: {e}", err=True)
            continue

        click.echo(f"{target.label}")
        click.echo(f"  provider: {target.provider}")
        click.echo(f"  bucket:   {target.bucket}")
        click.echo(f"  endpoint: {target.endpoint or '(default)'}")
        click.echo(f"  region:   {target.region or '(default)'}")

        plan, problems = plan_uploads(target, release.artifacts)
        for key, artifact in plan:
            click.echo(f"    {key}  <-  {artifact.path}")
        if not plan:
            click.echo("    (no artifacts)")
        for problem in problems:
            click.echo(f"  warning: {problem}", err=True)

    if failed:
        raise SystemExit(1)
