"""
Native Click implementation of the publish command.

Usage: blobpub publish [--tag TAG] [--skip-publish]
"""

from __future__ import annotations

from pathlib import Path

import click

from ...core.bootstrap import bootstrap
from ...core.exceptions import AggregatePublishError
from ...core.models.config import PublishConfig
from ...services.publish import Publisher
from ..context import BlobpubContext
from ._release import build_release


@click.command("publish")
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
@click.option(
    "--artifacts",
    "artifacts_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Artifacts manifest (default: <dist>/artifacts.json)",
)
@click.option("--tag", help="Release tag (default: latest git tag)")
@click.option(
    "--skip-publish",
    is_flag=True,
    help="Resolve nothing and upload nothing; no tag or manifest needed",
)
@click.option(
    "--parallelism",
    type=click.IntRange(1, 64),
    help="Concurrent uploads per target",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds after which no new uploads are started",
)
@click.pass_obj
def publish(
    ctx: BlobpubContext,
    config_path: Path | None,
    dist: Path | None,
    artifacts_file: Path | None,
    tag: str | None,
    skip_publish: bool,
    parallelism: int | None,
    timeout: float | None,
) -> None:
    """Upload release artifacts to every configured blob target."""
    config = ctx.load_config(config_path)

    overrides = {}
    if parallelism is not None:
        overrides["parallelism"] = parallelism
    if timeout is not None:
        overrides["timeout"] = timeout
    if overrides:
        config.publish = PublishConfig(**{**config.publish.model_dump(), **overrides})

    bootstrap(config.logging)
    release = build_release(
        ctx,
        config,
        dist=dist,
        artifacts_file=artifacts_file,
        tag=tag,
        skip_publish=skip_publish,
    )

    report = Publisher().run(release)

    if report.skipped:
        click.echo(f"Skipped: {report.skip_reason}")
        return

    for outcome in sorted(report.outcomes, key=lambda o: o.index):
        status = "ok" if outcome.succeeded else "FAILED"
        click.echo(
            f"{outcome.label}: {status} ({len(outcome.uploaded)} uploaded, "
            f"{len(outcome.errors)} error(s))"
        )

    if not report.ok:
        click.echo("", err=True)
        click.echo(str(AggregatePublishError(report.errors)), err=True)
        raise SystemExit(1)
