"""
Click-based CLI for blobpub.

This module provides the main Click command group and serves as the
entry point for the blobpub CLI.

Usage:
    from blobpub.cli import cli
    cli()  # Invokes the CLI
"""

from __future__ import annotations

import click

from .. import __version__
from .context import BlobpubContext


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="blobpub")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """blobpub - publish release artifacts to object storage

    \b
    Commands:
        blobpub targets        Show where a release would be uploaded
        blobpub publish        Upload release artifacts to every blob target
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)
    elif ctx.obj is None:
        ctx.obj = BlobpubContext.create()


def register_commands() -> None:
    """Register all CLI commands with the main group."""
    from .commands import COMMANDS

    for cmd in COMMANDS:
        cli.add_command(cmd)


# Register commands at module load time
register_commands()


__all__ = [
    "BlobpubContext",
    "__version__",
    "cli",
]
