"""
Click context extension for blobpub CLI.

Provides BlobpubContext dataclass that holds blobpub-specific data
passed through the Click command chain via ctx.obj.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import click

from ..core.exceptions import ConfigFileError
from ..core.models.config import BlobpubConfig


def _git(*args: str, cwd: Path) -> str | None:
    try:
        out = subprocess.check_output(["git", *args], cwd=cwd, stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.decode().strip() or None


@dataclass
class BlobpubContext:
    """Extended context passed through Click command chain.

    Attributes:
        cwd: Current working directory
        repo_root: Path to git repository root (None if not in a repo)
        env: Snapshot of the process environment, taken once at startup
    """

    cwd: Path
    repo_root: Path | None
    env: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(cls, cwd: Path | None = None) -> BlobpubContext:
        """Create a BlobpubContext for the current environment.

        Args:
            cwd: Working directory override (defaults to Path.cwd())
        """
        if cwd is None:
            cwd = Path.cwd()
        root = _git("rev-parse", "--show-toplevel", cwd=cwd)
        return cls(
            cwd=cwd,
            repo_root=Path(root) if root else None,
            env=dict(os.environ),
        )

    def load_config(self, config_path: Path | None = None) -> BlobpubConfig:
        """Load configuration, turning config file errors into usage errors."""
        from ..config import load_config

        try:
            return load_config(config_path=config_path, start_dir=str(self.cwd))
        except ConfigFileError as e:
            raise click.ClickException(str(e)) from e

    def current_tag(self) -> str | None:
        """Latest tag reachable from HEAD."""
        return _git("describe", "--tags", "--abbrev=0", cwd=self.cwd)

    def current_commit(self) -> str:
        """Full commit hash of HEAD, or an empty string outside a repository."""
        return _git("rev-parse", "HEAD", cwd=self.cwd) or ""

    def project_name(self, config: BlobpubConfig) -> str:
        """Configured project name, else the repository or directory name."""
        if config.project_name:
            return config.project_name
        return (self.repo_root or self.cwd).name
