"""
Local directory backend.

The bucket is a directory on the local filesystem and keys are relative
paths inside it. Useful for staging mirrors and for tests.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from ...core.exceptions import BackendConnectionError, UploadError
from .base import BaseBlobBackend, BaseBucket

if TYPE_CHECKING:
    from ...core.models.publish import ResolvedTarget


class DirectoryBucket(BaseBucket):
    """Handle on a local directory."""

    def __init__(self, target: ResolvedTarget, root: Path) -> None:
        super().__init__(target)
        self.root = root

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path != self.root and self.root not in path.parents:
            raise ValueError(f"key escapes bucket directory: {key}")
        return path

    def _put(self, key: str, source_path: str) -> None:
        try:
            dest = self._path_for(key)
            dest.parent.mkdir(parents=True, exist_ok=True)
            # Write next to the destination, then rename over it.
            fd, tmp = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.")
            try:
                with os.fdopen(fd, "wb") as out, open(source_path, "rb") as src:
                    shutil.copyfileobj(src, out)
                os.replace(tmp, dest)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except (OSError, ValueError) as e:
            raise UploadError(
                f"failed to write to bucket {self.target.bucket}: {e}",
                source_path=source_path,
                bucket=self.target.bucket,
                key=key,
                cause=e,
            ) from e

    def _list_keys(self, prefix: str) -> list[str]:
        keys = []
        for path in self.root.rglob("*"):
            if not path.is_file() or path.name.startswith("."):
                continue
            key = path.relative_to(self.root).as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return keys

    def _close(self) -> None:
        pass


class FileBackend(BaseBlobBackend):
    """Backend writing into a local directory named by the bucket."""

    @property
    def name(self) -> str:
        return "file"

    @property
    def default_endpoint(self) -> str | None:
        return None

    def open(self, target: ResolvedTarget) -> DirectoryBucket:
        root = Path(target.bucket).expanduser()
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackendConnectionError(
                f"cannot use directory as bucket: {e}",
                provider=self.name,
                bucket=target.bucket,
                cause=e,
            ) from e
        if not os.access(root, os.W_OK):
            raise BackendConnectionError(
                "bucket directory is not writable",
                provider=self.name,
                bucket=target.bucket,
            )
        return DirectoryBucket(target, root.resolve())
