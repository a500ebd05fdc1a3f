"""
Base storage backend.

Defines the common functionality shared by storage backends and their
bucket handles.
"""

from __future__ import annotations

import os
import threading
from abc import abstractmethod
from typing import TYPE_CHECKING

from ...core.di import resolve_or_default
from ...core.exceptions import UploadError
from ...core.interfaces.backend import IBlobBackend, IBucket
from ...core.interfaces.logger import ILogger

if TYPE_CHECKING:
    from ...core.models.publish import ResolvedTarget


def _get_logger() -> ILogger:
    from ...services.logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]


def format_size(size_bytes: int) -> str:
    """Format size in bytes to human readable string."""
    size: float = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024:
            return f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}PB"


class BaseBucket(IBucket):
    """
    Common handle behaviour: idempotent close and source validation.

    Subclasses implement _put, _list_keys and _close.
    """

    def __init__(self, target: ResolvedTarget) -> None:
        self.target = target
        self._closed = False
        self._close_lock = threading.Lock()
        self._logger = _get_logger().bind(target.label)

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, key: str, source_path: str) -> None:
        if self._closed:
            raise UploadError(
                "Bucket handle is closed",
                source_path=source_path,
                bucket=self.target.bucket,
                key=key,
            )
        if not os.path.isfile(source_path):
            raise UploadError(
                "Source file not found",
                source_path=source_path,
                bucket=self.target.bucket,
                key=key,
            )
        self._logger.debug(
            "uploading %s (%s) as %s",
            source_path,
            format_size(os.path.getsize(source_path)),
            key,
        )
        self._put(key, source_path)

    def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(self._list_keys(prefix))

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._close()

    @abstractmethod
    def _put(self, key: str, source_path: str) -> None:
        pass

    @abstractmethod
    def _list_keys(self, prefix: str) -> list[str]:
        pass

    @abstractmethod
    def _close(self) -> None:
        pass


class BaseBlobBackend(IBlobBackend):
    """
    Abstract base class for storage backends.

    Implements the Strategy pattern for storage operations.
    """

    @property
    def default_endpoint(self) -> str | None:
        return None

    @abstractmethod
    def open(self, target: ResolvedTarget) -> IBucket:
        pass
