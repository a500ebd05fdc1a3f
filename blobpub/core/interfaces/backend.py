"""
Storage backend interface definitions.

Enables pluggable blob-store backends (S3, GCS, local directories, ...)
following the Open/Closed Principle. The publish orchestrator only ever
talks to these interfaces; provider-specific session setup stays inside
each implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.publish import ResolvedTarget


class IBucket(ABC):
    """
    An open read/write handle on one bucket.

    Handles are context managers; leaving the ``with`` block closes them.
    """

    @abstractmethod
    def put(self, key: str, source_path: str) -> None:
        """
        Upload a local file, creating or overwriting ``key``.

        Args:
            key: Remote object key
            source_path: Local file to upload

        Raises:
            UploadError: If the transfer fails
        """
        pass

    @abstractmethod
    def list_keys(self, prefix: str = "") -> list[str]:
        """
        List object keys in the bucket.

        Args:
            prefix: Only return keys starting with this prefix

        Returns:
            Sorted list of keys

        Raises:
            BackendError: If listing fails
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying session. Safe to call more than once."""
        pass

    def __enter__(self) -> IBucket:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class IBlobBackend(ABC):
    """
    Interface for storage backends.

    Implementations must handle their specific SDK interactions while
    conforming to this common interface. One instance serves any number
    of targets; per-target state lives in the handle returned by open().
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Return the provider name this backend handles.

        Examples: 's3', 'gs', 'file'
        """
        pass

    @property
    @abstractmethod
    def default_endpoint(self) -> str | None:
        """Endpoint used when a target does not configure one (None = SDK default)."""
        pass

    @property
    def default_region(self) -> str | None:
        """Region used when a target does not configure one (None = SDK default)."""
        return None

    @abstractmethod
    def open(self, target: ResolvedTarget) -> IBucket:
        """
        Open a handle on the target's bucket.

        Args:
            target: Fully resolved target

        Returns:
            Open bucket handle

        Raises:
            BackendConnectionError: If the backend is unreachable or
                rejects the credentials
        """
        pass
