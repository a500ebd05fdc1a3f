"""
Shared pytest fixtures for blobpub tests.

This module provides:
- reset_app: Clean container and bootstrap state around every test
- dist: A dist directory with the four artifacts of a typical release
- make_release: Factory for ReleaseContext objects
- memory_store: An in-memory storage backend registered as provider "mem"
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import pytest

from blobpub.core.bootstrap import reset
from blobpub.core.container import get_container
from blobpub.core.exceptions import BackendConnectionError, UploadError
from blobpub.core.models import Artifact, ArtifactType, BlobConfig, ReleaseContext
from blobpub.plugins.backends.base import BaseBlobBackend, BaseBucket

RELEASE_DATE = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_app():
    """Give every test a fresh container."""
    reset()
    yield
    reset()


@pytest.fixture
def dist(tmp_path: Path) -> list[Artifact]:
    """
    Create the artifacts of a release in tmp_path/dist.

    - checksum.txt    Checksum, no ID
    - bin.tar.gz      Archive, ID foo
    - bin.deb         Linux package, ID bar
    - source.tar.gz   Source archive, no ID
    """
    dist_dir = tmp_path / "dist"
    dist_dir.mkdir()
    specs = [
        ("checksum.txt", ArtifactType.CHECKSUM, {}),
        ("bin.tar.gz", ArtifactType.UPLOADABLE_ARCHIVE, {"ID": "foo"}),
        ("bin.deb", ArtifactType.LINUX_PACKAGE, {"ID": "bar"}),
        ("source.tar.gz", ArtifactType.UPLOADABLE_SOURCE_ARCHIVE, {}),
    ]
    artifacts = []
    for name, kind, extra in specs:
        path = dist_dir / name
        path.write_text(f"contents of {name}\n")
        artifacts.append(Artifact(name=name, path=str(path), type=kind, extra=extra))
    return artifacts


@pytest.fixture
def make_release() -> Callable[..., ReleaseContext]:
    """Factory building a release of project testupload at v1.0.0."""

    def _make(
        blobs: list[BlobConfig] | None = None,
        artifacts: list[Artifact] | None = None,
        **kwargs,
    ) -> ReleaseContext:
        kwargs.setdefault("commit", "0123456789abcdef0123456789abcdef01234567")
        kwargs.setdefault("date", RELEASE_DATE)
        kwargs.setdefault("env", {})
        return ReleaseContext.create(
            kwargs.pop("project_name", "testupload"),
            kwargs.pop("current_tag", "v1.0.0"),
            artifacts=artifacts or [],
            blobs=blobs or [],
            **kwargs,
        )

    return _make


# =============================================================================
# In-memory backend
# =============================================================================


@dataclass
class MemoryStore:
    """State shared by every handle of the in-memory backend."""

    objects: dict[tuple[str, str], bytes] = field(default_factory=dict)
    opened: list[str] = field(default_factory=list)
    closed: list[str] = field(default_factory=list)
    unreachable: set[str] = field(default_factory=set)
    fail_keys: set[str] = field(default_factory=set)
    on_put: Callable[[str], None] | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)

    def keys(self, bucket: str) -> list[str]:
        return sorted(k for b, k in self.objects if b == bucket)


class MemoryBucket(BaseBucket):
    def __init__(self, target, store: MemoryStore) -> None:
        super().__init__(target)
        self.store = store

    def _put(self, key: str, source_path: str) -> None:
        if self.store.on_put is not None:
            self.store.on_put(key)
        if key in self.store.fail_keys:
            raise UploadError("simulated failure", bucket=self.target.bucket, key=key)
        data = Path(source_path).read_bytes()
        with self.store.lock:
            self.store.objects[(self.target.bucket, key)] = data

    def _list_keys(self, prefix: str) -> list[str]:
        return [k for k in self.store.keys(self.target.bucket) if k.startswith(prefix)]

    def _close(self) -> None:
        with self.store.lock:
            self.store.closed.append(self.target.bucket)


class MemoryBackend(BaseBlobBackend):
    store: MemoryStore

    @property
    def name(self) -> str:
        return "mem"

    def open(self, target) -> MemoryBucket:
        with self.store.lock:
            self.store.opened.append(target.bucket)
        if target.bucket in self.store.unreachable:
            raise BackendConnectionError(
                "connection refused", provider=self.name, bucket=target.bucket
            )
        return MemoryBucket(target, self.store)


@pytest.fixture
def memory_store() -> MemoryStore:
    """Register provider "mem" backed by a fresh MemoryStore."""
    store = MemoryStore()
    backend_cls = type("BoundMemoryBackend", (MemoryBackend,), {"store": store})
    get_container().register_backend("mem", backend_cls)
    return store
