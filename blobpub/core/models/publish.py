"""
Publish run models.

ResolvedTarget is the concrete view of one configured target; TargetOutcome
tracks a target through its states and collects its failures; PublishReport
aggregates the outcomes of a whole run.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ..exceptions import AggregatePublishError, BlobpubException

if TYPE_CHECKING:
    from ..interfaces.backend import IBlobBackend


@dataclass(frozen=True)
class ResolvedTarget:
    """A publish target with every template evaluated.

    Only built when resolution fully succeeded. ``backend`` is the
    provider variant selected during resolution; nothing downstream
    looks at ``provider`` again to decide how to talk to the store.
    """

    index: int
    provider: str
    bucket: str
    folder: str
    backend: IBlobBackend = field(repr=False, compare=False)
    region: str | None = None
    endpoint: str | None = None
    path_style: bool = False
    disable_ssl: bool = False
    ids: frozenset[str] = frozenset()
    kms_key: str | None = None
    acl: str | None = None
    cache_control: str | None = None
    extra_files: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        """Human-readable identity, e.g. ``s3://releases``."""
        return f"{self.provider}://{self.bucket}"


class TargetState(str, Enum):
    """Lifecycle of one target within a publish run."""

    PENDING = "pending"
    RESOLVING = "resolving"
    CONNECTING = "connecting"
    FILTERING = "filtering"
    UPLOADING = "uploading"
    CLOSED = "closed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (TargetState.SUCCEEDED, TargetState.FAILED)

    @property
    def rank(self) -> int:
        return _STATE_RANK[self]


_STATE_RANK = {
    TargetState.PENDING: 0,
    TargetState.RESOLVING: 1,
    TargetState.CONNECTING: 2,
    TargetState.FILTERING: 3,
    TargetState.UPLOADING: 4,
    TargetState.CLOSED: 5,
    TargetState.SUCCEEDED: 6,
    TargetState.FAILED: 6,
}


@dataclass
class TargetOutcome:
    """Result of publishing to one target.

    Upload workers record into the same outcome concurrently, so every
    mutation goes through the lock.
    """

    index: int
    label: str
    state: TargetState = TargetState.PENDING
    uploaded: list[str] = field(default_factory=list)
    errors: list[BlobpubException] = field(default_factory=list)
    history: list[TargetState] = field(default_factory=lambda: [TargetState.PENDING])
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def advance(self, state: TargetState) -> None:
        """Move to a later state.

        Raises:
            RuntimeError: If the transition would go backwards or leave a
                terminal state
        """
        with self._lock:
            if self.state.terminal or state.rank <= self.state.rank:
                raise RuntimeError(
                    f"Invalid target state transition: {self.state.value} -> {state.value}"
                )
            self.state = state
            self.history.append(state)

    def record_upload(self, key: str) -> None:
        with self._lock:
            self.uploaded.append(key)

    def record_error(self, error: BlobpubException) -> None:
        with self._lock:
            error.context.setdefault("target", self.label)
            self.errors.append(error)

    def finish(self) -> None:
        """Enter the terminal state matching the recorded errors."""
        self.advance(TargetState.FAILED if self.errors else TargetState.SUCCEEDED)

    @property
    def succeeded(self) -> bool:
        return self.state == TargetState.SUCCEEDED


@dataclass
class PublishReport:
    """Outcome of a whole publish run.

    ``skipped`` distinguishes a deliberate skip (publishing disabled or
    nothing configured) from a run that simply had nothing to upload.
    """

    outcomes: list[TargetOutcome] = field(default_factory=list)
    skipped: bool = False
    skip_reason: str | None = None

    @property
    def errors(self) -> list[BlobpubException]:
        """All errors, grouped by target in configuration order."""
        result: list[BlobpubException] = []
        for outcome in sorted(self.outcomes, key=lambda o: o.index):
            result.extend(outcome.errors)
        return result

    @property
    def uploaded(self) -> list[str]:
        """Every uploaded ``provider://bucket/key``."""
        return [
            f"{outcome.label}/{key}"
            for outcome in sorted(self.outcomes, key=lambda o: o.index)
            for key in sorted(outcome.uploaded)
        ]

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise AggregatePublishError if any target or artifact failed."""
        errors = self.errors
        if errors:
            raise AggregatePublishError(errors)
