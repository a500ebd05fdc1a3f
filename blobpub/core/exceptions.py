"""
Custom exception hierarchy for blobpub.

Every failure met while publishing is one of these typed exceptions, so
callers can tell configuration mistakes apart from transient network
failures after the run has been aggregated.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeVar

E = TypeVar("E", bound="BlobpubException")


class BlobpubException(Exception):
    """
    Base exception for all blobpub errors.

    Attributes:
        message: Human-readable error description
        context: Additional debugging context (target, bucket, key, etc.)
        exit_code: Suggested exit code for CLI (default: 1)
        recoverable: Whether retry/recovery may be possible
    """

    exit_code: int = 1
    recoverable: bool = True

    def __init__(
        self,
        message: str,
        *,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        if cause is not None:
            self.__cause__ = cause
        super().__init__(message)

    @property
    def target(self) -> str | None:
        """Label of the publish target this error belongs to, if any."""
        return self.context.get("target")

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


# =============================================================================
# Resolution Errors
# =============================================================================


class TemplateError(BlobpubException, ValueError):
    """
    A template expression could not be evaluated.

    Raised for references to unknown fields or environment variables and
    for expressions the renderer does not understand. No partially
    rendered string is ever returned alongside this error.
    """

    recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        template: str | None = None,
        reference: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if template is not None:
            ctx["template"] = template
        if reference:
            ctx["reference"] = reference
        super().__init__(message, context=ctx, cause=cause)
        self.template = template
        self.reference = reference


class ConfigError(BlobpubException, ValueError):
    """
    Unrecognized provider or malformed target descriptor.

    Inherits from ValueError for code that catches ValueError for
    validation errors.
    """

    recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        value: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        if value is not None:
            ctx["value"] = value
        super().__init__(message, context=ctx, cause=cause)


class ConfigFileError(ConfigError):
    """
    Error reading or parsing a configuration file.

    Raised for TOML parsing errors, file not found, permission errors, etc.
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


class PluginLoadError(BlobpubException):
    """
    Error loading or instantiating a backend plugin.

    Raised when a plugin module cannot be imported or a backend class
    cannot be instantiated.
    """

    def __init__(
        self,
        message: str,
        *,
        plugin_name: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if plugin_name:
            ctx["plugin_name"] = plugin_name
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Backend Errors
# =============================================================================


class BackendError(BlobpubException):
    """Base class for storage backend errors."""

    pass


class BackendConnectionError(BackendError):
    """
    Backend unreachable or authentication rejected.

    Fatal for the target being opened; sibling targets are unaffected.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        bucket: str | None = None,
        endpoint: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if provider:
            ctx["provider"] = provider
        if bucket:
            ctx["bucket"] = bucket
        if endpoint:
            ctx["endpoint"] = endpoint
        super().__init__(message, context=ctx, cause=cause)


class UploadError(BackendError):
    """
    A single artifact failed to transfer.

    The remaining artifacts of the target are still attempted.
    """

    def __init__(
        self,
        message: str,
        *,
        source_path: str | None = None,
        bucket: str | None = None,
        key: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if source_path:
            ctx["source_path"] = source_path
        if bucket:
            ctx["bucket"] = bucket
        if key:
            ctx["key"] = key
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Publish Errors
# =============================================================================


class PublishCancelledError(BlobpubException):
    """
    The publish run was cancelled before every upload was issued.

    In-flight uploads are allowed to finish; this error accounts for the
    ones that were never started.
    """

    def __init__(
        self,
        message: str = "Publish cancelled",
        *,
        pending: list[str] | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if pending:
            ctx["pending"] = pending
        super().__init__(message, context=ctx, cause=cause)
        self.pending = pending or []


class AggregatePublishError(BlobpubException):
    """
    Every failure of one publish run.

    The individual exceptions stay available in ``errors`` so callers can
    inspect their types instead of parsing a flattened message.
    """

    def __init__(
        self,
        errors: Iterable[BlobpubException],
        *,
        message: str | None = None,
    ) -> None:
        self.errors: tuple[BlobpubException, ...] = tuple(errors)
        targets = sorted({e.target for e in self.errors if e.target})
        super().__init__(
            message or f"{len(self.errors)} error(s) occurred while publishing",
            context={"targets": targets} if targets else None,
        )

    def errors_of(self, kind: type[E]) -> list[E]:
        """Return the wrapped errors that are instances of ``kind``."""
        return [e for e in self.errors if isinstance(e, kind)]

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        lines = [super().__str__()]
        lines.extend(f"  - {error}" for error in self.errors)
        return "\n".join(lines)
