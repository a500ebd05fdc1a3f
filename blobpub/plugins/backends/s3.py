"""
Amazon S3 and S3-compatible storage backend.

Credentials come from the standard AWS chain (environment, shared config
files, instance metadata); blobpub never reads them itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, EndpointConnectionError

from ...core.exceptions import BackendConnectionError, BackendError, UploadError
from .base import BaseBlobBackend, BaseBucket

if TYPE_CHECKING:
    from ...core.models.publish import ResolvedTarget

_TRANSFER_ERRORS = (ClientError, BotoCoreError, S3UploadFailedError, OSError)


def _error_code(error: BaseException | None) -> str | None:
    """Find the S3 error code on an exception or the exception it wraps."""
    seen = 0
    while error is not None and seen < 5:
        if isinstance(error, ClientError):
            return error.response.get("Error", {}).get("Code")
        error = error.__cause__ or error.__context__
        seen += 1
    return None


def describe_error(error: BaseException, bucket: str) -> str:
    """Translate an SDK error into a message naming the likely fix."""
    code = _error_code(error)
    if code in ("NoSuchBucket", "404", "NotFound"):
        return f"provided bucket does not exist: {bucket}"
    if code in ("InvalidAccessKeyId", "SignatureDoesNotMatch"):
        return "the access key or secret you provided was rejected"
    if code in ("AccessDenied", "403", "Forbidden"):
        return f"you don't have the required permissions on bucket {bucket}"
    if isinstance(error, EndpointConnectionError):
        return f"could not reach the storage endpoint: {error}"
    return f"failed to write to bucket {bucket}: {error}"


class S3Bucket(BaseBucket):
    """Handle on one S3 bucket backed by a boto3 client."""

    def __init__(self, target: ResolvedTarget, client: Any) -> None:
        super().__init__(target)
        self._client = client

    def _extra_args(self) -> dict[str, str]:
        extra: dict[str, str] = {}
        if self.target.acl:
            extra["ACL"] = self.target.acl
        if self.target.cache_control:
            extra["CacheControl"] = self.target.cache_control
        if self.target.kms_key:
            extra["ServerSideEncryption"] = "aws:kms"
            extra["SSEKMSKeyId"] = self.target.kms_key
        return extra

    def _put(self, key: str, source_path: str) -> None:
        try:
            self._client.upload_file(
                source_path,
                self.target.bucket,
                key,
                ExtraArgs=self._extra_args() or None,
            )
        except _TRANSFER_ERRORS as e:
            raise UploadError(
                describe_error(e, self.target.bucket),
                source_path=source_path,
                bucket=self.target.bucket,
                key=key,
                cause=e,
            ) from e

    def _list_keys(self, prefix: str) -> list[str]:
        keys: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.target.bucket, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (ClientError, BotoCoreError) as e:
            raise BackendError(
                describe_error(e, self.target.bucket),
                context={"bucket": self.target.bucket, "prefix": prefix},
                cause=e,
            ) from e
        return keys

    def _close(self) -> None:
        self._client.close()


class S3Backend(BaseBlobBackend):
    """
    S3 backend using boto3.

    A configured endpoint (MinIO, Ceph, ...) switches the client to
    path-style addressing, which self-hosted servers generally require.
    """

    #: Attempts per request made by the SDK, including the first one.
    MAX_ATTEMPTS = 3

    @property
    def name(self) -> str:
        return "s3"

    @property
    def default_endpoint(self) -> str | None:
        return None

    def _client_config(self, target: ResolvedTarget) -> Config:
        return Config(
            s3={"addressing_style": "path" if target.path_style else "auto"},
            retries={"max_attempts": self.MAX_ATTEMPTS, "mode": "standard"},
        )

    def _create_client(self, target: ResolvedTarget) -> Any:
        session = boto3.session.Session()
        return session.client(
            "s3",
            region_name=target.region,
            endpoint_url=target.endpoint,
            use_ssl=not target.disable_ssl,
            config=self._client_config(target),
        )

    def open(self, target: ResolvedTarget) -> S3Bucket:
        try:
            client = self._create_client(target)
        except (BotoCoreError, ValueError) as e:
            raise BackendConnectionError(
                f"failed to create {self.name} client: {e}",
                provider=self.name,
                bucket=target.bucket,
                endpoint=target.endpoint,
                cause=e,
            ) from e

        try:
            client.head_bucket(Bucket=target.bucket)
        except (ClientError, BotoCoreError) as e:
            client.close()
            raise BackendConnectionError(
                describe_error(e, target.bucket),
                provider=self.name,
                bucket=target.bucket,
                endpoint=target.endpoint,
                cause=e,
            ) from e

        return S3Bucket(target, client)
