"""
Google Cloud Storage backend.

Talks to the Cloud Storage XML API through its S3 interoperability
endpoint, authenticating with HMAC keys supplied through the usual AWS
credential variables.
"""

from .s3 import S3Backend


class GCSBackend(S3Backend):
    """GCS backend reusing the S3 client against storage.googleapis.com."""

    @property
    def name(self) -> str:
        return "gs"

    @property
    def default_endpoint(self) -> str | None:
        return "https://storage.googleapis.com"

    @property
    def default_region(self) -> str | None:
        return "auto"
