"""
Target resolution.

Turns a configured BlobConfig into a ResolvedTarget: templates rendered,
provider checked against the registered backends, endpoint and region
normalized for the selected backend.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ...core.container import ServiceContainer, get_container
from ...core.exceptions import ConfigError, TemplateError
from ...core.interfaces.templates import ITemplateRenderer
from ...core.models.config import BlobConfig
from ...core.models.publish import ResolvedTarget


def target_label(index: int, blob: BlobConfig) -> str:
    """Identity of a target before its bucket is known."""
    return f"blobs[{index}] ({blob.provider})"


def _render(
    renderer: ITemplateRenderer,
    field: str,
    template: str,
    values: Mapping[str, Any],
) -> str:
    try:
        return renderer(template, values).strip()
    except TemplateError as e:
        e.context.setdefault("field", field)
        raise
    except Exception as e:
        raise TemplateError(
            f"failed to render {field}: {e}",
            template=template,
            context={"field": field},
            cause=e,
        ) from e


def _normalize_endpoint(endpoint: str, disable_ssl: bool) -> str:
    endpoint = endpoint.rstrip("/")
    if "://" not in endpoint:
        scheme = "http" if disable_ssl else "https"
        endpoint = f"{scheme}://{endpoint}"
    return endpoint


def resolve_target(
    index: int,
    blob: BlobConfig,
    renderer: ITemplateRenderer,
    values: Mapping[str, Any],
    container: ServiceContainer | None = None,
) -> ResolvedTarget:
    """
    Resolve one configured target.

    Args:
        index: Position of the target in the configuration
        blob: Target declaration
        renderer: Template renderer
        values: Template context (see build_template_context)
        container: Container holding the backend registry

    Returns:
        Fully concrete ResolvedTarget

    Raises:
        TemplateError: If any templated field fails to render
        ConfigError: If the provider is unknown or the bucket is empty
    """
    container = container or get_container()

    bucket = _render(renderer, "bucket", blob.bucket, values)
    endpoint = _render(renderer, "endpoint", blob.endpoint, values) if blob.endpoint else ""
    region = _render(renderer, "region", blob.region, values) if blob.region else ""
    folder = _render(renderer, "folder", blob.folder, values)
    extra_files = tuple(
        _render(renderer, "extra_files", pattern, values) for pattern in blob.extra_files
    )

    if not container.has_backend(blob.provider):
        raise ConfigError(
            f"unsupported provider {blob.provider!r}",
            key="provider",
            value=blob.provider,
            context={"supported": container.list_backends()},
        )
    if not bucket:
        raise ConfigError("bucket is empty after rendering", key="bucket", value=blob.bucket)

    backend = container.get_backend(blob.provider)

    return ResolvedTarget(
        index=index,
        provider=blob.provider,
        bucket=bucket,
        folder=folder,
        backend=backend,
        region=region or backend.default_region,
        endpoint=(
            _normalize_endpoint(endpoint, blob.disable_ssl)
            if endpoint
            else backend.default_endpoint
        ),
        # Self-hosted S3-compatible servers rarely support virtual-host buckets.
        path_style=bool(endpoint),
        disable_ssl=blob.disable_ssl,
        ids=frozenset(blob.ids),
        kms_key=blob.kms_key,
        acl=blob.acl,
        cache_control=blob.cache_control,
        extra_files=tuple(p for p in extra_files if p),
    )
