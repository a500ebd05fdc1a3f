"""
Core infrastructure for blobpub.

This module provides:
- ServiceContainer: DI container using dependency-injector
- Backend registry with auto-discovery
- Application bootstrap for initialization
- Interface definitions for backends, renderers and logging
- Custom exception hierarchy
"""

from .bootstrap import bootstrap, is_initialized, reset
from .container import ServiceContainer, get_container, resolve, try_resolve
from .exceptions import (
    AggregatePublishError,
    BackendConnectionError,
    BackendError,
    BlobpubException,
    ConfigError,
    ConfigFileError,
    PluginLoadError,
    PublishCancelledError,
    TemplateError,
    UploadError,
)
from .registry import discover_backends, register_backend

__all__ = [
    "AggregatePublishError",
    "BackendConnectionError",
    "BackendError",
    "BlobpubException",
    "ConfigError",
    "ConfigFileError",
    "PluginLoadError",
    "PublishCancelledError",
    "ServiceContainer",
    "TemplateError",
    "UploadError",
    "bootstrap",
    "discover_backends",
    "get_container",
    "is_initialized",
    "register_backend",
    "reset",
    "resolve",
    "try_resolve",
]
