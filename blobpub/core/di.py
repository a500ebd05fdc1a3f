"""
Dependency injection helpers for blobpub.

Lets services fall back to a default implementation when the container
has not been bootstrapped, which keeps the publish core usable as a
library without the CLI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


def resolve_or_default(
    interface: type[T],
    default_factory: Callable[[], T],
) -> T:
    """Resolve a service from the container or create a default.

    Args:
        interface: The interface/protocol type to resolve
        default_factory: Callable that creates the default implementation

    Returns:
        Resolved service instance or default

    Example:
        >>> from blobpub.core.interfaces.logger import ILogger
        >>> from blobpub.services.logging import NullLogger
        >>> logger = resolve_or_default(ILogger, NullLogger)
    """
    from .container import get_container

    instance = get_container().try_resolve(interface)
    if instance is not None:
        return instance
    return default_factory()
