"""
Application bootstrap for blobpub.

Initializes the DI container with the logger and the storage backends.
This module should be called once at application startup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .container import ServiceContainer, get_container
from .interfaces.logger import ILogger
from .registry import discover_backends

if TYPE_CHECKING:
    from .models.config import LoggingConfig

_initialized = False


def bootstrap(logging_config: LoggingConfig | None = None) -> ServiceContainer:
    """
    Bootstrap the blobpub application.

    Initializes the DI container with:
    - The logger, configured from the logging section
    - Storage backends (built-in and entry points)

    Args:
        logging_config: Logging section of the loaded configuration

    Returns:
        Initialized ServiceContainer
    """
    global _initialized

    container = get_container()

    if _initialized:
        return container

    _register_core_services(container, logging_config)
    discover_backends()

    _initialized = True
    return container


def _register_core_services(
    container: ServiceContainer, logging_config: LoggingConfig | None
) -> None:
    """Register core application services."""
    from ..services.logging import BlobpubLogger
    from .models.config import LoggingConfig

    cfg = logging_config or LoggingConfig()

    def create_logger() -> ILogger:
        return BlobpubLogger(
            level=cfg.level,
            console_enabled=cfg.console,
            file_enabled=cfg.file,
        )

    container.register_singleton(ILogger, factory=create_logger)  # type: ignore[type-abstract]


def reset() -> None:
    """
    Reset the application state.

    Useful for testing to ensure clean state between tests.
    """
    global _initialized
    ServiceContainer.reset()
    _initialized = False


def is_initialized() -> bool:
    """Check if the application has been bootstrapped."""
    return _initialized
