"""
Backend registry with auto-discovery.

Automatically discovers and registers storage backends from:
1. Built-in backends in blobpub.plugins.backends.*
2. Entry point plugins from external packages
"""

import importlib
import pkgutil

from .container import ServiceContainer, get_container
from .di import resolve_or_default
from .exceptions import PluginLoadError
from .interfaces.backend import IBlobBackend
from .interfaces.logger import ILogger

ENTRY_POINT_GROUP = "blobpub.backends"


def _get_logger() -> ILogger:
    from ..services.logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]


def discover_backends(
    package_name: str = "blobpub.plugins.backends",
    container: ServiceContainer | None = None,
) -> None:
    """
    Auto-discover and register storage backends.

    Scans the built-in backends package for classes implementing
    IBlobBackend, then loads external ones from entry points.

    Args:
        package_name: Package to scan for built-in backends
        container: Container to register into (defaults to the global one)
    """
    container = container or get_container()
    _discover_builtin_backends(container, package_name)
    _discover_entrypoint_backends(container)


def _discover_builtin_backends(container: ServiceContainer, package_name: str) -> None:
    """Discover backends from the built-in backends package."""
    package = importlib.import_module(package_name)
    package_path = getattr(package, "__path__", None)
    if not package_path:
        return

    for _importer, modname, _ispkg in pkgutil.iter_modules(package_path):
        # Skip private modules and base classes
        if modname.startswith("_") or modname == "base":
            continue

        try:
            module = importlib.import_module(f"{package_name}.{modname}")
        except ImportError as e:
            # An optional SDK is missing; the provider stays unregistered
            _get_logger().debug("Skipping backend module %s: %s", modname, e)
            continue

        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if _implements(attr, IBlobBackend) and attr.__module__ == module.__name__:
                _register(container, attr)


def _implements(cls: object, interface: type) -> bool:
    """
    Check if a class implements an interface.

    Returns True if cls is a concrete subclass of interface
    (not the interface itself and not abstract).
    """
    return (
        isinstance(cls, type)
        and issubclass(cls, interface)
        and cls is not interface
        and not getattr(cls, "__abstractmethods__", set())
    )


def _register(container: ServiceContainer, backend_cls: type[IBlobBackend]) -> None:
    instance = backend_cls()
    container.register_backend(instance.name, backend_cls)
    _get_logger().debug("Registered storage backend %r -> %s", instance.name, backend_cls.__name__)


def _discover_entrypoint_backends(container: ServiceContainer) -> None:
    """
    Discover backends registered via entry points.

    External packages can register backends by adding to pyproject.toml:

        [project.entry-points."blobpub.backends"]
        azblob = "my_package.azure:AzureBlobBackend"
    """
    from importlib.metadata import entry_points

    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            backend_cls = ep.load()
        except Exception as e:
            # Don't fail startup due to broken external plugins
            _get_logger().warning("Failed to load backend plugin %s: %s", ep.name, e)
            continue

        if not _implements(backend_cls, IBlobBackend):
            _get_logger().warning(
                "Entry point %s does not provide an IBlobBackend implementation", ep.name
            )
            continue
        _register(container, backend_cls)


def register_backend(cls: type[IBlobBackend]) -> type[IBlobBackend]:
    """
    Decorator to manually register a backend class.

    Usage:
        @register_backend
        class MyBackend(BaseBlobBackend):
            ...
    """
    if not _implements(cls, IBlobBackend):
        raise PluginLoadError(
            f"{cls.__name__} is not a concrete IBlobBackend", plugin_name=cls.__name__
        )
    _register(get_container(), cls)
    return cls
