"""
Dependency injection container for blobpub.

Uses dependency-injector for DI with support for:
- Singleton and transient lifetimes
- Factory registration
- Interface-based resolution
- A backend registry for pluggable storage providers
"""

from collections.abc import Callable
from typing import Optional, TypeVar

from dependency_injector import providers

from .interfaces.backend import IBlobBackend

T = TypeVar("T")


class ServiceContainer:
    """
    Dependency injection container for blobpub.

    Combines dependency-injector's DI capabilities with the storage
    backend registry (provider name -> backend class).
    """

    _instance: Optional["ServiceContainer"] = None

    def __init__(self) -> None:
        """Initialize the container with empty registries."""
        # Dynamic provider storage (interface -> provider)
        self._providers: dict[type, providers.Provider] = {}

        # Backend registry (provider name -> class)
        self._backends: dict[str, type[IBlobBackend]] = {}

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        """Get the global container instance (singleton)."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the global container (for testing)."""
        cls._instance = None

    # -------------------------------------------------------------------------
    # Core service registration (uses dependency-injector providers)
    # -------------------------------------------------------------------------

    def register_singleton(
        self,
        interface: type[T],
        implementation: T | None = None,
        factory: Callable[[], T] | None = None,
    ) -> None:
        """
        Register a singleton service.

        Args:
            interface: The interface/protocol type
            implementation: Optional concrete instance
            factory: Optional factory function (for lazy init)
        """
        if implementation is not None:
            self._providers[interface] = providers.Object(implementation)
        elif factory is not None:
            self._providers[interface] = providers.Singleton(factory)
        else:
            raise ValueError("Must provide either implementation or factory")

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a service by interface.

        Raises:
            KeyError: If no registration found
        """
        if interface not in self._providers:
            raise KeyError(f"No provider registered for: {interface}")
        return self._providers[interface]()

    def try_resolve(self, interface: type[T]) -> T | None:
        """Try to resolve a service, returning None if not registered."""
        if interface not in self._providers:
            return None
        return self._providers[interface]()

    # -------------------------------------------------------------------------
    # Storage backend registry
    # -------------------------------------------------------------------------

    def register_backend(
        self,
        name: str,
        backend_class: type[IBlobBackend],
    ) -> None:
        """
        Register a storage backend.

        Args:
            name: Provider name (e.g., 's3', 'gs', 'file')
            backend_class: Class implementing IBlobBackend
        """
        self._backends[name.lower()] = backend_class

    def get_backend(self, name: str) -> IBlobBackend:
        """
        Get a backend instance by provider name.

        Raises:
            KeyError: If no backend registered for the provider
        """
        key = name.lower()
        if key not in self._backends:
            raise KeyError(f"No storage backend registered for provider: {name}")
        return self._backends[key]()

    def has_backend(self, name: str) -> bool:
        return name.lower() in self._backends

    def list_backends(self) -> list[str]:
        """List registered provider names."""
        return sorted(self._backends)


# -------------------------------------------------------------------------
# Module-level convenience functions
# -------------------------------------------------------------------------


def get_container() -> ServiceContainer:
    """Get the global service container instance."""
    return ServiceContainer.get_instance()


def resolve(interface: type[T]) -> T:
    """Resolve a service from the global container."""
    return get_container().resolve(interface)


def try_resolve(interface: type[T]) -> T | None:
    """Try to resolve a service, returning None if not registered."""
    return get_container().try_resolve(interface)
