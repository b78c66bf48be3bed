from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Pattern, Protocol, Sequence, Union, runtime_checkable

from wirebox_di.domain.enums import Lifecycle
from wirebox_di.domain.models import ResolutionContext, ServiceDescriptor


@runtime_checkable
class ServiceProvider(Protocol):
    """Contract every registrable service type implements.

    Only ``provides`` is mandatory. ``requires`` and ``lifecycle`` are optional;
    when they are missing the container supplies the defaults (no dependencies,
    ``perRequest``). Providers are called with the resolved dependencies in
    ``requires`` order, followed by any extra arguments given to ``get``.

    Example:
        >>> class UserRepository:
        ...     provides = "repositories.user"
        ...     requires = ["postgres", "logger?"]
        ...     lifecycle = Lifecycle.SINGLETON
        ...
        ...     def __init__(self, postgres, logger):
        ...         self.postgres = postgres
        ...         self.logger = logger
    """

    provides: str


def provided_name(provider: Any) -> Optional[str]:
    """Return the name a provider declares, or None if it declares none."""
    name = getattr(provider, "provides", None)
    if isinstance(name, str) and name:
        return name
    return None


def dependency_names(provider: Any) -> List[str]:
    """Return the dependency names a provider declares, defaulting to none."""
    requires = getattr(provider, "requires", None)
    if not requires:
        return []
    if isinstance(requires, str):
        return [requires]
    return list(requires)


def declared_lifecycle(provider: Any) -> Any:
    """Return the raw lifecycle a provider declares, defaulting to perRequest.

    The value is not validated here; see ``Lifecycle.parse``.
    """
    lifecycle = getattr(provider, "lifecycle", None)
    if lifecycle is None:
        return Lifecycle.PER_REQUEST
    return lifecycle


class IContainer(ABC):
    """Abstract interface for service container operations."""

    @abstractmethod
    def register_instance(self, instance: Any, name: str) -> str:
        """Register a concrete instance under a name.

        Args:
            instance: The object to return for the name.
            name: The service name.
        """

    @abstractmethod
    def register_class(self, factory: Any, filename: Optional[str] = None) -> str:
        """Register a provider class or function under its declared name.

        Args:
            factory: The provider, see ``ServiceProvider``.
            filename: Optional module file the provider was discovered in.
        """

    @abstractmethod
    def register_indexed(self, name: str, filename: str, requires: Sequence[str]) -> str:
        """Register a service known only from a persisted index."""

    @abstractmethod
    def has(self, name: str) -> bool:
        """Check whether a service is registered, without resolving it."""

    @abstractmethod
    def search(self, pattern: Union[str, Pattern[str]]) -> List[str]:
        """Return registered names matching a regular expression."""

    @abstractmethod
    def get(self, name: str, *extra: Any) -> Any:
        """Resolve and return a service.

        Args:
            name: The service name, with a trailing ``?`` for optional lookups.
            *extra: Extra constructor arguments appended after the dependencies.
        """

    @abstractmethod
    def get_descriptor(self, name: str) -> Optional[ServiceDescriptor]:
        """Return the descriptor registered under a name, if any."""

    @abstractmethod
    def load_descriptor(self, descriptor: ServiceDescriptor) -> None:
        """Load the factory of an indexed descriptor from its module file."""


class IResolver(ABC):
    """Abstract interface for dependency graph resolution."""

    @abstractmethod
    def resolve(self, name: str, extra: Sequence[Any], context: ResolutionContext) -> Any:
        """Resolve a service and its dependencies within a resolution context.

        Args:
            name: The service name, with a trailing ``?`` for optional lookups.
            extra: Extra constructor arguments.
            context: Bookkeeping shared by the whole top-level call.

        Returns:
            The service instance, or None for an unknown optional name.

        Raises:
            ServiceNotFoundError: If a mandatory service is not registered.
            CyclicDependencyError: If the service is reached again while in progress.
        """


class ILifecycleManager(ABC):
    """Abstract interface for applying lifecycle policies."""

    @abstractmethod
    def store(
        self,
        descriptor: ServiceDescriptor,
        lifecycle: Lifecycle,
        instance: Any,
        context: ResolutionContext,
    ) -> None:
        """Keep or drop a freshly constructed instance according to its lifecycle.

        Args:
            descriptor: The descriptor the instance was built from.
            lifecycle: The parsed lifecycle of the descriptor.
            instance: The constructed instance.
            context: The active resolution context.
        """

    @abstractmethod
    def clear_cache(self, descriptors: Iterable[ServiceDescriptor]) -> None:
        """Drop cached singleton instances of the given descriptors."""
