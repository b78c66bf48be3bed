import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Sequence, Union

from wirebox_di.application.lifecycle_manager import LifecycleManager
from wirebox_di.application.module_loader import ModuleLoader
from wirebox_di.application.resolver import ServiceResolver
from wirebox_di.domain import (
    DescriptorState,
    DiscoveryError,
    IContainer,
    ILifecycleManager,
    InvalidNameError,
    IResolver,
    Lifecycle,
    ResolutionContext,
    ServiceDescriptor,
    ServiceKind,
    StaleIndexError,
    declared_lifecycle,
    dependency_names,
    provided_name,
)

logger = logging.getLogger(__name__)

SELF_NAME = "container"


class ServiceContainer(IContainer):
    """Main service container.

    Keeps one descriptor per service name and hands resolution off to the
    resolver. The container registers itself under ``"container"`` so services
    can declare it as a dependency.

    Attributes:
        _registry: Dictionary mapping service names to their descriptors.
        _resolver: Component walking the dependency graph.
        _lifecycle_manager: Component applying lifecycle policies.
        _loader: Component importing provider modules by file path.
    """

    def __init__(self, module_loader: Optional[ModuleLoader] = None, self_name: str = SELF_NAME) -> None:
        """Initialize the container with an empty registry and its components.

        Args:
            module_loader: Loader for discovered modules, shared with discovery.
            self_name: Name the container registers itself under.
        """
        self._registry: Dict[str, ServiceDescriptor] = {}
        self._lifecycle_manager: ILifecycleManager = LifecycleManager()
        self._resolver: IResolver = ServiceResolver(self, self._lifecycle_manager)
        self._loader = module_loader or ModuleLoader()
        self._self_name = self_name
        self.register_instance(self, self_name)

    @property
    def module_loader(self) -> ModuleLoader:
        return self._loader

    @staticmethod
    def _validate_name(name: Any) -> str:
        if not isinstance(name, str) or not name or name.endswith("?"):
            raise InvalidNameError(name)
        return name

    def _init_descriptor(self, name: str) -> ServiceDescriptor:
        """Return the descriptor for a name, adding an empty one if needed."""
        name = self._validate_name(name)
        descriptor = self._registry.get(name)
        if descriptor is None:
            descriptor = ServiceDescriptor(name=name)
            self._registry[name] = descriptor
        return descriptor

    def register_instance(self, instance: Any, name: str) -> str:
        """Register a concrete instance of a service.

        Any previous registration under the name is replaced.

        Args:
            instance: The object returned for the name.
            name: The service name.

        Returns:
            The service name.

        Raises:
            InvalidNameError: If the name is empty or ends with ``?``.

        Example:
            >>> container.register_instance(settings, "config")
            'config'
        """
        descriptor = self._init_descriptor(name)
        logger.debug("Registering instance '%s'", name)

        descriptor.kind = ServiceKind.INSTANCE
        descriptor.instance = instance
        descriptor.cached_instance = None
        descriptor.factory = None
        descriptor.requires = []
        descriptor.lifecycle = Lifecycle.PER_REQUEST
        descriptor.filename = None
        descriptor.state = DescriptorState.LOADED
        return name

    def register_class(self, factory: Any, filename: Optional[str] = None) -> str:
        """Register a provider class or function under the name it declares.

        The declared lifecycle is stored as is and validated when the service
        is first resolved.

        Args:
            factory: A provider with a ``provides`` name and optional
                ``requires`` and ``lifecycle`` attributes.
            filename: Module file the provider was discovered in.

        Returns:
            The service name.

        Raises:
            InvalidNameError: If the provider declares no valid name, or a
                dependency name is not a non-empty string.

        Example:
            >>> class Mailer:
            ...     provides = "mailer"
            ...     requires = ["config", "logger?"]
            >>> container.register_class(Mailer)
            'mailer'
        """
        name = provided_name(factory)
        if name is None:
            raise InvalidNameError(getattr(factory, "provides", None))

        requires = dependency_names(factory)
        for dependency in requires:
            if not isinstance(dependency, str) or not dependency:
                raise InvalidNameError(dependency)

        descriptor = self._init_descriptor(name)
        logger.debug("Registering class '%s'", name)

        descriptor.kind = ServiceKind.CLASS
        descriptor.instance = None
        descriptor.cached_instance = None
        descriptor.factory = factory
        descriptor.requires = requires
        descriptor.lifecycle = declared_lifecycle(factory)
        descriptor.filename = filename
        descriptor.state = DescriptorState.LOADED
        return name

    def register_indexed(self, name: str, filename: str, requires: Sequence[str]) -> str:
        """Register a service known only from a persisted index.

        The module is imported when the service is first resolved.

        Args:
            name: The service name.
            filename: Module file providing the service.
            requires: Dependency names recorded in the index.

        Returns:
            The service name.
        """
        descriptor = self._init_descriptor(name)
        logger.debug("Registering indexed service '%s' from %s", name, filename)

        descriptor.kind = ServiceKind.CLASS
        descriptor.instance = None
        descriptor.cached_instance = None
        descriptor.factory = None
        descriptor.requires = list(requires)
        descriptor.lifecycle = Lifecycle.PER_REQUEST
        descriptor.filename = filename
        descriptor.state = DescriptorState.INDEXED
        return name

    def load_descriptor(self, descriptor: ServiceDescriptor) -> None:
        """Load the factory of an indexed descriptor from its module file.

        Args:
            descriptor: A descriptor in the ``INDEXED`` state.

        Raises:
            StaleIndexError: If the file is gone or no longer provides the service.
            DiscoveryError: If the module fails to import.
        """
        filename = descriptor.filename
        if not filename or not Path(filename).is_file():
            raise StaleIndexError(descriptor.name, filename)

        try:
            module = self._loader.load(filename)
        except Exception as e:
            raise DiscoveryError(filename, str(e)) from e

        for provider in self._loader.providers(module):
            if provided_name(provider) == descriptor.name:
                break
        else:
            raise StaleIndexError(descriptor.name, filename)

        logger.debug("Loaded indexed service '%s' from %s", descriptor.name, filename)
        descriptor.factory = provider
        descriptor.requires = dependency_names(provider)
        descriptor.lifecycle = declared_lifecycle(provider)
        descriptor.state = DescriptorState.LOADED

    def has(self, name: str) -> bool:
        """Check whether a service is registered, without resolving it.

        A trailing ``?`` is ignored. Anything that is not a string is never registered.
        """
        if not isinstance(name, str):
            return False
        if name.endswith("?"):
            name = name[:-1]
        return name in self._registry

    def search(self, pattern: Union[str, Pattern[str]]) -> List[str]:
        """Return registered names matching a regular expression, in registration order.

        Example:
            >>> container.search(r"^modules\\.[^.]+$")
            ['modules.users', 'modules.billing']
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        logger.debug("Searching for services %s", regex.pattern)
        return [name for name in self._registry if regex.search(name)]

    def names(self) -> List[str]:
        """Return all registered names in registration order."""
        return list(self._registry)

    def get(self, name: str, *extra: Any) -> Any:
        """Resolve and return a service.

        Each call starts a fresh resolution context: perRequest services are
        shared within this call only, singletons are shared across calls.

        Args:
            name: The service name, with a trailing ``?`` for optional lookups.
            *extra: Extra constructor arguments appended after the dependencies.

        Returns:
            The service instance, or None for an unregistered optional name.

        Raises:
            InvalidNameError: If no name is given.
            ServiceNotFoundError: If a mandatory service is not registered.
            CyclicDependencyError: If the dependency graph contains a cycle.
            InvalidLifecycleError: If a service declares an unknown lifecycle.

        Example:
            >>> users = container.get("users")
            >>> mailer = container.get("mailer?")
        """
        if not name:
            raise InvalidNameError(name)

        logger.debug("Retrieving service '%s'", name)
        return self._resolver.resolve(name, extra, ResolutionContext())

    def get_descriptor(self, name: str) -> Optional[ServiceDescriptor]:
        return self._registry.get(name)

    def get_registry_copy(self) -> Dict[str, ServiceDescriptor]:
        """Get a copy of the registry with every descriptor copied.

        Returns:
            Copy of the current registry.
        """
        return {name: descriptor.model_copy() for name, descriptor in self._registry.items()}

    def set_registry(self, registry: Dict[str, ServiceDescriptor]) -> None:
        """Replace the registry, keeping the container's own registration.

        Args:
            registry: Registry to use.
        """
        self._registry = registry
        self.register_instance(self, self._self_name)

    def clear_singletons(self) -> None:
        """Drop every cached singleton so it is constructed again on next use."""
        self._lifecycle_manager.clear_cache(self._registry.values())

    def clear(self) -> None:
        """Clear all registrations and cached instances.

        The container stays registered under its own name.
        """
        self._registry.clear()
        self.register_instance(self, self._self_name)
