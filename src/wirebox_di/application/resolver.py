import logging
from typing import Any, Optional, Sequence

from wirebox_di.application.lifecycle_manager import LifecycleManager
from wirebox_di.domain import (
    CyclicDependencyError,
    DIException,
    IContainer,
    ILifecycleManager,
    IResolver,
    Lifecycle,
    ResolutionContext,
    ResolutionState,
    ServiceConstructionError,
    ServiceDescriptor,
    ServiceKind,
    ServiceNotFoundError,
)

logger = logging.getLogger(__name__)


class ServiceResolver(IResolver):
    """Walks the dependency graph of a named service and constructs it.

    Dependencies are resolved depth-first in their declared order, all within
    the same resolution context, so perRequest services are shared by every
    consumer in the call tree and a name reached again while it is still in
    progress is reported as a cycle.

    Attributes:
        _container: The container descriptors are read from.
        _lifecycle_manager: Component applying lifecycle policies.
    """

    def __init__(self, container: IContainer, lifecycle_manager: Optional[ILifecycleManager] = None) -> None:
        self._container = container
        self._lifecycle_manager = lifecycle_manager or LifecycleManager()

    def resolve(self, name: str, extra: Sequence[Any], context: ResolutionContext) -> Any:
        """Resolve a service and its dependencies within a resolution context.

        Args:
            name: The service name, with a trailing ``?`` for optional lookups.
            extra: Extra constructor arguments appended after the dependencies.
            context: Bookkeeping shared by the whole top-level call.

        Returns:
            The service instance, or None for an unknown optional name.

        Raises:
            ServiceNotFoundError: If a mandatory service is not registered.
            CyclicDependencyError: If the service is reached again while in progress.
            InvalidLifecycleError: If the service declares an unknown lifecycle.
            StaleIndexError: If an indexed module no longer provides the service.
            ServiceConstructionError: If the factory itself fails.

        Example:
            >>> resolver = ServiceResolver(container)
            >>> user_service = resolver.resolve("users", (), ResolutionContext())
        """
        optional = name.endswith("?")
        if optional:
            name = name[:-1]

        descriptor = self._container.get_descriptor(name)
        if descriptor is None:
            if optional:
                logger.debug("Optional service '%s' is not registered", name)
                return None
            raise ServiceNotFoundError(name)

        if descriptor.kind == ServiceKind.INSTANCE:
            return descriptor.instance
        if descriptor.cached_instance is not None:
            return descriptor.cached_instance

        state = context.state(name)
        if state == ResolutionState.IN_PROGRESS:
            raise CyclicDependencyError(name, context.cycle_for(name))
        if state == ResolutionState.RESOLVED:
            return context.value(name)

        context.begin(name)
        if descriptor.is_indexed:
            self._container.load_descriptor(descriptor)

        lifecycle = Lifecycle.parse(name, descriptor.lifecycle)
        instance = self._instantiate(descriptor, extra, context)

        # A constructor handing back the in-progress marker means the graph looped.
        if instance is None or context.is_placeholder(instance):
            raise CyclicDependencyError(name)

        self._lifecycle_manager.store(descriptor, lifecycle, instance, context)
        descriptor.resolution_count += 1
        return instance

    def _instantiate(self, descriptor: ServiceDescriptor, extra: Sequence[Any], context: ResolutionContext) -> Any:
        """Resolve the declared dependencies in order and call the factory."""
        args = [self.resolve(dependency, (), context) for dependency in descriptor.requires]
        args.extend(extra)

        logger.debug("Instantiating service '%s'", descriptor.name)
        try:
            return descriptor.factory(*args)
        except DIException:
            raise
        except Exception as e:
            raise ServiceConstructionError(descriptor.name, f"Failed to create instance: {e}") from e
