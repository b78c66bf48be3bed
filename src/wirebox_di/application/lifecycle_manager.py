import logging
from typing import Any, Iterable

from wirebox_di.domain import ILifecycleManager, Lifecycle, ResolutionContext, ServiceDescriptor

logger = logging.getLogger(__name__)


class LifecycleManager(ILifecycleManager):
    """Applies the perRequest, singleton and unique policies to new instances.

    PerRequest instances live in the resolution context, so every consumer in
    the same top-level call shares them. Singletons are cached on their
    descriptor for the lifetime of the container. Unique instances are never
    kept anywhere.
    """

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

        Example:
            >>> context = ResolutionContext()
            >>> context.begin("d")
            >>> manager.store(descriptor, Lifecycle.PER_REQUEST, instance, context)
            >>> assert context.value("d") is instance
        """
        name = descriptor.name

        if lifecycle == Lifecycle.PER_REQUEST:
            context.complete(name, instance)
            return

        if lifecycle == Lifecycle.SINGLETON:
            logger.debug("Caching singleton '%s'", name)
            descriptor.cached_instance = instance
            context.discard(name)
            return

        # Lifecycle.UNIQUE
        context.discard(name)

    def clear_cache(self, descriptors: Iterable[ServiceDescriptor]) -> None:
        """Drop cached singleton instances so they are constructed again on next use.

        Args:
            descriptors: Descriptors whose singleton cache should be cleared.
        """
        for descriptor in descriptors:
            descriptor.cached_instance = None
