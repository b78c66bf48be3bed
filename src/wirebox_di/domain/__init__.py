"""
Domain layer - Core models and rules of the service container.

This layer contains the descriptor and context models, the provider contract,
and the error taxonomy. It has no dependencies on other layers.
"""

from .enums import DescriptorState, Lifecycle, ResolutionState, ServiceKind
from .exceptions import (
    CyclicDependencyError,
    DIException,
    DiscoveryError,
    InvalidLifecycleError,
    InvalidNameError,
    ServiceConstructionError,
    ServiceNotFoundError,
    StaleIndexError,
)
from .interfaces import (
    IContainer,
    ILifecycleManager,
    IResolver,
    ServiceProvider,
    declared_lifecycle,
    dependency_names,
    provided_name,
)
from .models import (
    DiscoveryConfig,
    IndexRecord,
    ResolutionContext,
    ServiceDescriptor,
    ServiceIndex,
)

__all__ = [
    # Enums
    "Lifecycle",
    "ServiceKind",
    "DescriptorState",
    "ResolutionState",
    # Exceptions
    "DIException",
    "InvalidNameError",
    "ServiceNotFoundError",
    "CyclicDependencyError",
    "InvalidLifecycleError",
    "StaleIndexError",
    "DiscoveryError",
    "ServiceConstructionError",
    # Interfaces
    "ServiceProvider",
    "IContainer",
    "IResolver",
    "ILifecycleManager",
    "provided_name",
    "dependency_names",
    "declared_lifecycle",
    # Models
    "ServiceDescriptor",
    "ResolutionContext",
    "IndexRecord",
    "ServiceIndex",
    "DiscoveryConfig",
]
