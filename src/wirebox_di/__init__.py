"""
wirebox-di: Name-based service container with lifecycle policies and cached discovery.

Public API exports for the wirebox-di package.
"""

# Application exports
from wirebox_di.application.container import ServiceContainer
from wirebox_di.application.discovery import ServiceDiscovery
from wirebox_di.application.index_store import IndexStore

# Domain exports
from wirebox_di.domain.enums import Lifecycle
from wirebox_di.domain.exceptions import (
    CyclicDependencyError,
    DIException,
    DiscoveryError,
    InvalidLifecycleError,
    InvalidNameError,
    ServiceConstructionError,
    ServiceNotFoundError,
    StaleIndexError,
)
from wirebox_di.domain.interfaces import ServiceProvider
from wirebox_di.domain.models import DiscoveryConfig

__version__ = "0.1.0"

__all__ = [
    # Container
    "ServiceContainer",
    "ServiceDiscovery",
    "IndexStore",
    "DiscoveryConfig",
    "ServiceProvider",
    # Enums
    "Lifecycle",
    # Exceptions
    "DIException",
    "InvalidNameError",
    "ServiceNotFoundError",
    "CyclicDependencyError",
    "InvalidLifecycleError",
    "StaleIndexError",
    "DiscoveryError",
    "ServiceConstructionError",
]
