"""
Application layer - Registration, resolution and discovery.

This layer contains the components that operate on the domain models.
It depends only on the Domain layer.
"""

from .container import ServiceContainer
from .discovery import ServiceDiscovery
from .index_store import IndexStore
from .lifecycle_manager import LifecycleManager
from .module_loader import ModuleLoader
from .resolver import ServiceResolver

__all__ = [
    "ServiceContainer",
    "ServiceResolver",
    "LifecycleManager",
    "ServiceDiscovery",
    "IndexStore",
    "ModuleLoader",
]
