"""
FastAPI integration module.

Provides helpers for resolving wirebox-di services from FastAPI endpoints.
"""

from .integration import (
    ContainerStateMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "ContainerStateMiddleware",
]
