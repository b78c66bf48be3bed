"""
Infrastructure layer - Framework and test harness adapters.

Exposes the service container to FastAPI endpoints and provides containers
with override support for test suites. Built on the Application layer.
"""

from . import fastapi_integration, testing

__all__ = ["fastapi_integration", "testing"]
