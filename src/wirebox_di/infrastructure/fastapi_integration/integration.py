from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wirebox_di.domain import IContainer


def create_fastapi_dependency(container: IContainer, name: str, *extra: Any) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves a service by name.

    Every call is a separate top-level ``get``, so perRequest services are
    built fresh for each request while singletons are shared.

    Args:
        container: The container to resolve from.
        name: The service name, with a trailing ``?`` for optional services.
        *extra: Extra constructor arguments passed on every resolution.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> get_users = create_fastapi_dependency(container, "repositories.user")
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo=Depends(get_users)):
        ...     return await repo.find_all()
    """

    def dependency() -> Any:
        """Resolve the service from the container."""
        return container.get(name, *extra)

    return dependency


def create_request_dependency(name: str) -> Callable[[Request], Any]:
    """Create a FastAPI dependency resolving from the container attached to the request.

    Requires the ContainerStateMiddleware to be installed.

    Args:
        name: The service name to resolve.

    Returns:
        A callable that resolves from ``request.state.container``.

    Example:
        >>> app.add_middleware(ContainerStateMiddleware, container=container)
        >>> get_mailer = create_request_dependency("mailer")
        >>>
        >>> @app.post("/invite")
        >>> async def invite(mailer=Depends(get_mailer)):
        ...     ...
    """

    def request_dependency(request: Request) -> Any:
        """Resolve from the request's container."""
        if not hasattr(request.state, "container"):
            raise RuntimeError(
                "Request does not have a service container. Did you forget to add ContainerStateMiddleware?"
            )
        container: IContainer = request.state.container
        return container.get(name)

    return request_dependency


class ContainerStateMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes the service container on every request.

    The container is accessible via ``request.state.container``.

    Attributes:
        container: The service container to attach.
    """

    def __init__(self, app: FastAPI, container: IContainer):
        """Initialize the middleware with the application container.

        Args:
            app: The FastAPI/Starlette application.
            container: The service container to attach.
        """
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the container to the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        request.state.container = self.container
        return await call_next(request)
