from typing import Any, List, Optional


class DIException(Exception):
    """Base exception for container-related errors."""


class InvalidNameError(DIException):
    """Raised when a service is registered or requested without a valid name.

    A valid name is a non-empty string that does not end with ``?``.

    Attributes:
        name: The offending name.
    """

    def __init__(self, name: Any = None) -> None:
        self.name = name
        if name:
            message = f"Invalid service name: {name}"
        else:
            message = "No service name provided"
        super().__init__(message)


class ServiceNotFoundError(DIException):
    """Raised when a mandatory lookup names an unregistered service.

    Attributes:
        name: The requested service name.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No service was found: {name}")


class CyclicDependencyError(DIException):
    """Raised when a service is reached again while it is still being resolved.

    Attributes:
        name: The name at which the cycle closed.
        chain: The in-progress names from the first occurrence of ``name`` to the re-entry.
    """

    def __init__(self, name: str, chain: Optional[List[str]] = None) -> None:
        self.name = name
        self.chain = chain or [name]
        message = f"Cyclic dependency while resolving '{name}'"
        if len(self.chain) > 1:
            message += f": {' -> '.join(self.chain)}"
        super().__init__(message)


class InvalidLifecycleError(DIException):
    """Raised when a service declares a lifecycle outside the recognized values.

    Detected when the service is resolved, not when it is registered.

    Attributes:
        name: The service name.
        lifecycle: The declared value.
    """

    def __init__(self, name: str, lifecycle: Any) -> None:
        self.name = name
        self.lifecycle = lifecycle
        super().__init__(f"Service '{name}' has invalid lifecycle: {lifecycle}")


class StaleIndexError(DIException):
    """Raised when a lazily loaded module no longer provides the indexed service.

    The persisted index must be discarded and discovery re-run.

    Attributes:
        name: The service name recorded in the index.
        filename: The module file recorded in the index.
    """

    def __init__(self, name: str, filename: Optional[str]) -> None:
        self.name = name
        self.filename = filename
        super().__init__(f"Index is stale: '{filename}' does not provide service '{name}'")


class DiscoveryError(DIException):
    """Raised when a module fails to load or register during discovery.

    The original error is available as ``__cause__``.

    Attributes:
        filename: The module file that failed.
        reason: Description of the underlying failure.
    """

    def __init__(self, filename: str, reason: Optional[str] = None) -> None:
        self.filename = filename
        self.reason = reason
        message = f"Could not load {filename}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class ServiceConstructionError(DIException):
    """Raised when a service factory fails with a non-container error.

    Attributes:
        name: The service being constructed.
        reason: Optional reason for the failure.
    """

    def __init__(self, name: str, reason: Optional[str] = None) -> None:
        self.name = name
        self.reason = reason
        message = f"Cannot construct service: {name}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)
