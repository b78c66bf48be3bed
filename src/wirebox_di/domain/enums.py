from enum import Enum
from typing import Any

from wirebox_di.domain.exceptions import InvalidLifecycleError


class Lifecycle(str, Enum):
    """Defines how long a resolved service instance lives.

    Attributes:
        PER_REQUEST: One instance shared within a single top-level resolution.
        SINGLETON: One instance for the lifetime of the container.
        UNIQUE: A fresh instance for every reference, even within one resolution.
    """

    PER_REQUEST = "perRequest"
    SINGLETON = "singleton"
    UNIQUE = "unique"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str, value: Any) -> "Lifecycle":
        """Convert a declared lifecycle value into a Lifecycle member.

        Args:
            name: Name of the service declaring the value, used in the error.
            value: The declared value (a member or its string value).

        Raises:
            InvalidLifecycleError: If the value is not a recognized lifecycle.
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidLifecycleError(name, value) from None


class ServiceKind(str, Enum):
    """What a descriptor holds: a literal instance or a constructible factory."""

    INSTANCE = "instance"
    CLASS = "class"


class DescriptorState(str, Enum):
    """Loading phase of a class descriptor.

    Attributes:
        INDEXED: Known from a persisted index only, the module is not imported yet.
        LOADED: The factory is available and can be called.
    """

    INDEXED = "indexed"
    LOADED = "loaded"


class ResolutionState(str, Enum):
    """Visit status of a service name within one resolution context."""

    UNSEEN = "unseen"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
