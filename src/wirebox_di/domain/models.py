from pathlib import Path
from typing import Annotated, Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from wirebox_di.domain.enums import DescriptorState, Lifecycle, ResolutionState, ServiceKind
from wirebox_di.domain.exceptions import CyclicDependencyError

_IN_PROGRESS = object()

ServiceName = Annotated[StrictStr, Field(min_length=1, pattern=r"^[\s\S]*[^?]$")]
DependencyName = Annotated[StrictStr, Field(min_length=1)]


class ServiceDescriptor(BaseModel):
    """The container's record for one named service.

    Mutated in place on re-registration, so a service implementation can be
    swapped while other parts of the application hold the container.

    Attributes:
        name: The service name.
        kind: Whether the descriptor holds a literal instance or a factory.
        instance: The registered literal instance (kind ``INSTANCE``).
        cached_instance: The resolved value of a singleton, once constructed.
        factory: The class or function to call (kind ``CLASS``), unset while indexed.
        requires: Dependency names passed to the factory, in call order.
        lifecycle: The declared lifecycle value, validated at resolution time.
        filename: Source module, set by discovery.
        state: Whether the factory is loaded or only known from an index.
        resolution_count: Number of times the service has been resolved.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="The service name.")
    kind: Optional[ServiceKind] = Field(default=None, description="Instance or class descriptor.")
    instance: Optional[Any] = Field(default=None, description="Registered literal instance.")
    cached_instance: Optional[Any] = Field(default=None, description="Cached singleton instance.")
    factory: Optional[Callable[..., Any]] = Field(default=None, description="Constructible class or function.")
    requires: List[str] = Field(default_factory=list, description="Dependency names in call order.")
    lifecycle: Any = Field(default=Lifecycle.PER_REQUEST, description="Declared lifecycle value.")
    filename: Optional[str] = Field(default=None, description="Module file the service was discovered in.")
    state: DescriptorState = Field(default=DescriptorState.LOADED, description="Loading phase.")
    resolution_count: int = Field(default=0, description="Number of times this service has been resolved.")

    @property
    def is_indexed(self) -> bool:
        """Whether the factory still has to be loaded from ``filename``."""
        return self.kind == ServiceKind.CLASS and self.state == DescriptorState.INDEXED


class ResolutionContext(BaseModel):
    """Bookkeeping for a single top-level ``get`` call.

    Maps service names to their resolved value, or to an in-progress marker
    while the service is being constructed. A name reached again while still
    in progress closes a cycle.

    Attributes:
        entries: Name to resolved value or in-progress marker.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    entries: Dict[str, Any] = Field(
        default_factory=dict,
        description="Resolved values and in-progress markers keyed by service name.",
    )

    def state(self, name: str) -> ResolutionState:
        if name not in self.entries:
            return ResolutionState.UNSEEN
        if self.entries[name] is _IN_PROGRESS:
            return ResolutionState.IN_PROGRESS
        return ResolutionState.RESOLVED

    def begin(self, name: str) -> None:
        """Mark a service as being resolved.

        Raises:
            CyclicDependencyError: If the service is already in progress.
        """
        if self.state(name) == ResolutionState.IN_PROGRESS:
            raise CyclicDependencyError(name, self.cycle_for(name))
        self.entries[name] = _IN_PROGRESS

    def complete(self, name: str, instance: Any) -> None:
        """Record the resolved value so later references in this call reuse it."""
        self.entries[name] = instance

    def discard(self, name: str) -> None:
        self.entries.pop(name, None)

    def value(self, name: str) -> Any:
        return self.entries[name]

    def cycle_for(self, name: str) -> List[str]:
        """Build the chain of in-progress names from ``name`` back to itself."""
        stack = [key for key, value in self.entries.items() if value is _IN_PROGRESS]
        if name not in stack:
            return [name]
        return stack[stack.index(name) :] + [name]

    @staticmethod
    def is_placeholder(value: Any) -> bool:
        """Whether a value is the in-progress marker rather than a real instance."""
        return value is _IN_PROGRESS


class IndexRecord(BaseModel):
    """One discovered service in a persisted index."""

    model_config = ConfigDict(frozen=True)

    filename: StrictStr = Field(..., min_length=1, description="Absolute path of the module providing the service.")
    provides: ServiceName = Field(..., description="The service name.")
    requires: List[DependencyName] = Field(..., description="Dependency names in call order.")


class ServiceIndex(BaseModel):
    """Persisted summary of a discovery pass, stamped with the application version."""

    version: StrictStr = Field(..., description="Application version the index was built for.")
    services: List[IndexRecord] = Field(default_factory=list, description="Discovered services.")


class DiscoveryConfig(BaseModel):
    """Settings for populating a container at startup.

    Attributes:
        roots: Discovery roots. ``!path`` is relative to the framework package,
            ``/path`` is absolute, anything else is relative to ``base_path``.
        base_path: Application base directory.
        framework_path: Directory ``!`` roots are resolved against. Defaults to the
            installed ``wirebox_di`` package.
        index_path: Where the discovery index is persisted. ``None`` disables it.
        version: Version stamp of the running application.
    """

    roots: List[str] = Field(default_factory=list, description="Discovery roots.")
    base_path: Path = Field(default_factory=Path.cwd, description="Application base directory.")
    framework_path: Optional[Path] = Field(default=None, description="Root for '!' prefixed paths.")
    index_path: Optional[Path] = Field(default=None, description="Location of the persisted index.")
    version: str = Field(default="0", description="Running application version.")
