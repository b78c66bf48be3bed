import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from wirebox_di.application.index_store import IndexStore
from wirebox_di.application.module_loader import ModuleLoader
from wirebox_di.domain import (
    DIException,
    DiscoveryConfig,
    DiscoveryError,
    IContainer,
    IndexRecord,
    ServiceIndex,
    dependency_names,
)

logger = logging.getLogger(__name__)

FRAMEWORK_PATH = Path(__file__).resolve().parent.parent


class ServiceDiscovery:
    """Populates a container from source trees or from a persisted index.

    Cold discovery imports every module under the configured roots, one file
    at a time in sorted order, and registers the providers it finds. Replay
    registers indexed descriptors straight from a previous discovery pass and
    imports nothing; modules are loaded when their services are first resolved.

    Attributes:
        _container: The container to populate.
        _config: Discovery settings.
        _loader: Module loader shared with the container.
    """

    def __init__(
        self,
        container: IContainer,
        config: Optional[DiscoveryConfig] = None,
        loader: Optional[ModuleLoader] = None,
    ) -> None:
        self._container = container
        self._config = config or DiscoveryConfig()
        self._loader = loader or getattr(container, "module_loader", None) or ModuleLoader()

    def resolve_root(self, root: str) -> Path:
        """Turn a configured root into a filesystem path.

        Args:
            root: ``!path`` for the framework package, ``/path`` for an absolute
                path, anything else relative to the application base directory.

        Returns:
            The path to walk.

        Example:
            >>> discovery.resolve_root("!services")
            PosixPath('/usr/lib/python3/site-packages/wirebox_di/services')
        """
        if root.startswith("!"):
            return (self._config.framework_path or FRAMEWORK_PATH) / root[1:]
        if root.startswith("/"):
            return Path(root)
        return Path(self._config.base_path) / root

    def iter_files(self, path: Path) -> Iterator[Path]:
        """Yield Python source files under a path, depth-first in name order.

        A path naming a file yields that file. Hidden entries and
        ``__pycache__`` directories are skipped; a missing path yields nothing.
        """
        if not path.exists():
            logger.debug("Discovery root %s does not exist", path)
            return

        if path.is_file():
            if path.suffix == ".py":
                yield path
            return

        for entry in sorted(path.iterdir(), key=lambda p: p.name):
            if entry.name.startswith(".") or entry.name == "__pycache__":
                continue
            if entry.is_dir():
                yield from self.iter_files(entry)
            elif entry.suffix == ".py":
                yield entry

    def discover(self, roots: Optional[Sequence[str]] = None) -> ServiceIndex:
        """Import every module under the roots and register its providers.

        Args:
            roots: Roots to walk, defaulting to the configured ones.

        Returns:
            The index describing every registered service.

        Raises:
            DiscoveryError: If any module fails to load or register. The pass is
                aborted at the first failure.
        """
        records: List[IndexRecord] = []
        for root in self._config.roots if roots is None else roots:
            path = self.resolve_root(root)
            logger.debug("Discovering services in %s", path)
            for filename in self.iter_files(path):
                records.extend(self._discover_file(filename))

        logger.info("Discovered %d services", len(records))
        return ServiceIndex(version=self._config.version, services=records)

    def _discover_file(self, filename: Path) -> List[IndexRecord]:
        path = str(filename.resolve())
        try:
            module = self._loader.load(path)
        except Exception as e:
            raise DiscoveryError(path, str(e)) from e

        records = []
        for provider in self._loader.providers(module):
            try:
                name = self._container.register_class(provider, filename=path)
            except DIException as e:
                raise DiscoveryError(path, str(e)) from e
            records.append(IndexRecord(filename=path, provides=name, requires=dependency_names(provider)))
        return records

    def replay(self, index: ServiceIndex) -> None:
        """Register every service of an index without importing any module.

        Args:
            index: A previously persisted discovery index.
        """
        for record in index.services:
            self._container.register_indexed(record.provides, record.filename, record.requires)
        logger.info("Replayed %d services from index", len(index.services))

    def run(self) -> ServiceIndex:
        """Populate the container, preferring a valid persisted index.

        Replays the index when one exists for the running version. Otherwise
        runs cold discovery and, when an index path is configured, persists
        the result for the next startup.

        Returns:
            The index the container was populated from.
        """
        store = IndexStore(self._config.index_path) if self._config.index_path else None

        if store is not None:
            index = store.read(self._config.version)
            if index is not None:
                self.replay(index)
                return index

        index = self.discover()
        if store is not None:
            store.write(index)
        return index
