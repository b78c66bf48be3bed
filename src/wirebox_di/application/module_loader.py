"""Application layer - Loading provider modules by file path."""

import hashlib
import importlib
import importlib.util
import inspect
import logging
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Optional, Tuple, Union

from wirebox_di.domain import provided_name

logger = logging.getLogger(__name__)


class ModuleLoader:
    """Imports provider modules from source files and lists their providers.

    Each file is executed at most once per loader; cold discovery and lazy
    loading of indexed services share the same module objects.

    Attributes:
        _modules: Loaded modules keyed by absolute file path.
    """

    def __init__(self) -> None:
        self._modules: Dict[str, ModuleType] = {}

    @staticmethod
    def module_name(filename: Union[str, Path]) -> str:
        """Build a stable, unique module name for a source file.

        Args:
            filename: Absolute path of the file.

        Returns:
            A name such as ``_wirebox_user_repository_3f2a9c01d4e5``.
        """
        path = Path(filename)
        digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
        stem = re.sub(r"\W", "_", path.stem)
        return f"_wirebox_{stem}_{digest}"

    @staticmethod
    def package_name(filename: Union[str, Path]) -> Optional[Tuple[Path, str]]:
        """Locate a file inside a chain of regular packages.

        Args:
            filename: Absolute path of the file.

        Returns:
            The directory to import from and the dotted module name, or None
            when the file's directory is not a package.

        Example:
            >>> ModuleLoader.package_name("/app/src/shop/repositories/users.py")
            (PosixPath('/app/src'), 'shop.repositories.users')
        """
        path = Path(filename)
        parts = [] if path.stem == "__init__" else [path.stem]
        directory = path.parent
        while (directory / "__init__.py").is_file():
            parts.insert(0, directory.name)
            directory = directory.parent

        if directory == path.parent or not all(part.isidentifier() for part in parts):
            return None
        return directory, ".".join(parts)

    def load(self, filename: Union[str, Path]) -> ModuleType:
        """Import a module from a file, reusing it if it was already loaded.

        Files inside a package are imported under their dotted name, with the
        directory above the top-level package added to ``sys.path``, so
        relative imports work and an application importing the same module
        gets the same module object. Other files are executed under a
        generated name.

        Args:
            filename: Path of the Python source file.

        Returns:
            The executed module.

        Raises:
            ImportError: If the file cannot be imported under its own name.
            Exception: Anything raised while executing the module body.
        """
        path = str(Path(filename).resolve())
        if path in self._modules:
            return self._modules[path]

        located = self.package_name(path)
        if located is None:
            module = self._load_script(path)
        else:
            module = self._import_package_module(path, *located)

        self._modules[path] = module
        return module

    def _load_script(self, path: str) -> ModuleType:
        name = self.module_name(path)
        logger.debug("Loading module %s from %s", name, path)
        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot create an import spec for {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            del sys.modules[name]
            raise
        return module

    def _import_package_module(self, path: str, root: Path, name: str) -> ModuleType:
        if str(root) not in sys.path:
            logger.debug("Adding %s to sys.path", root)
            sys.path.insert(0, str(root))

        logger.debug("Importing module %s from %s", name, path)
        importlib.invalidate_caches()
        module = importlib.import_module(name)

        module_file = getattr(module, "__file__", None)
        if module_file is None or str(Path(module_file).resolve()) != path:
            raise ImportError(f"Module {name} is already imported from {module_file}, not {path}")
        return module

    @staticmethod
    def providers(module: ModuleType) -> List[Any]:
        """List the service providers a module exposes.

        A module selects its providers explicitly with a ``__services__`` list.
        Otherwise every class defined in the module that declares a
        ``provides`` name is a provider, in definition order.

        Args:
            module: A loaded module.

        Returns:
            The providers, in a deterministic order.
        """
        explicit = getattr(module, "__services__", None)
        if explicit is not None:
            return list(explicit)

        return [
            obj
            for obj in vars(module).values()
            if inspect.isclass(obj) and obj.__module__ == module.__name__ and provided_name(obj)
        ]

    def clear(self) -> None:
        """Forget loaded modules so files are executed again on next load."""
        for module in self._modules.values():
            sys.modules.pop(module.__name__, None)
        self._modules.clear()
