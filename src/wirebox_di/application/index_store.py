import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from wirebox_di.domain import ServiceIndex

logger = logging.getLogger(__name__)


class IndexStore:
    """Reads and writes the persisted discovery index.

    The index is a JSON document::

        {"version": "1.4.0",
         "services": [{"filename": "/app/src/users.py",
                       "provides": "users",
                       "requires": ["postgres"]}]}

    A file that is missing, unreadable, malformed, or stamped with another
    version is treated as absent.

    Attributes:
        path: Location of the index file.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def read(self, version: str) -> Optional[ServiceIndex]:
        """Load the index if it is valid for the running version.

        Args:
            version: Version stamp of the running application.

        Returns:
            The index, or None when it has to be rebuilt.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No service index at %s", self.path)
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Discarding service index %s: %s", self.path, e)
            return None

        try:
            index = ServiceIndex.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding invalid service index %s: %s", self.path, e)
            return None

        if index.version != version:
            logger.info(
                "Discarding service index %s built for version %s (running %s)",
                self.path,
                index.version,
                version,
            )
            return None

        return index

    def write(self, index: ServiceIndex) -> None:
        """Persist an index, replacing any previous file atomically.

        Args:
            index: The index to write.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temporary = self.path.with_name(self.path.name + ".tmp")
        try:
            temporary.write_text(index.model_dump_json(indent=2), encoding="utf-8")
            temporary.replace(self.path)
        except OSError:
            temporary.unlink(missing_ok=True)
            raise
        logger.debug("Wrote service index with %d services to %s", len(index.services), self.path)

    def discard(self) -> None:
        """Remove the index file, forcing the next startup to run discovery."""
        self.path.unlink(missing_ok=True)
