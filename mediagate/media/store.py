"""
Media file collaborators for mediagate.
Deleting a resource also removes its backing file through a MediaStore.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Set
import logging

import aiofiles.os

from ..errors import ErrorSource, StorageError

logger = logging.getLogger(__name__)


class MediaStore(ABC):
    """Backing storage for uploaded media files."""

    @abstractmethod
    async def remove(self, path: str) -> bool:
        """Remove a media file. Returns False if it was already gone."""
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        pass

    def check_path(self, path: str) -> None:
        """Raise StorageError if ``path`` cannot be stored here."""
        pass


class FileMediaStore(MediaStore):
    """Media files on the local file system, below ``root``."""

    def __init__(self, root: str = "."):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        full_path = (self.root / path).resolve()
        if self.root != full_path and self.root not in full_path.parents:
            raise StorageError(f"Media path escapes storage root: {path}",
                               operation="resolve", key=path, source=ErrorSource.MEDIA)
        return full_path

    def check_path(self, path: str) -> None:
        self._resolve(path)

    async def exists(self, path: str) -> bool:
        return await aiofiles.os.path.exists(self._resolve(path))

    async def remove(self, path: str) -> bool:
        full_path = self._resolve(path)
        try:
            await aiofiles.os.remove(full_path)
            return True
        except FileNotFoundError:
            logger.warning(f"Media file already gone: {full_path}")
            return False
        except OSError as e:
            logger.error(f"Failed to remove media file {full_path}: {e}")
            raise StorageError(f"Failed to remove media file: {e}", operation="remove",
                               key=path, source=ErrorSource.MEDIA, cause=e)


class MemoryMediaStore(MediaStore):
    """In-memory stand-in for tests and development."""

    def __init__(self):
        self.paths: Set[str] = set()

    def add(self, path: str) -> None:
        self.paths.add(path)

    async def exists(self, path: str) -> bool:
        return path in self.paths

    async def remove(self, path: str) -> bool:
        if path not in self.paths:
            return False
        self.paths.discard(path)
        return True
