"""
Photo storage adapters.

Uploaded photos are kept on the local filesystem and served by the API
under /uploads. Stored photos are referenced by their public URL.
"""

import os
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional
from uuid import uuid4

import aiofiles

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}

UPLOADS_PREFIX = "/uploads/"


class StorageAdapter(ABC):
    """Abstract base class for storage adapters."""

    @abstractmethod
    async def save_photo(self, data: bytes, filename: str) -> str:
        """
        Save photo data to storage.

        Args:
            data: Raw image bytes
            filename: Original filename (only its extension is kept)

        Returns:
            Relative path to the saved photo
        """
        pass

    @abstractmethod
    async def delete_photo(self, location: str) -> bool:
        """
        Delete a photo from storage.

        Args:
            location: Relative path or public URL of the photo

        Returns:
            True if deleted, False otherwise
        """
        pass

    @abstractmethod
    def get_photo_url(self, path: str) -> str:
        """Public URL for a stored photo."""
        pass


class LocalStorageAdapter(StorageAdapter):
    """
    Local filesystem storage adapter.

    Structure: <base>/photos/YYYY/MM/<random>.<ext>
    """

    def __init__(self, base_path: Optional[str] = None, base_url: Optional[str] = None):
        self.base_path = Path(base_path or settings.storage_local_path)
        self.base_url = (base_url or settings.public_base_url).rstrip("/")

    def _get_date_path(self) -> Path:
        """Get the date-based subdirectory path (photos/YYYY/MM)."""
        now = datetime.now()
        return Path("photos") / str(now.year) / f"{now.month:02d}"

    def _build_filename(self, filename: str) -> str:
        """Random filename keeping only the original extension."""
        ext = os.path.splitext(os.path.basename(filename or ""))[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            ext = ".jpg"
        return f"{uuid4().hex}{ext}"

    def _resolve(self, location: str) -> Optional[Path]:
        """Map a URL or relative path to a file under base_path, None if outside it."""
        path = location
        if UPLOADS_PREFIX in path:
            path = path.split(UPLOADS_PREFIX, 1)[1]
        base = self.base_path.resolve()
        candidate = (base / path.lstrip("/")).resolve()
        if base != candidate and base not in candidate.parents:
            return None
        return candidate

    async def save_photo(self, data: bytes, filename: str) -> str:
        date_path = self._get_date_path()
        full_dir = self.base_path / date_path
        full_dir.mkdir(parents=True, exist_ok=True)

        safe_filename = self._build_filename(filename)
        async with aiofiles.open(full_dir / safe_filename, "wb") as f:
            await f.write(data)

        relative_path = (date_path / safe_filename).as_posix()
        logger.info("Saved photo to local storage: %s", relative_path)
        return relative_path

    async def delete_photo(self, location: str) -> bool:
        file_path = self._resolve(location)
        if file_path is None:
            logger.warning("Refusing to delete photo outside storage: %s", location)
            return False

        try:
            if file_path.is_file():
                file_path.unlink()
                logger.info("Deleted photo from local storage: %s", location)
                return True
            logger.warning("Photo not found for deletion: %s", location)
            return False
        except OSError as e:
            logger.error("Failed to delete photo from local storage: %s", e)
            return False

    def get_photo_url(self, path: str) -> str:
        return f"{self.base_url}{UPLOADS_PREFIX}{path}"


def get_storage_adapter() -> StorageAdapter:
    """FastAPI dependency returning the configured storage adapter."""
    return LocalStorageAdapter()
