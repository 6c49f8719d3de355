"""Blob storage on the local filesystem.

Bytes are stored one file per locator inside a single directory. Locators are
generated here (never derived from user supplied names) and thumbnails live
next to their source under ``<locator>_<width>``.
"""

import asyncio
import logging
import os
import re
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from app.core.config import Settings
from app.exceptions.base import StorageFaultError
from app.exceptions.file import BlobNotFoundError

logger = logging.getLogger(__name__)

LOCATOR_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}(_\d+)?$")


class BlobStore:
    def __init__(self, root: str | Path, timeout: float = 30.0):
        self.root = Path(root)
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "BlobStore":
        return cls(settings.storage_folder, timeout=settings.storage_timeout)

    @staticmethod
    def thumbnail_locator(locator: str, width: int) -> str:
        return f"{locator}_{width}"

    def _path(self, locator: str) -> Path:
        if not LOCATOR_PATTERN.match(locator):
            raise ValueError(f"Invalid locator: {locator!r}")
        return self.root / locator

    async def put(self, data: bytes) -> str:
        """Store ``data`` under a new locator and return the locator."""
        locator = str(uuid.uuid4())
        await self.write(locator, data)
        return locator

    async def write(self, locator: str, data: bytes) -> None:
        """Store ``data`` under ``locator``, replacing any previous content."""
        path = self._path(locator)
        try:
            await asyncio.wait_for(self._write_file(path, data), self.timeout)
        except asyncio.TimeoutError as e:
            logger.error("Timed out writing blob %s", locator)
            raise StorageFaultError("Timed out writing file content") from e
        except OSError as e:
            logger.error("Failed to write blob %s: %s", locator, str(e))
            raise StorageFaultError(f"Failed to write file content: {e.strerror or e}") from e

    async def get(self, locator: str) -> bytes:
        """Return the bytes stored under ``locator``.

        Raises :class:`BlobNotFoundError` if nothing is stored there.
        """
        path = self._path(locator)
        try:
            return await asyncio.wait_for(self._read_file(path), self.timeout)
        except FileNotFoundError as e:
            raise BlobNotFoundError(locator) from e
        except asyncio.TimeoutError as e:
            logger.error("Timed out reading blob %s", locator)
            raise StorageFaultError("Timed out reading file content") from e
        except OSError as e:
            logger.error("Failed to read blob %s: %s", locator, str(e))
            raise StorageFaultError(f"Failed to read file content: {e.strerror or e}") from e

    async def delete(self, locator: str) -> None:
        """Remove the bytes under ``locator`` if present."""
        path = self._path(locator)
        try:
            await asyncio.wait_for(aiofiles.os.remove(path), self.timeout)
        except FileNotFoundError:
            pass
        except (OSError, asyncio.TimeoutError) as e:
            logger.warning("Failed to delete blob %s: %s", locator, str(e))

    def is_alive(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.W_OK)

    async def _read_file(self, path: Path) -> bytes:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    async def _write_file(self, path: Path, data: bytes) -> None:
        await aiofiles.os.makedirs(self.root, exist_ok=True)
        # Readers never see a partially written blob
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, path)
        finally:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
