"""Local filesystem access beneath the configured storage root."""
import logging
import os
from pathlib import Path

import aiofiles
import aiofiles.os

from app.config import settings
from app.services.path_policy import canonical_root

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class FileStorageService:
    """Handles existence probes, chunked reads, creates, moves and deletes on local disk."""

    def __init__(self, root: str | None = None):
        self.root = canonical_root(root or settings.FILE_STORAGE_PATH)

    def ensure_root(self) -> None:
        """Create the storage root if it does not exist yet."""
        Path(self.root).mkdir(parents=True, exist_ok=True)

    async def exists(self, file_path: str) -> bool:
        return await aiofiles.os.path.isfile(file_path)

    async def is_directory(self, file_path: str) -> bool:
        return await aiofiles.os.path.isdir(file_path)

    async def iter_chunks(self, file_path: str, chunk_size: int = CHUNK_SIZE):
        """Yield the file in chunks; the handle is released when iteration stops."""
        async with aiofiles.open(file_path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    async def create_empty(self, file_path: str) -> None:
        """Create an empty file (and its parent directories) if absent."""
        await aiofiles.os.makedirs(os.path.dirname(file_path), exist_ok=True)
        async with aiofiles.open(file_path, "ab"):
            pass

    async def move(self, source: str, destination: str) -> None:
        """Move ``source`` to ``destination``; creates an empty destination if source is gone."""
        await aiofiles.os.makedirs(os.path.dirname(destination), exist_ok=True)
        if await self.exists(source):
            await aiofiles.os.rename(source, destination)
        else:
            logger.warning("Move source %s missing, creating empty %s", source, destination)
            await self.create_empty(destination)

    async def delete(self, file_path: str) -> bool:
        """Best-effort delete. Returns False (and logs) instead of raising."""
        try:
            if await self.exists(file_path):
                await aiofiles.os.remove(file_path)
            return True
        except OSError as e:
            logger.warning("Failed to delete %s: %s", file_path, e)
            return False


file_storage = FileStorageService()
