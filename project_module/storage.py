"""Local-disk object storage for uploaded project files."""
import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def format_size(num_bytes: int) -> str:
    """Human readable size label, e.g. ``"12.4 KB"``."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{int(size)} B" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def safe_filename(name: str) -> str:
    """Strip directories and unusual characters from a client file name."""
    base = Path(name.replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "file"


@dataclass
class StoredObject:
    """Result of a successful write."""
    location: str
    size: int

    @property
    def size_label(self) -> str:
        return format_size(self.size)


class ObjectStore:
    """Stores file bytes under ``root`` and hands back relative locations."""

    def __init__(self, root, prefix: str = "projects") -> None:
        self.root = Path(root).resolve()
        self.prefix = prefix

    def path_for(self, location: str) -> Path:
        """Absolute path of a stored object; refuses paths outside the root."""
        path = (self.root / location).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Location escapes storage root: {location}")
        return path

    async def put(self, name: str, data: bytes) -> StoredObject:
        """Write ``data`` under a unique name derived from ``name``."""
        directory = self.root / self.prefix
        await aiofiles.os.makedirs(directory, exist_ok=True)
        unique = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}-{safe_filename(name)}"
        location = f"{self.prefix}/{unique}"
        async with aiofiles.open(self.path_for(location), "wb") as fh:
            await fh.write(data)
        logger.debug(f"Stored {len(data)} bytes at {location}")
        return StoredObject(location=location, size=len(data))

    async def read(self, location: str) -> bytes:
        async with aiofiles.open(self.path_for(location), "rb") as fh:
            return await fh.read()

    async def exists(self, location: str) -> bool:
        return await aiofiles.os.path.exists(self.path_for(location))

    async def delete(self, location: str) -> None:
        """Remove one object. Raises ``OSError`` if it cannot be removed."""
        await aiofiles.os.remove(self.path_for(location))
        logger.debug(f"Deleted stored object {location}")

    async def delete_many(self, locations: Iterable[str]) -> List[str]:
        """Best-effort removal; returns the locations that could not be deleted."""
        failed = []
        for location in locations:
            try:
                await self.delete(location)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not delete stored object {location}: {e}")
                failed.append(location)
        return failed
