"""JSON file storage backend."""

import asyncio
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from ..exceptions import StorageError
from .base import StorageBackend


class FileBackend(StorageBackend):
    """Stores each key as ``<directory>/<key>.json``.

    Writes go to a temporary file in the same directory and are swapped in
    with ``os.replace``, so readers never see a half-written blob.
    """

    name = "file"

    def __init__(self, directory: str, logger: Optional[logging.Logger] = None):
        """Initialize file backend.

        Args:
            directory: Directory holding the blob files (created if missing)
            logger: Optional logger instance
        """
        self.directory = Path(directory)
        self.logger = logger or logging.getLogger(__name__)

    def _path_for(self, key: str) -> Path:
        if not re.match(r"^[A-Za-z0-9_.-]+$", key):
            raise StorageError(f"unsupported key {key!r}")
        return self.directory / f"{key}.json"

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write(self, path: Path, blob: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    async def load(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(self._read, path)
        except OSError as e:
            raise StorageError(f"failed to read {path}", original_error=e)

    async def save(self, key: str, blob: str) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(self._write, path, blob)
        except OSError as e:
            raise StorageError(f"failed to write {path}", original_error=e)
        self.logger.debug(f"Wrote {len(blob)} bytes to {path}")

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        """Healthy when the directory exists (or can be created) and is writable."""
        try:
            await asyncio.to_thread(self.directory.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error(f"Storage directory unavailable: {e}")
            return False
        return os.access(self.directory, os.W_OK)
