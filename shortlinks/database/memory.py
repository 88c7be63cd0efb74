"""In-process storage backend."""

from typing import Dict, Optional

from .base import StorageBackend


class MemoryBackend(StorageBackend):
    """Keeps blobs in a dict. Contents are lost when the process exits."""

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._blobs: Dict[str, str] = dict(initial or {})

    async def load(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    async def save(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True
