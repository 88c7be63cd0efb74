"""Abstract base class for short link storage backends."""

from abc import ABC, abstractmethod
from typing import Optional


class StorageBackend(ABC):
    """Key-value medium holding serialized blobs.

    The mapping store keeps its whole table as one blob under a fixed key, so
    a backend only needs whole-value reads and writes.
    """

    name = "base"

    @abstractmethod
    async def load(self, key: str) -> Optional[str]:
        """Read the blob stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored blob, or None if nothing is stored under the key
        """
        pass

    @abstractmethod
    async def save(self, key: str, blob: str) -> None:
        """Replace the blob stored under a key.

        Args:
            key: Storage key
            blob: Serialized value

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the backend is usable.

        Returns:
            True if healthy, False otherwise
        """
        pass
