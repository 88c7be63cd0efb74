"""Storage layer for short links."""

from .base import StorageBackend
from .file import FileBackend
from .memory import MemoryBackend
from .models import ClickEvent, UrlRecord
from .redis_backend import RedisBackend

__all__ = [
    "StorageBackend",
    "FileBackend",
    "MemoryBackend",
    "RedisBackend",
    "ClickEvent",
    "UrlRecord",
]
