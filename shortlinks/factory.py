"""Wiring of storage, events and service from configuration."""

import logging
from typing import Optional

from .database import FileBackend, MemoryBackend, RedisBackend, StorageBackend
from .events import EventReporter, HttpEventSink, LoggingEventSink
from .resolver import RedirectResolver
from .service import LinkService
from .shortcode import ShortCodeGenerator
from .store import MappingStore


def build_backend(config, logger: Optional[logging.Logger] = None) -> StorageBackend:
    """Create the storage backend named by ``config.storage_backend``."""
    if config.storage_backend == "memory":
        return MemoryBackend()
    if config.storage_backend == "file":
        return FileBackend(config.storage_path, logger=logger)
    if config.storage_backend == "redis":
        if not config.redis_url:
            raise ValueError("storage_backend=redis requires redis_url")
        return RedisBackend(redis_url=config.redis_url, logger=logger)
    raise ValueError(f"Unknown storage backend: {config.storage_backend}")


def build_reporter(config, logger: Optional[logging.Logger] = None) -> EventReporter:
    """Local log sink, plus the remote log API when one is configured."""
    sinks = [LoggingEventSink()]
    if config.log_api_url:
        sinks.append(
            HttpEventSink(
                config.log_api_url,
                token=config.log_api_token,
                timeout=config.log_api_timeout,
            )
        )
    return EventReporter(sinks, logger=logger)


def build_service(
    config,
    logger: Optional[logging.Logger] = None,
    backend: Optional[StorageBackend] = None,
    reporter: Optional[EventReporter] = None,
) -> LinkService:
    """Build a ready-to-open LinkService from configuration.

    Args:
        config: Configuration object (see ``config.Config``)
        logger: Optional logger passed to every component
        backend: Optional backend overriding ``config.storage_backend``
        reporter: Optional reporter overriding the configured sinks

    Returns:
        LinkService instance
    """
    backend = backend or build_backend(config, logger=logger)
    reporter = reporter or build_reporter(config, logger=logger)
    store = MappingStore(
        backend,
        generator=ShortCodeGenerator(default_length=config.short_code_length),
        reporter=reporter,
        max_generation_attempts=config.max_generation_attempts,
        logger=logger,
    )
    return LinkService(
        store,
        resolver=RedirectResolver(store, logger=logger),
        logger=logger,
        default_validity_minutes=config.default_validity_minutes,
        max_batch_size=config.max_batch_size,
    )
