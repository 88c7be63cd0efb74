"""Audit event reporting.

Store and resolver state transitions are reported as ``log_event(level,
message, context)`` calls. Delivery is fire-and-forget: :meth:`EventReporter.emit`
schedules the send as a background task and returns at once, and a failing
sink is logged locally and otherwise ignored.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

import httpx

LEVELS = ("info", "warn", "error", "success")

_STDLIB_LEVELS = {
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "success": logging.INFO,
}


class EventSink(ABC):
    """Destination for audit events."""

    @abstractmethod
    async def log_event(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        """Deliver one event. May raise; the reporter suppresses failures."""
        pass

    async def close(self) -> None:
        """Release sink resources."""
        pass


class LoggingEventSink(EventSink):
    """Writes events to a standard library logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("shortlinks.events")

    async def log_event(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        self.logger.log(
            _STDLIB_LEVELS.get(level, logging.INFO),
            f"[{level}] {message} {dict(context)}",
        )


class HttpEventSink(EventSink):
    """POSTs events as JSON to a remote log API.

    The bearer token is passed through untouched; this service does not
    interpret it.
    """

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize HTTP sink.

        Args:
            url: Log API endpoint
            token: Optional bearer token sent in the Authorization header
            timeout: Request timeout in seconds
            client: Optional pre-built client (for tests or connection reuse)
        """
        self.url = url
        self.token = token
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def log_event(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        payload = {
            "level": level,
            "message": message,
            "context": dict(context),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        response = await self.client.post(self.url, json=payload, headers=self._headers())
        response.raise_for_status()

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()


class EventReporter:
    """Fans events out to sinks without making callers wait or fail."""

    def __init__(
        self,
        sinks: Optional[Iterable[EventSink]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.sinks: List[EventSink] = list(sinks) if sinks is not None else [LoggingEventSink()]
        self.logger = logger or logging.getLogger(__name__)
        self._pending: Set[asyncio.Task] = set()

    def emit(self, level: str, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        """Schedule delivery of one event to every sink and return immediately.

        Must be called from a running event loop. Never raises for sink
        problems.
        """
        if level not in LEVELS:
            raise ValueError(f"Unknown event level: {level}")
        context = dict(context or {})

        for sink in self.sinks:
            task = asyncio.create_task(self._deliver(sink, level, message, context))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _deliver(self, sink: EventSink, level: str, message: str, context: Dict[str, Any]) -> None:
        try:
            await sink.log_event(level, message, context)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.debug(f"Event sink {type(sink).__name__} failed: {e}")

    @property
    def pending(self) -> int:
        """Number of deliveries still in flight."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight deliveries to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        """Drain pending events and close all sinks."""
        await self.drain()
        for sink in self.sinks:
            try:
                await sink.close()
            except Exception as e:
                self.logger.warning(f"Failed to close event sink {type(sink).__name__}: {e}")
