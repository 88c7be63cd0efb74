"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping

import pytest

from shortlinks.database.memory import MemoryBackend
from shortlinks.events import EventReporter, EventSink
from shortlinks.resolver import RedirectResolver
from shortlinks.service import LinkService
from shortlinks.shortcode import ShortCodeGenerator
from shortlinks.store import MappingStore
from shortlinks.common.logging_config import setup_logging


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class RecordingSink(EventSink):
    """Keeps every delivered event."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    async def log_event(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        self.events.append({"level": level, "message": message, "context": dict(context)})

    def levels(self) -> List[str]:
        return [event["level"] for event in self.events]


class FixedGenerator(ShortCodeGenerator):
    """Generator returning a fixed sequence of codes, then repeating the last."""

    def __init__(self, *codes: str):
        super().__init__(default_length=6)
        self.codes = list(codes)
        self.calls = 0

    def generate(self, length=None) -> str:
        self.calls += 1
        if len(self.codes) > 1:
            return self.codes.pop(0)
        return self.codes[0]


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def reporter(sink):
    return EventReporter([sink])


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def store(backend, short_code_generator, reporter, clock, logger) -> MappingStore:
    """Create mapping store over in-memory storage."""
    return MappingStore(
        backend,
        generator=short_code_generator,
        reporter=reporter,
        clock=clock,
        logger=logger,
    )


@pytest.fixture
def resolver(store) -> RedirectResolver:
    return RedirectResolver(store)


@pytest.fixture
def service(store, resolver, logger) -> LinkService:
    """Create service instance."""
    return LinkService(store, resolver=resolver, logger=logger)


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
