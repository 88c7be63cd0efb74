"""Tests for short link service."""

import pytest

from shortlinks.database.models import ClickEvent
from shortlinks.exceptions import (
    DuplicateShortcodeError,
    InvalidUrlError,
    NotFoundError,
    ShortLinkError,
)
from shortlinks.resolver import OutcomeStatus
from shortlinks.service import LinkService


@pytest.mark.asyncio
class TestLinkService:
    """Test LinkService class."""

    async def test_create_short_url(self, service, sample_urls):
        """Test creating a short URL."""
        record = await service.create_short_url(sample_urls[0])

        assert record.long_url == sample_urls[0]
        assert len(record.shortcode) == 6
        assert (record.expires_at - record.created_at).total_seconds() == 30 * 60

    async def test_create_with_custom_code(self, service, sample_urls):
        """Test creating with custom code."""
        record = await service.create_short_url(sample_urls[0], 10, custom_code="custom1")

        assert record.shortcode == "custom1"

    async def test_service_default_validity(self, store, sample_urls):
        service = LinkService(store, default_validity_minutes=90)

        record = await service.create_short_url(sample_urls[0])

        assert (record.expires_at - record.created_at).total_seconds() == 90 * 60

    async def test_duplicate_custom_code(self, service, sample_urls):
        """Test duplicate custom code fails."""
        await service.create_short_url(sample_urls[0], custom_code="dup1")

        with pytest.raises(DuplicateShortcodeError):
            await service.create_short_url(sample_urls[1], custom_code="dup1")

    async def test_invalid_url(self, service):
        """Test invalid URL fails."""
        with pytest.raises(InvalidUrlError):
            await service.create_short_url("not-a-valid-url")

    async def test_resolve_shortcode(self, service, sample_urls):
        record = await service.create_short_url(sample_urls[0])

        outcome = await service.resolve_shortcode(record.shortcode, referrer="https://ref.example")

        assert outcome.status is OutcomeStatus.SUCCESS
        assert outcome.long_url == sample_urls[0]

    async def test_get_stats(self, service, clock, sample_urls):
        """Test getting URL statistics."""
        record = await service.create_short_url(sample_urls[0], 10)
        await service.resolve_shortcode(record.shortcode, referrer="https://ref.example")
        await service.resolve_shortcode(record.shortcode)

        stats = await service.get_stats(record.shortcode)

        assert stats["short_code"] == record.shortcode
        assert stats["long_url"] == sample_urls[0]
        assert stats["clicks"] == 2
        assert stats["is_expired"] is False
        assert [detail["source"] for detail in stats["click_details"]] == ["https://ref.example", "Direct"]
        assert stats["click_details"][0]["timestamp"] == clock.now

    async def test_stats_of_expired_code(self, service, clock, sample_urls):
        record = await service.create_short_url(sample_urls[0], 1)
        clock.advance(90)

        stats = await service.get_stats(record.shortcode)

        assert stats["is_expired"] is True
        assert stats["clicks"] == 0

    async def test_get_stats_not_found(self, service):
        """Test getting stats for non-existent code."""
        with pytest.raises(NotFoundError):
            await service.get_stats("nonexistent")

    async def test_list_urls(self, service, clock, sample_urls):
        await service.create_short_url(sample_urls[0], custom_code="first1")
        clock.advance(1)
        await service.create_short_url(sample_urls[1], custom_code="second")

        urls = await service.list_urls()

        assert [url["short_code"] for url in urls] == ["second", "first1"]

    async def test_get_statistics(self, service, store, clock, sample_urls):
        """Test getting service statistics."""
        live = await service.create_short_url(sample_urls[0], 60)
        await service.create_short_url(sample_urls[1], 1)
        await store.record_click(live.shortcode, ClickEvent(clock.now))
        clock.advance(120)

        stats = await service.get_statistics()

        assert stats == {
            "total_urls": 2,
            "active_urls": 1,
            "expired_urls": 1,
            "total_clicks": 1,
            "storage": "memory",
        }

    async def test_health_check(self, service):
        """Test health check."""
        health = await service.health_check()

        assert health == {"storage": True, "overall": True}


@pytest.mark.asyncio
class TestBatchCreate:
    """Test creating several short URLs in one request."""

    async def test_batch_creates_in_order(self, service, sample_urls):
        records = await service.create_short_urls([
            {"long_url": sample_urls[0]},
            {"long_url": sample_urls[1], "validity_minutes": 5, "custom_code": "second"},
            {"long_url": sample_urls[2]},
        ])

        assert [record.long_url for record in records] == sample_urls
        assert records[1].shortcode == "second"

    async def test_invalid_item_creates_nothing(self, service, sample_urls):
        with pytest.raises(ShortLinkError, match="#2"):
            await service.create_short_urls([
                {"long_url": sample_urls[0], "custom_code": "okcode"},
                {"long_url": "nope"},
            ])

        assert await service.list_urls() == []

    async def test_all_errors_reported(self, service):
        with pytest.raises(ShortLinkError) as excinfo:
            await service.create_short_urls([
                {"long_url": "nope"},
                {"long_url": "https://example.com", "validity_minutes": 0},
                {"long_url": "https://example.com", "custom_code": "a!"},
            ])

        message = str(excinfo.value)
        assert "#1" in message and "#2" in message and "#3" in message

    async def test_repeated_custom_code_in_batch(self, service, sample_urls):
        with pytest.raises(ShortLinkError, match="more than once"):
            await service.create_short_urls([
                {"long_url": sample_urls[0], "custom_code": "same12"},
                {"long_url": sample_urls[1], "custom_code": "same12"},
            ])

        assert await service.list_urls() == []

    async def test_batch_size_limits(self, service, sample_urls):
        with pytest.raises(ValueError):
            await service.create_short_urls([])
        with pytest.raises(ValueError, match="At most 5"):
            await service.create_short_urls([{"long_url": sample_urls[0]}] * 6)

    async def test_validation_event(self, service, reporter, sink):
        with pytest.raises(ShortLinkError):
            await service.create_short_urls([{"long_url": "nope"}])
        await reporter.drain()

        assert sink.levels() == ["info", "warn"]
        assert sink.events[0]["message"] == "URL shortening process initiated"
        assert sink.events[1]["message"] == "Form validation failed"
