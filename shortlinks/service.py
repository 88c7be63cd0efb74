"""Business logic service for short links."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .common.validators import is_valid_short_code, is_valid_url
from .database.models import UrlRecord
from .events import EventReporter
from .exceptions import (
    InvalidShortcodeFormatError,
    InvalidUrlError,
    InvalidValidityError,
    NotFoundError,
    ShortLinkError,
)
from .resolver import RedirectOutcome, RedirectResolver
from .store import DEFAULT_VALIDITY_MINUTES, MappingStore, is_valid_validity

DEFAULT_MAX_BATCH_SIZE = 5


def record_stats(record: UrlRecord, now) -> Dict[str, Any]:
    """Statistics view of a record."""
    return {
        "short_code": record.shortcode,
        "long_url": record.long_url,
        "created_at": record.created_at,
        "expires_at": record.expires_at,
        "is_expired": record.is_expired(now),
        "clicks": record.clicks,
        "click_details": [
            {"timestamp": event.timestamp, "source": event.source, "location": event.location}
            for event in record.click_details
        ],
    }


class LinkService:
    """Public operation surface used by the HTTP app and the CLI."""

    def __init__(
        self,
        store: MappingStore,
        resolver: Optional[RedirectResolver] = None,
        logger: Optional[logging.Logger] = None,
        default_validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        """Initialize short link service.

        Args:
            store: Mapping store instance
            resolver: Optional resolver (built over the store if omitted)
            logger: Optional logger
            default_validity_minutes: Validity used when a request gives none
            max_batch_size: Maximum number of URLs per batch request
        """
        self.store = store
        self.resolver = resolver or RedirectResolver(store)
        self.logger = logger or logging.getLogger(__name__)
        self.default_validity_minutes = default_validity_minutes
        self.max_batch_size = max_batch_size

    @property
    def reporter(self) -> EventReporter:
        return self.store.reporter

    async def create_short_url(
        self,
        long_url: str,
        validity_minutes: Optional[int] = None,
        custom_code: Optional[str] = None,
    ) -> UrlRecord:
        """Create a new short URL.

        Args:
            long_url: The original long URL
            validity_minutes: Minutes the code stays live (service default if None)
            custom_code: Optional custom short code

        Returns:
            The stored record

        Raises:
            ShortLinkError: If validation fails, the code is taken, or
                generation is exhausted
        """
        if validity_minutes is None:
            validity_minutes = self.default_validity_minutes
        return await self.store.create(long_url, validity_minutes, custom_code)

    async def create_short_urls(self, items: Sequence[Dict[str, Any]]) -> List[UrlRecord]:
        """Create several short URLs in one request.

        Every item is validated before any is created, so a malformed item
        creates nothing. Items are then created in order; a duplicate or
        storage failure stops the batch, leaving earlier items committed.

        Args:
            items: Dicts with ``long_url`` and optional ``validity_minutes``
                and ``custom_code``

        Returns:
            Created records in request order
        """
        if not items:
            raise ValueError("At least one URL is required")
        if len(items) > self.max_batch_size:
            raise ValueError(f"At most {self.max_batch_size} URLs can be shortened at once")

        self.reporter.emit("info", "URL shortening process initiated", {"formsCount": len(items)})

        errors = []
        seen_codes = set()
        for index, item in enumerate(items):
            error = self._validate_item(item)
            custom_code = item.get("custom_code")
            if error is None and custom_code is not None:
                if custom_code in seen_codes:
                    error = f"Short code '{custom_code}' is used more than once in this batch"
                seen_codes.add(custom_code)
            if error is not None:
                errors.append(f"#{index + 1}: {error}")
        if errors:
            self.reporter.emit("warn", "Form validation failed", {"errors": errors})
            raise ShortLinkError("; ".join(errors))

        created = []
        for item in items:
            created.append(
                await self.create_short_url(
                    item["long_url"],
                    validity_minutes=item.get("validity_minutes"),
                    custom_code=item.get("custom_code"),
                )
            )
        return created

    def _validate_item(self, item: Dict[str, Any]) -> Optional[ShortLinkError]:
        long_url = item.get("long_url")
        valid, error = is_valid_url(long_url)
        if not valid:
            return InvalidUrlError(long_url, error)
        validity = item.get("validity_minutes")
        if validity is not None and not is_valid_validity(validity):
            return InvalidValidityError(validity)
        custom_code = item.get("custom_code")
        if custom_code is not None:
            valid, error = is_valid_short_code(custom_code)
            if not valid:
                return InvalidShortcodeFormatError(custom_code, error)
        return None

    async def resolve_shortcode(
        self,
        shortcode: str,
        referrer: Optional[str] = None,
        delay: float = 0.0,
    ) -> RedirectOutcome:
        """Resolve a short code for redirection, counting the click."""
        return await self.resolver.resolve(shortcode, referrer=referrer, delay=delay)

    async def get_stats(self, shortcode: str) -> Dict[str, Any]:
        """Get click statistics for a short code.

        Args:
            shortcode: The short code to lookup

        Returns:
            Dictionary with clicks, click_details, created_at, expires_at

        Raises:
            NotFoundError: If the short code is unknown
        """
        record = await self.store.get(shortcode)
        if record is None:
            raise NotFoundError(shortcode)
        return record_stats(record, self.store.clock())

    async def list_urls(self) -> List[Dict[str, Any]]:
        """Statistics for every stored short URL, newest first."""
        now = self.store.clock()
        return [record_stats(record, now) for record in await self.store.list_records()]

    async def get_statistics(self) -> Dict[str, Any]:
        """Get service statistics.

        Returns:
            Dictionary with statistics
        """
        now = self.store.clock()
        records = await self.store.list_records()
        expired = sum(1 for record in records if record.is_expired(now))
        return {
            "total_urls": len(records),
            "active_urls": len(records) - expired,
            "expired_urls": expired,
            "total_clicks": sum(record.clicks for record in records),
            "storage": self.store.backend.name,
        }

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        storage_healthy = await self.store.health_check()
        return {
            "storage": storage_healthy,
            "overall": storage_healthy,
        }

    async def close(self) -> None:
        """Flush pending events and close storage."""
        await self.reporter.close()
        await self.store.close()
