"""Redirection resolver: short code -> redirect outcome."""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .database.models import ClickEvent, UrlRecord
from .events import EventReporter
from .exceptions import ExpiredError, NotFoundError, StorageError
from .store import Clock, MappingStore


class OutcomeStatus(enum.Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"


@dataclass(frozen=True)
class RedirectOutcome:
    """Result of resolving one short code."""

    status: OutcomeStatus
    shortcode: str
    long_url: Optional[str] = None
    record: Optional[UrlRecord] = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def raise_for_status(self) -> "RedirectOutcome":
        """Raise NotFoundError or ExpiredError unless the outcome is a success.

        Returns:
            The outcome itself, for chaining
        """
        if self.status is OutcomeStatus.NOT_FOUND:
            raise NotFoundError(self.shortcode)
        if self.status is OutcomeStatus.EXPIRED:
            raise ExpiredError(self.shortcode)
        return self


class RedirectResolver:
    """Looks up a short code, checks expiry and records the click.

    Each resolve reports an ``info`` event on entry and exactly one of
    ``error`` (not found), ``warn`` (expired) or ``success`` on exit.
    """

    def __init__(
        self,
        store: MappingStore,
        reporter: Optional[EventReporter] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.reporter = reporter or store.reporter
        self.clock = clock or store.clock
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(
        self,
        shortcode: str,
        referrer: Optional[str] = None,
        delay: float = 0.0,
    ) -> RedirectOutcome:
        """Resolve a short code and count the click on success.

        Args:
            shortcode: The short code to resolve
            referrer: Referring page, recorded as the click source
            delay: Seconds to wait before resolving. Cancelling the caller
                during the wait leaves the store untouched.

        Returns:
            RedirectOutcome with status SUCCESS, NOT_FOUND or EXPIRED

        Raises:
            StorageError: If the click cannot be persisted
        """
        await self.announce(shortcode, delay)
        return await self.complete(shortcode, referrer)

    async def announce(self, shortcode: str, delay: float = 0.0) -> None:
        """Report the access, then hold for the presentation delay.

        Nothing is looked up or written here, so cancelling during the
        delay abandons the redirect without side effects.
        """
        self.reporter.emit("info", "Short URL accessed for redirection", {"shortcode": shortcode})

        if delay > 0:
            await asyncio.sleep(delay)

    async def complete(self, shortcode: str, referrer: Optional[str] = None) -> RedirectOutcome:
        """Look up the code, check expiry and record the click.

        Raises:
            StorageError: If the click cannot be persisted
        """
        record = await self.store.get(shortcode)
        if record is None:
            self.logger.warning(f"Short code not found: {shortcode}")
            self.reporter.emit("error", "Short URL not found", {"shortcode": shortcode})
            return RedirectOutcome(OutcomeStatus.NOT_FOUND, shortcode)

        now = self.clock()
        if record.is_expired(now):
            self.logger.info(f"Short code expired: {shortcode}")
            self.reporter.emit(
                "warn",
                "Attempted to access expired short URL",
                {"shortcode": shortcode, "expiresAt": record.expires_at.isoformat()},
            )
            return RedirectOutcome(OutcomeStatus.EXPIRED, shortcode, record=record)

        event = ClickEvent.from_referrer(now, referrer)
        try:
            updated = await self.store.record_click(shortcode, event)
        except StorageError as e:
            self.reporter.emit("error", "Error during redirection", {"shortcode": shortcode, "error": str(e)})
            raise

        # Records are never deleted, so this only happens with external housekeeping.
        if updated is None:
            self.reporter.emit("error", "Short URL not found", {"shortcode": shortcode})
            return RedirectOutcome(OutcomeStatus.NOT_FOUND, shortcode)

        self.logger.debug(f"Redirecting {shortcode} -> {updated.long_url} (clicks={updated.clicks})")
        self.reporter.emit(
            "success",
            "Short URL redirected successfully",
            {"shortcode": shortcode, "longUrl": updated.long_url, "totalClicks": updated.clicks},
        )
        return RedirectOutcome(OutcomeStatus.SUCCESS, shortcode, long_url=updated.long_url, record=updated)
