"""Mapping store: the durable shortcode -> record table."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from .common.validators import is_valid_short_code, is_valid_url
from .database.base import StorageBackend
from .database.models import ClickEvent, UrlRecord
from .events import EventReporter
from .exceptions import (
    DuplicateShortcodeError,
    GenerationExhaustedError,
    InvalidShortcodeFormatError,
    InvalidUrlError,
    InvalidValidityError,
    RecordCorruptedError,
    StorageError,
)
from .shortcode import ShortCodeGenerator

STORAGE_KEY = "shortenedUrls"
DEFAULT_VALIDITY_MINUTES = 30
DEFAULT_MAX_GENERATION_ATTEMPTS = 5

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_validity(validity_minutes) -> bool:
    """True for a positive int (bools are rejected)."""
    return (
        isinstance(validity_minutes, int)
        and not isinstance(validity_minutes, bool)
        and validity_minutes > 0
    )


class MappingStore:
    """Owns the shortcode table and serializes every mutation.

    The whole table is persisted as one JSON blob under ``STORAGE_KEY``. A
    single ``asyncio.Lock`` guards inserts and click updates; each holder
    mutates exactly one record and writes the blob before releasing it.
    Records are immutable, so readers never need the lock.

    A store instance must be used from a single event loop.
    """

    def __init__(
        self,
        backend: StorageBackend,
        generator: Optional[ShortCodeGenerator] = None,
        reporter: Optional[EventReporter] = None,
        clock: Optional[Clock] = None,
        max_generation_attempts: int = DEFAULT_MAX_GENERATION_ATTEMPTS,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize mapping store.

        Args:
            backend: Key-value medium holding the table blob
            generator: Short code generator for codes without a custom value
            reporter: Audit event reporter
            clock: Callable returning the current aware datetime
            max_generation_attempts: Candidates tried before giving up
            logger: Optional logger
        """
        if max_generation_attempts < 1:
            raise ValueError("max_generation_attempts must be at least 1")
        self.backend = backend
        self.generator = generator or ShortCodeGenerator()
        self.reporter = reporter or EventReporter()
        self.clock = clock or utc_now
        self.max_generation_attempts = max_generation_attempts
        self.logger = logger or logging.getLogger(__name__)

        self._records: Dict[str, UrlRecord] = {}
        self._lock = asyncio.Lock()
        self._loaded = False

    # Persistence

    async def open(self) -> None:
        """Load the persisted table. Safe to call more than once."""
        async with self._lock:
            if self._loaded:
                return
            blob = await self.backend.load(STORAGE_KEY)
            self._records = self._deserialize(blob)
            self._loaded = True
            self.logger.info(f"Loaded {len(self._records)} short links from {self.backend.name} storage")

    async def _ensure_open(self) -> None:
        if not self._loaded:
            await self.open()

    @staticmethod
    def _deserialize(blob: Optional[str]) -> Dict[str, UrlRecord]:
        if not blob:
            return {}
        try:
            raw = json.loads(blob)
        except json.JSONDecodeError as e:
            raise StorageError(f"persisted table is not valid JSON: {e}", original_error=e)
        if not isinstance(raw, dict):
            raise StorageError("persisted table is not a JSON object")

        records = {}
        for key, data in raw.items():
            record = UrlRecord.from_dict(data)
            if record.shortcode != key:
                raise RecordCorruptedError(key, f"stored under key {key!r} but names {record.shortcode!r}")
            records[key] = record
        return records

    @staticmethod
    def _serialize(records: Dict[str, UrlRecord]) -> str:
        return json.dumps({code: record.to_dict() for code, record in records.items()})

    async def _commit(self, records: Dict[str, UrlRecord]) -> None:
        """Persist ``records`` and make them current. Caller holds the lock."""
        await self.backend.save(STORAGE_KEY, self._serialize(records))
        self._records = records

    async def _mutate(self, change):
        """Run ``change`` under the lock, shielded from cancellation of the caller.

        A backend write cannot be taken back once started, so a cancelled
        caller must not stop the mutation between the write and the swap of
        the in-memory table. The caller still sees ``CancelledError``.
        """

        async def locked():
            async with self._lock:
                return await change()

        return await asyncio.shield(locked())

    async def _insert_if_absent(self, record: UrlRecord) -> bool:
        return await self._mutate(lambda: self._insert_locked(record))

    async def _insert_locked(self, record: UrlRecord) -> bool:
        if record.shortcode in self._records:
            return False
        records = dict(self._records)
        records[record.shortcode] = record
        await self._commit(records)
        return True

    # Operations

    def _reject(self, error: Exception, message: str, context: dict) -> Exception:
        self.reporter.emit("warn", message, {**context, "error": str(error)})
        return error

    async def create(
        self,
        long_url: str,
        validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        custom_shortcode: Optional[str] = None,
    ) -> UrlRecord:
        """Create and persist a new record.

        Args:
            long_url: Absolute http(s) URL to redirect to
            validity_minutes: Positive number of minutes the code stays live
            custom_shortcode: Optional user-chosen code

        Returns:
            The stored record

        Raises:
            InvalidUrlError: If the URL fails validation
            InvalidValidityError: If validity_minutes is not a positive int
            InvalidShortcodeFormatError: If the custom code fails validation
            DuplicateShortcodeError: If the custom code is already stored
            GenerationExhaustedError: If every generated candidate was taken
            StorageError: If the table cannot be persisted
        """
        context = {"longUrl": long_url, "validity": validity_minutes, "customShortcode": custom_shortcode}

        valid, error = is_valid_url(long_url)
        if not valid:
            raise self._reject(InvalidUrlError(long_url, error), "Invalid URL format", context)

        if not is_valid_validity(validity_minutes):
            raise self._reject(InvalidValidityError(validity_minutes), "Invalid validity period", context)

        if custom_shortcode is not None:
            valid, error = is_valid_short_code(custom_shortcode)
            if not valid:
                raise self._reject(
                    InvalidShortcodeFormatError(custom_shortcode, error),
                    "Invalid shortcode format",
                    context,
                )

        await self._ensure_open()

        try:
            if custom_shortcode is not None:
                record = UrlRecord.new(custom_shortcode, long_url, self.clock(), validity_minutes)
                if not await self._insert_if_absent(record):
                    raise self._reject(
                        DuplicateShortcodeError(custom_shortcode),
                        "Shortcode already in use",
                        context,
                    )
            else:
                record = await self._create_generated(long_url, validity_minutes)
        except StorageError as e:
            self.reporter.emit("error", "URL shortening failed", {**context, "error": str(e)})
            raise

        if record is None:
            error = GenerationExhaustedError(self.max_generation_attempts)
            self.reporter.emit("error", "Shortcode generation exhausted", {**context, "error": str(error)})
            raise error

        self.logger.info(f"Created short URL: {record.shortcode} -> {long_url}")
        self.reporter.emit(
            "success",
            "URL shortened successfully",
            {
                "shortcode": record.shortcode,
                "longUrl": record.long_url,
                "expiresAt": record.expires_at.isoformat(),
            },
        )
        return record

    async def _create_generated(self, long_url: str, validity_minutes: int) -> Optional[UrlRecord]:
        # Lock is taken per candidate, never across attempts.
        for attempt in range(1, self.max_generation_attempts + 1):
            candidate = self.generator.generate()
            record = UrlRecord.new(candidate, long_url, self.clock(), validity_minutes)
            if await self._insert_if_absent(record):
                if attempt > 1:
                    self.logger.debug(f"Generated code after {attempt} attempts: {candidate}")
                return record
            self.logger.debug(f"Short code collision on attempt {attempt}: {candidate}")
        return None

    async def get(self, shortcode: str) -> Optional[UrlRecord]:
        """Look up a record. Expired records are returned too.

        Args:
            shortcode: The short code to lookup

        Returns:
            The record, or None if not found
        """
        await self._ensure_open()
        return self._records.get(shortcode)

    async def record_click(self, shortcode: str, event: ClickEvent) -> Optional[UrlRecord]:
        """Atomically add one click to a record.

        Args:
            shortcode: The short code that was followed
            event: Click details to append

        Returns:
            The updated record, or None if not found

        Raises:
            StorageError: If the table cannot be persisted
        """
        await self._ensure_open()
        return await self._mutate(lambda: self._click_locked(shortcode, event))

    async def _click_locked(self, shortcode: str, event: ClickEvent) -> Optional[UrlRecord]:
        record = self._records.get(shortcode)
        if record is None:
            return None
        updated = record.with_click(event)
        records = dict(self._records)
        records[shortcode] = updated
        await self._commit(records)
        return updated

    async def list_records(self) -> List[UrlRecord]:
        """All records, newest first."""
        await self._ensure_open()
        return sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)

    async def health_check(self) -> bool:
        return await self.backend.health_check()

    async def close(self) -> None:
        await self.backend.close()
