"""Data models for short link records."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from ..exceptions import RecordCorruptedError

DIRECT_SOURCE = "Direct"
UNKNOWN_LOCATION = "Unknown"

REQUIRED_RECORD_FIELDS = ("shortcode", "longUrl", "createdAt", "expiresAt", "clicks", "clickDetails")
REQUIRED_CLICK_FIELDS = ("timestamp", "source", "location")


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is present.

    Accepts the trailing ``Z`` of JavaScript's ``toISOString()``, which
    ``fromisoformat`` only understands from Python 3.11 on.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        if isinstance(value, str) and value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_timestamp(value: datetime) -> str:
    return value.isoformat()


@dataclass(frozen=True)
class ClickEvent:
    """One successful redirect."""

    timestamp: datetime
    source: str = DIRECT_SOURCE
    location: str = UNKNOWN_LOCATION

    @classmethod
    def from_referrer(cls, timestamp: datetime, referrer: Optional[str] = None) -> "ClickEvent":
        """Build an event, falling back to 'Direct' for a missing referrer."""
        source = referrer.strip() if referrer and referrer.strip() else DIRECT_SOURCE
        return cls(timestamp=timestamp, source=source, location=UNKNOWN_LOCATION)

    def to_dict(self) -> dict:
        """Convert to the persisted dictionary form."""
        return {
            "timestamp": _format_timestamp(self.timestamp),
            "source": self.source,
            "location": self.location,
        }

    @classmethod
    def from_dict(cls, data: dict, shortcode: str = "?") -> "ClickEvent":
        """Create from the persisted dictionary form."""
        missing = [name for name in REQUIRED_CLICK_FIELDS if name not in data]
        if missing:
            raise RecordCorruptedError(shortcode, f"click event missing {', '.join(missing)}")
        try:
            timestamp = _parse_timestamp(data["timestamp"])
        except (TypeError, ValueError) as e:
            raise RecordCorruptedError(shortcode, f"bad click timestamp: {e}")
        return cls(
            timestamp=timestamp,
            source=str(data["source"]),
            location=str(data["location"]),
        )


@dataclass(frozen=True)
class UrlRecord:
    """A short code mapped to a long URL, with its click history.

    Records are immutable. A click produces a new record through
    :meth:`with_click`, so ``clicks`` and ``click_details`` always change
    together.
    """

    shortcode: str
    long_url: str
    created_at: datetime
    expires_at: datetime
    clicks: int = 0
    click_details: Tuple[ClickEvent, ...] = field(default_factory=tuple)

    @classmethod
    def new(cls, shortcode: str, long_url: str, created_at: datetime, validity_minutes: int) -> "UrlRecord":
        """Create a fresh record expiring ``validity_minutes`` after ``created_at``."""
        return cls(
            shortcode=shortcode,
            long_url=long_url,
            created_at=created_at,
            expires_at=created_at + timedelta(minutes=validity_minutes),
        )

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` is strictly past the expiry time."""
        return now > self.expires_at

    def with_click(self, event: ClickEvent) -> "UrlRecord":
        """Return a copy with one more click appended."""
        return replace(
            self,
            clicks=self.clicks + 1,
            click_details=self.click_details + (event,),
        )

    def to_dict(self) -> dict:
        """Convert to the persisted dictionary form."""
        return {
            "shortcode": self.shortcode,
            "longUrl": self.long_url,
            "createdAt": _format_timestamp(self.created_at),
            "expiresAt": _format_timestamp(self.expires_at),
            "clicks": self.clicks,
            "clickDetails": [event.to_dict() for event in self.click_details],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UrlRecord":
        """Create from the persisted dictionary form.

        Raises:
            RecordCorruptedError: If a field is missing or the click counter
                disagrees with the click history.
        """
        shortcode = str(data.get("shortcode", "?")) if isinstance(data, dict) else "?"
        if not isinstance(data, dict):
            raise RecordCorruptedError(shortcode, "record is not an object")

        missing = [name for name in REQUIRED_RECORD_FIELDS if name not in data]
        if missing:
            raise RecordCorruptedError(shortcode, f"missing {', '.join(missing)}")

        clicks = data["clicks"]
        details = data["clickDetails"]
        if not isinstance(clicks, int) or isinstance(clicks, bool) or clicks < 0:
            raise RecordCorruptedError(shortcode, f"bad click count {clicks!r}")
        if not isinstance(details, list):
            raise RecordCorruptedError(shortcode, "clickDetails is not a list")
        if clicks != len(details):
            raise RecordCorruptedError(
                shortcode, f"clicks={clicks} but {len(details)} click details"
            )

        try:
            created_at = _parse_timestamp(data["createdAt"])
            expires_at = _parse_timestamp(data["expiresAt"])
        except (TypeError, ValueError) as e:
            raise RecordCorruptedError(shortcode, f"bad timestamp: {e}")

        return cls(
            shortcode=shortcode,
            long_url=str(data["longUrl"]),
            created_at=created_at,
            expires_at=expires_at,
            clicks=clicks,
            click_details=tuple(ClickEvent.from_dict(item, shortcode) for item in details),
        )
