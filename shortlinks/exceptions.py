"""Exceptions raised by the short link store and service."""

from typing import Optional


class ShortLinkError(ValueError):
    """Base exception for short link failures."""


class InvalidUrlError(ShortLinkError):
    """Raised when a long URL fails validation."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidShortcodeFormatError(ShortLinkError):
    """Raised when a custom short code fails validation."""

    def __init__(self, shortcode: str, reason: str = "Invalid short code format"):
        self.shortcode = shortcode
        self.reason = reason
        super().__init__(f"{reason}: {shortcode}")


class InvalidValidityError(ShortLinkError):
    """Raised when the validity window is not a positive integer."""

    def __init__(self, validity_minutes):
        self.validity_minutes = validity_minutes
        super().__init__(
            f"Validity must be a positive number of minutes, got {validity_minutes!r}"
        )


class DuplicateShortcodeError(ShortLinkError):
    """Raised when a custom short code is already taken."""

    def __init__(self, shortcode: str):
        self.shortcode = shortcode
        super().__init__(f"Short code '{shortcode}' already exists")


class GenerationExhaustedError(ShortLinkError):
    """Raised when no free short code was found within the retry budget."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Unable to generate unique short code after {attempts} attempts"
        )


class NotFoundError(ShortLinkError):
    """Raised when a short code is not in the store."""

    def __init__(self, shortcode: str):
        self.shortcode = shortcode
        super().__init__(f"Short code '{shortcode}' not found")


class ExpiredError(ShortLinkError):
    """Raised when a short code exists but its validity window has passed."""

    def __init__(self, shortcode: str):
        self.shortcode = shortcode
        super().__init__(f"Short code '{shortcode}' has expired")


class StorageError(ShortLinkError):
    """Raised when the storage backend cannot be read or written."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Storage error: {message}")


class RecordCorruptedError(StorageError):
    """Raised when a persisted record is missing fields or inconsistent."""

    def __init__(self, shortcode: str, reason: str):
        self.shortcode = shortcode
        self.reason = reason
        super().__init__(f"corrupted record '{shortcode}': {reason}")
