"""Validation utilities for short links."""

import re
from urllib.parse import urlparse
from typing import Tuple

MAX_URL_LENGTH = 2048
SHORT_CODE_MIN_LENGTH = 4
SHORT_CODE_MAX_LENGTH = 10
SHORT_CODE_PATTERN = re.compile(r"[A-Za-z0-9]{4,10}")


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlparse(url)

        if result.scheme.lower() not in ("http", "https"):
            return False, "URL must use http or https protocol"

        # hostname is None for "http://", "http://:80" and similar
        if not result.netloc or not result.hostname:
            return False, "URL must have a valid domain"

        return True, ""

    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"


def is_valid_short_code(short_code: str) -> Tuple[bool, str]:
    """Validate a short code.

    Args:
        short_code: The short code to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str):
        return False, "Short code is required"

    if len(short_code) < SHORT_CODE_MIN_LENGTH:
        return False, f"Short code must be at least {SHORT_CODE_MIN_LENGTH} characters"

    if len(short_code) > SHORT_CODE_MAX_LENGTH:
        return False, f"Short code must be at most {SHORT_CODE_MAX_LENGTH} characters"

    if not SHORT_CODE_PATTERN.fullmatch(short_code):
        return False, "Short code can only contain letters and numbers"

    return True, ""


def validate_url(url: str) -> bool:
    """True iff ``url`` is an absolute http(s) URL with a host."""
    return is_valid_url(url)[0]


def validate_shortcode(code: str) -> bool:
    """True iff ``code`` is 4-10 ASCII letters or digits."""
    return is_valid_short_code(code)[0]
