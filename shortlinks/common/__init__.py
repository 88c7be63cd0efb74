"""Common utilities for short links."""

from .validators import is_valid_url, is_valid_short_code, validate_url, validate_shortcode
from .headers import extract_forwarded_headers, build_base_url, get_referrer
from .url_builder import build_short_url, normalize_path_prefix
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_valid_short_code",
    "validate_url",
    "validate_shortcode",
    "extract_forwarded_headers",
    "build_base_url",
    "get_referrer",
    "build_short_url",
    "normalize_path_prefix",
    "setup_logging",
]
