"""Request header helpers."""

from typing import Dict, Mapping, Optional


def _lower_keys(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k.lower(): v for k, v in headers.items()}


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Extract X-Forwarded-* headers from request.

    Args:
        headers: Request headers

    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for
    """
    headers_lower = _lower_keys(headers)

    return {
        "forwarded_proto": headers_lower.get("x-forwarded-proto"),
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
    }


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Build the public base URL for short links.

    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host
    2. Request scheme + host
    3. Fallback base URL from config

    Returns:
        Base URL without trailing slash (e.g., https://example.com)
    """
    forwarded = extract_forwarded_headers(headers)

    if forwarded["forwarded_proto"] and forwarded["forwarded_host"]:
        return f"{forwarded['forwarded_proto']}://{forwarded['forwarded_host']}"

    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"

    return fallback_base_url.rstrip("/")


def get_referrer(headers: Mapping[str, str]) -> Optional[str]:
    """Referring page from the Referer header, or None when absent or blank."""
    referrer = _lower_keys(headers).get("referer", "").strip()
    return referrer or None
