"""Public paths and URLs of short links."""

RESERVED_PREFIXES = ("api",)


def normalize_path_prefix(path_prefix: str) -> str:
    """Mount form of a path prefix: ``""`` or ``"/s"`` (no trailing slash).

    Raises:
        ValueError: If the prefix would shadow the JSON API
    """
    prefix = (path_prefix or "").strip().strip("/")
    if prefix.split("/")[0] in RESERVED_PREFIXES:
        raise ValueError(f"path prefix '/{prefix}' is reserved")
    return f"/{prefix}" if prefix else ""


def build_short_url(short_code: str, base_url: str, path_prefix: str = "") -> str:
    """Absolute URL served by the redirect route mounted at ``path_prefix``.

    Args:
        short_code: The short code
        base_url: Public base URL (e.g., https://example.com)
        path_prefix: Redirect route prefix (e.g., /s)

    Returns:
        Complete short URL, e.g. https://example.com/s/abc123
    """
    return f"{base_url.rstrip('/')}{normalize_path_prefix(path_prefix)}/{short_code}"
