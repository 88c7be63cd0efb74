#!/usr/bin/env python3
"""
Command-line interface for the short link service.

Usage:
    shortlinks shorten <url> [--validity MINUTES] [--custom-code CODE]
    shortlinks resolve <short_code> [--referrer URL]
    shortlinks stats <short_code>
    shortlinks list
    shortlinks health
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import Optional

from .common.logging_config import setup_logging
from .exceptions import ShortLinkError
from .factory import build_service


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _print(payload: dict, stream=None) -> None:
    print(json.dumps(payload, indent=2, default=_json_default), file=stream or sys.stdout)


class ShortLinksCLI:
    """Command-line interface for short links."""

    def __init__(self, config, verbose: bool = False):
        """Initialize CLI."""
        self.config = config
        self.logger = setup_logging(
            level="DEBUG" if verbose else config.log_level,
            stream=sys.stderr,  # stdout carries the JSON result
        )
        self.service = None

    async def initialize(self):
        """Build the service and load the table."""
        self.service = build_service(self.config, logger=self.logger)
        await self.service.store.open()

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    async def shorten(self, url: str, validity: Optional[int] = None, custom_code: Optional[str] = None) -> int:
        """Shorten a URL."""
        try:
            record = await self.service.create_short_url(url, validity, custom_code)
        except ShortLinkError as e:
            _print({"success": False, "error": str(e)}, sys.stderr)
            return 1

        _print({
            "success": True,
            "short_code": record.shortcode,
            "original_url": record.long_url,
            "created_at": record.created_at,
            "expires_at": record.expires_at,
            "message": f"Successfully shortened URL to: {record.shortcode}",
        })
        return 0

    async def resolve(self, short_code: str, referrer: Optional[str] = None) -> int:
        """Resolve a short code, counting a click like a redirect would."""
        outcome = await self.service.resolve_shortcode(short_code, referrer=referrer)

        try:
            outcome.raise_for_status()
        except ShortLinkError as e:
            _print({"success": False, "status": outcome.status.value, "error": str(e)}, sys.stderr)
            return 1

        _print({
            "success": True,
            "short_code": short_code,
            "original_url": outcome.long_url,
            "clicks": outcome.record.clicks,
        })
        return 0

    async def stats(self, short_code: str) -> int:
        """Get statistics for a short code."""
        try:
            stats = await self.service.get_stats(short_code)
        except ShortLinkError as e:
            _print({"success": False, "error": str(e)}, sys.stderr)
            return 1

        _print({"success": True, **stats})
        return 0

    async def list_urls(self) -> int:
        """List every stored URL."""
        urls = await self.service.list_urls()
        _print({"success": True, "count": len(urls), "urls": urls})
        return 0

    async def health(self) -> int:
        """Check service health."""
        health_status = await self.service.health_check()
        stats = await self.service.get_statistics()

        _print({"success": True, "health": health_status, "statistics": stats})
        return 0 if health_status["overall"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shortlinks",
        description="Short link CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL for 30 minutes (default)
  %(prog)s shorten https://example.com/long/url

  # Shorten with custom code, valid for two hours
  %(prog)s shorten https://example.com/long/url --custom-code mylink --validity 120

  # Follow a short code (counts a click)
  %(prog)s resolve mylink

  # Get click statistics
  %(prog)s stats mylink
        """
    )

    parser.add_argument(
        "--storage-backend",
        choices=["memory", "file", "redis"],
        help="Storage backend (default: from STORAGE_BACKEND env or file)"
    )
    parser.add_argument(
        "--storage-path",
        help="Directory for the file backend (default: from STORAGE_PATH env or ./data)"
    )
    parser.add_argument(
        "--redis-url",
        help="Redis connection URL (default: from REDIS_URL env)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")
    shorten_parser.add_argument("--validity", type=int, help="Minutes the short URL stays valid")
    shorten_parser.add_argument("--custom-code", help="Custom short code")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a short code")
    resolve_parser.add_argument("short_code", help="Short code to resolve")
    resolve_parser.add_argument("--referrer", help="Referrer recorded as the click source")

    stats_parser = subparsers.add_parser("stats", help="Get URL statistics")
    stats_parser.add_argument("short_code", help="Short code to get stats for")

    subparsers.add_parser("list", help="List stored URLs")
    subparsers.add_parser("health", help="Check service health")

    return parser


async def run(args, config) -> int:
    """Execute a parsed command against a freshly built service."""
    cli = ShortLinksCLI(config, verbose=args.verbose)

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url, args.validity, args.custom_code)
        elif args.command == "resolve":
            return await cli.resolve(args.short_code, args.referrer)
        elif args.command == "stats":
            return await cli.stats(args.short_code)
        elif args.command == "list":
            return await cli.list_urls()
        elif args.command == "health":
            return await cli.health()
        return 1
    finally:
        await cli.cleanup()


def main(argv=None) -> int:
    """Main entry point."""
    from config import Config

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    overrides = {
        name: value
        for name, value in (
            ("storage_backend", args.storage_backend),
            ("storage_path", args.storage_path),
            ("redis_url", args.redis_url),
        )
        if value is not None
    }
    return asyncio.run(run(args, Config(**overrides)))


if __name__ == "__main__":
    sys.exit(main())
