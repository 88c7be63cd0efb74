"""Core business logic for short links."""

from .shortcode import ShortCodeGenerator
from .store import MappingStore
from .resolver import OutcomeStatus, RedirectOutcome, RedirectResolver
from .service import LinkService

__all__ = [
    "ShortCodeGenerator",
    "MappingStore",
    "OutcomeStatus",
    "RedirectOutcome",
    "RedirectResolver",
    "LinkService",
]
