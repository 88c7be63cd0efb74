"""JSON API for creating short links and reading their statistics."""

from .routes import router as api_router

__all__ = ["api_router"]
