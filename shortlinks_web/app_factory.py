"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .web import web_router
from .middleware.logging import LoggingMiddleware
from shortlinks.common.url_builder import normalize_path_prefix


def create_app(service, config, lifespan=None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service: LinkService instance (may be None until the lifespan sets it)
        config: Configuration instance
        lifespan: Optional lifespan context manager that builds the service

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Short Links",
        description="Short links with expiry and click analytics",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    # Store instances in app state for access in routes
    app.state.service = service
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    # API first: the redirect route matches any single path segment under its prefix
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(
        web_router,
        prefix=normalize_path_prefix(config.path_prefix),
        tags=["Redirect"],
    )

    return app
