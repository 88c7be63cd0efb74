"""API routes implementation."""

from fastapi import APIRouter, Request, HTTPException, status
from datetime import datetime, timezone

from .schemas import (
    ShortenRequest,
    ShortenResponse,
    BatchShortenRequest,
    BatchShortenResponse,
    URLStatsResponse,
    URLListResponse,
    HealthResponse,
    ErrorResponse,
    StatisticsResponse,
)
from ..errors import http_error
from shortlinks.common.url_builder import build_short_url
from shortlinks.common.headers import build_base_url
from shortlinks.exceptions import ShortLinkError

router = APIRouter()


def _short_url_for(request: Request, short_code: str) -> str:
    config = request.app.state.config
    base_url = build_base_url(
        headers=dict(request.headers),
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )
    return build_short_url(
        short_code=short_code,
        base_url=base_url,
        path_prefix=config.path_prefix,
    )


def _shorten_response(request: Request, record) -> ShortenResponse:
    return ShortenResponse(
        short_code=record.shortcode,
        short_url=_short_url_for(request, record.shortcode),
        original_url=record.long_url,
        created_at=record.created_at,
        expires_at=record.expires_at,
    )


def _stats_response(request: Request, stats: dict) -> URLStatsResponse:
    return URLStatsResponse(
        short_url=_short_url_for(request, stats["short_code"]),
        **stats,
    )


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Short code already exists"},
        503: {"model": ErrorResponse, "description": "No short code available or storage failure"},
    },
    summary="Create short URL",
    description="Create a shortened URL with a validity window. Optionally provide a custom short code.",
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create a shortened URL."""
    service = request.app.state.service
    item = body.to_item()

    try:
        record = await service.create_short_url(
            item["long_url"],
            validity_minutes=item["validity_minutes"],
            custom_code=item["custom_code"],
        )
    except ShortLinkError as e:
        raise http_error(e)

    return _shorten_response(request, record)


@router.post(
    "/shorten/batch",
    response_model=BatchShortenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Short code already exists"},
    },
    summary="Create several short URLs",
    description="Shorten up to the configured batch size of URLs. Nothing is created if any item is invalid.",
)
async def shorten_urls(request: Request, body: BatchShortenRequest):
    """Create several shortened URLs."""
    service = request.app.state.service

    try:
        records = await service.create_short_urls([item.to_item() for item in body.items])
    except ShortLinkError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return BatchShortenResponse(results=[_shorten_response(request, record) for record in records])


@router.get(
    "/urls",
    response_model=URLListResponse,
    summary="List short URLs",
    description="List every stored short URL with its click statistics, newest first.",
)
async def list_urls(request: Request):
    """List all short URLs."""
    service = request.app.state.service

    urls = [_stats_response(request, stats) for stats in await service.list_urls()]
    return URLListResponse(count=len(urls), urls=urls)


@router.get(
    "/urls/{short_code}",
    response_model=URLStatsResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Get URL statistics",
    description="Get clicks, click details, creation and expiry time of a short URL.",
)
async def get_url_stats(request: Request, short_code: str):
    """Get statistics for a short URL."""
    service = request.app.state.service

    try:
        stats = await service.get_stats(short_code)
    except ShortLinkError as e:
        raise http_error(e)

    return _stats_response(request, stats)


@router.get(
    "/stats",
    response_model=StatisticsResponse,
    summary="Get statistics",
    description="Get service-wide statistics.",
)
async def get_statistics(request: Request):
    """Get service statistics."""
    service = request.app.state.service

    stats = await service.get_statistics()

    return StatisticsResponse(**stats)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        storage="healthy" if health["storage"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
