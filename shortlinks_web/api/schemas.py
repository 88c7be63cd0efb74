"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""

    url: str = Field(..., description="The URL to shorten")
    validity: Optional[int] = Field(None, description="Minutes the short URL stays valid (default 30)")
    custom_code: Optional[str] = Field(None, description="Optional custom short code (4-10 letters or digits)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                    "validity": 30,
                    "custom_code": None
                },
                {
                    "url": "https://github.com/user/repo",
                    "validity": 120,
                    "custom_code": "myrepo"
                }
            ]
        }
    }

    def to_item(self) -> dict:
        return {
            "long_url": self.url,
            "validity_minutes": self.validity,
            # Blank form fields mean "generate one"
            "custom_code": self.custom_code.strip() if self.custom_code and self.custom_code.strip() else None,
        }


class BatchShortenRequest(BaseModel):
    """Request to shorten several URLs at once."""

    items: List[ShortenRequest] = Field(..., description="URLs to shorten")


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    short_code: str = Field(..., description="The generated or custom short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")
    created_at: datetime = Field(..., description="Creation timestamp")
    expires_at: datetime = Field(..., description="Expiry timestamp")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "short_code": "abc123",
                    "short_url": "https://short.link/abc123",
                    "original_url": "https://example.com/very/long/path",
                    "created_at": "2024-01-01T12:00:00Z",
                    "expires_at": "2024-01-01T12:30:00Z"
                }
            ]
        }
    }


class BatchShortenResponse(BaseModel):
    """Response after shortening several URLs."""

    results: List[ShortenResponse]


class ClickDetail(BaseModel):
    """One recorded redirect."""

    timestamp: datetime
    source: str
    location: str


class URLStatsResponse(BaseModel):
    """Click statistics for one short URL."""

    short_code: str
    short_url: str
    long_url: str
    created_at: datetime
    expires_at: datetime
    is_expired: bool
    clicks: int
    click_details: List[ClickDetail]


class URLListResponse(BaseModel):
    """All stored short URLs."""

    count: int
    urls: List[URLStatsResponse]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    storage: str = Field(..., description="Storage backend status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str = Field(..., description="Error message")


class StatisticsResponse(BaseModel):
    """Statistics response."""

    total_urls: int
    active_urls: int
    expired_urls: int
    total_clicks: int
    storage: str
