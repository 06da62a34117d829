"""Response schemas for Shortlinks."""

from pydantic import BaseModel


class ShortUrlCreateResponse(BaseModel):
    """Response model for created short URL."""

    shortLink: str
    expiry: str


class ClickEventResponse(BaseModel):
    """One recorded click."""

    timestamp: str
    source: str
    location: str


class UrlStatsResponse(BaseModel):
    """Response model for URL statistics."""

    shortcode: str
    originalUrl: str
    createdAt: str
    expiresAt: str
    totalClicks: int
    clickData: list[ClickEventResponse]


class UrlSummaryResponse(BaseModel):
    """Response model for one entry of the URL listing."""

    shortcode: str
    originalUrl: str
    createdAt: str
    expiresAt: str
    totalClicks: int
    isExpired: bool


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    timestamp: str
    uptime: float
