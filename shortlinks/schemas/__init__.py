"""Schemas package for Shortlinks."""

from .url import (
    ShortUrlCreateResponse,
    ClickEventResponse,
    UrlStatsResponse,
    UrlSummaryResponse,
    HealthResponse,
)

__all__ = [
    "ShortUrlCreateResponse",
    "ClickEventResponse",
    "UrlStatsResponse",
    "UrlSummaryResponse",
    "HealthResponse",
]
