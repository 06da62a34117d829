"""URL shortening API routes.

This module contains all endpoints for URL operations:
- Create short URL (POST /shorturls)
- Redirect to original URL (GET /shorturls/{shortcode})
- Get URL statistics (GET /shorturls/{shortcode}/stats)
- List all URLs (GET /api/urls)
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from ...core.errors import InvalidShortcode
from ...core.registry import ShortcodeRegistry, get_registry
from ...models.records import ClientInfo
from ...models.url import ShortUrlCreate, ErrorResponse
from ...schemas.url import (
    ShortUrlCreateResponse,
    UrlStatsResponse,
    UrlSummaryResponse,
)
from ...utils.shortener import SHORT_CODE_PATTERN, format_timestamp

router = APIRouter(prefix="", tags=["URLs"])


def check_shortcode_param(shortcode: str) -> str:
    """Reject path shortcodes that are not alphanumeric.

    Args:
        shortcode: Shortcode taken from the request path.

    Returns:
        The unchanged shortcode.
    """
    if not SHORT_CODE_PATTERN.fullmatch(shortcode):
        raise InvalidShortcode()
    return shortcode


def get_client_info(request: Request) -> ClientInfo:
    """Collect requester metadata for click tracking.

    Args:
        request: FastAPI request object.

    Returns:
        Client IP and user agent.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip() or getattr(request.client, "host", None)
    return ClientInfo(ip=ip, user_agent=request.headers.get("user-agent"))


@router.post(
    "/shorturls",
    response_model=ShortUrlCreateResponse,
    status_code=201,
    responses={
        201: {"description": "Short URL created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Shortcode unavailable"},
    },
    summary="Create a short URL",
    description="Create a new short URL from a long URL. Optionally specify a custom shortcode and validity in minutes.",
)
async def create_short_url_endpoint(
    url_data: ShortUrlCreate,
    registry: ShortcodeRegistry = Depends(get_registry),
) -> dict:
    """Create a short URL from a long URL.

    Args:
        url_data: URL creation data.
        registry: Shortcode registry.

    Returns:
        Short link and its expiry.
    """
    created = registry.create_short_url(
        url_data.url,
        validity_minutes=url_data.validity,
        requested_shortcode=url_data.shortcode,
    )
    return {
        "shortLink": created["short_link"],
        "expiry": format_timestamp(created["expires_at"]),
    }


@router.get(
    "/shorturls/{shortcode}",
    response_class=RedirectResponse,
    status_code=302,
    responses={
        302: {"description": "Redirect to original URL"},
        400: {"model": ErrorResponse, "description": "Invalid shortcode format"},
        404: {"model": ErrorResponse, "description": "Short URL not found"},
        410: {"model": ErrorResponse, "description": "Short URL has expired"},
    },
    summary="Redirect to original URL",
    description="Redirect to the original URL associated with the shortcode and record the click.",
)
async def redirect_to_url(
    request: Request,
    shortcode: str = Depends(check_shortcode_param),
    registry: ShortcodeRegistry = Depends(get_registry),
) -> RedirectResponse:
    """Redirect to the original URL.

    Args:
        request: FastAPI request object.
        shortcode: The shortcode.
        registry: Shortcode registry.

    Returns:
        Redirect response to original URL.
    """
    original_url = registry.get_original_url(shortcode, get_client_info(request))
    return RedirectResponse(url=original_url, status_code=302)


@router.get(
    "/shorturls/{shortcode}/stats",
    response_model=UrlStatsResponse,
    responses={
        200: {"description": "URL statistics retrieved"},
        400: {"model": ErrorResponse, "description": "Invalid shortcode format"},
        404: {"model": ErrorResponse, "description": "Short URL not found"},
    },
    summary="Get URL statistics",
    description="Get click statistics for a short URL. Expired URLs are included.",
)
async def get_url_stats(
    shortcode: str = Depends(check_shortcode_param),
    registry: ShortcodeRegistry = Depends(get_registry),
) -> dict:
    stats = registry.get_url_stats(shortcode)
    return {
        "shortcode": stats["shortcode"],
        "originalUrl": stats["original_url"],
        "createdAt": format_timestamp(stats["created_at"]),
        "expiresAt": format_timestamp(stats["expires_at"]),
        "totalClicks": stats["total_clicks"],
        "clickData": [
            {
                "timestamp": format_timestamp(click["timestamp"]),
                "source": click["source"],
                "location": click["location"],
            }
            for click in stats["click_data"]
        ],
    }


@router.get(
    "/api/urls",
    response_model=list[UrlSummaryResponse],
    summary="List all URLs",
    description="List every short URL, including expired ones.",
)
async def list_urls(
    registry: ShortcodeRegistry = Depends(get_registry),
) -> list[dict]:
    """List all URLs.

    Args:
        registry: Shortcode registry.

    Returns:
        List of URL summaries in creation order.
    """
    return [
        {
            "shortcode": url["shortcode"],
            "originalUrl": url["original_url"],
            "createdAt": format_timestamp(url["created_at"]),
            "expiresAt": format_timestamp(url["expires_at"]),
            "totalClicks": url["total_clicks"],
            "isExpired": url["is_expired"],
        }
        for url in registry.list_all()
    ]
