"""URL shortening utilities module.

This module handles the generation and validation of short codes,
user-agent classification for click events and timestamp formatting.
"""

import random
import re
import string
from datetime import datetime, timezone
from typing import Optional

from ..core.config import settings


# Characters allowed in short codes
ALPHABET = string.ascii_letters + string.digits

SHORT_CODE_PATTERN = re.compile(r"[A-Za-z0-9]+")

# Checked in order, first match wins
KNOWN_SOURCES = ("chrome", "firefox", "safari", "edge", "opera", "postman", "curl")

_random = random.SystemRandom()


def generate_short_code(length: Optional[int] = None) -> str:
    """Generate a random short code.

    Args:
        length: Length of the generated code. Defaults to settings value.

    Returns:
        Random short code string.
    """
    length = length or settings.short_code_length
    return "".join(_random.choices(ALPHABET, k=length))


def validate_short_code(code: Optional[str], max_length: Optional[int] = None) -> bool:
    """Validate short code format.

    Args:
        code: Short code to validate.
        max_length: Maximum allowed length. Defaults to settings value.

    Returns:
        True if valid, False otherwise.
    """
    if not code or not isinstance(code, str):
        return False
    max_length = max_length or settings.max_short_code_length
    if len(code) > max_length:
        return False
    return bool(SHORT_CODE_PATTERN.fullmatch(code))


def classify_user_agent(user_agent: Optional[str]) -> str:
    """Derive a coarse click source from a user-agent string.

    Args:
        user_agent: Raw User-Agent header value.

    Returns:
        A known browser or tool name, "other" when nothing matches,
        or "unknown" when no user agent was sent.
    """
    if not user_agent:
        return "unknown"
    ua = user_agent.lower()
    for source in KNOWN_SOURCES:
        if source in ua:
            return source
    return "other"


def create_short_url(base_url: str, short_code: str) -> str:
    """Create full short URL from base URL and short code.

    Args:
        base_url: Base URL of the service.
        short_code: Short code.

    Returns:
        Full short URL string.
    """
    return f"{base_url.rstrip('/')}/shorturls/{short_code}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def is_url_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    """Check if URL has expired.

    The expiry instant itself is still valid.

    Args:
        expires_at: Expiration timestamp.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        True if expired, False otherwise.
    """
    now = now or utc_now()
    return now > expires_at
