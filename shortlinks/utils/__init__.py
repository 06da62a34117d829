"""Utils package for Shortlinks."""

from .shortener import (
    generate_short_code,
    validate_short_code,
    classify_user_agent,
    create_short_url,
    format_timestamp,
    is_url_expired,
)

__all__ = [
    "generate_short_code",
    "validate_short_code",
    "classify_user_agent",
    "create_short_url",
    "format_timestamp",
    "is_url_expired",
]
