"""In-memory records held by the shortcode registry."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..utils.shortener import is_url_expired


@dataclass(frozen=True)
class ClientInfo:
    """Request metadata captured when a short link is followed."""

    ip: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class ClickEvent:
    """One successful resolution of a short link."""

    timestamp: datetime
    source: str
    location: str = "Unknown"
    ip: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class UrlRecord:
    """A shortcode and its redirect target.

    Only ``clicks`` changes after creation.
    """

    shortcode: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    clicks: list[ClickEvent] = field(default_factory=list)

    def is_expired(self, now: datetime) -> bool:
        return is_url_expired(self.expires_at, now)
