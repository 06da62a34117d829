"""Models package for Shortlinks."""

from .records import ClickEvent, ClientInfo, UrlRecord
from .url import ShortUrlCreate, ErrorResponse

__all__ = ["ClickEvent", "ClientInfo", "UrlRecord", "ShortUrlCreate", "ErrorResponse"]
