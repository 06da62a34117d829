"""Core package - configuration, logging and the shortcode registry."""

from .config import settings, get_settings

__all__ = [
    "settings",
    "get_settings",
]
