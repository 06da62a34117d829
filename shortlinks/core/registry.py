"""Shortcode registry for Shortlinks.

This module holds the in-memory mapping from shortcode to URL record
and the operations built on it: creating short URLs, resolving them
for redirection and reporting click statistics. Records live for the
lifetime of the process; expiry is checked when a code is resolved and
never removes the record.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from fastapi import Request

from .config import Settings
from .errors import (
    GenerationExhausted,
    InvalidShortcode,
    InvalidValidity,
    ShortcodeConflict,
    ShortcodeExpired,
    ShortcodeNotFound,
)
from .log_sink import LogSink
from ..models.records import ClickEvent, ClientInfo, UrlRecord
from ..utils.shortener import (
    classify_user_agent,
    create_short_url,
    generate_short_code,
    utc_now,
    validate_short_code,
)

logger = logging.getLogger(__name__)


class ShortcodeRegistry:
    """Thread-safe registry of short URLs.

    A single lock guards the map and every record in it, so a
    check-then-insert and a click append are each atomic and readers
    only ever see complete records.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        default_validity_minutes: int = 30,
        max_validity_minutes: int = 525600,
        short_code_length: int = 6,
        max_short_code_length: int = 20,
        max_generation_attempts: int = 10,
        sink: Optional[LogSink] = None,
        generator: Optional[Callable[[int], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the registry.

        Args:
            base_url: Base URL used to build short links.
            default_validity_minutes: Validity applied when none is given.
            max_validity_minutes: Upper bound for validity.
            short_code_length: Length of generated shortcodes.
            max_short_code_length: Upper bound for custom shortcodes.
            max_generation_attempts: Candidates tried before giving up.
            sink: Log sink notified of registry events.
            generator: Callable returning a candidate code of a given length.
            clock: Callable returning the current UTC time.
        """
        self.base_url = base_url
        self.default_validity_minutes = default_validity_minutes
        self.max_validity_minutes = max_validity_minutes
        self.short_code_length = short_code_length
        self.max_short_code_length = max_short_code_length
        self.max_generation_attempts = max_generation_attempts
        self.sink = sink or LogSink(enable_api=False)
        self.generator = generator or generate_short_code
        self.clock = clock or utc_now
        self._urls: dict[str, UrlRecord] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls, settings: Settings, sink: Optional[LogSink] = None
    ) -> "ShortcodeRegistry":
        """Build a registry from application settings.

        Args:
            settings: Application settings.
            sink: Log sink notified of registry events.

        Returns:
            ShortcodeRegistry instance.
        """
        return cls(
            base_url=settings.base_url,
            default_validity_minutes=settings.default_validity_minutes,
            max_validity_minutes=settings.max_validity_minutes,
            short_code_length=settings.short_code_length,
            max_short_code_length=settings.max_short_code_length,
            max_generation_attempts=settings.max_generation_attempts,
            sink=sink,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)

    def __contains__(self, shortcode: str) -> bool:
        with self._lock:
            return shortcode in self._urls

    def create_short_url(
        self,
        original_url: str,
        validity_minutes: Optional[int] = None,
        requested_shortcode: Optional[str] = None,
    ) -> dict:
        """Register a new short URL.

        Args:
            original_url: Absolute http(s) URL to redirect to.
            validity_minutes: Minutes until the link expires.
            requested_shortcode: Custom shortcode to use instead of a
                generated one.

        Returns:
            Dict with shortcode, short_link, created_at and expires_at.

        Raises:
            InvalidValidity: validity is not an integer in range.
            InvalidShortcode: the custom shortcode is malformed.
            ShortcodeConflict: the custom shortcode is taken.
            GenerationExhausted: no free code was generated in time.
        """
        self._notify("info", f"Creating short URL for: {original_url}")

        if validity_minutes is None:
            validity_minutes = self.default_validity_minutes
        if (
            isinstance(validity_minutes, bool)
            or not isinstance(validity_minutes, int)
            or not 1 <= validity_minutes <= self.max_validity_minutes
        ):
            raise InvalidValidity(
                f"Validity must be an integer between 1 and "
                f"{self.max_validity_minutes} minutes"
            )

        if requested_shortcode is not None and not validate_short_code(
            requested_shortcode, self.max_short_code_length
        ):
            raise InvalidShortcode(
                f"Shortcode must be 1-{self.max_short_code_length} "
                "alphanumeric characters"
            )

        # Sink calls stay outside the lock
        record = None
        with self._lock:
            if requested_shortcode is None:
                shortcode = self._generate_unique_shortcode()
            elif requested_shortcode in self._urls:
                shortcode = None
            else:
                shortcode = requested_shortcode

            if shortcode is not None:
                created_at = self.clock()
                record = UrlRecord(
                    shortcode=shortcode,
                    original_url=original_url,
                    created_at=created_at,
                    expires_at=created_at + timedelta(minutes=validity_minutes),
                )
                self._urls[shortcode] = record

        if record is None and requested_shortcode is not None:
            self._notify("warn", f"Shortcode collision detected: {requested_shortcode}")
            raise ShortcodeConflict()
        if record is None:
            self._notify(
                "error",
                f"Unable to generate unique shortcode after "
                f"{self.max_generation_attempts} attempts",
            )
            raise GenerationExhausted()

        self._notify("info", f"Short URL created successfully: {shortcode}")

        return {
            "shortcode": shortcode,
            "short_link": create_short_url(self.base_url, shortcode),
            "created_at": record.created_at,
            "expires_at": record.expires_at,
        }

    def get_original_url(
        self, shortcode: str, client_info: Optional[ClientInfo] = None
    ) -> str:
        """Resolve a shortcode and record the click.

        Args:
            shortcode: Exact, case-sensitive shortcode.
            client_info: Requester metadata for the click event.

        Returns:
            The original URL.

        Raises:
            ShortcodeNotFound: the shortcode is unknown.
            ShortcodeExpired: the link is past its expiry; no click is recorded.
        """
        client_info = client_info or ClientInfo()

        expired = False
        with self._lock:
            record = self._urls.get(shortcode)
            if record is not None:
                now = self.clock()
                expired = record.is_expired(now)
                if not expired:
                    record.clicks.append(
                        ClickEvent(
                            timestamp=now,
                            source=classify_user_agent(client_info.user_agent),
                            location="Unknown",
                            ip=client_info.ip,
                            user_agent=client_info.user_agent,
                        )
                    )

        if record is None:
            self._notify("warn", f"Shortcode not found: {shortcode}")
            raise ShortcodeNotFound()
        if expired:
            self._notify("warn", f"Accessing expired URL: {shortcode}")
            raise ShortcodeExpired()

        self._notify(
            "info", f"URL accessed successfully: {shortcode} -> {record.original_url}"
        )
        return record.original_url

    def get_url_stats(self, shortcode: str) -> dict:
        """Get click statistics for a shortcode, expired or not.

        Raises:
            ShortcodeNotFound: the shortcode was never created.
        """
        stats = None
        with self._lock:
            record = self._urls.get(shortcode)
            if record is not None:
                stats = {
                    "shortcode": record.shortcode,
                    "original_url": record.original_url,
                    "created_at": record.created_at,
                    "expires_at": record.expires_at,
                    "total_clicks": len(record.clicks),
                    "click_data": [
                        {
                            "timestamp": click.timestamp,
                            "source": click.source,
                            "location": click.location,
                        }
                        for click in record.clicks
                    ],
                }

        if stats is None:
            self._notify(
                "warn", f"Statistics requested for non-existent shortcode: {shortcode}"
            )
            raise ShortcodeNotFound()

        self._notify(
            "info",
            f"Statistics retrieved for shortcode: {shortcode}, "
            f"total clicks: {stats['total_clicks']}",
        )
        return stats

    def list_all(self) -> list[dict]:
        """Summarize every record in insertion order."""
        with self._lock:
            now = self.clock()
            summaries = [
                {
                    "shortcode": record.shortcode,
                    "original_url": record.original_url,
                    "created_at": record.created_at,
                    "expires_at": record.expires_at,
                    "total_clicks": len(record.clicks),
                    "is_expired": record.is_expired(now),
                }
                for record in self._urls.values()
            ]
        self._notify("info", f"Retrieved {len(summaries)} URLs")
        return summaries

    def _notify(self, level: str, message: str) -> None:
        try:
            self.sink.notify(level, "service", message)
        except Exception:
            logger.warning(f"Log sink failed: {message}", exc_info=True)

    def _generate_unique_shortcode(self) -> Optional[str]:
        # Caller holds the lock; None when every candidate collided
        for _ in range(self.max_generation_attempts):
            candidate = self.generator(self.short_code_length)
            if candidate not in self._urls:
                return candidate
        return None


def get_registry(request: Request) -> ShortcodeRegistry:
    """Get the app's registry for dependency injection.

    Args:
        request: FastAPI request object.

    Returns:
        ShortcodeRegistry instance.
    """
    return request.app.state.registry
