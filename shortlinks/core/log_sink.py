"""Log sink for application events.

Entries are written to the standard ``logging`` tree and, when enabled,
shipped to a remote log collector over HTTP. Remote delivery runs on a
background worker with bounded retries, so ``notify`` never blocks on the
network and never raises. At most ``max_pending`` entries wait for
delivery; anything beyond that is dropped.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import httpx

from .config import Settings
from ..utils.shortener import format_timestamp, utc_now

logger = logging.getLogger("shortlinks.sink")

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


class LogSink:
    """Write-only sink taking (level, category, message) entries."""

    def __init__(
        self,
        stack: str = "backend",
        api_url: Optional[str] = None,
        enable_console: bool = True,
        enable_api: bool = False,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 5.0,
        max_pending: int = 1000,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize the sink.

        Args:
            stack: Stack name attached to every entry.
            api_url: Remote collector endpoint.
            enable_console: Write entries to the stdlib logger.
            enable_api: Ship entries to ``api_url``.
            retry_attempts: Delivery attempts per entry.
            retry_delay: Seconds to wait between attempts.
            timeout: HTTP timeout in seconds.
            max_pending: Entries allowed to wait for delivery.
            client: Optional preconfigured httpx client.
        """
        self.stack = stack
        self.api_url = api_url
        self.enable_console = enable_console
        self.enable_api = bool(enable_api and api_url)
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay
        self.max_pending = max(1, max_pending)
        self._owns_client = client is None
        self._client = client
        self._timeout = timeout
        self._pending = 0
        self._pending_lock = threading.Lock()
        self._closing = threading.Event()
        self._executor: Optional[ThreadPoolExecutor] = None
        if self.enable_api:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="log-sink"
            )
            if self._client is None:
                self._client = httpx.Client(
                    timeout=timeout,
                    headers={"Content-Type": "application/json"},
                )

    @classmethod
    def from_settings(cls, settings: Settings) -> "LogSink":
        """Build a sink from the ``log_*`` application settings."""
        return cls(
            stack=settings.log_stack,
            api_url=settings.log_api_url,
            enable_api=settings.log_api_enabled,
            retry_attempts=settings.log_retry_attempts,
            retry_delay=settings.log_retry_delay,
            timeout=settings.log_timeout,
            max_pending=settings.log_max_pending,
        )

    @property
    def pending(self) -> int:
        """Entries queued or in flight."""
        with self._pending_lock:
            return self._pending

    def notify(self, level: str, category: str, message: str) -> None:
        """Record one entry. Never raises."""
        level = level if level in LEVELS else "info"
        entry = {
            "stack": self.stack,
            "level": level,
            "package": category,
            "message": message,
            "timestamp": format_timestamp(utc_now()),
        }
        try:
            if self.enable_console:
                logger.log(
                    LEVELS[level], "[%s] [%s] %s", self.stack.upper(), category, message
                )
            if self._executor is not None:
                self._submit(entry)
        except Exception:
            # Executor already shut down, or a broken handler
            logger.debug("Dropped log entry: %s", message, exc_info=True)

    def debug(self, category: str, message: str) -> None:
        self.notify("debug", category, message)

    def info(self, category: str, message: str) -> None:
        self.notify("info", category, message)

    def warn(self, category: str, message: str) -> None:
        self.notify("warn", category, message)

    def error(self, category: str, message: str) -> None:
        self.notify("error", category, message)

    def fatal(self, category: str, message: str) -> None:
        self.notify("fatal", category, message)

    def _submit(self, entry: dict) -> None:
        with self._pending_lock:
            if self._pending >= self.max_pending:
                logger.debug(
                    "Log backlog full (%d), dropped entry: %s",
                    self._pending,
                    entry["message"],
                )
                return
            self._pending += 1
        try:
            future = self._executor.submit(self._deliver, entry)
        except Exception:
            self._release()
            raise
        future.add_done_callback(self._on_done)

    def _release(self) -> None:
        with self._pending_lock:
            self._pending -= 1

    def _on_done(self, future: Future) -> None:
        self._release()
        if not future.cancelled() and future.exception() is not None:
            logger.warning(
                "Log delivery failed unexpectedly", exc_info=future.exception()
            )

    def _deliver(self, entry: dict) -> bool:
        """Post one entry to the collector.

        Returns:
            True if the collector accepted the entry.
        """
        for attempt in range(1, self.retry_attempts + 1):
            if self._closing.is_set():
                return False
            try:
                response = self._client.post(self.api_url, json=entry)
                response.raise_for_status()
                return True
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                if attempt >= self.retry_attempts:
                    logger.warning(
                        f"Failed to send log to API after {attempt} attempts: {e}"
                    )
                    return False
                # Returns early once close() is called
                self._closing.wait(self.retry_delay)
        return False

    def close(self, drain: bool = False) -> None:
        """Stop delivery and release the HTTP client.

        Args:
            drain: Deliver every queued entry first. By default queued
                entries are cancelled and only the one in flight is
                allowed to finish its current attempt.
        """
        if self._executor is not None:
            if drain:
                self._executor.shutdown(wait=True)
            else:
                self._closing.set()
                self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
