"""Fixed-window, per-client rate limiting for the AI capability endpoints.

State lives in a RateLimiter instance owned by the app (no module globals),
so tests get a fresh limiter and a controllable clock. A single lock guards
every read-modify-write of the record map.
"""

import asyncio
import math
import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_MAX_REQUESTS = 20
DEFAULT_WINDOW_SECONDS = 60 * 60


@dataclass
class RateLimitRecord:
    """Request count for one client inside its current window."""
    client_key: str
    count: int
    window_start: float


@dataclass
class RateLimitDecision:
    """Outcome of a rate-limit check."""
    allowed: bool
    message: str = ""
    retry_after_ms: int | None = None


class RateLimiter:
    """Fixed-window limiter: at most `max_requests` per `window_seconds` per key."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls) -> "RateLimiter":
        """Build a limiter from RATE_LIMIT_MAX_REQUESTS / RATE_LIMIT_WINDOW_SECONDS."""
        return cls(
            max_requests=int(os.environ.get("RATE_LIMIT_MAX_REQUESTS", str(DEFAULT_MAX_REQUESTS))),
            window_seconds=float(os.environ.get("RATE_LIMIT_WINDOW_SECONDS", str(DEFAULT_WINDOW_SECONDS))),
        )

    def check(self, client_key: str | None) -> RateLimitDecision:
        """Count one request for `client_key` and decide whether it may proceed.

        Args:
            client_key: Client identifier (IP address). None disables limiting
                for this call.

        Returns:
            RateLimitDecision; when denied, `message` holds a human-readable
            retry hint and `retry_after_ms` the remaining window time.
        """
        if not client_key:
            logger.warning("rate_limit.no_client_key", action="allowed")
            return RateLimitDecision(allowed=True)

        with self._lock:
            now = self._clock()
            record = self._records.get(client_key)

            if record is None or now - record.window_start >= self.window_seconds:
                self._records[client_key] = RateLimitRecord(client_key, 1, now)
                return RateLimitDecision(allowed=True)

            if record.count >= self.max_requests:
                remaining_s = self.window_seconds - (now - record.window_start)
                minutes = max(1, math.ceil(remaining_s / 60))
                logger.info("rate_limit.exceeded", client_key=client_key,
                            count=record.count, retry_after_s=round(remaining_s))
                return RateLimitDecision(
                    allowed=False,
                    message=(
                        "You have exceeded the request limit. "
                        f"Please try again in about {minutes} minute{'s' if minutes != 1 else ''}."
                    ),
                    retry_after_ms=int(remaining_s * 1000),
                )

            record.count += 1
            return RateLimitDecision(allowed=True)

    def sweep(self) -> int:
        """Delete records whose window has elapsed.

        Returns:
            Number of records removed.
        """
        with self._lock:
            now = self._clock()
            expired = [
                key for key, record in self._records.items()
                if now - record.window_start >= self.window_seconds
            ]
            for key in expired:
                del self._records[key]
            remaining = len(self._records)

        if expired:
            logger.debug("rate_limit.swept", removed=len(expired), remaining=remaining)
        return len(expired)

    def get_record(self, client_key: str) -> RateLimitRecord | None:
        with self._lock:
            record = self._records.get(client_key)
            if record is None:
                return None
            return RateLimitRecord(record.client_key, record.count, record.window_start)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


async def run_sweeper(limiter: RateLimiter, interval: float | None = None) -> None:
    """Sweep expired records forever; cancel the task to stop it.

    Args:
        limiter: The limiter to sweep.
        interval: Seconds between sweeps. Defaults to half the window.
    """
    interval = interval or limiter.window_seconds / 2
    logger.info("rate_limit.sweeper_started", interval_s=interval)
    while True:
        await asyncio.sleep(interval)
        limiter.sweep()
