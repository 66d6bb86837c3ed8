"""Fixed-window, per-user rate limiting for expensive operations.

State is process-local and lost on restart. With several API processes each
one enforces its own window, so the effective limit is multiplied by the
process count.
"""

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from persona_studio.config import settings
from persona_studio.domain.enums import OperationClass
from persona_studio.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitEntry:
    """Counter for one (operation class, user) window."""

    count: int
    reset_at: float  # epoch seconds


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of admitting one request."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: int  # epoch seconds, rounded up
    retry_after: int | None = None

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }


def default_limits() -> dict[OperationClass, int]:
    return {
        OperationClass.GENERATE: settings.rate_limit_generate_max,
        OperationClass.VOICE_CLONE: settings.rate_limit_voice_clone_max,
        OperationClass.VIDEO: settings.rate_limit_video_max,
        OperationClass.TTS: settings.rate_limit_tts_max,
    }


class RateLimiter:
    """Counts requests per user and operation class in fixed windows."""

    def __init__(
        self,
        limits: dict[OperationClass, int] | None = None,
        window_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.limits = limits or default_limits()
        self.window_seconds = window_seconds or settings.rate_limit_window_seconds
        self.clock = clock
        self._entries: dict[tuple[OperationClass, str], RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._cleanup_stop = threading.Event()
        self._cleanup_thread: threading.Thread | None = None

    def admit(self, operation: OperationClass, user_id: str | None) -> RateLimitDecision:
        """Count one request and decide whether it may proceed.

        Requests without a user identity are always admitted. A denied
        request still counts against the window.
        """
        limit = self.limits[operation]
        now = self.clock()

        if user_id is None:
            return RateLimitDecision(
                allowed=True,
                limit=limit,
                remaining=limit,
                reset_at=math.ceil(now + self.window_seconds),
            )

        key = (operation, user_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now > entry.reset_at:
                entry = RateLimitEntry(count=0, reset_at=now + self.window_seconds)
                self._entries[key] = entry
            entry.count += 1
            count, reset_at = entry.count, entry.reset_at

        allowed = count <= limit
        decision = RateLimitDecision(
            allowed=allowed,
            limit=limit,
            remaining=max(0, limit - count),
            reset_at=math.ceil(reset_at),
            retry_after=None if allowed else max(1, math.ceil(reset_at - now)),
        )
        if not allowed:
            logger.info(
                "rate_limit_denied",
                operation=operation,
                user_id=user_id,
                retry_after=decision.retry_after,
            )
        return decision

    def usage(self, operation: OperationClass, user_id: str) -> int:
        """Requests counted in the current window of ``(operation, user_id)``."""
        now = self.clock()
        with self._lock:
            entry = self._entries.get((operation, user_id))
            if entry is None or now > entry.reset_at:
                return 0
            return entry.count

    def sweep(self) -> int:
        """Drop windows that have elapsed. Returns the number removed."""
        now = self.clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now > entry.reset_at]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("rate_limit_sweep", removed=len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _cleanup_loop(self, interval: float) -> None:
        while not self._cleanup_stop.wait(interval):
            try:
                self.sweep()
            except Exception as e:
                logger.error("rate_limit_sweep_failed", error=str(e))

    def start_cleanup(self, interval: float | None = None) -> None:
        """Sweep expired windows periodically on a daemon thread."""
        if self._cleanup_thread is not None and self._cleanup_thread.is_alive():
            return
        self._cleanup_stop.clear()
        self._cleanup_thread = threading.Thread(
            target=self._cleanup_loop,
            args=(interval or settings.rate_limit_cleanup_seconds,),
            name="rate-limit-cleanup",
            daemon=True,
        )
        self._cleanup_thread.start()

    def stop_cleanup(self) -> None:
        self._cleanup_stop.set()
        if self._cleanup_thread is not None:
            self._cleanup_thread.join(timeout=5)
            self._cleanup_thread = None
