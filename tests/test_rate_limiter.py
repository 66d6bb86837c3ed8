"""Tests for the fixed-window rate limiter."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from persona_studio.domain.enums import OperationClass
from persona_studio.services.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> RateLimiter:
    limits = {op: 2 for op in OperationClass}
    return RateLimiter(limits=limits, window_seconds=100, clock=clock)


class TestAdmit:
    """Tests for RateLimiter.admit."""

    def test_allows_up_to_limit_then_denies(self, limiter: RateLimiter) -> None:
        first = limiter.admit(OperationClass.GENERATE, "u1")
        second = limiter.admit(OperationClass.GENERATE, "u1")
        third = limiter.admit(OperationClass.GENERATE, "u1")

        assert first.allowed and first.remaining == 1
        assert second.allowed and second.remaining == 0
        assert not third.allowed
        assert third.remaining == 0

    def test_denial_reports_retry_after(self, limiter: RateLimiter, clock: FakeClock) -> None:
        limiter.admit(OperationClass.TTS, "u1")
        limiter.admit(OperationClass.TTS, "u1")
        clock.now += 39.5

        denied = limiter.admit(OperationClass.TTS, "u1")

        assert not denied.allowed
        # Window opened at 1000 and resets at 1100; 60.5s left rounds up
        assert denied.retry_after == 61
        assert denied.reset_at == 1100

    def test_concurrent_requests_are_all_counted(self, clock: FakeClock) -> None:
        limits = {op: 5 for op in OperationClass}
        limiter = RateLimiter(limits=limits, window_seconds=100, clock=clock)
        workers = 32
        barrier = threading.Barrier(workers)

        def hit(_: int) -> bool:
            barrier.wait()
            return limiter.admit(OperationClass.GENERATE, "u1").allowed

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(hit, range(workers)))

        assert limiter.usage(OperationClass.GENERATE, "u1") == workers
        assert results.count(True) == 5

    def test_usage_is_zero_for_unknown_or_expired_windows(
        self, limiter: RateLimiter, clock: FakeClock
    ) -> None:
        assert limiter.usage(OperationClass.TTS, "u1") == 0

        limiter.admit(OperationClass.TTS, "u1")
        assert limiter.usage(OperationClass.TTS, "u1") == 1

        clock.now += 100.001
        assert limiter.usage(OperationClass.TTS, "u1") == 0

    def test_window_resets_after_expiry(self, limiter: RateLimiter, clock: FakeClock) -> None:
        for _ in range(3):
            limiter.admit(OperationClass.VIDEO, "u1")

        clock.now += 100
        assert not limiter.admit(OperationClass.VIDEO, "u1").allowed

        clock.now += 0.001
        decision = limiter.admit(OperationClass.VIDEO, "u1")
        assert decision.allowed
        assert decision.remaining == 1

    def test_unauthenticated_requests_always_pass(self, limiter: RateLimiter) -> None:
        for _ in range(10):
            decision = limiter.admit(OperationClass.VOICE_CLONE, None)
            assert decision.allowed
        assert len(limiter) == 0

    def test_users_and_operations_are_independent(self, limiter: RateLimiter) -> None:
        limiter.admit(OperationClass.GENERATE, "u1")
        limiter.admit(OperationClass.GENERATE, "u1")

        assert not limiter.admit(OperationClass.GENERATE, "u1").allowed
        assert limiter.admit(OperationClass.GENERATE, "u2").allowed
        assert limiter.admit(OperationClass.TTS, "u1").allowed

    def test_headers(self, limiter: RateLimiter) -> None:
        decision = limiter.admit(OperationClass.GENERATE, "u1")

        assert decision.headers() == {
            "X-RateLimit-Limit": "2",
            "X-RateLimit-Remaining": "1",
            "X-RateLimit-Reset": "1100",
        }

    def test_default_limits_from_settings(self) -> None:
        limiter = RateLimiter()

        assert limiter.limits[OperationClass.GENERATE] == 50
        assert limiter.limits[OperationClass.VOICE_CLONE] == 5
        assert limiter.limits[OperationClass.VIDEO] == 20
        assert limiter.limits[OperationClass.TTS] == 50
        assert limiter.window_seconds == 24 * 60 * 60


class TestSweep:
    """Tests for expired window cleanup."""

    def test_sweep_drops_only_expired(self, limiter: RateLimiter, clock: FakeClock) -> None:
        limiter.admit(OperationClass.GENERATE, "old")
        clock.now += 60
        limiter.admit(OperationClass.GENERATE, "new")

        clock.now += 41
        assert limiter.sweep() == 1
        assert len(limiter) == 1

    def test_cleanup_thread_starts_and_stops(self, limiter: RateLimiter) -> None:
        limiter.start_cleanup(interval=0.01)
        limiter.start_cleanup(interval=0.01)
        limiter.stop_cleanup()

        assert limiter._cleanup_thread is None
