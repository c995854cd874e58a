"""
Tests for RateLimiter.
"""

from utils.rate_limiter import RateLimiter


def _limiter(times):
    ticks = iter(times)
    return RateLimiter(clock=lambda: next(ticks))


def test_rate_limiter_allows_within_limit():
    limiter = _limiter([0.0, 1.0])

    result1 = limiter.check(scope="bet", user_id=2, limit=2, per_seconds=10)
    result2 = limiter.check(scope="bet", user_id=2, limit=2, per_seconds=10)

    assert result1.allowed is True
    assert result2.allowed is True


def test_rate_limiter_blocks_and_sets_retry():
    limiter = _limiter([0.0, 1.0, 2.0])

    limiter.check(scope="bet", user_id=2, limit=2, per_seconds=10)
    limiter.check(scope="bet", user_id=2, limit=2, per_seconds=10)
    blocked = limiter.check(scope="bet", user_id=2, limit=2, per_seconds=10)

    assert blocked.allowed is False
    assert blocked.retry_after_seconds == 8


def test_rate_limiter_allows_after_window():
    limiter = _limiter([0.0, 1.0, 11.0])

    limiter.check(scope="bet", user_id=2, limit=2, per_seconds=10)
    limiter.check(scope="bet", user_id=2, limit=2, per_seconds=10)
    allowed = limiter.check(scope="bet", user_id=2, limit=2, per_seconds=10)

    assert allowed.allowed is True


def test_scopes_and_users_are_separate():
    limiter = _limiter([0.0, 0.0, 0.0])

    assert limiter.check(scope="bet", user_id=2, limit=1, per_seconds=10).allowed
    assert limiter.check(scope="deposit", user_id=2, limit=1, per_seconds=10).allowed
    assert limiter.check(scope="bet", user_id=3, limit=1, per_seconds=10).allowed


def test_reset_clears_history():
    limiter = _limiter([0.0, 0.0, 0.0])
    limiter.check(scope="bet", user_id=2, limit=1, per_seconds=10)
    assert not limiter.check(scope="bet", user_id=2, limit=1, per_seconds=10).allowed

    limiter.reset()

    assert limiter.check(scope="bet", user_id=2, limit=1, per_seconds=10).allowed
