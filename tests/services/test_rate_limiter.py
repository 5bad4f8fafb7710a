from __future__ import annotations

import asyncio

from ead_service.services.rate_limiter import InMemoryRateLimiter, RateLimitConfig


class _Tick:
    def __init__(self) -> None:
        self.t = 100.0

    def __call__(self) -> float:
        return self.t


def test_burst_up_to_capacity_then_reject() -> None:
    tick = _Tick()
    limiter = InMemoryRateLimiter(clock=tick)
    config = RateLimitConfig(capacity=3, refill_rate=1.0)

    results = [asyncio.run(limiter.check("ip:1", config)) for _ in range(4)]

    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results[:3]] == [2, 1, 0]
    assert results[3].retry_after > 0


def test_bucket_refills_over_time() -> None:
    tick = _Tick()
    limiter = InMemoryRateLimiter(clock=tick)
    config = RateLimitConfig(capacity=1, refill_rate=0.5)

    assert asyncio.run(limiter.check("ip:1", config)).allowed
    assert not asyncio.run(limiter.check("ip:1", config)).allowed
    tick.t += 2.0
    assert asyncio.run(limiter.check("ip:1", config)).allowed


def test_keys_are_independent() -> None:
    limiter = InMemoryRateLimiter(clock=_Tick())
    config = RateLimitConfig(capacity=1, refill_rate=0.01)
    assert asyncio.run(limiter.check("ip:1", config)).allowed
    assert asyncio.run(limiter.check("ip:2", config)).allowed
    assert not asyncio.run(limiter.check("ip:1", config)).allowed


def test_reset_restores_full_bucket() -> None:
    limiter = InMemoryRateLimiter(clock=_Tick())
    config = RateLimitConfig(capacity=1, refill_rate=0.01)
    asyncio.run(limiter.check("ip:1", config))
    asyncio.run(limiter.reset("ip:1"))
    assert asyncio.run(limiter.check("ip:1", config)).allowed
