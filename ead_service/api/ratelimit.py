"""Rate limiting as a route dependency.

Only routes that declare it are limited: the public verifier (keyed by
client IP, since it is anonymous) and certificate requests.  Health,
readiness and metrics never are.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status

from ead_service.core.metrics import RATE_LIMIT_HITS
from ead_service.db.redis import redis_pool
from ead_service.services.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimiter,
    RedisRateLimiter,
)

logger = logging.getLogger(__name__)

if redis_pool is not None:
    rate_limiter: RateLimiter = RedisRateLimiter(redis_pool)
else:
    rate_limiter = InMemoryRateLimiter()


def require_rate_limit(config: RateLimitConfig, scope: str):
    """Dependency factory.  ``scope`` keeps each route family's buckets apart."""

    async def _check(request: Request) -> None:
        key = f"{scope}:ip:{client_ip(request)}"
        result = await rate_limiter.check(key, config)
        if result.allowed:
            return

        RATE_LIMIT_HITS.labels(key_type="ip").inc()
        logger.warning("Rate limit exceeded scope=%s", scope)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
            headers={
                "Retry-After": str(int(result.retry_after) + 1),
                "X-RateLimit-Limit": str(result.limit),
                "X-RateLimit-Remaining": "0",
            },
        )

    return _check


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
