"""Redis connection management.

Mirrors engine.py: when REDIS_URL is configured we create a real
connection pool; when it's None (local dev, tests), the consumers fall
back to in-memory implementations and no Redis server is needed.

WHAT LIVES IN REDIS
--------------------
Nothing durable.  Enrollments, certificates and audit entries belong in
PostgreSQL.  Redis holds:
  - rate-limit buckets (ephemeral, shared by all API instances)
  - the notification queue the worker drains (LPUSH/BRPOP)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from ead_service.core.config import SETTINGS

logger = logging.getLogger(__name__)

# Conditional Redis client (None when REDIS_URL is not set).  Every consumer
# of redis_pool checks for None and falls back to in-memory.

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,  # return str instead of bytes, less casting
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis() -> AsyncIterator[None]:
    """Startup/shutdown hook for Redis, mirrors lifespan_db()."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured, Redis features use in-memory fallbacks")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]  # redis stubs mistype async ping as bool
        logger.info("Redis connected")
    except Exception:
        logger.exception("Redis connection failed on startup")
        # Rate limiting and notification enqueueing degrade; enrollment and
        # certificate operations do not depend on Redis.
        yield
        return

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
