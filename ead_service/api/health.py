"""Liveness and readiness probes.

/health answers as long as the process does; it reports dependency status
but stays 200 when degraded so the orchestrator does not restart a
process that is merely waiting for Redis.

/ready is what the load balancer consults.  The store is critical: with
DATABASE_URL configured and Postgres unreachable, no request can be
served, so the instance reports 503.  Redis is not critical (rate
limiting and notifications degrade, access decisions do not).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from sqlalchemy import text

from ead_service.db import engine as db
from ead_service.db.redis import redis_pool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _check_redis() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception:
        logger.warning("Redis ping failed", exc_info=True)
        return "degraded"
    return "ok"


async def _check_database() -> str:
    if db.engine is None:
        return "in_memory"
    try:
        async with db.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.warning("Database ping failed", exc_info=True)
        return "down"
    return "ok"


@router.get("/health")
async def health() -> dict:
    checks = {"redis": await _check_redis(), "database": await _check_database()}
    healthy = ("ok", "not_configured", "in_memory")
    overall = "ok" if all(v in healthy for v in checks.values()) else "degraded"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await _check_database() == "down":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
