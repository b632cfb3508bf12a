"""Redis connection management.

Mirrors engine.py: with REDIS_URL set, a pooled async client is created at
import time; without it ``redis_pool`` is None and the rate limiter keeps
its buckets in process memory.

Redis only holds rate-limit buckets here.  Losing them on a restart resets
everybody's quota, which is harmless, so a Redis that is down at startup
is logged and tolerated rather than fatal.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from fluency_api.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


async def ping_redis() -> bool:
    if redis_pool is None:
        return False
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception:
        logger.warning("Redis ping failed", exc_info=True)
        return False
    return True


@asynccontextmanager
async def lifespan_redis():
    """Startup/shutdown hook for Redis."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured, rate limits kept in memory")
        yield
        return

    if await ping_redis():
        logger.info("Redis connected")
    else:
        logger.error("Redis unreachable on startup; continuing without it")

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
