"""Liveness and readiness endpoints.

/health answers "is the process up", and reports each backing service so an
operator can see what is impaired.  It always returns 200; the ``status``
field carries the verdict.

/ready answers "should traffic come here".  The database is the only hard
dependency: with DATABASE_URL set and the database unreachable, every data
route would fail, so /ready returns 503 and the load balancer routes
around this instance.  Redis only holds rate-limit buckets and the payment
processor is only needed at checkout, so neither affects readiness.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from fluency_api.db import engine as db_engine
from fluency_api.db import redis as db_redis
from fluency_api.services.payment_gateway import payment_gateway

router = APIRouter(tags=["health"])


async def _database_check() -> str:
    if db_engine.engine is None:
        return "not_configured"
    return "ok" if await db_engine.ping_database() else "degraded"


async def _redis_check() -> str:
    if db_redis.redis_pool is None:
        return "not_configured"
    return "ok" if await db_redis.ping_redis() else "degraded"


@router.get("/health")
async def health() -> dict:
    checks = {
        "database": await _database_check(),
        "redis": await _redis_check(),
        "payment": payment_gateway.name,
    }
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await _database_check() == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
