"""Rate limiting as a per-route dependency.

A dependency (not middleware) so each route picks its own budget and
/health, /metrics stay unlimited:

  POST /jwt                     10 burst, 1 every 6s, keyed by client IP
  POST /create-payment-intent   20 burst, keyed by token email
  POST /payments                20 burst, keyed by token email

The key comes from the token's ``sub`` when a bearer token is present
(decoded without verification: a forged sub only buys the forger a bucket
of their own, and require_user still rejects the request), otherwise from
the client IP.

If Redis errors mid-request the limiter fails open and logs; losing rate
limiting briefly beats refusing every request.
"""

from __future__ import annotations

import logging

import jwt as pyjwt
from fastapi import HTTPException, Request, status
from redis.exceptions import RedisError

from fluency_api.core.metrics import RATE_LIMIT_HITS
from fluency_api.db.redis import redis_pool
from fluency_api.services.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimiter,
    RedisRateLimiter,
)

logger = logging.getLogger(__name__)

if redis_pool is not None:
    _rate_limiter: RateLimiter = RedisRateLimiter(redis_pool)
else:
    _rate_limiter = InMemoryRateLimiter()

TOKEN_ISSUE_LIMIT = RateLimitConfig(capacity=10, refill_rate=1 / 6)
PAYMENT_LIMIT = RateLimitConfig(capacity=20, refill_rate=0.5)
_DEFAULT_CONFIG = RateLimitConfig()


def require_rate_limit(config: RateLimitConfig = _DEFAULT_CONFIG):
    """Dependency factory.

    Usage: dependencies=[Depends(require_rate_limit(TOKEN_ISSUE_LIMIT))]
    """

    async def _check(request: Request) -> None:
        key = _build_key(request)
        try:
            result = await _rate_limiter.check(key, config)
        except RedisError:
            logger.warning(
                "Rate limiter unavailable, allowing key=%s", key, exc_info=True
            )
            return

        if not result.allowed:
            RATE_LIMIT_HITS.labels(
                key_type="user" if key.startswith("user:") else "ip"
            ).inc()
            logger.warning("Rate limit exceeded key=%s", key)
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


def _build_key(request: Request) -> str:
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        try:
            claims = pyjwt.decode(auth_header[7:], options={"verify_signature": False})
        except pyjwt.InvalidTokenError:
            claims = {}
        sub = claims.get("sub")
        if sub:
            return f"user:{sub}"

    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"
