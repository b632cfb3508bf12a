"""Token-bucket rate limiting.

A bucket holds up to ``capacity`` tokens and refills at ``refill_rate``
tokens per second; each request spends one.  That allows a short burst
(a page load firing several calls) while holding the long-run rate down,
and needs only two numbers of state per client.

POST /jwt is the route that needs it most: it mints a token for any email
it is given, so it is limited per client IP.  The payment routes are
limited per authenticated email.

InMemoryRateLimiter is per-process (dev, tests, a single worker).
RedisRateLimiter shares buckets across workers and runs the
read-refill-spend cycle as one Lua script, which Redis executes
atomically.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    limit: int
    retry_after: float  # seconds until the next token; 0 when allowed


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """capacity = burst size, refill_rate = sustained tokens per second."""

    capacity: int = 60
    refill_rate: float = 1.0


@runtime_checkable
class RateLimiter(Protocol):
    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult: ...
    async def reset(self, key: str) -> None: ...


def _spend(
    tokens: float, elapsed: float, config: RateLimitConfig
) -> tuple[float, RateLimitResult]:
    tokens = min(config.capacity, tokens + elapsed * config.refill_rate)
    if tokens >= 1:
        tokens -= 1
        return tokens, RateLimitResult(
            allowed=True,
            remaining=int(tokens),
            limit=config.capacity,
            retry_after=0,
        )
    return tokens, RateLimitResult(
        allowed=False,
        remaining=0,
        limit=config.capacity,
        retry_after=(1 - tokens) / config.refill_rate,
    )


class InMemoryRateLimiter:
    def __init__(self) -> None:
        # key -> (tokens_remaining, last_refill_monotonic)
        self._buckets: dict[str, tuple[float, float]] = {}

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        now = time.monotonic()
        # A new client starts with a full bucket.
        tokens, last = self._buckets.get(key, (float(config.capacity), now))
        tokens, result = _spend(tokens, now - last, config)
        self._buckets[key] = (tokens, now)
        return result

    async def reset(self, key: str) -> None:
        self._buckets.pop(key, None)


class RedisRateLimiter:
    # KEYS[1] = bucket key
    # ARGV = capacity, refill_rate, now (seconds)
    # Returns {allowed (0/1), remaining, retry_after_ms}
    _LUA_SCRIPT = """
    local key = KEYS[1]
    local capacity = tonumber(ARGV[1])
    local refill_rate = tonumber(ARGV[2])
    local now = tonumber(ARGV[3])
    local ttl = math.ceil(capacity / refill_rate) + 60

    local bucket = redis.call('HMGET', key, 'tokens', 'last_refill')
    local tokens = tonumber(bucket[1]) or capacity
    local last_refill = tonumber(bucket[2]) or now

    tokens = math.min(capacity, tokens + (now - last_refill) * refill_rate)

    if tokens >= 1 then
        tokens = tokens - 1
        redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
        redis.call('EXPIRE', key, ttl)
        return {1, math.floor(tokens), 0}
    end

    redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
    redis.call('EXPIRE', key, ttl)
    return {0, 0, math.ceil((1 - tokens) / refill_rate * 1000)}
    """

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._script = None

    def _get_script(self):
        if self._script is None:
            self._script = self._redis.register_script(self._LUA_SCRIPT)
        return self._script

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        allowed, remaining, retry_after_ms = await self._get_script()(
            keys=[f"ratelimit:{key}"],
            args=[config.capacity, config.refill_rate, time.time()],
        )
        return RateLimitResult(
            allowed=bool(allowed),
            remaining=int(remaining),
            limit=config.capacity,
            retry_after=retry_after_ms / 1000,
        )

    async def reset(self, key: str) -> None:
        await self._redis.delete(f"ratelimit:{key}")
