"""
Redis-backed response cache for user routes.
"""

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TYPE_CHECKING

import redis.asyncio as redis
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from shared.logging import get_logger
from .cache_keys import user_key_patterns

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


Handler = Callable[[Request], Awaitable[Any]]


@dataclass(frozen=True)
class CachePolicy:
    """How a route's responses are cached: key derivation and time-to-live."""

    key_builder: Callable[[Request], str]
    ttl_seconds: int

    def build_key(self, request: Request) -> str:
        return self.key_builder(request)


class ResponseCache:
    """JSON response cache that degrades to a pass-through when Redis is down."""

    def __init__(
        self,
        redis_url: str,
        *,
        namespace: str = "users-api",
        enabled: bool = True,
        socket_timeout: float = 2.0,
        metrics: Optional["MetricsCollector"] = None,
        redis_client: Optional[redis.Redis] = None,
    ):
        self.redis_url = redis_url
        self.namespace = namespace
        self.enabled = enabled
        self.socket_timeout = socket_timeout
        self.metrics = metrics
        self.logger = get_logger("users.response_cache")
        self._redis = redis_client

    async def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
            )
        return self._redis

    def _make_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Return the decoded payload stored under key, or None on miss or store failure."""
        if not self.enabled:
            return None

        try:
            client = await self._get_redis()
            raw = await client.get(self._make_key(key))
        except (RedisError, OSError) as exc:
            self.logger.error("Cache get error", key=key, error=str(exc))
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            self.logger.warning("Discarding undecodable cache entry", key=key)
            return None

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Store a JSON-serialisable payload for ttl seconds."""
        if not self.enabled:
            return False

        try:
            client = await self._get_redis()
            await client.setex(self._make_key(key), ttl, json.dumps(value))
        except (RedisError, OSError) as exc:
            self.logger.error("Cache set error", key=key, error=str(exc))
            return False

        self.logger.debug("Cached value", key=key, ttl=ttl)
        return True

    async def invalidate(self, key: str) -> bool:
        """Delete a single entry."""
        try:
            client = await self._get_redis()
            await client.delete(self._make_key(key))
            return True
        except (RedisError, OSError) as exc:
            self.logger.error("Cache invalidate error", key=key, error=str(exc))
            return False

    async def clear_pattern(self, pattern: str) -> int:
        """Delete entries matching a glob pattern; returns the number removed."""
        try:
            client = await self._get_redis()
            keys = [key async for key in client.scan_iter(match=self._make_key(pattern))]
            if keys:
                await client.delete(*keys)
                self.logger.info("Cleared cache pattern", pattern=pattern, keys_count=len(keys))
            return len(keys)
        except (RedisError, OSError) as exc:
            self.logger.error("Cache clear error", pattern=pattern, error=str(exc))
            return 0

    async def invalidate_user(self, user_id: str) -> bool:
        """Drop every entry that may embed the given user."""
        removed = 0
        for pattern in user_key_patterns(user_id):
            removed += await self.clear_pattern(pattern)
        self.logger.info("Invalidated user cache", user_id=user_id, removed=removed)
        return True

    async def respond(self, request: Request, policy: CachePolicy, handler: Handler, *, route: str) -> JSONResponse:
        """Serve from cache on hit; otherwise run handler and store its payload.

        Exceptions raised by the handler propagate and nothing is stored.
        """
        if not self.enabled:
            payload = jsonable_encoder(await handler(request))
            return JSONResponse(content=payload, headers={"X-Cache": "BYPASS"})

        key = policy.build_key(request)
        cached = await self.get(key)
        if cached is not None:
            self._record("cache_hits_total", route)
            self.logger.debug("Cache hit", route=route, key=key)
            return JSONResponse(content=cached, headers={"X-Cache": "HIT"})

        self._record("cache_misses_total", route)
        payload = jsonable_encoder(await handler(request))
        await self.set(key, payload, policy.ttl_seconds)
        return JSONResponse(content=payload, headers={"X-Cache": "MISS"})

    def _record(self, metric_name: str, route: str) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, route=route)

    async def ping(self) -> bool:
        try:
            client = await self._get_redis()
            return bool(await client.ping())
        except (RedisError, OSError) as exc:
            self.logger.warning("Cache ping failed", error=str(exc))
            return False

    async def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        pattern = self._make_key("*")
        try:
            client = await self._get_redis()
            total = 0
            async for _ in client.scan_iter(match=pattern):
                total += 1
        except (RedisError, OSError) as exc:
            self.logger.error("Cache stats error", error=str(exc))
            return {"enabled": self.enabled, "error": str(exc)}

        return {"enabled": self.enabled, "total_keys": total, "pattern": pattern}

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
