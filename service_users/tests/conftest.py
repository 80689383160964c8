"""
Shared fixtures for User Access API tests.
"""

import time
from fnmatch import fnmatch
from typing import Any, Dict, Iterable, Optional

import pytest
from jose import jwt
from redis.exceptions import ConnectionError as RedisConnectionError

from shared.config import ServiceConfig

TEST_SECRET = "test-secret"


class InMemoryRedis:
    """Async stand-in for the subset of redis.asyncio.Redis the cache uses."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.available = True
        self.calls = []

    def _check(self, op: str, *args):
        self.calls.append((op,) + args)
        if not self.available:
            raise RedisConnectionError("Redis unavailable")

    async def get(self, key: str) -> Optional[str]:
        self._check("get", key)
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self._check("setex", key, ttl)
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        self._check("delete", *keys)
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def scan_iter(self, match: str = "*"):
        self._check("scan_iter", match)
        for key in list(self.store):
            if fnmatch(key, match):
                yield key

    async def ping(self) -> bool:
        self._check("ping")
        return True

    async def aclose(self) -> None:
        return None


def make_token(user_id: str, roles: Iterable[str] = ("user",), secret: str = TEST_SECRET,
               expires_in: int = 3600, **extra: Any) -> str:
    """Mint an HS256 token for tests."""
    claims = {"sub": user_id, "roles": list(roles), "exp": int(time.time()) + expires_in}
    claims.update(extra)
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_header(user_id: str, roles: Iterable[str] = ("user",)) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, roles)}"}


@pytest.fixture
def fake_redis():
    """In-memory Redis double."""
    return InMemoryRedis()


@pytest.fixture
def service_config():
    """Service configuration for tests."""
    return ServiceConfig(
        service_name="users",
        port=8000,
        jwt_secret=TEST_SECRET,
        redis_url="redis://localhost:6379/15",
        user_directory_url="http://directory.test",
        credit_score_service_url="http://scores.test",
    )
