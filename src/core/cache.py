import json
from functools import lru_cache
from typing import Any, Optional

import redis.asyncio as redis
import structlog

from ..config import get_settings

logger = structlog.get_logger(__name__)

DEFAULT_CACHE_TTL = 60 * 60 * 24  # 24 hours in seconds


def news_cache_key(from_date: str, to_date: str) -> str:
    return f"news_{from_date}_{to_date}"


def daily_image_cache_key(date: str) -> str:
    return f"daily_image_{date}"


class RedisCache:
    """
    JSON cache on top of Redis.

    Read and write failures are logged and reported as a miss / False so a
    cache outage never breaks the caller.
    """

    def __init__(self, url: str, default_ttl: int = DEFAULT_CACHE_TTL, client: Optional[redis.Redis] = None):
        self.url = url
        self.default_ttl = default_ttl
        self._client = client

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(self.url, decode_responses=True)
        return self._client

    async def get(self, key: str) -> Optional[Any]:
        try:
            data = await self._get_client().get(key)
            return json.loads(data) if data else None
        except Exception as e:
            logger.error("redis_get_failed", key=key, error=str(e))
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            await self._get_client().set(key, json.dumps(value), ex=ttl or self.default_ttl)
            return True
        except Exception as e:
            logger.error("redis_set_failed", key=key, error=str(e))
            return False

    async def delete(self, key: str) -> bool:
        try:
            await self._get_client().delete(key)
            return True
        except Exception as e:
            logger.error("redis_delete_failed", key=key, error=str(e))
            return False

    async def ping(self) -> bool:
        try:
            return bool(await self._get_client().ping())
        except Exception as e:
            logger.warning("redis_ping_failed", error=str(e))
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


@lru_cache()
def get_cache() -> RedisCache:
    settings = get_settings()
    return RedisCache(settings.redis_url, default_ttl=settings.cache_ttl_seconds)
