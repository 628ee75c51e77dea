"""
NewsAPI (newsapi.org) source adapter
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from .base import NewsSource
from ...core.cache import RedisCache, news_cache_key
from ...exceptions import ConfigurationError, NewsSourceError

logger = structlog.get_logger(__name__)


class NewsApiClient(NewsSource):
    name = "newsapi"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://newsapi.org/v2/everything",
        query: str = "news",
        page_size: int = 50,
        timeout_seconds: int = 30,
        cache: Optional[RedisCache] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.query = query
        self.page_size = page_size
        self.timeout_seconds = timeout_seconds
        self.cache = cache

    async def search(self, from_date: str, to_date: str) -> List[Dict[str, Any]]:
        if not self.api_key:
            raise ConfigurationError("NEWS_API_KEY is not configured")

        cache_key = news_cache_key(from_date, to_date)
        if self.cache:
            cached_news = await self.cache.get(cache_key)
            if cached_news:
                logger.info("news_cache_hit", key=cache_key, count=len(cached_news))
                return cached_news

        params = {
            "apiKey": self.api_key,
            "q": self.query,
            "from": from_date,
            "to": to_date,
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": self.page_size,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException:
            raise NewsSourceError(f"News search timed out after {self.timeout_seconds}s")
        except httpx.HTTPStatusError as e:
            raise NewsSourceError(f"News search failed with HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise NewsSourceError(f"News search request failed: {str(e)}")

        if payload.get("status") != "ok":
            raise NewsSourceError(f"News provider error: {payload.get('message', 'unknown error')}")

        articles = payload.get("articles") or []
        logger.info("news_fetched", count=len(articles), from_date=from_date, to_date=to_date)

        if self.cache:
            await self.cache.set(cache_key, articles)
        return articles
