import httpx
import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from src.exceptions import ConfigurationError, NewsSourceError
from src.services.news_sources.newsapi_client import NewsApiClient


def ok_response(articles):
    response = MagicMock()
    response.json.return_value = {"status": "ok", "totalResults": len(articles), "articles": articles}
    response.raise_for_status = MagicMock()
    return response


class TestNewsApiClient:
    @pytest.fixture(autouse=True)
    def setup_client(self, mock_cache):
        self.cache = mock_cache
        self.client = NewsApiClient(api_key="test-news-key", cache=mock_cache)

    @patch('httpx.AsyncClient')
    async def test_search_returns_articles(self, mock_client):
        articles = [{"title": "A"}, {"title": "B"}]
        get = AsyncMock(return_value=ok_response(articles))
        mock_client.return_value.__aenter__.return_value.get = get

        result = await self.client.search("2024-01-01T12:00:00Z", "2024-01-02T12:00:00Z")

        assert result == articles
        params = get.await_args.kwargs["params"]
        assert params["from"] == "2024-01-01T12:00:00Z"
        assert params["to"] == "2024-01-02T12:00:00Z"
        assert params["language"] == "en"
        assert params["sortBy"] == "publishedAt"
        self.cache.set.assert_awaited_once_with("news_2024-01-01T12:00:00Z_2024-01-02T12:00:00Z", articles)

    @patch('httpx.AsyncClient')
    async def test_cache_hit_skips_request(self, mock_client):
        self.cache.get.return_value = [{"title": "cached"}]

        result = await self.client.search("a", "b")

        assert result == [{"title": "cached"}]
        self.cache.get.assert_awaited_once_with("news_a_b")
        mock_client.assert_not_called()

    @patch('httpx.AsyncClient')
    async def test_timeout_raises(self, mock_client):
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            side_effect=httpx.TimeoutException("Request timeout")
        )

        with pytest.raises(NewsSourceError):
            await self.client.search("a", "b")

    @patch('httpx.AsyncClient')
    async def test_provider_error_status_raises(self, mock_client):
        response = MagicMock()
        response.json.return_value = {"status": "error", "message": "apiKeyInvalid"}
        response.raise_for_status = MagicMock()
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=response)

        with pytest.raises(NewsSourceError, match="apiKeyInvalid"):
            await self.client.search("a", "b")

        self.cache.set.assert_not_awaited()

    async def test_missing_key_raises(self):
        client = NewsApiClient(api_key=None)

        with pytest.raises(ConfigurationError):
            await client.search("a", "b")
