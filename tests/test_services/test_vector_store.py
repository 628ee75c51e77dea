import pytest
from unittest.mock import AsyncMock, MagicMock

from src.exceptions import VectorStoreError
from src.services.vector_store import EmbeddingService, PineconeVectorStore


class TestEmbeddingService:
    async def test_embed(self):
        client = MagicMock()
        client.embeddings.create = AsyncMock(return_value=MagicMock(data=[MagicMock(embedding=[0.5, 0.25])]))
        service = EmbeddingService(api_key=None, client=client)

        assert await service.embed("text") == [0.5, 0.25]
        client.embeddings.create.assert_awaited_once_with(model="text-embedding-3-small", input="text")


class TestPineconeVectorStore:
    @pytest.fixture(autouse=True)
    def setup_store(self):
        self.index = MagicMock()
        self.store = PineconeVectorStore(api_key=None, index_name="news", index=self.index)

    async def test_upsert(self):
        await self.store.upsert("news_2024-01-02", [0.1], {"date": "2024-01-02", "analysis": "a"})

        self.index.upsert.assert_called_once_with(
            vectors=[{"id": "news_2024-01-02", "values": [0.1], "metadata": {"date": "2024-01-02", "analysis": "a"}}]
        )

    async def test_query_flattens_matches(self):
        match = MagicMock(id="news_2024-01-01", score=0.8, metadata={"date": "2024-01-01", "analysis": "a"})
        self.index.query.return_value = MagicMock(matches=[match])

        matches = await self.store.query([0.1], top_k=2)

        assert matches == [{"id": "news_2024-01-01", "score": 0.8, "metadata": {"date": "2024-01-01", "analysis": "a"}}]
        assert self.index.query.call_args.kwargs["top_k"] == 2

    async def test_errors_are_wrapped(self):
        self.index.upsert.side_effect = RuntimeError("index missing")

        with pytest.raises(VectorStoreError):
            await self.store.upsert("id", [0.1], {})
