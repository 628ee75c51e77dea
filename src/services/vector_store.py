"""
Embedding and vector storage for daily news analyses
"""

import asyncio
from typing import Any, Dict, List, Optional

import openai
import structlog
from pinecone import Pinecone

from ..exceptions import ConfigurationError, VectorStoreError

logger = structlog.get_logger(__name__)


class EmbeddingService:
    def __init__(self, api_key: Optional[str], model: str = "text-embedding-3-small", client: Optional[openai.AsyncOpenAI] = None):
        if client is None:
            if not api_key:
                raise ConfigurationError("OPENAI_API_KEY is required for embeddings")
            client = openai.AsyncOpenAI(api_key=api_key)
        self.client = client
        self.model = model

    async def embed(self, text: str) -> List[float]:
        try:
            response = await self.client.embeddings.create(model=self.model, input=text)
        except openai.OpenAIError as e:
            raise VectorStoreError(f"Embedding request failed: {str(e)}")
        return response.data[0].embedding


class PineconeVectorStore:
    """Thin async wrapper over a Pinecone index. The SDK is blocking, so calls run in a worker thread."""

    def __init__(self, api_key: Optional[str], index_name: str, index: Any = None):
        if index is None:
            if not api_key:
                raise ConfigurationError("PINECONE_API_KEY is not configured")
            index = Pinecone(api_key=api_key).Index(index_name)
        self.index = index
        self.index_name = index_name

    async def upsert(self, vector_id: str, values: List[float], metadata: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(
                self.index.upsert,
                vectors=[{"id": vector_id, "values": values, "metadata": metadata}],
            )
        except Exception as e:
            raise VectorStoreError(f"Vector upsert failed for {vector_id}: {str(e)}")
        logger.info("vector_upserted", index=self.index_name, vector_id=vector_id)

    async def query(self, values: List[float], top_k: int = 5) -> List[Dict[str, Any]]:
        try:
            response = await asyncio.to_thread(
                self.index.query,
                vector=values,
                top_k=top_k,
                include_metadata=True,
            )
        except Exception as e:
            raise VectorStoreError(f"Vector query failed: {str(e)}")

        matches = []
        for match in response.matches or []:
            matches.append({
                "id": match.id,
                "score": match.score,
                "metadata": dict(match.metadata or {}),
            })
        return matches
