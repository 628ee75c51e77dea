"""
DailyImageService - one generated image per calendar date
Runs the news-to-image workflow, stores the image and the analysis embedding,
and keeps the result in the database and the cache.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from ..agents.workflow.workflow_orchestrator import NewsImageWorkflow
from ..config import get_settings
from ..core.cache import RedisCache, daily_image_cache_key, get_cache
from ..core.database import session_scope
from ..exceptions import ConfigurationError, WorkflowError
from ..repositories.daily_image_repository import DailyImageRepository
from ..utils.date_utils import calendar_day_window, daily_window, parse_iso_date, today_iso
from .image_generation_service import ImageGenerationParams, create_image_generator
from .image_storage import ImageStorageService
from .llm_service import LLMProvider, LLMService
from .news_sources.newsapi_client import NewsApiClient
from .vector_store import EmbeddingService, PineconeVectorStore

logger = structlog.get_logger(__name__)


def vector_id_for(date: str) -> str:
    return f"news_{date}"


def format_analysis(summary: str, themes) -> str:
    return f"{summary}\n\nThemes: {', '.join(themes)}"


class DailyImageService:
    def __init__(
        self,
        workflow: NewsImageWorkflow,
        repository: DailyImageRepository,
        image_storage: ImageStorageService,
        embedding_service: EmbeddingService,
        vector_store: PineconeVectorStore,
        cache: Optional[RedisCache] = None,
    ):
        self.workflow = workflow
        self.repository = repository
        self.image_storage = image_storage
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.cache = cache

    async def generate_daily_image(self, date: Optional[str] = None, force: bool = False) -> Dict[str, Any]:
        """
        Return the daily image record for `date` (default today), generating it if needed.

        Lookup order is cache, then database, then a fresh workflow run.
        `force` skips both lookups and overwrites the stored record.

        Raises:
            WorkflowError: the workflow run failed; nothing is persisted.
        """
        date = date or today_iso()
        day = parse_iso_date(date)
        cache_key = daily_image_cache_key(date)

        if not force:
            cached_result = await self._cache_get(cache_key)
            if cached_result:
                logger.info("daily_image_cache_hit", date=date)
                return cached_result

            existing = self.repository.get(date)
            if existing:
                result = existing.to_dict()
                await self._cache_set(cache_key, result)
                logger.info("daily_image_db_hit", date=date)
                return result

        window = daily_window(datetime.combine(day, datetime.now().time()))
        workflow_result = await self.workflow.run(window)
        if workflow_result is None:
            raise WorkflowError(f"News image workflow failed for {date}")

        analysis = workflow_result.analysis
        # The image file is written only after the vector upsert succeeds
        await self._save_to_vector_db(analysis, date)
        image_path = await self.image_storage.save_image(workflow_result.image_url, date)

        record = self.repository.upsert(
            date=date,
            analysis=analysis,
            image_path=image_path,
            summary=workflow_result.summary,
            themes=list(workflow_result.themes),
            image_prompt=workflow_result.image_prompt,
        )
        result = record.to_dict()
        await self._cache_set(cache_key, result)

        logger.info("daily_image_generated", date=date, image_path=image_path, forced=force)
        return result

    async def fill_vector_db(self, date: str) -> Dict[str, str]:
        """Analyze the news of one calendar day and store its embedding."""
        day = parse_iso_date(date)
        state = await self.workflow.analyze(calendar_day_window(day))
        if state.failed:
            raise WorkflowError(f"Vector DB fill failed for {date}: {state.error}")

        await self._save_to_vector_db(format_analysis(state.summary, state.themes), date)
        return {
            "date": date,
            "status": "success",
            "message": "Vector DB updated successfully",
        }

    async def query_similar_news(self, query: str, limit: int = 5) -> List[Dict[str, Any]]:
        query_embedding = await self.embedding_service.embed(query)
        matches = await self.vector_store.query(query_embedding, top_k=limit)

        return [
            {
                "date": match["metadata"].get("date", ""),
                "analysis": match["metadata"].get("analysis", ""),
                "score": match["score"],
            }
            for match in matches
        ]

    async def _save_to_vector_db(self, analysis: str, date: str) -> None:
        values = await self.embedding_service.embed(analysis)
        await self.vector_store.upsert(
            vector_id_for(date),
            values,
            metadata={"date": date, "analysis": analysis},
        )

    async def _cache_get(self, key: str):
        if not self.cache:
            return None
        return await self.cache.get(key)

    async def _cache_set(self, key: str, value: Dict[str, Any]) -> None:
        if self.cache:
            await self.cache.set(key, value)


def resolve_llm_provider(name: str) -> LLMProvider:
    try:
        return LLMProvider(name)
    except ValueError:
        raise ConfigurationError(f"Unknown LLM provider: {name}")


def create_news_image_workflow(settings, cache: Optional[RedisCache] = None) -> NewsImageWorkflow:
    preferred_provider = resolve_llm_provider(settings.preferred_llm_provider)
    llm_service = LLMService.from_settings(settings)
    news_source = NewsApiClient(
        api_key=settings.news_api_key,
        base_url=settings.news_api_url,
        query=settings.news_query,
        page_size=settings.news_page_size,
        timeout_seconds=settings.news_request_timeout_seconds,
        cache=cache,
    )
    return NewsImageWorkflow(
        news_source=news_source,
        llm_service=llm_service,
        image_generator=create_image_generator(settings),
        image_params=ImageGenerationParams(
            size=settings.image_size,
            steps=settings.image_steps,
            guidance_scale=settings.image_guidance_scale,
        ),
        preferred_provider=preferred_provider,
        analysis_temperature=settings.analysis_temperature,
        prompt_temperature=settings.prompt_temperature,
        max_tokens=settings.llm_max_tokens,
    )


def create_daily_image_service(settings, repository: DailyImageRepository) -> DailyImageService:
    """
    Build the service with real capabilities.

    Raises:
        ConfigurationError: a required credential is missing.
    """
    cache = get_cache()
    return DailyImageService(
        workflow=create_news_image_workflow(settings, cache=cache),
        repository=repository,
        image_storage=ImageStorageService(settings.image_storage_path),
        embedding_service=EmbeddingService(settings.openai_api_key, model=settings.embedding_model_name),
        vector_store=PineconeVectorStore(settings.pinecone_api_key, settings.pinecone_index_name),
        cache=cache,
    )


# Entry points for the scheduler and the chat bot, which run outside a request
async def run_daily_image_job(date: Optional[str] = None) -> Dict[str, Any]:
    logger.info("daily_image_job_started", date=date or today_iso())
    with session_scope() as db:
        service = create_daily_image_service(get_settings(), DailyImageRepository(db))
        return await service.generate_daily_image(date)


async def find_similar_news(query: str, limit: int = 5) -> List[Dict[str, Any]]:
    with session_scope() as db:
        service = create_daily_image_service(get_settings(), DailyImageRepository(db))
        return await service.query_similar_news(query, limit=limit)
