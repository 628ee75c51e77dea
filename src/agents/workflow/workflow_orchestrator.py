from typing import List, Optional, Tuple
import time

import structlog

from .graph import WorkflowNode, build_news_image_graph
from .state import WorkflowResult, WorkflowState
from .steps import NewsImageSteps
from ...services.image_generation_service import ImageGenerationParams, ImageGenerator
from ...services.llm_service import LLMProvider, LLMService
from ...services.news_sources.base import NewsSource
from ...utils.date_utils import NewsWindow, recent_window

logger = structlog.get_logger(__name__)


class NewsImageWorkflow:
    """
    Runs fetch -> analyze -> prompt -> generate over one WorkflowState.

    run() yields a complete WorkflowResult or None. Capabilities are passed in
    once and shared across runs; every run builds its own state.
    """

    def __init__(
        self,
        news_source: NewsSource,
        llm_service: LLMService,
        image_generator: ImageGenerator,
        image_params: ImageGenerationParams = ImageGenerationParams(),
        preferred_provider: Optional[LLMProvider] = None,
        analysis_temperature: float = 0.3,
        prompt_temperature: float = 0.7,
        max_tokens: int = 1000,
    ):
        self.news_source = news_source
        self.llm_service = llm_service
        self.image_generator = image_generator
        self.image_params = image_params
        self.preferred_provider = preferred_provider
        self.analysis_temperature = analysis_temperature
        self.prompt_temperature = prompt_temperature
        self.max_tokens = max_tokens

    def build_steps(self, window: NewsWindow) -> NewsImageSteps:
        return NewsImageSteps(
            news_source=self.news_source,
            llm_service=self.llm_service,
            image_generator=self.image_generator,
            window=window,
            image_params=self.image_params,
            preferred_provider=self.preferred_provider,
            analysis_temperature=self.analysis_temperature,
            prompt_temperature=self.prompt_temperature,
            max_tokens=self.max_tokens,
        )

    async def execute(
        self,
        window: Optional[NewsWindow] = None,
        trace: Optional[List[WorkflowNode]] = None,
    ) -> Tuple[WorkflowNode, WorkflowState]:
        window = window or recent_window()
        graph = build_news_image_graph(self.build_steps(window))
        return await graph.execute(WorkflowState(), trace=trace)

    async def run(self, window: Optional[NewsWindow] = None) -> Optional[WorkflowResult]:
        start_time = time.time()
        logger.info("news_image_workflow_started", window=window.label if window else "recent")

        try:
            terminal, state = await self.execute(window)
        except Exception as e:
            logger.error("news_image_workflow_crashed", error=str(e), exc_info=True)
            return None

        if terminal == WorkflowNode.FAILED or state.failed:
            logger.error("news_image_workflow_failed", error=state.error)
            return None

        if not state.image_url:
            logger.error("news_image_workflow_incomplete", has_prompt=bool(state.image_prompt))
            return None

        logger.info(
            "news_image_workflow_completed",
            article_count=len(state.articles),
            theme_count=len(state.themes),
            processing_time=round(time.time() - start_time, 2)
        )
        return WorkflowResult.from_state(state)

    async def analyze(self, window: NewsWindow) -> WorkflowState:
        """Fetch and analyze only; used to backfill the vector store for past dates."""
        steps = self.build_steps(window)
        state = await steps.fetch_news(WorkflowState())
        return await steps.analyze_news(state)
