import re
from typing import Optional

import structlog

from .state import WorkflowState
from ..prompts import ImagePromptPrompts, NewsAnalysisPrompts
from ...services.image_generation_service import ImageGenerationParams, ImageGenerator
from ...services.llm_service import LLMProvider, LLMService
from ...services.news_sources.base import NewsArticleItem, NewsSource
from ...utils.date_utils import NewsWindow

logger = structlog.get_logger(__name__)

SUMMARY_PATTERN = re.compile(r"^\s*SUMMARY:\s*(.+)$", re.MULTILINE)
THEMES_PATTERN = re.compile(r"^\s*THEMES:\s*(.+)$", re.MULTILINE)


def parse_analysis(reply: str) -> Optional[tuple]:
    """Extract (summary, themes) from an analysis reply, or None if either line is missing."""
    summary_match = SUMMARY_PATTERN.search(reply or "")
    themes_match = THEMES_PATTERN.search(reply or "")
    if not summary_match or not themes_match:
        return None

    themes = tuple(theme.strip() for theme in themes_match.group(1).split(",") if theme.strip())
    return summary_match.group(1).strip(), themes


class NewsImageSteps:
    """
    The four workflow steps bound to their capabilities.

    Every step takes a WorkflowState and returns a new one. A step either
    fills its own fields or records an error; once an error is present the
    remaining steps hand the state back untouched.
    """

    def __init__(
        self,
        news_source: NewsSource,
        llm_service: LLMService,
        image_generator: ImageGenerator,
        window: NewsWindow,
        image_params: ImageGenerationParams = ImageGenerationParams(),
        preferred_provider: Optional[LLMProvider] = None,
        analysis_temperature: float = 0.3,
        prompt_temperature: float = 0.7,
        max_tokens: int = 1000,
    ):
        self.news_source = news_source
        self.llm_service = llm_service
        self.image_generator = image_generator
        self.window = window
        self.image_params = image_params
        self.preferred_provider = preferred_provider
        self.analysis_temperature = analysis_temperature
        self.prompt_temperature = prompt_temperature
        self.max_tokens = max_tokens

    async def fetch_news(self, state: WorkflowState) -> WorkflowState:
        if state.failed:
            return state

        try:
            raw_articles = await self.news_source.search(self.window.from_date, self.window.to_date)
        except Exception as e:
            logger.error("fetch_news_failed", from_date=self.window.from_date, to_date=self.window.to_date, error=str(e))
            return state.with_error(f"Failed to fetch news: {str(e)}")

        articles = tuple(NewsArticleItem.from_raw(raw) for raw in raw_articles or [])
        logger.info("fetch_news_completed", article_count=len(articles))
        return state.advance(articles=articles)

    async def analyze_news(self, state: WorkflowState) -> WorkflowState:
        if state.failed:
            return state

        news_context = NewsAnalysisPrompts.build_news_context(state.articles)
        try:
            reply = await self.llm_service.generate_with_fallback(
                system_prompt=NewsAnalysisPrompts.get_analysis_system_prompt(),
                user_prompt=news_context,
                temperature=self.analysis_temperature,
                max_tokens=self.max_tokens,
                preferred_provider=self.preferred_provider,
            )
        except Exception as e:
            logger.error("analyze_news_failed", error=str(e))
            return state.with_error(f"Failed to analyze news: {str(e)}")

        parsed = parse_analysis(reply)
        if parsed is None:
            logger.error("analyze_news_parse_failed", reply_preview=(reply or "")[:200])
            return state.with_error("Failed to parse analysis: expected SUMMARY: and THEMES: lines")

        summary, themes = parsed
        logger.info("analyze_news_completed", theme_count=len(themes))
        return state.advance(summary=summary, themes=themes)

    async def create_image_prompt(self, state: WorkflowState) -> WorkflowState:
        if state.failed:
            return state

        try:
            reply = await self.llm_service.generate_with_fallback(
                system_prompt=ImagePromptPrompts.get_image_prompt_system_prompt(),
                user_prompt=ImagePromptPrompts.build_image_prompt_request(state.summary or "", state.themes),
                temperature=self.prompt_temperature,
                max_tokens=self.max_tokens,
                preferred_provider=self.preferred_provider,
            )
        except Exception as e:
            logger.error("create_image_prompt_failed", error=str(e))
            return state.with_error(f"Failed to create image prompt: {str(e)}")

        image_prompt = (reply or "").strip()
        if not image_prompt:
            return state.with_error("Failed to create image prompt: empty reply")

        logger.info("create_image_prompt_completed", word_count=len(image_prompt.split()))
        return state.advance(image_prompt=image_prompt)

    async def generate_image(self, state: WorkflowState) -> WorkflowState:
        if state.failed or not state.image_prompt:
            return state

        try:
            image_url = await self.image_generator.generate(state.image_prompt, self.image_params)
        except Exception as e:
            logger.error("generate_image_failed", error=str(e))
            return state.with_error(f"Failed to generate image: {str(e)}")

        logger.info("generate_image_completed")
        return state.advance(image_url=image_url)
