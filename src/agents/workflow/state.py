from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ...services.news_sources.base import NewsArticleItem


@dataclass(frozen=True)
class WorkflowState:
    articles: Tuple[NewsArticleItem, ...] = ()
    summary: Optional[str] = None
    themes: Tuple[str, ...] = ()
    image_prompt: Optional[str] = None
    image_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return bool(self.error)

    def with_error(self, message: str) -> "WorkflowState":
        # The first error of a run wins
        if self.failed:
            return self
        return replace(self, error=message)

    def advance(self, **changes) -> "WorkflowState":
        return replace(self, **changes)


@dataclass(frozen=True)
class WorkflowResult:
    summary: str
    themes: Tuple[str, ...]
    image_prompt: str
    image_url: str

    @classmethod
    def from_state(cls, state: WorkflowState) -> "WorkflowResult":
        return cls(
            summary=state.summary or "",
            themes=state.themes,
            image_prompt=state.image_prompt or "",
            image_url=state.image_url or "",
        )

    @property
    def analysis(self) -> str:
        return f"{self.summary}\n\nThemes: {', '.join(self.themes)}"

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "themes": list(self.themes),
            "image_prompt": self.image_prompt,
            "image_url": self.image_url,
        }
