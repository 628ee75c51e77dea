"""
Base types for news sources
Clean, simple interface that every source must implement
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass(frozen=True)
class NewsArticleItem:
    """Standardized news item format for all sources"""
    title: str = ""
    description: str = ""
    url: str = ""
    source: str = ""
    published_at: str = ""

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "NewsArticleItem":
        """Coerce a provider payload, substituting "" for anything missing."""
        source = raw.get("source")
        if isinstance(source, dict):
            source = source.get("name")

        return cls(
            title=raw.get("title") or "",
            description=raw.get("description") or "",
            url=raw.get("url") or "",
            source=source or "",
            published_at=raw.get("publishedAt") or raw.get("published_at") or "",
        )


class NewsSource(ABC):
    """Base adapter for news sources"""

    name: str = "base"

    @abstractmethod
    async def search(self, from_date: str, to_date: str) -> List[Dict[str, Any]]:
        """Return raw articles published inside [from_date, to_date]"""
        pass
