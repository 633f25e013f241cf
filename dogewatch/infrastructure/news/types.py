"""
News source protocol for type hints.
"""

from __future__ import annotations

from typing import List, Protocol

from dogewatch.domain.models import NewsItem


class NewsSource(Protocol):
    async def get_news(self) -> List[NewsItem]:
        ...


def newest_first(items: List[NewsItem]) -> List[NewsItem]:
    # sorted() is stable with reverse=True, so equal timestamps keep source order
    return sorted(items, key=lambda item: item.published_at, reverse=True)
