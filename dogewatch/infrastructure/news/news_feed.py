"""
News feed - try primary, then fallback.

Unlike the market data chain, results are never merged: the first source
that succeeds supplies the whole list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from dogewatch.domain.errors import DegradedModeError, FeedError
from dogewatch.domain.models import NewsItem
from dogewatch.infrastructure.news.types import NewsSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedSource:
    name: str
    source: NewsSource


class FallbackNewsFeed:
    def __init__(self, primary: NamedSource, fallback: NamedSource):
        self.primary = primary
        self.fallback = fallback
        self.last_source: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.last_source == self.fallback.name

    async def fetch_news(self) -> List[NewsItem]:
        """
        Newest-first news from the primary source, or from the fallback when
        the primary fails.

        Raises:
            DegradedModeError: both sources failed
        """
        try:
            items = await self.primary.source.get_news()
        except FeedError as exc:
            primary_error = exc
            logger.warning("News source '%s' failed, falling back to '%s': %s",
                           self.primary.name, self.fallback.name, exc)
        else:
            self.last_source = self.primary.name
            return items

        try:
            items = await self.fallback.source.get_news()
        except FeedError as fallback_error:
            self.last_source = None
            raise DegradedModeError(primary_error, fallback_error) from fallback_error

        self.last_source = self.fallback.name
        return items
