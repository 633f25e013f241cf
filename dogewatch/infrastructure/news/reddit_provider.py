"""
Reddit community feed, used when the RSS source is down or rate limited.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from dogewatch.domain.errors import SchemaError
from dogewatch.domain.models import NewsItem
from dogewatch.infrastructure.http_client import request_json
from dogewatch.infrastructure.news.types import newest_first
from dogewatch.utils.time import from_epoch_seconds

logger = logging.getLogger(__name__)

SOURCE = "reddit"


class RedditNewsProvider:
    def __init__(
        self,
        community: str = "dogecoin",
        page_size: int = 20,
        base_url: str = "https://www.reddit.com",
        user_agent: Optional[str] = None,
        timeout_seconds: float = 10.0,
    ):
        self.community = community
        self.page_size = page_size
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds

    async def _request_json(self, url: str, params: Optional[dict] = None) -> Any:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return await request_json(
            url, source=SOURCE, params=params, headers=headers, timeout=self.timeout_seconds
        )

    async def get_news(self) -> List[NewsItem]:
        url = f"{self.base_url}/r/{self.community}/hot.json"
        payload = await self._request_json(url, params={"limit": self.page_size})

        try:
            children = payload["data"]["children"]
        except (KeyError, TypeError) as exc:
            raise SchemaError("reddit listing has no data.children", source=SOURCE) from exc
        if not isinstance(children, list):
            raise SchemaError("reddit data.children is not a list", source=SOURCE)

        items: List[NewsItem] = []
        for child in children:
            try:
                items.append(self._to_item(child["data"]))
            except (KeyError, TypeError, ValueError, OverflowError) as exc:
                logger.warning("Skipping reddit post: %s", exc)
        return newest_first(items)

    def _to_item(self, post: Dict[str, Any]) -> NewsItem:
        return NewsItem(
            id=str(post["id"]),
            title=str(post["title"]),
            url=f"{self.base_url}{post['permalink']}",
            source=f"r/{post['subreddit']}",
            published_at=from_epoch_seconds(post["created_utc"]),
        )
