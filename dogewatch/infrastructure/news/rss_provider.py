"""
Google News RSS provider via the rss2json translation service.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus, urlparse

from dogewatch.domain.errors import SchemaError
from dogewatch.domain.models import NewsItem
from dogewatch.infrastructure.http_client import request_json
from dogewatch.infrastructure.news.types import newest_first
from dogewatch.utils.time import parse_timestamp

logger = logging.getLogger(__name__)

SOURCE = "rss"


def source_from_link(url: str) -> str:
    """Hostname of url without a leading ``www.``."""
    host = urlparse(url).hostname
    if not host:
        raise ValueError(f"link has no hostname: {url!r}")
    if host.startswith("www."):
        host = host[len("www."):]
    return host


class RssNewsProvider:
    def __init__(
        self,
        rss_url: str,
        rss2json_url: str = "https://api.rss2json.com/v1/api.json",
        timeout_seconds: float = 10.0,
    ):
        self.rss_url = rss_url
        self.rss2json_url = rss2json_url
        self.timeout_seconds = timeout_seconds

    @classmethod
    def for_query(cls, query: str, rss_url_template: str, **kwargs: Any) -> "RssNewsProvider":
        return cls(rss_url=rss_url_template.format(query=quote_plus(query)), **kwargs)

    async def _request_json(self, url: str, params: Optional[dict] = None) -> Any:
        return await request_json(url, source=SOURCE, params=params, timeout=self.timeout_seconds)

    async def get_news(self) -> List[NewsItem]:
        payload = await self._request_json(self.rss2json_url, params={"rss_url": self.rss_url})
        if not isinstance(payload, dict):
            raise SchemaError("rss2json returned a non-object body", source=SOURCE)

        status = payload.get("status", "ok")
        if status != "ok":
            raise SchemaError(f"rss2json status={status}: {payload.get('message', '')}", source=SOURCE)

        raw_items = payload.get("items") or []
        if not isinstance(raw_items, list):
            raise SchemaError("rss2json 'items' is not a list", source=SOURCE)

        items: List[NewsItem] = []
        for raw in raw_items:
            try:
                items.append(self._to_item(raw))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping RSS item: %s", exc)
        return newest_first(items)

    @staticmethod
    def _to_item(raw: Dict[str, Any]) -> NewsItem:
        url = raw["link"]
        if not isinstance(url, str) or not url:
            raise ValueError("item has no link")
        return NewsItem(
            id=str(raw.get("guid") or url),
            title=str(raw["title"]),
            url=url,
            source=str(raw.get("author") or source_from_link(url)),
            published_at=parse_timestamp(raw["pubDate"]),
        )
