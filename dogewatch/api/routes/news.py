"""
News API Routes
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel
from typing import List, Optional

from dogewatch.api.formatters import format_time_ago
from dogewatch.utils.time import now_utc

router = APIRouter()


class NewsCardResponse(BaseModel):
    id: str
    title: str
    url: str
    source: str
    published_at: str
    time_ago: str


class NewsResponse(BaseModel):
    loading: bool
    error: Optional[str] = None
    stale: bool = False
    source: Optional[str] = None
    degraded: bool = False
    last_updated: Optional[str] = None
    items: List[NewsCardResponse]


def _render(request: Request) -> NewsResponse:
    state = request.app.state.store.news
    now = now_utc()
    return NewsResponse(
        loading=state.loading,
        error=state.error,
        stale=state.stale,
        source=state.source,
        degraded=state.degraded,
        last_updated=state.last_updated.isoformat() if state.last_updated else None,
        items=[
            NewsCardResponse(
                id=item.id,
                title=item.title,
                url=item.url,
                source=item.source,
                published_at=item.published_at.isoformat(),
                time_ago=format_time_ago(item.published_at, now=now),
            )
            for item in state.items
        ],
    )


@router.get("", response_model=NewsResponse)
async def get_news(request: Request):
    """Newest-first news cards."""
    return _render(request)


@router.post("/refresh", response_model=NewsResponse)
async def refresh_news(request: Request):
    """Fetch news now instead of waiting for the next tick."""
    await request.app.state.refresher.refresh_news()
    return _render(request)
