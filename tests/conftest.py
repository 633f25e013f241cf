from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, List, Optional

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from dogewatch.api.routes import dashboard, news
from dogewatch.domain.models import NewsItem, PriceSnapshot
from dogewatch.domain.services.portfolio_engine import PortfolioEngine
from dogewatch.infrastructure.news.news_feed import FallbackNewsFeed, NamedSource
from dogewatch.infrastructure.portfolio_config.portfolio_feed import default_portfolios
from dogewatch.realtime.state import DashboardStore
from dogewatch.scheduler.refresh import RefreshScheduler

FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakePriceFeed:
    def __init__(self, snapshot: Optional[PriceSnapshot] = None, error: Optional[Exception] = None):
        self.snapshot = snapshot
        self.error = error
        self.calls: List[str] = []

    async def fetch_price_snapshot(self, pair_symbol: str) -> PriceSnapshot:
        self.calls.append(pair_symbol)
        if self.error is not None:
            raise self.error
        return self.snapshot


class FakeNewsSource:
    def __init__(self, items: Optional[List[NewsItem]] = None, error: Optional[Exception] = None):
        self.items = items or []
        self.error = error
        self.calls = 0

    async def get_news(self) -> List[NewsItem]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.items)


class FakePortfolioFeed:
    def __init__(self, portfolios=None, error: Optional[Exception] = None):
        self.portfolios = portfolios or {}
        self.error = error

    async def fetch_portfolios(self):
        if self.error is not None:
            raise self.error
        return dict(self.portfolios)


class FakeScheduler:
    """Stands in for AsyncIOScheduler; records jobs instead of running them."""

    def __init__(self):
        self.jobs = {}
        self.started = False
        self.shutdown_called = False

    def add_job(self, func, trigger, id=None, **kwargs):
        self.jobs[id] = {"func": func, "trigger": trigger, **kwargs}

    def start(self):
        self.started = True

    def shutdown(self, wait=True):
        self.shutdown_called = True


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def snapshot() -> PriceSnapshot:
    return PriceSnapshot(
        symbol="DOGEUSDT",
        price=Decimal("0.025"),
        price_change_percent=Decimal("3.76"),
        volume=Decimal("1000000"),
        high_price=Decimal("0.03"),
        low_price=Decimal("0.02"),
        observed_at=FIXED_NOW,
    )


@pytest.fixture
def news_items() -> List[NewsItem]:
    # Newest first, as providers return them
    return [
        NewsItem(
            id="b",
            title="Dogecoin ETF filing",
            url="https://example.com/b",
            source="example.com",
            published_at=FIXED_NOW - timedelta(minutes=5),
        ),
        NewsItem(
            id="a",
            title="Dogecoin rallies",
            url="https://example.com/a",
            source="example.com",
            published_at=FIXED_NOW - timedelta(hours=2),
        ),
    ]


@pytest.fixture
def price_feed(snapshot) -> FakePriceFeed:
    return FakePriceFeed(snapshot=snapshot)


@pytest.fixture
def rss_source(news_items) -> FakeNewsSource:
    return FakeNewsSource(items=news_items)


@pytest.fixture
def reddit_source() -> FakeNewsSource:
    return FakeNewsSource(
        items=[
            NewsItem(
                id="r1",
                title="Much wow",
                url="https://www.reddit.com/r/dogecoin/comments/r1/",
                source="r/dogecoin",
                published_at=FIXED_NOW - timedelta(days=1),
            )
        ]
    )


@pytest.fixture
def news_feed(rss_source, reddit_source) -> FallbackNewsFeed:
    return FallbackNewsFeed(
        primary=NamedSource("rss", rss_source),
        fallback=NamedSource("reddit", reddit_source),
    )


@pytest.fixture
def store() -> DashboardStore:
    return DashboardStore(default_portfolios("DOGE"), selected="harshi")


@pytest.fixture
def fake_scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def refresher(store, price_feed, news_feed, fake_scheduler) -> RefreshScheduler:
    return RefreshScheduler(
        store=store,
        price_feed=price_feed,
        news_feed=news_feed,
        pair_symbol="DOGEUSDT",
        portfolio_feed=FakePortfolioFeed(default_portfolios("DOGE")),
        clock=lambda: FIXED_NOW,
        scheduler_factory=lambda: fake_scheduler,
    )


@pytest.fixture()
async def app(store, refresher) -> FastAPI:
    app = FastAPI()
    app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["Dashboard"])
    app.include_router(news.router, prefix="/api/v1/news", tags=["News"])

    app.state.store = store
    app.state.refresher = refresher
    app.state.portfolio_engine = PortfolioEngine()
    refresher.activate()
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
