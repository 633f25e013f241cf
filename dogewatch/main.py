"""
FastAPI Main Application with Refresh Scheduler
Live Dogecoin price, portfolio P/L and news
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dataclasses import dataclass
import logging
from typing import AsyncGenerator, Optional

from dogewatch.config import Settings, settings
from dogewatch.core.logging import setup_logging
from dogewatch.domain.services.portfolio_engine import PortfolioEngine
from dogewatch.infrastructure.market_data.binance_provider import BinanceMarketDataProvider
from dogewatch.infrastructure.news.news_feed import FallbackNewsFeed, NamedSource
from dogewatch.infrastructure.news.reddit_provider import RedditNewsProvider
from dogewatch.infrastructure.news.rss_provider import RssNewsProvider
from dogewatch.infrastructure.portfolio_config.portfolio_feed import (
    PortfolioConfigFeed,
    default_portfolios,
)
from dogewatch.realtime.state import DashboardStore
from dogewatch.scheduler.refresh import RefreshScheduler

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: DashboardStore
    refresher: RefreshScheduler
    portfolio_engine: PortfolioEngine


def build_services(cfg: Optional[Settings] = None) -> Services:
    """Wire feeds, state and scheduler from settings."""
    cfg = cfg or settings
    timeout = cfg.HTTP_TIMEOUT_SECONDS

    store = DashboardStore(
        portfolios=default_portfolios(cfg.ASSET_SYMBOL),
        selected=cfg.DEFAULT_PORTFOLIO,
    )

    price_feed = BinanceMarketDataProvider(
        api_base_url=cfg.MARKET_DATA_BASE_URL,
        timeout_seconds=timeout,
    )
    news_feed = FallbackNewsFeed(
        primary=NamedSource(
            "rss",
            RssNewsProvider.for_query(
                cfg.NEWS_QUERY,
                cfg.NEWS_RSS_URL,
                rss2json_url=cfg.RSS2JSON_URL,
                timeout_seconds=timeout,
            ),
        ),
        fallback=NamedSource(
            "reddit",
            RedditNewsProvider(
                community=cfg.REDDIT_COMMUNITY,
                page_size=cfg.REDDIT_PAGE_SIZE,
                base_url=cfg.REDDIT_BASE_URL,
                user_agent=cfg.HTTP_USER_AGENT,
                timeout_seconds=timeout,
            ),
        ),
    )
    portfolio_feed = None
    if cfg.PORTFOLIO_FEED_ENABLED and cfg.PORTFOLIO_FEED_URL:
        portfolio_feed = PortfolioConfigFeed(
            url=cfg.PORTFOLIO_FEED_URL,
            asset_symbol=cfg.ASSET_SYMBOL,
            timeout_seconds=timeout,
        )

    refresher = RefreshScheduler(
        store=store,
        price_feed=price_feed,
        news_feed=news_feed,
        pair_symbol=cfg.PAIR_SYMBOL,
        portfolio_feed=portfolio_feed,
        price_interval_seconds=cfg.PRICE_REFRESH_SECONDS,
        news_interval_seconds=cfg.NEWS_REFRESH_SECONDS,
        portfolio_interval_seconds=cfg.PORTFOLIO_REFRESH_SECONDS,
        timezone=cfg.TIMEZONE,
    )
    return Services(store=store, refresher=refresher, portfolio_engine=PortfolioEngine())


def install_services(app: FastAPI, services: Services) -> None:
    app.state.store = services.store
    app.state.refresher = services.refresher
    app.state.portfolio_engine = services.portfolio_engine


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Starts the refresh timers on startup and cancels them on shutdown
    """
    logger.info("Starting DogeWatch (%s, pair=%s)", settings.APP_ENV, settings.PAIR_SYMBOL)

    services = build_services()
    install_services(app, services)

    if settings.SCHEDULER_ENABLED:
        services.refresher.start()
    else:
        services.refresher.activate()
        logger.info("Scheduler disabled; data refreshes only on request")

    yield

    logger.info("Shutting down DogeWatch")
    services.refresher.stop()


app = FastAPI(
    title="DogeWatch",
    description="Live Dogecoin price, portfolio P/L and news",
    version="1.0.0",
    lifespan=lifespan,
    root_path=settings.BASE_PATH,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Scheduler and feed status."""
    store = getattr(app.state, "store", None)
    refresher = getattr(app.state, "refresher", None)

    return {
        "status": "healthy",
        "service": "DogeWatch",
        "version": "1.0.0",
        "scheduler": "running" if refresher and refresher.running else "stopped",
        "feeds": {
            "price": {
                "has_data": bool(store and store.price.snapshot),
                "error": store.price.error if store else None,
            },
            "news": {
                "items": len(store.news.items) if store else 0,
                "source": store.news.source if store else None,
                "degraded": store.news.degraded if store else False,
                "error": store.news.error if store else None,
            },
            "portfolios": {
                "origin": store.portfolio.origin if store else None,
                "count": len(store.portfolio.portfolios) if store else 0,
            },
        },
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "DogeWatch",
        "version": "1.0.0",
        "pair": settings.PAIR_SYMBOL,
        "docs": "/docs",
    }


# Import and include routers
from dogewatch.api.routes import dashboard, news  # noqa: E402

app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["Dashboard"])
app.include_router(news.router, prefix="/api/v1/news", tags=["News"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("dogewatch.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
