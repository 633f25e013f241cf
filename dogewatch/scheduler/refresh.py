"""
REFRESH SCHEDULER

Periodic re-fetch of the price, news and portfolio feeds.
Orchestration only: feeds do the fetching, DashboardStore holds the result.

Each job tags its fetch through a RequestSequencer and applies the result
only when that tag is still current, so a slow response can neither
overwrite a newer one nor land after stop().
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from dogewatch.domain.errors import FeedError
from dogewatch.infrastructure.market_data.types import PriceFeed
from dogewatch.infrastructure.news.news_feed import FallbackNewsFeed
from dogewatch.infrastructure.portfolio_config.portfolio_feed import PortfolioConfigFeed
from dogewatch.realtime.sequencer import RequestSequencer
from dogewatch.realtime.state import DashboardStore
from dogewatch.utils.time import now_utc

logger = logging.getLogger(__name__)

# Overlapping runs are allowed; the sequencer decides whose result sticks.
_MAX_INSTANCES = 3


class RefreshScheduler:
    def __init__(
        self,
        store: DashboardStore,
        price_feed: PriceFeed,
        news_feed: FallbackNewsFeed,
        pair_symbol: str,
        portfolio_feed: Optional[PortfolioConfigFeed] = None,
        price_interval_seconds: float = 5.0,
        news_interval_seconds: float = 300.0,
        portfolio_interval_seconds: float = 30.0,
        clock: Optional[Callable[[], datetime]] = None,
        scheduler_factory: Optional[Callable[[], Any]] = None,
        timezone: str = "UTC",
    ):
        self.store = store
        self.price_feed = price_feed
        self.news_feed = news_feed
        self.portfolio_feed = portfolio_feed
        self.pair_symbol = pair_symbol

        self.price_interval_seconds = price_interval_seconds
        self.news_interval_seconds = news_interval_seconds
        self.portfolio_interval_seconds = portfolio_interval_seconds

        self._clock = clock or now_utc
        self._scheduler_factory = scheduler_factory or (
            lambda: AsyncIOScheduler(timezone=pytz.timezone(timezone))
        )
        self.scheduler: Optional[Any] = None

        self.price_sequencer = RequestSequencer("price")
        self.news_sequencer = RequestSequencer("news")
        self.portfolio_sequencer = RequestSequencer("portfolio")

    @property
    def running(self) -> bool:
        return self.scheduler is not None

    def _sequencers(self):
        return (self.price_sequencer, self.news_sequencer, self.portfolio_sequencer)

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    def activate(self) -> None:
        """Allow fetch results to be applied without scheduling any timers."""
        for sequencer in self._sequencers():
            sequencer.activate()

    def start(self) -> None:
        """Fetch everything once right away, then on each interval."""
        if self.scheduler is not None:
            return

        self.activate()
        scheduler = self._scheduler_factory()
        first_run = self._clock()

        scheduler.add_job(
            self.refresh_price,
            IntervalTrigger(seconds=self.price_interval_seconds),
            id="price_refresh",
            name="Price snapshot refresh",
            next_run_time=first_run,
            max_instances=_MAX_INSTANCES,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.add_job(
            self.refresh_news,
            IntervalTrigger(seconds=self.news_interval_seconds),
            id="news_refresh",
            name="News refresh",
            next_run_time=first_run,
            max_instances=_MAX_INSTANCES,
            coalesce=True,
            replace_existing=True,
        )
        if self.portfolio_feed is not None:
            scheduler.add_job(
                self.refresh_portfolios,
                IntervalTrigger(seconds=self.portfolio_interval_seconds),
                id="portfolio_refresh",
                name="Portfolio config refresh",
                next_run_time=first_run,
                max_instances=_MAX_INSTANCES,
                coalesce=True,
                replace_existing=True,
            )

        scheduler.start()
        self.scheduler = scheduler
        logger.info(
            "Refresh scheduler started (price=%ss, news=%ss, portfolio=%s)",
            self.price_interval_seconds,
            self.news_interval_seconds,
            f"{self.portfolio_interval_seconds}s" if self.portfolio_feed else "off",
        )

    def stop(self) -> None:
        """Cancel the timers. In-flight fetches finish but are not applied."""
        for sequencer in self._sequencers():
            sequencer.deactivate()

        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
            logger.info("Refresh scheduler stopped")

    # ------------------------------------------------------------------
    # JOBS
    # ------------------------------------------------------------------

    async def refresh_price(self) -> bool:
        """Returns True when a result (data or error) was applied."""
        seq = self.price_sequencer.issue()
        try:
            snapshot = await self.price_feed.fetch_price_snapshot(self.pair_symbol)
        except FeedError as exc:
            if not self.price_sequencer.accept(seq):
                return False
            logger.warning("Price refresh failed, keeping last snapshot: %s", exc)
            self.store.apply_price_error()
            return True
        except Exception:
            if not self.price_sequencer.accept(seq):
                return False
            logger.exception("Unexpected error refreshing price")
            self.store.apply_price_error()
            return True

        if not self.price_sequencer.accept(seq):
            return False
        self.store.apply_price(snapshot, at=self._clock())
        return True

    async def refresh_news(self) -> bool:
        seq = self.news_sequencer.issue()
        try:
            items = await self.news_feed.fetch_news()
        except FeedError as exc:
            if not self.news_sequencer.accept(seq):
                return False
            logger.error("News refresh failed: %s", exc)
            self.store.apply_news_error()
            return True
        except Exception:
            if not self.news_sequencer.accept(seq):
                return False
            logger.exception("Unexpected error refreshing news")
            self.store.apply_news_error()
            return True

        if not self.news_sequencer.accept(seq):
            return False
        self.store.apply_news(
            items,
            source=self.news_feed.last_source,
            degraded=self.news_feed.degraded,
            at=self._clock(),
        )
        logger.info("News refreshed: %d items from %s", len(items), self.news_feed.last_source)
        return True

    async def refresh_portfolios(self) -> bool:
        if self.portfolio_feed is None:
            return False

        seq = self.portfolio_sequencer.issue()
        try:
            portfolios = await self.portfolio_feed.fetch_portfolios()
        except FeedError as exc:
            # Defaults or the previous feed contents stay in place
            logger.warning("Portfolio feed refresh failed: %s", exc)
            return False
        except Exception:
            logger.exception("Unexpected error refreshing portfolios")
            return False

        if not self.portfolio_sequencer.accept(seq):
            return False
        self.store.apply_portfolios(portfolios, at=self._clock())
        return True
