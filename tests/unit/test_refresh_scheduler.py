import asyncio
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from dogewatch.domain.errors import NetworkError, SchemaError
from dogewatch.infrastructure.news.news_feed import FallbackNewsFeed, NamedSource
from dogewatch.realtime.state import NEWS_ERROR_MESSAGE, PRICE_ERROR_MESSAGE
from dogewatch.scheduler.refresh import RefreshScheduler

from conftest import FIXED_NOW, FakeNewsSource, FakePortfolioFeed, FakePriceFeed


class GatedPriceFeed:
    """Each call blocks until the test releases it, so completion order is controlled."""

    def __init__(self):
        self.gates = []

    async def fetch_price_snapshot(self, pair_symbol):
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        return await gate


def _refresher(store, price_feed, news_feed, **kwargs):
    return RefreshScheduler(
        store=store,
        price_feed=price_feed,
        news_feed=news_feed,
        pair_symbol="DOGEUSDT",
        clock=lambda: FIXED_NOW,
        **kwargs,
    )


class TestLifecycle:
    def test_start_registers_jobs_with_immediate_first_run(self, refresher, fake_scheduler):
        refresher.start()

        assert fake_scheduler.started is True
        assert set(fake_scheduler.jobs) == {"price_refresh", "news_refresh", "portfolio_refresh"}

        price_job = fake_scheduler.jobs["price_refresh"]
        assert price_job["func"] == refresher.refresh_price
        assert isinstance(price_job["trigger"], IntervalTrigger)
        assert price_job["trigger"].interval == timedelta(seconds=5)
        assert price_job["next_run_time"] == FIXED_NOW
        assert fake_scheduler.jobs["news_refresh"]["trigger"].interval == timedelta(seconds=300)
        assert refresher.running is True

    def test_start_is_idempotent(self, refresher, fake_scheduler):
        refresher.start()
        fake_scheduler.jobs.clear()

        refresher.start()

        assert fake_scheduler.jobs == {}

    def test_no_portfolio_job_without_feed(self, store, price_feed, news_feed, fake_scheduler):
        refresher = _refresher(store, price_feed, news_feed, scheduler_factory=lambda: fake_scheduler)
        refresher.start()
        assert "portfolio_refresh" not in fake_scheduler.jobs

    def test_stop_shuts_scheduler_down(self, refresher, fake_scheduler):
        refresher.start()
        refresher.stop()

        assert fake_scheduler.shutdown_called is True
        assert refresher.running is False
        assert refresher.price_sequencer.active is False


class TestPriceRefresh:
    @pytest.mark.asyncio
    async def test_success_updates_store(self, refresher, store, snapshot, price_feed):
        refresher.activate()

        assert await refresher.refresh_price() is True

        assert price_feed.calls == ["DOGEUSDT"]
        assert store.price.snapshot == snapshot
        assert store.price.loading is False
        assert store.price.error is None
        assert store.price.last_updated == FIXED_NOW

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_snapshot(self, refresher, store, snapshot, price_feed):
        refresher.activate()
        await refresher.refresh_price()

        price_feed.error = NetworkError("HTTP 503", source="binance")
        assert await refresher.refresh_price() is True

        assert store.price.snapshot == snapshot
        assert store.price.error == PRICE_ERROR_MESSAGE
        assert store.price.stale is True

    @pytest.mark.asyncio
    async def test_failure_before_first_success_has_no_snapshot(self, refresher, store, price_feed):
        refresher.activate()
        price_feed.error = SchemaError("missing field 'volume'", source="binance")

        await refresher.refresh_price()

        assert store.price.snapshot is None
        assert store.price.loading is False
        assert store.price.error == PRICE_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported_not_raised(self, refresher, store, price_feed):
        refresher.activate()
        price_feed.error = RuntimeError("boom")

        assert await refresher.refresh_price() is True
        assert store.price.error == PRICE_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_older_response_never_overwrites_newer(self, store, news_feed, snapshot):
        feed = GatedPriceFeed()
        refresher = _refresher(store, feed, news_feed)
        refresher.activate()

        first = asyncio.create_task(refresher.refresh_price())
        second = asyncio.create_task(refresher.refresh_price())
        await asyncio.sleep(0)
        assert len(feed.gates) == 2

        newer = replace(snapshot, price=Decimal("0.031"))
        older = replace(snapshot, price=Decimal("0.019"))
        feed.gates[1].set_result(newer)
        assert await second is True
        feed.gates[0].set_result(older)
        assert await first is False

        assert store.price.snapshot.price == Decimal("0.031")
        assert refresher.price_sequencer.discarded == 1

    @pytest.mark.asyncio
    async def test_result_after_stop_is_discarded(self, store, news_feed, snapshot):
        feed = GatedPriceFeed()
        refresher = _refresher(store, feed, news_feed)
        refresher.activate()

        task = asyncio.create_task(refresher.refresh_price())
        await asyncio.sleep(0)
        refresher.stop()
        feed.gates[0].set_result(snapshot)

        assert await task is False
        assert store.price.snapshot is None
        assert store.price.loading is True

    @pytest.mark.asyncio
    async def test_result_in_flight_across_restart_is_discarded(self, store, news_feed, snapshot):
        feed = GatedPriceFeed()
        refresher = _refresher(store, feed, news_feed)
        refresher.activate()

        task = asyncio.create_task(refresher.refresh_price())
        await asyncio.sleep(0)
        refresher.stop()
        refresher.activate()
        feed.gates[0].set_result(snapshot)

        assert await task is False
        assert store.price.snapshot is None

    @pytest.mark.asyncio
    async def test_error_after_stop_is_discarded(self, refresher, store, price_feed):
        price_feed.error = NetworkError("late", source="binance")
        refresher.stop()

        assert await refresher.refresh_price() is False
        assert store.price.error is None


class TestNewsRefresh:
    @pytest.mark.asyncio
    async def test_primary_news_applied(self, refresher, store, news_items):
        refresher.activate()

        assert await refresher.refresh_news() is True

        assert list(store.news.items) == news_items
        assert store.news.source == "rss"
        assert store.news.degraded is False
        assert store.news.last_updated == FIXED_NOW

    @pytest.mark.asyncio
    async def test_degraded_source_is_recorded(self, store, price_feed, reddit_source):
        news_feed = FallbackNewsFeed(
            primary=NamedSource("rss", FakeNewsSource(error=NetworkError("429", source="rss"))),
            fallback=NamedSource("reddit", reddit_source),
        )
        refresher = _refresher(store, price_feed, news_feed)
        refresher.activate()

        await refresher.refresh_news()

        assert [i.id for i in store.news.items] == ["r1"]
        assert store.news.source == "reddit"
        assert store.news.degraded is True

    @pytest.mark.asyncio
    async def test_total_failure_keeps_previous_items(self, refresher, store, news_feed, news_items):
        refresher.activate()
        await refresher.refresh_news()

        news_feed.primary.source.error = NetworkError("down", source="rss")
        news_feed.fallback.source.error = NetworkError("down", source="reddit")
        assert await refresher.refresh_news() is True

        assert list(store.news.items) == news_items
        assert store.news.error == NEWS_ERROR_MESSAGE
        assert store.news.stale is True


class TestPortfolioRefresh:
    @pytest.mark.asyncio
    async def test_feed_replaces_defaults_and_keeps_selection(self, store, price_feed, news_feed):
        feed_portfolios = {
            "arun": store.portfolio.portfolios["arun"],
            "harshi": store.portfolio.portfolios["harshi"],
        }
        refresher = _refresher(
            store, price_feed, news_feed, portfolio_feed=FakePortfolioFeed(feed_portfolios)
        )
        refresher.activate()

        assert await refresher.refresh_portfolios() is True

        assert store.portfolio_keys == ["arun", "harshi"]
        assert store.portfolio.selected == "harshi"
        assert store.portfolio.origin == "feed"

    @pytest.mark.asyncio
    async def test_feed_failure_keeps_defaults(self, store, price_feed, news_feed):
        refresher = _refresher(
            store,
            price_feed,
            news_feed,
            portfolio_feed=FakePortfolioFeed(error=NetworkError("HTTP 404", source="portfolio_feed")),
        )
        refresher.activate()

        assert await refresher.refresh_portfolios() is False

        assert store.portfolio_keys == ["harshi", "arun"]
        assert store.portfolio.origin == "default"

    @pytest.mark.asyncio
    async def test_without_feed_is_noop(self, store, price_feed, news_feed):
        refresher = _refresher(store, price_feed, news_feed)
        refresher.activate()
        assert await refresher.refresh_portfolios() is False

    @pytest.mark.asyncio
    async def test_unexpected_feed_error_is_logged_not_raised(self, store, price_feed, news_feed):
        refresher = _refresher(
            store, price_feed, news_feed, portfolio_feed=FakePortfolioFeed(error=RuntimeError("boom"))
        )
        refresher.activate()

        assert await refresher.refresh_portfolios() is False
        assert store.portfolio.origin == "default"
