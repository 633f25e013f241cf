import pytest
from decimal import Decimal

from dogewatch.domain.errors import NetworkError, SchemaError
from dogewatch.infrastructure.portfolio_config.portfolio_feed import (
    PortfolioConfigFeed,
    default_portfolios,
    parse_portfolios,
)


def test_defaults_match_published_holdings():
    portfolios = default_portfolios("DOGE")

    assert list(portfolios) == ["harshi", "arun"]
    harshi = portfolios["harshi"].holdings[0]
    assert harshi.quantity == Decimal("75000")
    assert harshi.buy_price == Decimal("0.0225")
    assert harshi.invested_amount == Decimal("1687.50")
    assert portfolios["arun"].holdings[0].invested_amount == Decimal("1237.50")


def test_parse_accepts_misspelled_name_key():
    portfolios = parse_portfolios(
        [
            {"harhsi": "harshi", "quantity": 80000, "price": "0.021"},
            {"name": "arun", "quantity": "45000", "price": 0.0275},
        ]
    )

    assert list(portfolios) == ["harshi", "arun"]
    assert portfolios["harshi"].name == "Harshi"
    holding = portfolios["harshi"].holdings[0]
    assert holding.quantity == Decimal("80000")
    assert holding.invested_amount == Decimal("1680.000")


def test_parse_skips_unusable_entries():
    portfolios = parse_portfolios(
        [
            "not an object",
            {"quantity": 10, "price": "0.1"},
            {"name": "  ", "quantity": 10, "price": "0.1"},
            {"name": "bad", "quantity": "lots", "price": "0.1"},
            {"name": "free", "quantity": 10, "price": "0"},
            {"name": "Kept", "quantity": 10, "price": "0.1"},
        ]
    )
    assert list(portfolios) == ["kept"]
    assert portfolios["kept"].name == "Kept"


@pytest.mark.parametrize("payload", [{"name": "harshi"}, [], [{"name": "x"}]])
def test_parse_rejects_unusable_feed(payload):
    with pytest.raises(SchemaError):
        parse_portfolios(payload)


@pytest.mark.asyncio
async def test_fetch_portfolios(monkeypatch):
    feed = PortfolioConfigFeed(url="https://example.com/price.json", asset_symbol="DOGE")

    async def fake_request_json(url):
        assert url == "https://example.com/price.json"
        return [{"name": "arun", "quantity": 1000, "price": "0.03"}]

    monkeypatch.setattr(feed, "_request_json", fake_request_json)
    portfolios = await feed.fetch_portfolios()

    assert portfolios["arun"].holdings[0].symbol == "DOGE"


@pytest.mark.asyncio
async def test_fetch_propagates_network_error(monkeypatch):
    feed = PortfolioConfigFeed(url="https://example.com/price.json")

    async def fake_request_json(url):
        raise NetworkError("HTTP 404", source="portfolio_feed")

    monkeypatch.setattr(feed, "_request_json", fake_request_json)
    with pytest.raises(NetworkError):
        await feed.fetch_portfolios()
