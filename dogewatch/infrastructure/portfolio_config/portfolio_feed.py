"""
External portfolio definitions.

The feed is a JSON array of ``{name, quantity, price}``. One published
version misspells the name key as ``harhsi``; it is accepted as an
alternate. Until the feed loads, the built-in defaults apply.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from dogewatch.domain.errors import FeedError, SchemaError
from dogewatch.domain.models import Holding, Portfolio
from dogewatch.infrastructure.http_client import request_json
from dogewatch.infrastructure.parsing import parse_decimal

logger = logging.getLogger(__name__)

SOURCE = "portfolio_feed"

_NAME_KEYS = ("name", "harhsi")


def default_portfolios(asset_symbol: str = "DOGE") -> Dict[str, Portfolio]:
    return {
        "harshi": Portfolio(
            key="harshi",
            name="Harshi",
            holdings=(
                Holding(
                    symbol=asset_symbol,
                    quantity=Decimal("75000"),
                    buy_price=Decimal("0.0225"),
                    invested_amount=Decimal("1687.50"),
                ),
            ),
        ),
        "arun": Portfolio(
            key="arun",
            name="Arun",
            holdings=(
                Holding(
                    symbol=asset_symbol,
                    quantity=Decimal("45000"),
                    buy_price=Decimal("0.0275"),
                    invested_amount=Decimal("1237.50"),
                ),
            ),
        ),
    }


def _display_name(name: str) -> str:
    return name[:1].upper() + name[1:]


def parse_portfolios(payload: Any, asset_symbol: str = "DOGE") -> Dict[str, Portfolio]:
    """
    Build portfolios keyed by lowercase name, in feed order.

    Entries without a usable name or numbers are skipped. A later entry with
    the same name replaces an earlier one.
    """
    if not isinstance(payload, list):
        raise SchemaError("portfolio feed is not a JSON array", source=SOURCE)

    portfolios: Dict[str, Portfolio] = {}
    for entry in payload:
        if not isinstance(entry, dict):
            logger.warning("Skipping portfolio entry that is not an object: %r", entry)
            continue

        name: Optional[str] = next(
            (entry[k].strip() for k in _NAME_KEYS if isinstance(entry.get(k), str) and entry[k].strip()),
            None,
        )
        if not name:
            logger.warning("Skipping portfolio entry without a name: %r", entry)
            continue

        try:
            quantity = parse_decimal(entry, "quantity", SOURCE)
            price = parse_decimal(entry, "price", SOURCE)
            holding = Holding(symbol=asset_symbol, quantity=quantity, buy_price=price)
        except (FeedError, ValueError) as exc:
            logger.warning("Skipping portfolio '%s': %s", name, exc)
            continue

        key = name.lower()
        portfolios[key] = Portfolio(key=key, name=_display_name(name), holdings=(holding,))

    if not portfolios:
        raise SchemaError("portfolio feed has no usable entries", source=SOURCE)
    return portfolios


class PortfolioConfigFeed:
    def __init__(
        self,
        url: str,
        asset_symbol: str = "DOGE",
        timeout_seconds: float = 10.0,
    ):
        self.url = url
        self.asset_symbol = asset_symbol
        self.timeout_seconds = timeout_seconds

    async def _request_json(self, url: str) -> Any:
        return await request_json(url, source=SOURCE, timeout=self.timeout_seconds)

    async def fetch_portfolios(self) -> Dict[str, Portfolio]:
        payload = await self._request_json(self.url)
        return parse_portfolios(payload, asset_symbol=self.asset_symbol)
