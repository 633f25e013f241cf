"""
Market data provider protocol for type hints.
"""

from __future__ import annotations

from typing import Protocol

from dogewatch.domain.models import PriceSnapshot


class PriceFeed(Protocol):
    async def fetch_price_snapshot(self, pair_symbol: str) -> PriceSnapshot:
        ...
