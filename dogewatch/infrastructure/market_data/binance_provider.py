"""
Binance US Market Data Provider
Spot price + 24h ticker statistics for one trading pair.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from dogewatch.domain.errors import SchemaError
from dogewatch.domain.models import PriceSnapshot
from dogewatch.infrastructure.http_client import request_json
from dogewatch.infrastructure.parsing import parse_decimal
from dogewatch.utils.time import now_utc

logger = logging.getLogger(__name__)

SOURCE = "binance"


class BinanceMarketDataProvider:
    def __init__(
        self,
        api_base_url: str = "https://api.binance.us",
        timeout_seconds: float = 10.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._clock = clock or now_utc

    async def _request_json(self, url: str, params: Optional[dict] = None) -> Any:
        return await request_json(url, source=SOURCE, params=params, timeout=self.timeout_seconds)

    async def _get_object(self, endpoint: str, pair_symbol: str) -> Dict[str, Any]:
        url = f"{self.api_base_url}{endpoint}"
        payload = await self._request_json(url, params={"symbol": pair_symbol})
        if not isinstance(payload, dict):
            raise SchemaError(f"{endpoint} returned {type(payload).__name__}, expected object", source=SOURCE)
        return payload

    # ------------------------------------------------------------------
    # SNAPSHOT
    # ------------------------------------------------------------------

    async def fetch_price_snapshot(self, pair_symbol: str) -> PriceSnapshot:
        """
        Fetch spot price and 24h stats and combine them.

        Both calls must succeed; a failure in either raises and no snapshot
        is produced.
        """
        price_payload = await self._get_object("/api/v3/ticker/price", pair_symbol)
        stats_payload = await self._get_object("/api/v3/ticker/24hr", pair_symbol)

        price = parse_decimal(price_payload, "price", SOURCE)
        if price <= 0:
            raise SchemaError(f"price must be positive, got {price}", source=SOURCE)

        snapshot = PriceSnapshot(
            symbol=str(price_payload.get("symbol") or pair_symbol),
            price=price,
            price_change_percent=parse_decimal(stats_payload, "priceChangePercent", SOURCE),
            volume=parse_decimal(stats_payload, "volume", SOURCE),
            high_price=parse_decimal(stats_payload, "highPrice", SOURCE),
            low_price=parse_decimal(stats_payload, "lowPrice", SOURCE),
            observed_at=self._clock(),
        )
        logger.debug("Snapshot %s price=%s change=%s%%", snapshot.symbol, snapshot.price, snapshot.price_change_percent)
        return snapshot
