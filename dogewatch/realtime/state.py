"""
Dashboard view state.

Single owner of what the dashboard shows: the latest price snapshot, the
news list, the portfolio definitions and which portfolio is selected.
Written by the refresh jobs, read by the API routes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from dogewatch.domain.models import NewsItem, Portfolio, PriceSnapshot

PRICE_ERROR_MESSAGE = "Failed to fetch Dogecoin data. Retrying..."
NEWS_ERROR_MESSAGE = "Failed to fetch news. Please try again later."


@dataclass
class PriceState:
    snapshot: Optional[PriceSnapshot] = None
    last_updated: Optional[datetime] = None
    loading: bool = True
    error: Optional[str] = None

    @property
    def stale(self) -> bool:
        return self.error is not None and self.snapshot is not None


@dataclass
class NewsState:
    items: Tuple[NewsItem, ...] = ()
    last_updated: Optional[datetime] = None
    loading: bool = True
    error: Optional[str] = None
    source: Optional[str] = None
    degraded: bool = False

    @property
    def stale(self) -> bool:
        return self.error is not None and self.last_updated is not None


@dataclass
class PortfolioState:
    portfolios: Dict[str, Portfolio] = field(default_factory=dict)
    selected: Optional[str] = None
    origin: str = "default"
    last_updated: Optional[datetime] = None


class DashboardStore:
    def __init__(self, portfolios: Dict[str, Portfolio], selected: Optional[str] = None):
        self.price = PriceState()
        self.news = NewsState()
        self.portfolio = PortfolioState()
        self._set_portfolios(portfolios, preferred=selected)

    # ------------------------------------------------------------------
    # PRICE
    # ------------------------------------------------------------------

    def apply_price(self, snapshot: PriceSnapshot, at: datetime) -> None:
        self.price = PriceState(snapshot=snapshot, last_updated=at, loading=False, error=None)

    def apply_price_error(self, message: str = PRICE_ERROR_MESSAGE) -> None:
        # Keep the previous snapshot on screen
        self.price.loading = False
        self.price.error = message

    @property
    def current_price(self):
        snapshot = self.price.snapshot
        return snapshot.price if snapshot else None

    # ------------------------------------------------------------------
    # NEWS
    # ------------------------------------------------------------------

    def apply_news(self, items: List[NewsItem], source: Optional[str], degraded: bool, at: datetime) -> None:
        self.news = NewsState(
            items=tuple(items),
            last_updated=at,
            loading=False,
            error=None,
            source=source,
            degraded=degraded,
        )

    def apply_news_error(self, message: str = NEWS_ERROR_MESSAGE) -> None:
        self.news.loading = False
        self.news.error = message

    # ------------------------------------------------------------------
    # PORTFOLIOS
    # ------------------------------------------------------------------

    def apply_portfolios(self, portfolios: Dict[str, Portfolio], at: datetime, origin: str = "feed") -> None:
        self._set_portfolios(portfolios, preferred=self.portfolio.selected)
        self.portfolio.origin = origin
        self.portfolio.last_updated = at

    def _set_portfolios(self, portfolios: Dict[str, Portfolio], preferred: Optional[str]) -> None:
        self.portfolio.portfolios = dict(portfolios)
        if preferred in self.portfolio.portfolios:
            self.portfolio.selected = preferred
        else:
            self.portfolio.selected = next(iter(self.portfolio.portfolios), None)

    @property
    def portfolio_keys(self) -> List[str]:
        return list(self.portfolio.portfolios)

    def selected_portfolio(self) -> Optional[Portfolio]:
        if self.portfolio.selected is None:
            return None
        return self.portfolio.portfolios.get(self.portfolio.selected)

    def select_next(self) -> Optional[Portfolio]:
        return self._step(1)

    def select_previous(self) -> Optional[Portfolio]:
        return self._step(-1)

    def _step(self, offset: int) -> Optional[Portfolio]:
        keys = self.portfolio_keys
        if not keys:
            return None
        try:
            index = keys.index(self.portfolio.selected)
        except ValueError:
            index = 0
            offset = 0
        self.portfolio.selected = keys[(index + offset) % len(keys)]
        return self.selected_portfolio()
