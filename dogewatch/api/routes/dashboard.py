"""
Dashboard API Routes
Price header, portfolio card and portfolio summary, valued at the latest price
"""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel
from typing import List, Optional

from dogewatch.api.formatters import (
    format_money,
    format_percent,
    format_price,
    format_quantity,
    format_signed_money,
    format_volume,
)
from dogewatch.domain.models import ValuedHolding, ValuedPortfolio
from dogewatch.domain.services.portfolio_engine import PortfolioEngine
from dogewatch.realtime.state import DashboardStore

router = APIRouter()


def _get_store(request: Request) -> DashboardStore:
    return request.app.state.store


def _get_engine(request: Request) -> PortfolioEngine:
    engine = getattr(request.app.state, "portfolio_engine", None)
    return engine or PortfolioEngine()


# Response models
class PriceCardResponse(BaseModel):
    loading: bool
    error: Optional[str] = None
    stale: bool = False
    symbol: Optional[str] = None
    price: Optional[str] = None
    price_change: Optional[str] = None
    change_positive: Optional[bool] = None
    high_24h: Optional[str] = None
    low_24h: Optional[str] = None
    volume_24h: Optional[str] = None
    price_value: Optional[float] = None
    price_change_value: Optional[float] = None
    last_updated: Optional[str] = None


class HoldingCardResponse(BaseModel):
    symbol: str
    quantity: str
    buy_price: str
    invested: str
    current_value: str
    profit_loss: str
    profit_loss_percent: str
    in_profit: bool
    quantity_value: float
    invested_value: float
    current_value_value: float
    profit_loss_value: float
    profit_loss_percent_value: float


class PortfolioCardResponse(BaseModel):
    key: str
    name: str
    title: str
    priced: bool
    holdings: List[HoldingCardResponse]
    total_value: str
    total_change: str
    total_change_percent: str
    portfolios: List[str]


class SummaryRowResponse(BaseModel):
    key: str
    name: str
    profit_loss: str
    profit_loss_percent: str
    in_profit: bool


class PortfolioSummaryResponse(BaseModel):
    priced: bool
    total_invested: str
    total_current: str
    total_profit_loss: str
    total_profit_loss_percent: str
    in_profit: bool
    rows: List[SummaryRowResponse]
    total_invested_value: float
    total_current_value: float
    total_profit_loss_value: float
    total_profit_loss_percent_value: float


def _holding_card(holding: ValuedHolding) -> HoldingCardResponse:
    return HoldingCardResponse(
        symbol=holding.symbol,
        quantity=format_quantity(holding.quantity),
        buy_price=format_price(holding.buy_price),
        invested=format_money(holding.invested_amount),
        current_value=format_money(holding.current_value),
        profit_loss=format_signed_money(holding.profit_loss),
        profit_loss_percent=format_percent(holding.profit_loss_percent),
        in_profit=holding.profit_loss >= 0,
        quantity_value=float(holding.quantity),
        invested_value=float(holding.invested_amount),
        current_value_value=float(holding.current_value),
        profit_loss_value=float(holding.profit_loss),
        profit_loss_percent_value=float(holding.profit_loss_percent),
    )


def _portfolio_card(valued: ValuedPortfolio, keys: List[str]) -> PortfolioCardResponse:
    return PortfolioCardResponse(
        key=valued.key,
        name=valued.name,
        title=f"{valued.name}'s Portfolio",
        priced=valued.priced,
        holdings=[_holding_card(h) for h in valued.holdings],
        total_value=format_money(valued.total_value),
        total_change=format_signed_money(valued.total_change),
        total_change_percent=format_percent(valued.total_change_percent),
        portfolios=keys,
    )


# ---------------------------------------------------------------------
# PRICE
# ---------------------------------------------------------------------

@router.get("/price", response_model=PriceCardResponse)
async def get_price_card(request: Request):
    """Header card: live price, 24h change, high/low and volume."""
    state = _get_store(request).price
    snapshot = state.snapshot

    if snapshot is None:
        return PriceCardResponse(loading=state.loading, error=state.error)

    return PriceCardResponse(
        loading=False,
        error=state.error,
        stale=state.stale,
        symbol=snapshot.symbol,
        price=format_price(snapshot.price),
        price_change=format_percent(snapshot.price_change_percent),
        change_positive=snapshot.price_change_percent >= 0,
        high_24h=format_price(snapshot.high_price),
        low_24h=format_price(snapshot.low_price),
        volume_24h=format_volume(snapshot.volume),
        price_value=float(snapshot.price),
        price_change_value=float(snapshot.price_change_percent),
        last_updated=state.last_updated.isoformat() if state.last_updated else None,
    )


# ---------------------------------------------------------------------
# PORTFOLIO CARD
# ---------------------------------------------------------------------

def _selected_card(request: Request) -> PortfolioCardResponse:
    store = _get_store(request)
    portfolio = store.selected_portfolio()
    if portfolio is None:
        raise HTTPException(status_code=404, detail="No portfolios configured")
    valued = _get_engine(request).value_portfolio(portfolio, store.current_price)
    return _portfolio_card(valued, store.portfolio_keys)


@router.get("/portfolio", response_model=PortfolioCardResponse)
async def get_portfolio_card(request: Request):
    """Currently selected portfolio valued at the latest price."""
    return _selected_card(request)


@router.post("/portfolio/next", response_model=PortfolioCardResponse)
async def next_portfolio(request: Request):
    _get_store(request).select_next()
    return _selected_card(request)


@router.post("/portfolio/previous", response_model=PortfolioCardResponse)
async def previous_portfolio(request: Request):
    _get_store(request).select_previous()
    return _selected_card(request)


# ---------------------------------------------------------------------
# SUMMARY
# ---------------------------------------------------------------------

@router.get("/summary", response_model=PortfolioSummaryResponse)
async def get_portfolio_summary(request: Request):
    """P/L per portfolio plus combined totals."""
    store = _get_store(request)
    engine = _get_engine(request)
    price = store.current_price

    valued = [engine.value_portfolio(p, price) for p in store.portfolio.portfolios.values()]
    summary = engine.aggregate(valued)

    rows = [
        SummaryRowResponse(
            key=v.key,
            name=v.name,
            profit_loss=format_signed_money(v.total_change),
            profit_loss_percent=format_percent(v.total_change_percent),
            in_profit=v.total_change >= 0,
        )
        for v in valued
    ]

    return PortfolioSummaryResponse(
        priced=price is not None,
        total_invested=format_money(summary.total_invested),
        total_current=format_money(summary.total_current),
        total_profit_loss=format_signed_money(summary.total_profit_loss),
        total_profit_loss_percent=format_percent(summary.total_profit_loss_percent),
        in_profit=summary.total_profit_loss >= 0,
        rows=rows,
        total_invested_value=float(summary.total_invested),
        total_current_value=float(summary.total_current),
        total_profit_loss_value=float(summary.total_profit_loss),
        total_profit_loss_percent_value=float(summary.total_profit_loss_percent),
    )
