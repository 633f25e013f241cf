"""
DOMAIN MODELS - PORTFOLIO & PnL

Immutable structures representing holdings and their valuations.
No market data fetching. Valued* objects are rebuilt on every price tick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple

ZERO = Decimal("0")


@dataclass(frozen=True)
class Holding:
    """
    Static ownership record: some quantity bought at a known price.

    invested_amount defaults to quantity * buy_price. When the source supplies
    it explicitly it is kept as given.
    """
    symbol: str
    quantity: Decimal
    buy_price: Decimal
    invested_amount: Optional[Decimal] = None

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(f"quantity must be >= 0, got {self.quantity}")
        if self.buy_price <= 0:
            raise ValueError(f"buy_price must be > 0, got {self.buy_price}")
        if self.invested_amount is None:
            object.__setattr__(self, "invested_amount", self.quantity * self.buy_price)


@dataclass(frozen=True)
class Portfolio:
    key: str
    name: str
    holdings: Tuple[Holding, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ValuedHolding:
    holding: Holding
    current_value: Decimal
    profit_loss: Decimal
    profit_loss_percent: Decimal

    @property
    def symbol(self) -> str:
        return self.holding.symbol

    @property
    def quantity(self) -> Decimal:
        return self.holding.quantity

    @property
    def buy_price(self) -> Decimal:
        return self.holding.buy_price

    @property
    def invested_amount(self) -> Decimal:
        return self.holding.invested_amount  # type: ignore[return-value]


@dataclass(frozen=True)
class ValuedPortfolio:
    """
    Portfolio valued against one price.

    priced is False when no price was available; every derived figure is
    then zero.
    """
    key: str
    name: str
    holdings: Tuple[ValuedHolding, ...]
    total_invested: Decimal
    total_value: Decimal
    total_change: Decimal
    total_change_percent: Decimal
    priced: bool


@dataclass(frozen=True)
class PortfolioTotals:
    """
    Additive partial sums used to aggregate portfolios.

    Addition is associative and commutative with zero() as identity, so any
    grouping or order of portfolios gives the same result.
    """
    invested: Decimal = ZERO
    current: Decimal = ZERO
    priced: bool = True

    @classmethod
    def zero(cls) -> "PortfolioTotals":
        return cls()

    def __add__(self, other: "PortfolioTotals") -> "PortfolioTotals":
        return PortfolioTotals(
            invested=self.invested + other.invested,
            current=self.current + other.current,
            priced=self.priced and other.priced,
        )


@dataclass(frozen=True)
class PortfolioSummary:
    total_invested: Decimal
    total_current: Decimal
    total_profit_loss: Decimal
    total_profit_loss_percent: Decimal
