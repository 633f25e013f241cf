"""
PORTFOLIO ENGINE
Value holdings against a live price (NOT fetching)

RESPONSIBILITIES:
- Per-holding current value and profit/loss
- Per-portfolio totals
- Cross-portfolio summary

RULES:
✅ Pure calculation
✅ Deterministic output
✅ Never raises on missing price or zero investment
"""

from __future__ import annotations

from decimal import Decimal
from functools import reduce
from typing import Iterable, Optional

from dogewatch.domain.models import (
    Holding,
    Portfolio,
    PortfolioSummary,
    PortfolioTotals,
    ValuedHolding,
    ValuedPortfolio,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class PortfolioEngine:
    """
    Portfolio Engine
    Combines static holdings with the latest price
    """

    def value_portfolio(
        self,
        portfolio: Portfolio,
        current_price: Optional[Decimal],
    ) -> ValuedPortfolio:
        """
        Value every holding of a portfolio at current_price.

        Args:
            portfolio: Static portfolio definition
            current_price: Latest price, or None before the first snapshot

        Returns:
            ValuedPortfolio. With no price every derived field is zero.
        """
        if not current_price:
            return self._unpriced(portfolio)

        holdings = tuple(self.value_holding(h, current_price) for h in portfolio.holdings)

        total_value = sum((h.current_value for h in holdings), ZERO)
        total_invested = sum((h.invested_amount for h in holdings), ZERO)
        total_change = total_value - total_invested

        return ValuedPortfolio(
            key=portfolio.key,
            name=portfolio.name,
            holdings=holdings,
            total_invested=total_invested,
            total_value=total_value,
            total_change=total_change,
            total_change_percent=self._percent(total_change, total_invested),
            priced=True,
        )

    def value_holding(self, holding: Holding, current_price: Decimal) -> ValuedHolding:
        current_value = holding.quantity * current_price
        profit_loss = current_value - holding.invested_amount
        return ValuedHolding(
            holding=holding,
            current_value=current_value,
            profit_loss=profit_loss,
            profit_loss_percent=self._percent(profit_loss, holding.invested_amount),
        )

    def aggregate(self, portfolios: Iterable[ValuedPortfolio]) -> PortfolioSummary:
        """
        Summarize valued portfolios.

        Invested amounts are summed over every holding of every portfolio.
        If any portfolio is unpriced the current value and P/L are unknown
        and reported as zero.
        """
        totals = reduce(
            lambda acc, p: acc + self.totals_of(p),
            portfolios,
            PortfolioTotals.zero(),
        )

        if not totals.priced:
            return PortfolioSummary(
                total_invested=totals.invested,
                total_current=ZERO,
                total_profit_loss=ZERO,
                total_profit_loss_percent=ZERO,
            )

        profit_loss = totals.current - totals.invested
        return PortfolioSummary(
            total_invested=totals.invested,
            total_current=totals.current,
            total_profit_loss=profit_loss,
            total_profit_loss_percent=self._percent(profit_loss, totals.invested),
        )

    @staticmethod
    def totals_of(portfolio: ValuedPortfolio) -> PortfolioTotals:
        invested = sum((h.invested_amount for h in portfolio.holdings), ZERO)
        return PortfolioTotals(
            invested=invested,
            current=portfolio.total_value,
            priced=portfolio.priced,
        )

    def _unpriced(self, portfolio: Portfolio) -> ValuedPortfolio:
        holdings = tuple(
            ValuedHolding(
                holding=h,
                current_value=ZERO,
                profit_loss=ZERO,
                profit_loss_percent=ZERO,
            )
            for h in portfolio.holdings
        )
        return ValuedPortfolio(
            key=portfolio.key,
            name=portfolio.name,
            holdings=holdings,
            total_invested=ZERO,
            total_value=ZERO,
            total_change=ZERO,
            total_change_percent=ZERO,
            priced=False,
        )

    @staticmethod
    def _percent(change: Decimal, base: Decimal) -> Decimal:
        # Zero investment has no meaningful return
        if base == 0:
            return ZERO
        return change / base * HUNDRED
