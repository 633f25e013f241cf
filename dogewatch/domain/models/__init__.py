"""
Domain Models Package
Export all domain entities
"""

from .market_snapshot import PriceSnapshot
from .news import NewsItem
from .portfolio import (
    Holding,
    Portfolio,
    PortfolioSummary,
    PortfolioTotals,
    ValuedHolding,
    ValuedPortfolio,
)

__all__ = [
    "Holding",
    "NewsItem",
    "Portfolio",
    "PortfolioSummary",
    "PortfolioTotals",
    "PriceSnapshot",
    "ValuedHolding",
    "ValuedPortfolio",
]
