from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class PriceSnapshot:
    """
    Immutable point-in-time read of a trading pair.

    Built only from a fully successful pair of price + 24h stats calls and
    replaced wholesale on the next successful fetch.
    """

    symbol: str
    price: Decimal
    price_change_percent: Decimal

    # 24h statistics
    volume: Decimal
    high_price: Decimal
    low_price: Decimal

    observed_at: datetime

    def __post_init__(self) -> None:
        for name in ("price", "price_change_percent", "volume", "high_price", "low_price"):
            value = getattr(self, name)
            if not isinstance(value, Decimal) or not value.is_finite():
                raise ValueError(f"{name} must be a finite Decimal, got {value!r}")
        if self.price <= 0:
            raise ValueError(f"price must be positive, got {self.price}")
