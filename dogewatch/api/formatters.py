"""
Display formatting for dashboard cards.

Pure functions, en-US conventions. Amounts are rounded half away from
zero, matching browser Intl output.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

_SIX_PLACES = Decimal("0.000001")
_TWO_PLACES = Decimal("0.01")
_ONE_PLACE = Decimal("0.1")
_THREE_PLACES = Decimal("0.001")

_COMPACT_UNITS = (
    (Decimal("1"), ""),
    (Decimal("1e3"), "K"),
    (Decimal("1e6"), "M"),
    (Decimal("1e9"), "B"),
    (Decimal("1e12"), "T"),
)

_TIME_BUCKETS = (
    (31536000, "year"),
    (2592000, "month"),
    (86400, "day"),
    (3600, "hour"),
    (60, "minute"),
)


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _currency(value: Number, places: Decimal) -> str:
    amount = _to_decimal(value).quantize(places, rounding=ROUND_HALF_UP)
    digits = -places.as_tuple().exponent
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.{digits}f}"


def format_price(price: Number) -> str:
    """USD with exactly six fractional digits, e.g. ``$0.022500``."""
    return _currency(price, _SIX_PLACES)


def format_money(amount: Number) -> str:
    """USD with two fractional digits, e.g. ``$1,687.50``."""
    return _currency(amount, _TWO_PLACES)


def format_signed_money(amount: Number) -> str:
    text = format_money(amount)
    return text if text.startswith("-") else f"+{text}"


def format_percent(percent: Number) -> str:
    raw = _to_decimal(percent)
    value = raw.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    # Sign of the unrounded value, so -0.001 reads -0.00%
    sign = "+" if raw >= 0 else "-"
    return f"{sign}{abs(value):.2f}%"


def format_volume(volume: Number) -> str:
    """Compact notation with at most one fractional digit: 1.2K, 3M, 4.5B."""
    value = _to_decimal(volume)
    sign = "-" if value < 0 else ""
    magnitude = abs(value)

    index = 0
    for i, (threshold, _) in enumerate(_COMPACT_UNITS):
        if magnitude >= threshold:
            index = i

    scaled = (magnitude / _COMPACT_UNITS[index][0]).quantize(_ONE_PLACE, rounding=ROUND_HALF_UP)
    # 999,950 rounds to 1000K; show it as 1M instead
    if scaled >= 1000 and index < len(_COMPACT_UNITS) - 1:
        index += 1
        scaled = (magnitude / _COMPACT_UNITS[index][0]).quantize(_ONE_PLACE, rounding=ROUND_HALF_UP)

    text = f"{scaled:,.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return f"{sign}{text}{_COMPACT_UNITS[index][1]}"


def format_quantity(quantity: Number) -> str:
    """Grouped quantity with up to three fractional digits, e.g. ``75,000``."""
    value = _to_decimal(quantity).quantize(_THREE_PLACES, rounding=ROUND_HALF_UP)
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text


def format_time_ago(instant: datetime, now: Optional[datetime] = None) -> str:
    """
    Relative time such as ``3 hours ago``.

    The coarsest bucket whose quotient is >= 1 wins; the unit is plural when
    the floored value is > 1. Anything under a minute, including instants in
    the future, renders as seconds with a minimum of 1.
    """
    if now is None:
        now = datetime.now(tz=timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - instant).total_seconds() // 1)

    for divisor, unit in _TIME_BUCKETS:
        interval = seconds / divisor
        if interval >= 1:
            count = int(interval)
            return f"{count} {unit}{'s' if count > 1 else ''} ago"

    return f"{max(1, seconds)} seconds ago"
