"""
Strict field parsing for feed payloads.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from dogewatch.domain.errors import SchemaError


def parse_decimal(payload: Dict[str, Any], field: str, source: str) -> Decimal:
    """
    Read a numeric field strictly.

    Numbers may arrive as JSON numbers or as strings. Anything that is not a
    finite number is a SchemaError; nothing is coerced to zero.
    """
    if not isinstance(payload, dict) or field not in payload:
        raise SchemaError(f"missing field '{field}'", source=source)
    raw = payload[field]
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise SchemaError(f"field '{field}' is not numeric: {raw!r}", source=source)
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise SchemaError(f"field '{field}' is not numeric: {raw!r}", source=source) from exc
    if not value.is_finite():
        raise SchemaError(f"field '{field}' is not finite: {raw!r}", source=source)
    return value
