"""Time utilities (UTC)."""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive values as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(raw: str) -> datetime:
    """
    Parse an ISO-8601 or RFC 2822 timestamp into an aware UTC datetime.

    rss2json emits ``2024-05-01 13:45:00`` (UTC, no offset); raw RSS uses
    ``Wed, 01 May 2024 13:45:00 GMT``.
    """
    text = (raw or "").strip()
    if not text:
        raise ValueError("empty timestamp")
    try:
        return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass
    try:
        return ensure_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"unrecognized timestamp: {raw!r}") from exc


def from_epoch_seconds(value: float) -> datetime:
    return datetime.fromtimestamp(float(value), tz=timezone.utc)
