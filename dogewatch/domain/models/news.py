from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NewsItem:
    """A news or discussion item normalized from either news source."""

    id: str
    title: str
    url: str
    source: str
    published_at: datetime
