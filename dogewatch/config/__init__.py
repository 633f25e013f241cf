"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    BASE_PATH: str = "/crypto-react"
    TIMEZONE: str = "UTC"

    # ======================
    # Market Data
    # ======================
    PAIR_SYMBOL: str = "DOGEUSDT"
    ASSET_SYMBOL: str = "DOGE"
    MARKET_DATA_BASE_URL: str = "https://api.binance.us"

    # ======================
    # News
    # ======================
    NEWS_QUERY: str = "dogecoin"
    NEWS_RSS_URL: str = "https://news.google.com/rss/search?q={query}&hl=en-US&gl=US&ceid=US:en"
    RSS2JSON_URL: str = "https://api.rss2json.com/v1/api.json"
    REDDIT_BASE_URL: str = "https://www.reddit.com"
    REDDIT_COMMUNITY: str = "dogecoin"
    REDDIT_PAGE_SIZE: int = 20

    # ======================
    # Portfolio feed
    # ======================
    PORTFOLIO_FEED_ENABLED: bool = True
    PORTFOLIO_FEED_URL: Optional[str] = (
        "https://raw.githubusercontent.com/arunk1234/financial-calculators/master/price.json"
    )
    DEFAULT_PORTFOLIO: str = "harshi"

    # ======================
    # Scheduler
    # ======================
    SCHEDULER_ENABLED: bool = True
    PRICE_REFRESH_SECONDS: float = 5.0
    NEWS_REFRESH_SECONDS: float = 300.0
    PORTFOLIO_REFRESH_SECONDS: float = 30.0

    # ======================
    # HTTP
    # ======================
    HTTP_TIMEOUT_SECONDS: float = 10.0
    HTTP_USER_AGENT: str = "dogewatch/1.0 (+https://github.com/dogewatch)"

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
