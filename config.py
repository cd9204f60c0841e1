"""
Application configuration settings.

Centralizes all configuration parameters for the portfolio tracker.
Supports environment-based configuration and sensible defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    path: Path = field(default_factory=lambda: Path("db/portfolio.db"))
    echo: bool = False

    @property
    def url(self) -> str:
        """SQLAlchemy connection URL."""
        # Prefer direct URL if provided in environment
        env_url = os.environ.get("PORTFOLIO_DB_URL") or os.environ.get("DATABASE_URL")
        if env_url:
            return env_url

        return f"sqlite:///{self.path}"


@dataclass(frozen=True)
class MarketDataConfig:
    """Market data provider configuration (NSE + Yahoo Finance)."""
    nse_base_url: str = "https://www.nseindia.com/api"
    nse_suffix: str = ".NS"
    nifty50_symbol: str = "^NSEI"
    user_agent: str = "Mozilla/5.0"

    # HTTP timeout (seconds)
    http_timeout: float = 10.0

    # Quote cache validity window (seconds)
    quote_cache_seconds: float = 60.0

    # Rate limiting between batched requests (seconds)
    quote_request_delay: float = 0.05
    metadata_request_delay: float = 0.1

    # Symbol search
    search_min_query_length: int = 2
    search_max_results: int = 10


@dataclass(frozen=True)
class AnalyticsConfig:
    """Dashboard analytics settings."""
    performer_limit: int = 5
    what_if_presets: tuple[float, ...] = (-20.0, -10.0, 0.0, 10.0, 20.0)
    days_per_year: float = 365.0


@dataclass(frozen=True)
class AuthConfig:
    """Local authentication settings."""
    min_password_length: int = 6
    bcrypt_rounds: int = 12


@dataclass(frozen=True)
class UIConfig:
    """Dashboard UI configuration."""
    page_title: str = "My Portfolio"
    layout: str = "wide"
    currency_symbol: str = "₹"

    # Number formatting
    decimal_places: int = 2
    percentage_decimal_places: int = 2


@dataclass
class Config:
    """
    Main configuration container.

    Usage:
        from config import config
        db_path = config.database.path
    """
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    market_data: MarketDataConfig = field(default_factory=MarketDataConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    # Base paths
    project_root: ClassVar[Path] = Path(__file__).parent

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create config from environment variables.

        Supports overrides via:
        - PORTFOLIO_DB_PATH: Custom database path
        - PORTFOLIO_QUOTE_CACHE_SECONDS: Quote cache validity window
        - PORTFOLIO_HTTP_TIMEOUT: Market data HTTP timeout
        """
        db_path_env = os.getenv("PORTFOLIO_DB_PATH")
        db_config = DatabaseConfig(
            path=Path(db_path_env) if db_path_env else DatabaseConfig().path,
            echo=os.getenv("PORTFOLIO_SQL_ECHO", "").lower() in ("1", "true", "yes"),
        )

        defaults = MarketDataConfig()
        cache_env = os.getenv("PORTFOLIO_QUOTE_CACHE_SECONDS")
        timeout_env = os.getenv("PORTFOLIO_HTTP_TIMEOUT")
        market_config = MarketDataConfig(
            quote_cache_seconds=float(cache_env) if cache_env else defaults.quote_cache_seconds,
            http_timeout=float(timeout_env) if timeout_env else defaults.http_timeout,
        )

        return cls(database=db_config, market_data=market_config)


# Global config instance
config = Config.from_env()
