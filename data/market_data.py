"""
Live quote fetching for NSE-listed securities.

Sources, tried in order:
1. NSE unofficial `quote-equity` API (requests)
2. Yahoo Finance `<SYMBOL>.NS` via yfinance fast_info

Quotes are cached in memory per normalized symbol for a fixed window
(60 seconds by default). Failures never raise: callers get None and the
error is logged.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import requests
import yfinance as yf

from config import config


logger = logging.getLogger(__name__)


def normalize_symbol(symbol: str) -> str:
    """Strip whitespace and a trailing `.NS` suffix, upper-case."""
    cleaned = symbol.strip().upper()
    suffix = config.market_data.nse_suffix.upper()
    if cleaned.endswith(suffix):
        cleaned = cleaned[: -len(suffix)]
    return cleaned


def _num(value: Any) -> float:
    """Coerce a provider field to float; missing or invalid -> 0."""
    if value is None:
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if result == result else 0.0  # NaN -> 0


@dataclass(frozen=True)
class NSEQuote:
    """Snapshot quote for one symbol."""
    symbol: str
    last_price: float
    change: float
    p_change: float
    previous_close: float
    open: float
    high: float
    low: float
    timestamp: str
    source: str = "nse"


class QuoteCache:
    """
    In-memory quote cache keyed by normalized symbol.

    Stores (quote, fetched_at); an entry is valid while
    `now - fetched_at < ttl_seconds`. Entries are only replaced by a
    newer `set`.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = config.market_data.quote_cache_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[NSEQuote, float]] = {}

    def get(self, symbol: str) -> NSEQuote | None:
        """Cached quote if still within the validity window."""
        cached = self._entries.get(normalize_symbol(symbol))
        if cached and self._clock() - cached[1] < self.ttl_seconds:
            return cached[0]
        return None

    def set(self, symbol: str, quote: NSEQuote) -> None:
        """Store or overwrite a quote stamped with the current time."""
        self._entries[normalize_symbol(symbol)] = (quote, self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class MarketDataClient:
    """
    Fetches live quotes from NSE with a Yahoo Finance fallback.

    Usage:
        client = MarketDataClient()
        quote = client.get_quote("INFY")
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        cache: QuoteCache | None = None,
    ):
        self.config = config.market_data
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        })
        self.cache = cache or QuoteCache()

    def fetch_nse_quote(self, symbol: str) -> NSEQuote | None:
        """Quote from the NSE `quote-equity` endpoint, or None."""
        clean = normalize_symbol(symbol)
        try:
            response = self.session.get(
                f"{self.config.nse_base_url}/quote-equity",
                params={"symbol": clean},
                timeout=self.config.http_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug(f"NSE quote unavailable for {clean}: {e}")
            return None

        price_info = data.get("priceInfo") or {}
        day_range = price_info.get("intraDayHighLow") or {}
        if not price_info:
            return None

        return NSEQuote(
            symbol=clean,
            last_price=_num(price_info.get("lastPrice")),
            change=_num(price_info.get("change")),
            p_change=_num(price_info.get("pChange")),
            previous_close=_num(price_info.get("previousClose")),
            open=_num(price_info.get("open")),
            high=_num(day_range.get("max")),
            low=_num(day_range.get("min")),
            timestamp=datetime.now(timezone.utc).isoformat(),
            source="nse",
        )

    def fetch_yahoo_quote(self, symbol: str) -> NSEQuote | None:
        """Quote from Yahoo Finance for `<SYMBOL>.NS`, or None."""
        clean = normalize_symbol(symbol)
        yahoo_symbol = f"{clean}{self.config.nse_suffix}"
        try:
            info = yf.Ticker(yahoo_symbol).fast_info
            last_price = _num(info.last_price)
            previous_close = _num(info.previous_close)
            open_price = _num(info.open) or last_price
            high = _num(info.day_high) or last_price
            low = _num(info.day_low) or last_price
        except Exception as e:
            logger.error(f"Yahoo Finance quote failed for {yahoo_symbol}: {e}")
            return None

        if last_price <= 0:
            logger.warning(f"⚠️ No price returned for {yahoo_symbol}")
            return None

        change = last_price - previous_close if previous_close else 0.0
        p_change = change / previous_close * 100 if previous_close else 0.0
        return NSEQuote(
            symbol=clean,
            last_price=last_price,
            change=change,
            p_change=p_change,
            previous_close=previous_close,
            open=open_price,
            high=high,
            low=low,
            timestamp=datetime.now(timezone.utc).isoformat(),
            source="yahoo",
        )

    def fetch_quote(self, symbol: str) -> NSEQuote | None:
        """
        Fetch a fresh quote, bypassing the cache.

        Tries NSE first, then Yahoo Finance. Successful quotes are cached.
        """
        quote = self.fetch_nse_quote(symbol) or self.fetch_yahoo_quote(symbol)
        if quote is None:
            logger.warning(f"⚠️ No quote available for {normalize_symbol(symbol)}")
            return None
        self.cache.set(symbol, quote)
        return quote

    def get_quote(self, symbol: str) -> NSEQuote | None:
        """Cached quote if fresh, otherwise fetch."""
        cached = self.cache.get(symbol)
        if cached is not None:
            return cached
        return self.fetch_quote(symbol)

    def fetch_multiple_quotes(self, symbols: list[str]) -> dict[str, NSEQuote]:
        """
        Fetch quotes for several symbols.

        Returns:
            Dict keyed by normalized symbol; symbols without a quote are omitted.
        """
        quotes: dict[str, NSEQuote] = {}
        for index, symbol in enumerate(symbols):
            if index:
                time.sleep(self.config.quote_request_delay)
            quote = self.get_quote(symbol)
            if quote is not None:
                quotes[normalize_symbol(symbol)] = quote
        return quotes

    def fetch_nifty50(self) -> float | None:
        """Current NIFTY 50 index level, or None."""
        try:
            level = _num(yf.Ticker(self.config.nifty50_symbol).fast_info.last_price)
        except Exception as e:
            logger.error(f"Error fetching NIFTY 50: {e}")
            return None
        return level or None


_client: MarketDataClient | None = None


def get_market_data_client() -> MarketDataClient:
    """Get or create the shared market data client."""
    global _client
    if _client is None:
        _client = MarketDataClient()
    return _client
