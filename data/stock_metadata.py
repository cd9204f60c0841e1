"""
Stock metadata lookup for NSE-listed companies.

Company name, sector, industry and market-cap band come from Yahoo Finance
(yfinance Ticker.info). A curated NSE sector map overrides Yahoo's
classification and doubles as the offline fallback.

Market cap is reported in crores (1 crore = 10,000,000).
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

import yfinance as yf

from config import config
from data.market_data import normalize_symbol


logger = logging.getLogger(__name__)

CRORE = 10_000_000

LARGE_CAP = "Large Cap"
MID_CAP = "Mid Cap"
SMALL_CAP = "Small Cap"
MICRO_CAP = "Micro Cap"

NSE_SECTORS: dict[str, tuple[str, str]] = {
    # IT
    "TCS": ("Information Technology", "IT Services & Consulting"),
    "INFY": ("Information Technology", "IT Services & Consulting"),
    "WIPRO": ("Information Technology", "IT Services & Consulting"),
    "HCLTECH": ("Information Technology", "IT Services & Consulting"),
    "TECHM": ("Information Technology", "IT Services & Consulting"),
    "LTI": ("Information Technology", "IT Services & Consulting"),
    # Banking
    "HDFCBANK": ("Financial Services", "Private Banks"),
    "ICICIBANK": ("Financial Services", "Private Banks"),
    "KOTAKBANK": ("Financial Services", "Private Banks"),
    "AXISBANK": ("Financial Services", "Private Banks"),
    "INDUSINDBK": ("Financial Services", "Private Banks"),
    "SBIN": ("Financial Services", "Public Banks"),
    "PNB": ("Financial Services", "Public Banks"),
    "BANKBARODA": ("Financial Services", "Public Banks"),
    # NBFC
    "BAJFINANCE": ("Financial Services", "NBFCs"),
    "BAJAJFINSV": ("Financial Services", "NBFCs"),
    "CHOLAFIN": ("Financial Services", "NBFCs"),
    # Auto
    "MARUTI": ("Automobile", "Passenger Vehicles"),
    "TATAMOTORS": ("Automobile", "Passenger Vehicles"),
    "M&M": ("Automobile", "Passenger Vehicles"),
    "EICHERMOT": ("Automobile", "Two Wheelers"),
    "HEROMOTOCO": ("Automobile", "Two Wheelers"),
    "BAJAJ-AUTO": ("Automobile", "Two Wheelers"),
    # Pharma
    "SUNPHARMA": ("Pharmaceuticals", "Generic Drugs"),
    "DRREDDY": ("Pharmaceuticals", "Generic Drugs"),
    "CIPLA": ("Pharmaceuticals", "Generic Drugs"),
    "DIVISLAB": ("Pharmaceuticals", "Generic Drugs"),
    "AUROPHARMA": ("Pharmaceuticals", "Generic Drugs"),
    # FMCG
    "HINDUNILVR": ("FMCG", "Personal Care"),
    "ITC": ("FMCG", "Diversified FMCG"),
    "NESTLEIND": ("FMCG", "Packaged Foods"),
    "BRITANNIA": ("FMCG", "Packaged Foods"),
    "DABUR": ("FMCG", "Personal Care"),
    # Telecom
    "BHARTIARTL": ("Telecom", "Telecom Services"),
    "IDEA": ("Telecom", "Telecom Services"),
    # Energy
    "RELIANCE": ("Energy", "Refineries"),
    "ONGC": ("Energy", "Oil & Gas Exploration"),
    "BPCL": ("Energy", "Refineries"),
    "IOC": ("Energy", "Refineries"),
    # Metals
    "TATASTEEL": ("Metals & Mining", "Steel"),
    "HINDALCO": ("Metals & Mining", "Aluminium"),
    "JSWSTEEL": ("Metals & Mining", "Steel"),
    "VEDL": ("Metals & Mining", "Diversified Metals"),
    "COALINDIA": ("Metals & Mining", "Coal"),
    # Cement
    "ULTRACEMCO": ("Construction Materials", "Cement"),
    "GRASIM": ("Construction Materials", "Cement"),
    "SHREECEM": ("Construction Materials", "Cement"),
    # Consumer Durables
    "TITAN": ("Consumer Durables", "Gems & Jewellery"),
    "ASIANPAINT": ("Consumer Durables", "Paints"),
    # ETFs
    "NIFTYBEES": ("ETF", "Index ETF"),
    "GOLDBEES": ("ETF", "Commodity ETF"),
    "BANKBEES": ("ETF", "Sectoral ETF"),
    "JUNIORBEES": ("ETF", "Index ETF"),
}

NIFTY_50_STOCKS: frozenset[str] = frozenset({
    "ADANIENT", "ADANIPORTS", "APOLLOHOSP", "ASIANPAINT", "AXISBANK", "BAJAJ-AUTO",
    "BAJFINANCE", "BAJAJFINSV", "BHARTIARTL", "BPCL", "BRITANNIA", "CIPLA",
    "COALINDIA", "DIVISLAB", "DRREDDY", "EICHERMOT", "GRASIM", "HCLTECH",
    "HDFCBANK", "HDFCLIFE", "HEROMOTOCO", "HINDALCO", "HINDUNILVR", "ICICIBANK",
    "INDUSINDBK", "INFY", "ITC", "JSWSTEEL", "KOTAKBANK", "LT", "M&M", "MARUTI",
    "NESTLEIND", "NTPC", "ONGC", "POWERGRID", "RELIANCE", "SBIN", "SHREECEM",
    "SUNPHARMA", "TATAMOTORS", "TATASTEEL", "TCS", "TECHM", "TITAN", "ULTRACEMCO",
    "UPL", "WIPRO",
})

SECTOR_COLORS: dict[str, str] = {
    "Information Technology": "#3b82f6",
    "Financial Services": "#10b981",
    "Automobile": "#f59e0b",
    "Pharmaceuticals": "#ef4444",
    "FMCG": "#8b5cf6",
    "Telecom": "#06b6d4",
    "Energy": "#f97316",
    "Metals & Mining": "#64748b",
    "Construction Materials": "#a855f7",
    "Consumer Durables": "#ec4899",
    "ETF": "#6366f1",
    "Unknown": "#9ca3af",
    "Uncategorized": "#9ca3af",
}

MARKET_CAP_COLORS: dict[str, str] = {
    LARGE_CAP: "#10b981",
    MID_CAP: "#3b82f6",
    SMALL_CAP: "#f59e0b",
    MICRO_CAP: "#ef4444",
    "Uncategorized": "#9ca3af",
}

DEFAULT_COLOR = "#9ca3af"


@dataclass(frozen=True)
class StockMetadata:
    """Company profile for a listed symbol."""
    symbol: str
    company_name: str
    sector: str
    industry: str
    market_cap_category: str
    market_cap: float  # crores
    exchange: str = "NSE"
    pe_ratio: float | None = None
    pb_ratio: float | None = None
    dividend_yield: float | None = None  # percent
    in_nifty50: bool = False


def market_cap_category(market_cap_crores: float) -> str:
    """Band a market cap (in crores) into Large/Mid/Small/Micro Cap."""
    if market_cap_crores >= 20000:
        return LARGE_CAP
    if market_cap_crores >= 5000:
        return MID_CAP
    if market_cap_crores >= 1000:
        return SMALL_CAP
    return MICRO_CAP


def _safe_metric(value: Any) -> float | None:
    if value is None:
        return None
    try:
        val = float(value)
    except (TypeError, ValueError):
        return None
    if val != val or val in (float("inf"), float("-inf")):
        return None
    return val


def fallback_metadata(symbol: str) -> StockMetadata:
    """Metadata from the local NSE sector map only."""
    clean = normalize_symbol(symbol)
    in_nifty = clean in NIFTY_50_STOCKS
    mapping = NSE_SECTORS.get(clean)

    if mapping is None:
        return StockMetadata(
            symbol=clean,
            company_name=clean,
            sector="Unknown",
            industry="Unknown",
            market_cap_category=SMALL_CAP,
            market_cap=0.0,
            in_nifty50=in_nifty,
        )

    sector, industry = mapping
    return StockMetadata(
        symbol=clean,
        company_name=clean,
        sector=sector,
        industry=industry,
        market_cap_category=LARGE_CAP if in_nifty else MID_CAP,
        market_cap=0.0,
        in_nifty50=in_nifty,
    )


def fetch_stock_metadata(symbol: str) -> StockMetadata:
    """
    Fetch company metadata from Yahoo Finance.

    The NSE sector map overrides Yahoo's sector/industry. Falls back to
    `fallback_metadata` when Yahoo fails or returns nothing.
    """
    clean = normalize_symbol(symbol)
    yahoo_symbol = f"{clean}{config.market_data.nse_suffix}"

    try:
        info = yf.Ticker(yahoo_symbol).info or {}
    except Exception as e:
        logger.error(f"Failed to fetch metadata for {yahoo_symbol}: {e}")
        return fallback_metadata(clean)

    if not info.get("longName") and not info.get("shortName") and not info.get("sector"):
        logger.warning(f"⚠️ No metadata returned for {yahoo_symbol}")
        return fallback_metadata(clean)

    sector = info.get("sector") or "Unknown"
    industry = info.get("industry") or "Unknown"
    if clean in NSE_SECTORS:
        sector, industry = NSE_SECTORS[clean]

    market_cap = (_safe_metric(info.get("marketCap")) or 0.0) / CRORE
    dividend_yield = _safe_metric(info.get("dividendYield"))

    return StockMetadata(
        symbol=clean,
        company_name=info.get("longName") or info.get("shortName") or clean,
        sector=sector,
        industry=industry,
        market_cap_category=market_cap_category(market_cap),
        market_cap=market_cap,
        pe_ratio=_safe_metric(info.get("forwardPE")) or _safe_metric(info.get("trailingPE")),
        pb_ratio=_safe_metric(info.get("priceToBook")),
        dividend_yield=dividend_yield * 100 if dividend_yield else None,
        in_nifty50=clean in NIFTY_50_STOCKS,
    )


def fetch_multiple_stock_metadata(symbols: list[str]) -> dict[str, StockMetadata]:
    """Metadata for several symbols, keyed by normalized symbol."""
    results: dict[str, StockMetadata] = {}
    for index, symbol in enumerate(symbols):
        if index:
            time.sleep(config.market_data.metadata_request_delay)
        metadata = fetch_stock_metadata(symbol)
        results[metadata.symbol] = metadata
    return results


def search_stocks(query: str, limit: int | None = None) -> list[dict[str, str]]:
    """
    Search NSE listings by partial symbol or company name.

    Returns:
        Up to `limit` dicts with `symbol` (no `.NS` suffix) and `name`.
        Empty for short queries or on provider failure.
    """
    limit = config.market_data.search_max_results if limit is None else limit
    query = query.strip()
    if len(query) < config.market_data.search_min_query_length:
        return []

    try:
        quotes = yf.Search(query, max_results=limit, news_count=0).quotes or []
    except Exception as e:
        logger.error(f"Error searching stocks for {query!r}: {e}")
        return []

    results = []
    for quote in quotes:
        symbol = quote.get("symbol") or ""
        if quote.get("exchange") != "NSI" and not symbol.endswith(config.market_data.nse_suffix):
            continue
        results.append({
            "symbol": normalize_symbol(symbol),
            "name": quote.get("longname") or quote.get("shortname") or symbol,
        })
    return results[:limit]


def get_sector_color(sector: str) -> str:
    """Chart color for a sector."""
    return SECTOR_COLORS.get(sector, DEFAULT_COLOR)


def get_market_cap_color(category: str) -> str:
    """Chart color for a market-cap band."""
    return MARKET_CAP_COLORS.get(category, DEFAULT_COLOR)
