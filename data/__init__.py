"""
Data package initialization.

Exports market data services.
"""

from data.market_data import (
    MarketDataClient,
    NSEQuote,
    QuoteCache,
    get_market_data_client,
    normalize_symbol,
)
from data.stock_metadata import (
    StockMetadata,
    fallback_metadata,
    fetch_multiple_stock_metadata,
    fetch_stock_metadata,
    get_market_cap_color,
    get_sector_color,
    market_cap_category,
    search_stocks,
)

__all__ = [
    "MarketDataClient",
    "NSEQuote",
    "QuoteCache",
    "get_market_data_client",
    "normalize_symbol",
    "StockMetadata",
    "fallback_metadata",
    "fetch_multiple_stock_metadata",
    "fetch_stock_metadata",
    "get_market_cap_color",
    "get_sector_color",
    "market_cap_category",
    "search_stocks",
]
