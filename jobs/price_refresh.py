"""
Price Refresh Job Runner.

Revalues listed holdings from live quotes:
1. Collect Stock/ETF investments that have a symbol and units
2. Fetch one quote per distinct symbol (NSE, then Yahoo Finance)
3. Set current price and current value = units * last price
4. Report status

Missing quotes are logged and counted; the job never raises on them.
"""

import logging
import sys
from datetime import datetime
from typing import NamedTuple

from data.market_data import MarketDataClient, get_market_data_client, normalize_symbol
from db import init_db, get_db
from db.repositories import InvestmentRepository


logger = logging.getLogger(__name__)


class JobResult(NamedTuple):
    """Result summary from a job run."""
    success: bool
    total_investments: int
    updated_investments: int
    symbols_quoted: int
    errors: list[str]


class PriceRefreshJob:
    """
    Refreshes current values of listed holdings.

    Usage:
        result = PriceRefreshJob().run(user_id=1)
    """

    def __init__(self, client: MarketDataClient | None = None):
        self.client = client or get_market_data_client()

    def run(self, user_id: int | None = None) -> JobResult:
        """
        Revalue priceable holdings.

        Args:
            user_id: Limit to one user's holdings (None = all users).

        Returns:
            JobResult with summary.
        """
        logger.info(f"📈 Starting price refresh at {datetime.now():%Y-%m-%d %H:%M:%S}")

        db = get_db()
        errors: list[str] = []
        updated = 0

        with db.session() as session:
            symbols = sorted({
                normalize_symbol(inv.symbol)
                for inv in InvestmentRepository(session).list_priceable(user_id)
            })

        # Quotes are fetched outside any open transaction
        quotes = self.client.fetch_multiple_quotes(symbols) if symbols else {}

        with db.session() as session:
            repo = InvestmentRepository(session)
            investments = repo.list_priceable(user_id)
            for investment in investments:
                quote = quotes.get(normalize_symbol(investment.symbol))
                if quote is None or quote.last_price <= 0:
                    errors.append(f"{investment.symbol}: no quote available")
                    continue
                repo.apply_market_price(investment, quote.last_price)
                updated += 1

        result = JobResult(
            success=not errors,
            total_investments=len(investments),
            updated_investments=updated,
            symbols_quoted=len(quotes),
            errors=errors,
        )

        status = "✅" if result.success else "⚠️"
        logger.info(
            f"{status} Price refresh complete: "
            f"{result.updated_investments}/{result.total_investments} investments, "
            f"{result.symbols_quoted} symbols quoted"
        )
        for error in result.errors:
            logger.warning(f"    ⚠️ {error}")

        return result


def run_price_refresh(user_id: int | None = None) -> int:
    """Entry point for the price refresh job. Returns a process exit code."""
    init_db()
    result = PriceRefreshJob().run(user_id)
    return 0 if result.success else 1


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    sys.exit(run_price_refresh(int(sys.argv[1]) if len(sys.argv) > 1 else None))
