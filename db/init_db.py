"""
Database initialization script.

Creates all tables and optionally seeds a demo account with sample holdings.
Safe to run multiple times (idempotent).
"""

import argparse
import logging
from datetime import date

from db.session import init_db
from services.auth_service import register_user, authenticate
from services.investment_service import add_investment, list_investments
from services.transaction_service import add_transaction

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo1234"

SAMPLE_INVESTMENTS = [
    {"category": "Stock", "name": "Infosys", "symbol": "INFY", "units": 40, "purchase_price": 1450.0,
     "amount_invested": 58000, "current_value": 63200, "date_purchased": date(2023, 4, 12), "institution": "Zerodha"},
    {"category": "Stock", "name": "HDFC Bank", "symbol": "HDFCBANK", "units": 30, "purchase_price": 1620.0,
     "amount_invested": 48600, "current_value": 45900, "date_purchased": date(2023, 9, 1), "institution": "Zerodha"},
    {"category": "Stock", "name": "Tata Steel", "symbol": "TATASTEEL", "units": 200, "purchase_price": 110.0,
     "amount_invested": 22000, "current_value": 29800, "date_purchased": date(2022, 11, 20), "institution": "Groww"},
    {"category": "ETF", "name": "Nippon India Nifty BeES", "symbol": "NIFTYBEES", "units": 150, "purchase_price": 210.0,
     "amount_invested": 31500, "current_value": 37650, "date_purchased": date(2023, 1, 5), "institution": "Zerodha"},
    {"category": "Mutual Fund", "name": "Parag Parikh Flexi Cap", "amount_invested": 120000,
     "current_value": 151000, "date_purchased": date(2022, 6, 15), "institution": "Coin"},
    {"category": "Fixed Deposit", "name": "SBI FD 7.1%", "amount_invested": 100000, "current_value": 107100,
     "date_purchased": date(2024, 2, 1), "maturity_date": date(2026, 2, 1), "institution": "SBI"},
    {"category": "PPF", "name": "PPF Account", "amount_invested": 150000, "current_value": 163500,
     "date_purchased": date(2021, 4, 1), "institution": "Post Office"},
    {"category": "Gold", "name": "Sovereign Gold Bond 2023", "units": 10, "amount_invested": 59000,
     "current_value": 72000, "date_purchased": date(2023, 3, 10)},
]


def create_sample_data() -> None:
    """
    Create a demo account with sample holdings and a few transactions.

    Skipped when the demo account already has holdings.
    """
    result = register_user(DEMO_EMAIL, DEMO_PASSWORD, display_name="Demo Investor")
    if not result.success:
        result = authenticate(DEMO_EMAIL, DEMO_PASSWORD)
        if not result.success:
            print(f"  {result.message}")
            return

    user_id = result.user.id
    if list_investments(user_id):
        print(f"  Demo account {DEMO_EMAIL} already has holdings")
        return

    for data in SAMPLE_INVESTMENTS:
        added = add_investment(user_id, **data)
        print(f"  {added.message}")
        if added.success and added.investment.symbol:
            add_transaction(
                user_id,
                "buy",
                added.investment.symbol,
                transaction_date=added.investment.date_purchased,
                stock_name=added.investment.name,
                quantity=added.investment.units,
                price_per_unit=added.investment.purchase_price,
                investment_id=added.investment.id,
            )


def main():
    """Initialize database and optionally create sample data."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    parser = argparse.ArgumentParser(description="Initialize portfolio database")
    parser.add_argument(
        "--sample-data",
        action="store_true",
        help=f"Create a demo account ({DEMO_EMAIL} / {DEMO_PASSWORD}) with sample holdings",
    )
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()

    db = init_db(if_drop=args.drop)
    print("✅ Database initialized")
    print(f"   Location: {db.db_url}")

    if args.sample_data:
        print("\n📦 Creating sample data...")
        create_sample_data()
        print("✅ Sample data created")


if __name__ == "__main__":
    main()
