"""
Portfolio Tracker - Main Entry Point.

A personal investment tracker: holdings across asset classes, ROI and
XIRR, top/bottom performers, what-if projections and a trade ledger.

Usage:
    # Initialize database
    python main.py init

    # Create an account (password prompted, or set PORTFOLIO_PASSWORD)
    python main.py register --email me@example.com --name "Asha"

    # Holdings
    python main.py add-investment --email me@example.com --category Stock --name Infosys \
        --symbol INFY --units 40 --amount 58000 --current 63200 --date 2023-04-12
    python main.py add-investment --email me@example.com --category "Fixed Deposit" \
        --name "SBI FD" --amount 100000 --current 107100 --maturity 2026-02-01
    python main.py investments --email me@example.com --category Stock
    python main.py remove-investment 3 --email me@example.com

    # Portfolio summary with a what-if move
    python main.py summary --email me@example.com --what-if -10

    # Ledger
    python main.py add-transaction --email me@example.com --type buy --symbol INFY \
        --quantity 10 --price 1500 --brokerage 20
    python main.py transactions --email me@example.com --limit 10

    # Market data
    python main.py quote INFY TCS
    python main.py metadata INFY
    python main.py search tata

    # Revalue listed holdings from live quotes
    python main.py refresh --email me@example.com

    # Launch dashboard
    python main.py dashboard
"""

import argparse
import getpass
import logging
import os
import sys

from analytics.scenario import project_presets
from analytics.summary import performers_frame
from config import config
from db import init_db, InvestmentCategory, TransactionType
from services.auth_service import authenticate, display_name_for, register_user
from services.investment_service import (
    add_investment,
    get_portfolio_summary,
    list_investments,
    remove_investment,
    replace_investment,
)
from services.transaction_service import (
    add_transaction,
    delete_transaction,
    list_transactions,
)

PASSWORD_ENV = "PORTFOLIO_PASSWORD"


def _money(value: float) -> str:
    return f"{config.ui.currency_symbol}{value:,.2f}"


def _read_password(confirm: bool = False) -> str:
    password = os.environ.get(PASSWORD_ENV)
    if password:
        return password
    password = getpass.getpass("Password: ")
    if confirm and getpass.getpass("Confirm password: ") != password:
        raise SystemExit("❌ Passwords do not match")
    return password


def _signed_in_user(args):
    """Authenticate the --email user or exit."""
    init_db()
    result = authenticate(args.email, _read_password())
    if not result.success:
        raise SystemExit(result.message)
    return result.user


def _investment_fields(args) -> dict:
    return {
        "symbol": args.symbol,
        "amount_invested": args.amount,
        "current_value": args.current,
        "units": args.units,
        "purchase_price": args.purchase_price,
        "current_price": args.current_price,
        "date_purchased": args.date,
        "maturity_date": args.maturity,
        "notes": args.notes,
        "institution": args.institution,
    }


def cmd_init(args):
    """Initialize the database."""
    db = init_db(args.db_url, if_drop=args.if_drop)
    if args.if_drop:
        print("⚠️ Existing tables dropped.")
    print("✅ Database initialized successfully")
    print(f"   Location: {db.db_url}")


def cmd_register(args):
    """Create a local account."""
    init_db()
    result = register_user(args.email, _read_password(confirm=True), display_name=args.name)
    print(result.message)
    return 0 if result.success else 1


def cmd_add_investment(args):
    """Add a holding."""
    user = _signed_in_user(args)
    result = add_investment(user.id, args.category, args.name, **_investment_fields(args))
    print(result.message)
    return 0 if result.success else 1


def cmd_replace_investment(args):
    """Replace every field of a holding."""
    user = _signed_in_user(args)
    result = replace_investment(user.id, args.id, args.category, args.name, **_investment_fields(args))
    print(result.message)
    return 0 if result.success else 1


def cmd_remove_investment(args):
    """Delete a holding."""
    user = _signed_in_user(args)
    result = remove_investment(user.id, args.id)
    print(result.message)
    return 0 if result.success else 1


def cmd_investments(args):
    """List holdings."""
    user = _signed_in_user(args)
    try:
        investments = list_investments(user.id, args.category)
    except ValueError as e:
        raise SystemExit(f"❌ {e}")

    if not investments:
        print("No investments yet.")
        return

    print(f"\n📋 Investments ({len(investments)})")
    print("-" * 96)
    print(f"{'ID':>4} {'Category':<16} {'Name':<28} {'Symbol':<10} {'Invested':>16} {'Current':>16}")
    print("-" * 96)
    for inv in investments:
        name = inv.name if len(inv.name) <= 28 else inv.name[:25] + "..."
        print(
            f"{inv.id:>4} {inv.category.value:<16} {name:<28} {inv.symbol or '-':<10} "
            f"{_money(float(inv.amount_invested)):>16} {_money(float(inv.current_value)):>16}"
        )


def cmd_summary(args):
    """Show portfolio summary."""
    user = _signed_in_user(args)
    try:
        summary = get_portfolio_summary(user.id, args.category, what_if_pct=args.what_if)
    except ValueError as e:
        raise SystemExit(f"❌ {e}")

    scope = summary.category.value if summary.category else "All"
    print("\n" + "=" * 50)
    print(f"📊 PORTFOLIO SUMMARY - {display_name_for(user)} ({scope})")
    print("=" * 50)

    print("\n💰 Value")
    print(f"   Invested:        {_money(summary.total_invested):>16}")
    print(f"   Current:         {_money(summary.total_current):>16}")
    print(f"   Gain/Loss:       {summary.total_gain:>+16,.2f}")
    print(f"   Holdings:        {summary.totals.position_count:>16}")

    print("\n📈 Returns")
    print(f"   ROI:             {summary.roi:>15.2f}%")
    print(f"   XIRR:            {summary.xirr:>15.2f}%")
    if summary.xirr_solved is not None:
        print(f"   XIRR (solved):   {summary.xirr_solved:>15.2f}%")

    if summary.breakdown:
        print("\n🥧 By Category")
        for name, value in sorted(summary.breakdown.items(), key=lambda item: -item[1]):
            print(f"   {name:<16} {_money(value):>16}")

    for title, rows in (("🏆 Top Performers", summary.performers.top),
                        ("📉 Bottom Performers", summary.performers.bottom)):
        frame = performers_frame(rows)
        if not frame.empty:
            print(f"\n{title}")
            for _, row in frame.iterrows():
                print(f"   {row['Name'][:28]:<28} {row['Category']:<16} {row['Return %']:>+8.2f}%")

    print("\n🔮 What-If")
    what_if = summary.what_if
    if args.what_if:
        print(f"   {what_if.delta_pct:+.0f}%: {_money(what_if.what_if_value)} ({what_if.impact:+,.2f})")
    else:
        for projection in project_presets(summary.total_current):
            print(
                f"   {projection.delta_pct:>+4.0f}%: {_money(projection.what_if_value):>16} "
                f"({projection.impact:+,.2f})"
            )

    print("\n" + "=" * 50)


def cmd_add_transaction(args):
    """Record a ledger transaction."""
    user = _signed_in_user(args)
    result = add_transaction(
        user.id,
        args.type,
        args.symbol,
        transaction_date=args.date,
        stock_name=args.stock_name,
        quantity=args.quantity,
        price_per_unit=args.price,
        total_amount=args.total,
        split_ratio=args.split_ratio,
        bonus_ratio=args.bonus_ratio,
        brokerage_fee=args.brokerage,
        stt_charges=args.stt,
        other_charges=args.other_charges,
        notes=args.notes,
        investment_id=args.investment_id,
    )
    print(result.message)
    if result.success and result.transaction.total_amount is not None:
        print(f"   Total: {_money(float(result.transaction.total_amount))}")
    return 0 if result.success else 1


def cmd_transactions(args):
    """List recent transactions."""
    user = _signed_in_user(args)
    transactions = list_transactions(user.id, args.type, args.symbol, args.limit)

    if not transactions:
        print("No transactions found.")
        return

    print(f"\n💼 Transactions (last {len(transactions)})")
    print("-" * 86)
    print(f"{'ID':>4} {'Date':<12} {'Type':<9} {'Symbol':<12} {'Qty':>10} {'Price':>12} {'Total':>16}")
    print("-" * 86)
    for tx in transactions:
        quantity = f"{tx.quantity:,.2f}" if tx.quantity else "-"
        price = f"{tx.price_per_unit:,.2f}" if tx.price_per_unit else "-"
        total = _money(float(tx.total_amount)) if tx.total_amount is not None else "-"
        print(
            f"{tx.id:>4} {tx.transaction_date.isoformat():<12} {tx.transaction_type.value:<9} "
            f"{tx.symbol:<12} {quantity:>10} {price:>12} {total:>16}"
        )


def cmd_delete_transaction(args):
    """Delete a ledger transaction."""
    user = _signed_in_user(args)
    result = delete_transaction(user.id, args.id)
    print(result.message)
    return 0 if result.success else 1


def cmd_quote(args):
    """Show live quotes."""
    from data.market_data import get_market_data_client

    quotes = get_market_data_client().fetch_multiple_quotes(args.symbols)
    if not quotes:
        print("No quotes available.")
        return 1

    for symbol, quote in quotes.items():
        print(
            f"   {symbol:<12} {_money(quote.last_price):>14} {quote.change:>+10.2f} "
            f"({quote.p_change:+.2f}%)  [{quote.source}]"
        )


def cmd_metadata(args):
    """Show company metadata."""
    from data.stock_metadata import fetch_stock_metadata

    meta = fetch_stock_metadata(args.symbol)
    print(f"\n🏢 {meta.company_name} ({meta.symbol})")
    print(f"   Sector:      {meta.sector}")
    print(f"   Industry:    {meta.industry}")
    print(f"   Market Cap:  {meta.market_cap:,.0f} Cr ({meta.market_cap_category})")
    if meta.pe_ratio is not None:
        print(f"   P/E:         {meta.pe_ratio:.2f}")
    if meta.dividend_yield is not None:
        print(f"   Div. Yield:  {meta.dividend_yield:.2f}%")
    print(f"   NIFTY 50:    {'Yes' if meta.in_nifty50 else 'No'}")


def cmd_search(args):
    """Search NSE listings."""
    from data.stock_metadata import search_stocks

    results = search_stocks(args.query, limit=args.limit)
    if not results:
        print("No matches.")
        return
    for row in results:
        print(f"   {row['symbol']:<14} {row['name']}")


def cmd_refresh(args):
    """Revalue listed holdings from live quotes."""
    from jobs.price_refresh import PriceRefreshJob

    user_id = _signed_in_user(args).id if args.email else None
    if user_id is None:
        init_db()
    result = PriceRefreshJob().run(user_id)
    print(
        f"{'✅' if result.success else '⚠️'} Updated {result.updated_investments}/"
        f"{result.total_investments} investments"
    )
    for error in result.errors:
        print(f"   ⚠️ {error}")
    return 0 if result.success else 1


def cmd_dashboard(args):
    """Launch the Streamlit dashboard."""
    import subprocess

    subprocess.run(
        [
            sys.executable,
            "-m",
            "streamlit",
            "run",
            "ui/app.py",
        ]
    )


def _add_user_argument(parser, required: bool = True):
    parser.add_argument("--email", required=required, help="Account email")


def _add_investment_arguments(parser):
    parser.add_argument("--category", required=True, help=f"One of: {', '.join(InvestmentCategory.choices())}")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--symbol", help="Ticker symbol (Stock/ETF)")
    parser.add_argument("--amount", type=float, help="Amount invested")
    parser.add_argument("--current", type=float, help="Current value")
    parser.add_argument("--units", type=float, help="Units held")
    parser.add_argument("--purchase-price", type=float, help="Purchase price per unit")
    parser.add_argument("--current-price", type=float, help="Current price per unit")
    parser.add_argument("--date", help="Purchase date (YYYY-MM-DD)")
    parser.add_argument("--maturity", help="Maturity date (YYYY-MM-DD)")
    parser.add_argument("--institution", help="Broker, bank or platform")
    parser.add_argument("--notes", help="Free-form notes")


def main():
    """Main CLI entry point."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    parser = argparse.ArgumentParser(
        description="Portfolio Tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    init = subparsers.add_parser("init", help="Initialize database")
    init.add_argument("--db-url", help="Custom database URL", default=None)
    init.add_argument("--if-drop", action="store_true", help="Drop existing tables before creating")

    # register command
    register = subparsers.add_parser("register", help="Create an account")
    _add_user_argument(register)
    register.add_argument("--name", help="Display name")

    # investment commands
    add_inv = subparsers.add_parser("add-investment", help="Add a holding")
    _add_user_argument(add_inv)
    _add_investment_arguments(add_inv)

    replace_inv = subparsers.add_parser("replace-investment", help="Replace every field of a holding")
    replace_inv.add_argument("id", type=int, help="Investment ID")
    _add_user_argument(replace_inv)
    _add_investment_arguments(replace_inv)

    remove_inv = subparsers.add_parser("remove-investment", help="Delete a holding")
    remove_inv.add_argument("id", type=int, help="Investment ID")
    _add_user_argument(remove_inv)

    investments = subparsers.add_parser("investments", help="List holdings")
    _add_user_argument(investments)
    investments.add_argument("--category", help="Filter by category (default: All)")

    # summary command
    summary = subparsers.add_parser("summary", help="Show portfolio summary")
    _add_user_argument(summary)
    summary.add_argument("--category", help="Filter totals by category (default: All)")
    summary.add_argument("--what-if", type=float, default=0.0, help="Percentage move to project, e.g. -10")

    # transaction commands
    add_tx = subparsers.add_parser("add-transaction", help="Record a ledger transaction")
    _add_user_argument(add_tx)
    add_tx.add_argument("--type", required=True, choices=[t.value for t in TransactionType])
    add_tx.add_argument("--symbol", required=True, help="Ticker symbol")
    add_tx.add_argument("--stock-name", help="Company name (default: symbol)")
    add_tx.add_argument("--date", help="Transaction date (YYYY-MM-DD, default: today)")
    add_tx.add_argument("--quantity", type=float, help="Quantity (buy/sell)")
    add_tx.add_argument("--price", type=float, help="Price per unit (buy/sell)")
    add_tx.add_argument("--total", type=float, help="Total amount (dividends)")
    add_tx.add_argument("--split-ratio", help="Split ratio, e.g. 1:2")
    add_tx.add_argument("--bonus-ratio", help="Bonus ratio, e.g. 1:1")
    add_tx.add_argument("--brokerage", type=float, default=0.0, help="Brokerage fee")
    add_tx.add_argument("--stt", type=float, default=0.0, help="STT charges")
    add_tx.add_argument("--other-charges", type=float, default=0.0, help="Other charges")
    add_tx.add_argument("--investment-id", type=int, help="Link to a holding")
    add_tx.add_argument("--notes", help="Free-form notes")

    transactions = subparsers.add_parser("transactions", help="List recent transactions")
    _add_user_argument(transactions)
    transactions.add_argument("--type", choices=[t.value for t in TransactionType], help="Filter by type")
    transactions.add_argument("--symbol", help="Filter by symbol")
    transactions.add_argument("--limit", type=int, default=20, help="Max number of transactions to show")

    delete_tx = subparsers.add_parser("delete-transaction", help="Delete a ledger transaction")
    delete_tx.add_argument("id", type=int, help="Transaction ID")
    _add_user_argument(delete_tx)

    # market data commands
    quote = subparsers.add_parser("quote", help="Show live quotes")
    quote.add_argument("symbols", nargs="+", help="NSE symbols")

    metadata = subparsers.add_parser("metadata", help="Show company metadata")
    metadata.add_argument("symbol", help="NSE symbol")

    search = subparsers.add_parser("search", help="Search NSE listings")
    search.add_argument("query", help="Partial symbol or company name")
    search.add_argument("--limit", type=int, default=None, help="Max results")

    # refresh command
    refresh = subparsers.add_parser("refresh", help="Revalue listed holdings from live quotes")
    _add_user_argument(refresh, required=False)

    # dashboard command
    subparsers.add_parser("dashboard", help="Launch Streamlit dashboard")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "register": cmd_register,
        "add-investment": cmd_add_investment,
        "replace-investment": cmd_replace_investment,
        "remove-investment": cmd_remove_investment,
        "investments": cmd_investments,
        "summary": cmd_summary,
        "add-transaction": cmd_add_transaction,
        "transactions": cmd_transactions,
        "delete-transaction": cmd_delete_transaction,
        "quote": cmd_quote,
        "metadata": cmd_metadata,
        "search": cmd_search,
        "refresh": cmd_refresh,
        "dashboard": cmd_dashboard,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main() or 0)
