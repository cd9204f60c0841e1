"""
Transaction Service - Ledger entry validation, recording and lookup.

Rules:
- symbol and type are always required
- buy/sell need quantity and price per unit
- split needs a split ratio, bonus needs a bonus ratio ("a:b")
- total for buy = quantity * price + charges; for sell = quantity * price - charges
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Sequence

from data.market_data import get_market_data_client, normalize_symbol
from data.stock_metadata import fetch_stock_metadata
from db import Investment, Transaction, TransactionType, get_db
from db.repositories import InvestmentRepository, TransactionRepository

logger = logging.getLogger(__name__)


@dataclass
class TransactionResult:
    """Result of a transaction add/delete operation."""
    success: bool
    transaction: Transaction | None = None
    errors: list[str] = field(default_factory=list)
    message: str = ""


@dataclass
class SymbolLookup:
    """Prefill data for the transaction form."""
    symbol: str
    stock_name: str
    price_per_unit: float | None = None


def compute_total_amount(
    transaction_type: TransactionType | str,
    quantity: float | None,
    price_per_unit: float | None,
    brokerage_fee: float | None = 0.0,
    stt_charges: float | None = 0.0,
    other_charges: float | None = 0.0,
) -> float:
    """
    Total cash amount of a trade, rounded to 2 decimals.

    Charges are added for buys, subtracted for sells and ignored otherwise.
    """
    transaction_type = TransactionType(transaction_type)
    total = (quantity or 0.0) * (price_per_unit or 0.0)
    charges = (brokerage_fee or 0.0) + (stt_charges or 0.0) + (other_charges or 0.0)

    if transaction_type == TransactionType.BUY:
        total += charges
    elif transaction_type == TransactionType.SELL:
        total -= charges
    return round(total, 2)


def parse_ratio(ratio: str) -> tuple[float, float]:
    """
    Parse a split/bonus ratio like "1:2".

    Raises:
        ValueError: If the ratio is not two positive numbers separated by ':'.
    """
    parts = (ratio or "").split(":")
    if len(parts) != 2:
        raise ValueError(f"Ratio must look like 'a:b', got {ratio!r}")
    try:
        left, right = float(parts[0]), float(parts[1])
    except ValueError:
        raise ValueError(f"Ratio must look like 'a:b', got {ratio!r}") from None
    if left <= 0 or right <= 0:
        raise ValueError(f"Ratio parts must be positive, got {ratio!r}")
    return left, right


def validate_transaction(
    transaction_type: TransactionType | str | None,
    symbol: str | None,
    quantity: float | None = None,
    price_per_unit: float | None = None,
    split_ratio: str | None = None,
    bonus_ratio: str | None = None,
) -> list[str]:
    """Check per-type requirements. Returns a list of error messages."""
    errors = []
    if not symbol or not symbol.strip():
        errors.append("Symbol is required")

    try:
        transaction_type = TransactionType(transaction_type)
    except ValueError:
        valid = ", ".join(t.value for t in TransactionType)
        errors.append(f"Transaction type must be one of: {valid}")
        return errors

    if transaction_type in (TransactionType.BUY, TransactionType.SELL):
        if not quantity or not price_per_unit:
            errors.append("Quantity and price are required for buy/sell transactions")
        elif quantity < 0 or price_per_unit < 0:
            errors.append("Quantity and price cannot be negative")

    if transaction_type == TransactionType.SPLIT:
        if not split_ratio:
            errors.append("Split ratio is required for split transactions")
        else:
            try:
                parse_ratio(split_ratio)
            except ValueError as e:
                errors.append(str(e))

    if transaction_type == TransactionType.BONUS:
        if not bonus_ratio:
            errors.append("Bonus ratio is required for bonus transactions")
        else:
            try:
                parse_ratio(bonus_ratio)
            except ValueError as e:
                errors.append(str(e))

    return errors


def _money(value: float | None) -> Decimal:
    return Decimal(str(round(value or 0.0, 2)))


def add_transaction(
    user_id: int,
    transaction_type: TransactionType | str,
    symbol: str,
    transaction_date: date | str | None = None,
    stock_name: str | None = None,
    quantity: float | None = None,
    price_per_unit: float | None = None,
    total_amount: float | None = None,
    split_ratio: str | None = None,
    bonus_ratio: str | None = None,
    brokerage_fee: float | None = 0.0,
    stt_charges: float | None = 0.0,
    other_charges: float | None = 0.0,
    notes: str | None = None,
    investment_id: int | None = None,
) -> TransactionResult:
    """
    Record a ledger transaction.

    The total is computed for buy/sell when quantity and price are given;
    otherwise the explicit `total_amount` is kept (e.g. dividends).

    Args:
        user_id: Owning user.
        transaction_type: buy/sell/bonus/split/dividend.
        symbol: Ticker symbol (stored upper-case).
        transaction_date: Date (defaults to today).
        investment_id: Optional link to one of the user's holdings.

    Returns:
        TransactionResult with the created transaction.
    """
    errors = validate_transaction(
        transaction_type, symbol, quantity, price_per_unit, split_ratio, bonus_ratio
    )
    if isinstance(transaction_date, str) and transaction_date:
        try:
            transaction_date = date.fromisoformat(transaction_date)
        except ValueError:
            errors.append("Transaction date must be YYYY-MM-DD")
    if errors:
        return TransactionResult(success=False, errors=errors, message="❌ " + "; ".join(errors))

    transaction_type = TransactionType(transaction_type)
    symbol = symbol.strip().upper()
    if quantity and price_per_unit:
        total_amount = compute_total_amount(
            transaction_type, quantity, price_per_unit, brokerage_fee, stt_charges, other_charges
        )

    db = get_db()
    with db.session() as session:
        investment_category = None
        if investment_id is not None:
            investment = InvestmentRepository(session).get_for_user(user_id, investment_id)
            if investment is None:
                return TransactionResult(
                    success=False,
                    errors=["Linked investment not found"],
                    message=f"❌ Investment #{investment_id} not found",
                )
            investment_category = investment.category

        transaction = TransactionRepository(session).create(
            user_id,
            investment_id=investment_id,
            investment_category=investment_category,
            transaction_type=transaction_type,
            transaction_date=transaction_date or date.today(),
            symbol=symbol,
            stock_name=(stock_name or "").strip() or symbol,
            quantity=quantity,
            price_per_unit=price_per_unit,
            total_amount=_money(total_amount) if total_amount is not None else None,
            split_ratio=split_ratio or None,
            bonus_ratio=bonus_ratio or None,
            brokerage_fee=_money(brokerage_fee),
            stt_charges=_money(stt_charges),
            other_charges=_money(other_charges),
            notes=(notes or "").strip() or None,
        )

    logger.info(f"Recorded {transaction_type.value} #{transaction.id} for {symbol} (user #{user_id})")
    return TransactionResult(
        success=True,
        transaction=transaction,
        message=f"✅ Recorded {transaction_type.value.upper()} {symbol}",
    )


def delete_transaction(user_id: int, transaction_id: int) -> TransactionResult:
    """Delete a transaction owned by the user."""
    db = get_db()
    with db.session() as session:
        deleted = TransactionRepository(session).delete(user_id, transaction_id)

    if not deleted:
        return TransactionResult(
            success=False,
            errors=["Transaction not found"],
            message=f"❌ Transaction #{transaction_id} not found",
        )

    logger.info(f"Deleted transaction #{transaction_id} for user #{user_id}")
    return TransactionResult(success=True, message=f"✅ Deleted transaction #{transaction_id}")


def list_transactions(
    user_id: int,
    transaction_type: TransactionType | str | None = None,
    symbol: str | None = None,
    limit: int | None = None,
) -> Sequence[Transaction]:
    """User's transactions, newest first."""
    db = get_db()
    with db.session() as session:
        return TransactionRepository(session).list_for_user(
            user_id,
            transaction_type=TransactionType(transaction_type) if transaction_type else None,
            symbol=symbol,
            limit=limit,
        )


def list_linkable_investments(user_id: int) -> Sequence[Investment]:
    """Holdings in tradable categories that a transaction may link to."""
    db = get_db()
    with db.session() as session:
        return InvestmentRepository(session).list_tradable(user_id)


def lookup_symbol(symbol: str) -> SymbolLookup:
    """
    Prefill data for a symbol: live price and company name.

    Missing data leaves the price as None and the name as the symbol.
    """
    clean = normalize_symbol(symbol)
    quote = get_market_data_client().get_quote(clean)
    metadata = fetch_stock_metadata(clean)
    return SymbolLookup(
        symbol=clean,
        stock_name=metadata.company_name or clean,
        price_per_unit=quote.last_price if quote and quote.last_price > 0 else None,
    )


__all__ = [
    "SymbolLookup",
    "TransactionResult",
    "add_transaction",
    "compute_total_amount",
    "delete_transaction",
    "list_linkable_investments",
    "list_transactions",
    "lookup_symbol",
    "parse_ratio",
    "validate_transaction",
]
