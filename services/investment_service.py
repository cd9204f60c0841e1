"""
Investment Service - Holding management and portfolio summaries.

This service layer provides functionality for:
- Validating user input at the boundary (category, amounts, dates)
- Adding, replacing and removing holdings
- Listing holdings with an optional category filter
- Computing the dashboard summary for a user
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

from analytics.summary import DashboardSummary, compute_dashboard_summary
from db import Investment, InvestmentCategory, get_db
from db.repositories import InvestmentRepository

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


@dataclass
class InvestmentResult:
    """Result of an investment add/replace/remove operation."""
    success: bool
    investment: Investment | None = None
    errors: list[str] = field(default_factory=list)
    message: str = ""


def parse_category_filter(value: InvestmentCategory | str | None) -> InvestmentCategory | None:
    """
    Parse a category filter.

    "All", empty and None mean no filter.

    Raises:
        ValueError: If the value is not a known category.
    """
    if value is None or (isinstance(value, str) and value.strip().lower() in ("", ALL_CATEGORIES.lower())):
        return None
    return InvestmentCategory.parse(value)


def _parse_amount(value: Any, label: str, errors: list[str]) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        errors.append(f"{label} must be a number")
        return Decimal("0")
    if not amount.is_finite():
        errors.append(f"{label} must be a number")
        return Decimal("0")
    if amount < 0:
        errors.append(f"{label} cannot be negative")
    return amount.quantize(Decimal("0.01"))


def _parse_optional_float(value: Any, label: str, errors: list[str]) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        errors.append(f"{label} must be a number")
        return None


def _parse_optional_date(value: Any, label: str, errors: list[str]) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        errors.append(f"{label} must be a date (YYYY-MM-DD)")
        return None


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_investment_fields(
    category: InvestmentCategory | str,
    name: str,
    symbol: str | None = None,
    amount_invested: Any = None,
    current_value: Any = None,
    units: Any = None,
    purchase_price: Any = None,
    current_price: Any = None,
    date_purchased: Any = None,
    maturity_date: Any = None,
    notes: str | None = None,
    institution: str | None = None,
) -> tuple[dict[str, Any], list[str]]:
    """
    Validate raw form input into model fields.

    Returns:
        Tuple of (fields, errors). Fields are only usable when errors is empty.
    """
    errors: list[str] = []

    parsed_category = None
    try:
        parsed_category = InvestmentCategory.parse(category)
    except ValueError as e:
        errors.append(str(e))

    clean_name = (name or "").strip()
    if not clean_name:
        errors.append("Name is required")

    fields = {
        "category": parsed_category,
        "name": clean_name,
        "symbol": _optional_text(symbol.upper() if symbol else None),
        "amount_invested": _parse_amount(amount_invested, "Amount invested", errors),
        "current_value": _parse_amount(current_value, "Current value", errors),
        "units": _parse_optional_float(units, "Units", errors),
        "purchase_price": _parse_optional_float(purchase_price, "Purchase price", errors),
        "current_price": _parse_optional_float(current_price, "Current price", errors),
        "date_purchased": _parse_optional_date(date_purchased, "Purchase date", errors),
        "maturity_date": _parse_optional_date(maturity_date, "Maturity date", errors),
        "notes": _optional_text(notes),
        "institution": _optional_text(institution),
    }
    return fields, errors


def add_investment(user_id: int, category: InvestmentCategory | str, name: str, **kwargs: Any) -> InvestmentResult:
    """
    Add a holding for a user.

    Args:
        user_id: Owning user.
        category: Category (member, display value or name).
        name: Display name.
        **kwargs: Optional fields accepted by `build_investment_fields`.

    Returns:
        InvestmentResult with the created investment.
    """
    fields, errors = build_investment_fields(category, name, **kwargs)
    if errors:
        return InvestmentResult(success=False, errors=errors, message="❌ " + "; ".join(errors))

    db = get_db()
    with db.session() as session:
        investment = InvestmentRepository(session).create(user_id, **fields)

    logger.info(f"Added investment #{investment.id} ({investment.category.value}: {investment.name}) for user #{user_id}")
    return InvestmentResult(
        success=True,
        investment=investment,
        message=f"✅ Added {investment.name} ({investment.category.value})",
    )


def replace_investment(
    user_id: int,
    investment_id: int,
    category: InvestmentCategory | str,
    name: str,
    **kwargs: Any,
) -> InvestmentResult:
    """
    Replace every field of an existing holding.

    Omitted optional fields are cleared.
    """
    fields, errors = build_investment_fields(category, name, **kwargs)
    if errors:
        return InvestmentResult(success=False, errors=errors, message="❌ " + "; ".join(errors))

    db = get_db()
    with db.session() as session:
        investment = InvestmentRepository(session).replace(user_id, investment_id, **fields)

    if investment is None:
        return InvestmentResult(
            success=False,
            errors=["Investment not found"],
            message=f"❌ Investment #{investment_id} not found",
        )

    logger.info(f"Replaced investment #{investment_id} for user #{user_id}")
    return InvestmentResult(success=True, investment=investment, message=f"✅ Updated {investment.name}")


def remove_investment(user_id: int, investment_id: int) -> InvestmentResult:
    """Delete a holding owned by the user."""
    db = get_db()
    with db.session() as session:
        deleted = InvestmentRepository(session).delete(user_id, investment_id)

    if not deleted:
        return InvestmentResult(
            success=False,
            errors=["Investment not found"],
            message=f"❌ Investment #{investment_id} not found",
        )

    logger.info(f"Removed investment #{investment_id} for user #{user_id}")
    return InvestmentResult(success=True, message=f"✅ Removed investment #{investment_id}")


def list_investments(
    user_id: int,
    category: InvestmentCategory | str | None = None,
) -> Sequence[Investment]:
    """User's holdings, most recently updated first, optionally filtered."""
    db = get_db()
    with db.session() as session:
        return InvestmentRepository(session).list_for_user(user_id, parse_category_filter(category))


def get_portfolio_summary(
    user_id: int,
    category: InvestmentCategory | str | None = None,
    what_if_pct: float = 0.0,
    as_of: date | None = None,
) -> DashboardSummary:
    """
    Compute the dashboard summary for a user.

    Performers rank all holdings; totals honour the category filter.
    """
    investments = list_investments(user_id)
    return compute_dashboard_summary(
        investments,
        category=parse_category_filter(category),
        what_if_pct=what_if_pct,
        as_of=as_of,
    )
