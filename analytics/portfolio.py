"""
Portfolio aggregation module.

Sums invested and current values across holdings, optionally narrowed to
one category, and builds the category -> value map used by the
allocation chart.

All functions are pure: they read attributes from the given records and
never mutate them. Missing numeric fields count as zero.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from db.models import InvestmentCategory


@dataclass(frozen=True)
class PortfolioTotals:
    """Aggregated invested/current values for a set of holdings."""
    total_invested: float
    total_current: float
    position_count: int

    @property
    def total_gain(self) -> float:
        """Absolute profit or loss."""
        return self.total_current - self.total_invested


def field_value(record: Any, field_name: str) -> Any:
    """Read a field from an ORM object, dataclass or mapping (None if absent)."""
    if isinstance(record, dict):
        return record.get(field_name)
    return getattr(record, field_name, None)


def numeric(record: Any, field_name: str) -> float:
    """
    Read a numeric field from a record as float.

    None, missing, unparseable and non-finite values are treated as 0.
    """
    value = field_value(record, field_name)
    if value is None:
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def category_of(record: Any) -> str | None:
    """Category display name of a record, or None."""
    value = field_value(record, "category")
    if isinstance(value, InvestmentCategory):
        return value.value
    return value


def filter_by_category(
    investments: Iterable[Any],
    category: InvestmentCategory | None = None,
) -> list[Any]:
    """
    Narrow holdings to one category.

    Args:
        investments: Holdings in display order.
        category: Category to keep, or None for all.

    Returns:
        New list preserving input order.
    """
    if category is None:
        return list(investments)
    wanted = category.value
    return [inv for inv in investments if category_of(inv) == wanted]


def aggregate_investments(
    investments: Sequence[Any],
    category: InvestmentCategory | None = None,
) -> PortfolioTotals:
    """
    Compute invested and current totals over the filtered holdings.

    Empty input yields zero totals.
    """
    filtered = filter_by_category(investments, category)
    total_invested = math.fsum(numeric(inv, "amount_invested") for inv in filtered)
    total_current = math.fsum(numeric(inv, "current_value") for inv in filtered)
    return PortfolioTotals(
        total_invested=float(total_invested),
        total_current=float(total_current),
        position_count=len(filtered),
    )


def category_breakdown(
    investments: Sequence[Any],
    category: InvestmentCategory | None = None,
) -> dict[str, float]:
    """Map category name -> summed current value, in a single pass."""
    values: dict[str, list[float]] = {}
    for inv in filter_by_category(investments, category):
        key = category_of(inv) or InvestmentCategory.OTHER.value
        values.setdefault(key, []).append(numeric(inv, "current_value"))
    return {key: math.fsum(amounts) for key, amounts in values.items()}
