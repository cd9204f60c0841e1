"""
Performance ranking module.

Computes per-holding return percentages and produces the top and bottom
performer lists shown on the dashboard. Sorting is stable, so holdings
with equal returns keep their original relative order.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

from analytics.portfolio import numeric
from config import config


@dataclass(frozen=True)
class PerformerRow:
    """A holding paired with its return percentage."""
    investment: Any
    return_pct: float


@dataclass(frozen=True)
class PerformerRanking:
    """Best and worst performers."""
    top: list[PerformerRow] = field(default_factory=list)
    bottom: list[PerformerRow] = field(default_factory=list)


def compute_return_pct(investment: Any) -> float:
    """(current - invested) / invested * 100, or 0 when nothing was invested."""
    invested = numeric(investment, "amount_invested")
    if invested > 0:
        return (numeric(investment, "current_value") - invested) / invested * 100
    return 0.0


def _scored(investments: Sequence[Any]) -> list[PerformerRow]:
    return [PerformerRow(investment=inv, return_pct=compute_return_pct(inv)) for inv in investments]


def top_performers(investments: Sequence[Any], limit: int | None = None) -> list[PerformerRow]:
    """Highest returns first, at most `limit` rows."""
    limit = config.analytics.performer_limit if limit is None else limit
    rows = sorted(_scored(investments), key=lambda row: row.return_pct, reverse=True)
    return rows[:limit]


def bottom_performers(investments: Sequence[Any], limit: int | None = None) -> list[PerformerRow]:
    """Lowest returns first, at most `limit` rows."""
    limit = config.analytics.performer_limit if limit is None else limit
    rows = sorted(_scored(investments), key=lambda row: row.return_pct)
    return rows[:limit]


def rank_performers(investments: Sequence[Any], limit: int | None = None) -> PerformerRanking:
    """
    Rank holdings by return percentage.

    Args:
        investments: Full (unfiltered) holding list; not mutated.
        limit: Maximum rows per list (default from config, 5).

    Returns:
        PerformerRanking with `top` descending and `bottom` ascending.
    """
    return PerformerRanking(
        top=top_performers(investments, limit),
        bottom=bottom_performers(investments, limit),
    )
