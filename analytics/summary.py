"""
Dashboard summary.

Combines aggregation, return estimation, ranking and the what-if
projection into the single structure the CLI and dashboard render.

Filtering rules:
- Totals, ROI, XIRR and the category breakdown use the category-filtered
  holdings.
- Top/bottom performers always rank the full holding list.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Sequence

import pandas as pd

from analytics.performance import approximate_xirr, build_cash_flows, compute_roi, solve_xirr
from analytics.portfolio import (
    PortfolioTotals,
    aggregate_investments,
    category_breakdown,
    category_of,
    field_value,
    filter_by_category,
    numeric,
)
from analytics.ranking import PerformerRanking, PerformerRow, rank_performers
from analytics.scenario import WhatIfResult, project_what_if
from db.models import InvestmentCategory


@dataclass
class DashboardSummary:
    """Everything the portfolio overview displays."""
    category: InvestmentCategory | None
    totals: PortfolioTotals
    roi: float
    xirr: float
    xirr_solved: float | None
    breakdown: dict[str, float] = field(default_factory=dict)
    performers: PerformerRanking = field(default_factory=PerformerRanking)
    what_if: WhatIfResult | None = None

    @property
    def total_invested(self) -> float:
        return self.totals.total_invested

    @property
    def total_current(self) -> float:
        return self.totals.total_current

    @property
    def total_gain(self) -> float:
        return self.totals.total_gain


def compute_dashboard_summary(
    investments: Sequence[Any],
    category: InvestmentCategory | None = None,
    what_if_pct: float = 0.0,
    as_of: date | datetime | None = None,
    performer_limit: int | None = None,
) -> DashboardSummary:
    """
    Compute the portfolio overview.

    Args:
        investments: All of the user's holdings.
        category: Optional category filter for totals and breakdown.
        what_if_pct: Percentage move for the what-if projection.
        as_of: Valuation date (default today).
        performer_limit: Rows per performer list (default from config).
    """
    filtered = filter_by_category(investments, category)
    totals = aggregate_investments(filtered)
    cash_flows = build_cash_flows(filtered, as_of=as_of)

    return DashboardSummary(
        category=category,
        totals=totals,
        roi=compute_roi(totals.total_invested, totals.total_current),
        xirr=approximate_xirr(cash_flows),
        xirr_solved=solve_xirr(cash_flows),
        breakdown=category_breakdown(filtered),
        performers=rank_performers(investments, performer_limit),
        what_if=project_what_if(totals.total_current, what_if_pct),
    )


def performers_frame(
    rows: Sequence[PerformerRow],
    category: InvestmentCategory | None = None,
) -> pd.DataFrame:
    """
    Tabulate performer rows for display.

    Args:
        rows: Ranked rows.
        category: Optionally keep only rows of this category (the
            dashboard shows Stock rows only).
    """
    columns = ["Name", "Category", "Institution", "Units", "Investment", "Current Value", "Return %"]
    records = []
    for row in rows:
        inv = row.investment
        if category is not None and category_of(inv) != category.value:
            continue
        records.append({
            "Name": field_value(inv, "name"),
            "Category": category_of(inv),
            "Institution": field_value(inv, "institution") or "N/A",
            "Units": field_value(inv, "units"),
            "Investment": numeric(inv, "amount_invested"),
            "Current Value": numeric(inv, "current_value"),
            "Return %": row.return_pct,
        })
    return pd.DataFrame.from_records(records, columns=columns)
