"""
Analytics package initialization.

Exports commonly used analytics functions for convenient imports:
    from analytics import aggregate_investments, compute_roi, etc.
"""

from analytics.portfolio import (
    PortfolioTotals,
    aggregate_investments,
    category_breakdown,
    filter_by_category,
)
from analytics.performance import (
    CashFlow,
    approximate_xirr,
    build_cash_flows,
    compute_roi,
    solve_xirr,
)
from analytics.ranking import (
    PerformerRanking,
    PerformerRow,
    bottom_performers,
    compute_return_pct,
    rank_performers,
    top_performers,
)
from analytics.scenario import (
    WHAT_IF_PRESETS,
    WhatIfResult,
    project_presets,
    project_what_if,
)
from analytics.summary import (
    DashboardSummary,
    compute_dashboard_summary,
    performers_frame,
)

__all__ = [
    # Aggregation
    "PortfolioTotals",
    "aggregate_investments",
    "category_breakdown",
    "filter_by_category",
    # Returns
    "CashFlow",
    "approximate_xirr",
    "build_cash_flows",
    "compute_roi",
    "solve_xirr",
    # Ranking
    "PerformerRanking",
    "PerformerRow",
    "bottom_performers",
    "compute_return_pct",
    "rank_performers",
    "top_performers",
    # What-if
    "WHAT_IF_PRESETS",
    "WhatIfResult",
    "project_presets",
    "project_what_if",
    # Dashboard
    "DashboardSummary",
    "compute_dashboard_summary",
    "performers_frame",
]
