from __future__ import annotations

from datetime import date

import pytest

from analytics.summary import compute_dashboard_summary, performers_frame
from db.models import InvestmentCategory


AS_OF = date(2024, 1, 1)


def test_summary_all(sample_investments):
    summary = compute_dashboard_summary(sample_investments, as_of=AS_OF, what_if_pct=-10)
    assert summary.category is None
    assert summary.total_invested == 50000
    assert summary.total_current == 56500
    assert summary.roi == pytest.approx(13.0)
    # every purchase is exactly 365 days before AS_OF
    assert summary.xirr == pytest.approx(13.0)
    assert summary.xirr_solved == pytest.approx(13.0, abs=1e-4)
    assert summary.what_if.what_if_value == pytest.approx(50850)
    assert set(summary.breakdown) == {"Stock", "Mutual Fund", "Fixed Deposit"}


def test_summary_filter_narrows_totals_but_not_performers(sample_investments):
    summary = compute_dashboard_summary(
        sample_investments, category=InvestmentCategory.STOCK, as_of=AS_OF
    )
    assert summary.total_invested == 20000
    assert summary.total_current == 21000
    assert summary.breakdown == {"Stock": 21000}
    assert len(summary.performers.top) == 4
    assert "Flexi Cap" in [row.investment.name for row in summary.performers.top]


def test_summary_empty():
    summary = compute_dashboard_summary([], as_of=AS_OF)
    assert summary.total_invested == 0
    assert summary.roi == 0
    assert summary.xirr == 0
    assert summary.xirr_solved is None
    assert summary.performers.top == []
    assert summary.what_if.what_if_value == 0


def test_performers_frame_keeps_stock_rows(sample_investments):
    summary = compute_dashboard_summary(sample_investments, as_of=AS_OF)
    frame = performers_frame(summary.performers.top, category=InvestmentCategory.STOCK)
    assert list(frame["Name"]) == ["Infosys", "HDFC Bank"]
    assert list(frame["Return %"]) == pytest.approx([20.0, -10.0])
    assert frame.loc[0, "Institution"] == "Zerodha"


def test_performers_frame_empty_has_columns():
    frame = performers_frame([])
    assert frame.empty
    assert "Return %" in frame.columns
