from __future__ import annotations

from datetime import date, timedelta

import pytest

from analytics.performance import (
    CashFlow,
    approximate_xirr,
    build_cash_flows,
    compute_roi,
    solve_xirr,
)
from analytics.summary import compute_dashboard_summary


def test_roi_basic():
    assert compute_roi(1000, 1200) == pytest.approx(20.0)
    assert compute_roi(1000, 800) == pytest.approx(-20.0)


def test_roi_nothing_invested():
    assert compute_roi(0, 500) == 0.0


def test_build_cash_flows_orders_outflows_then_inflow():
    as_of = date(2024, 1, 1)
    rows = [
        {"amount_invested": 1000, "current_value": 1100, "date_purchased": date(2023, 1, 1)},
        {"amount_invested": 500, "current_value": 400, "date_purchased": None},
    ]
    flows = build_cash_flows(rows, as_of=as_of)
    assert flows == [
        CashFlow(date(2023, 1, 1), -1000.0),
        CashFlow(as_of, -500.0),
        CashFlow(as_of, 1500.0),
    ]


def test_build_cash_flows_accepts_iso_strings():
    flows = build_cash_flows(
        [{"amount_invested": 100, "current_value": 100, "date_purchased": "2023-06-30"}],
        as_of=date(2024, 1, 1),
    )
    assert flows[0].date == date(2023, 6, 30)


def test_xirr_one_year_equals_roi():
    start = date(2023, 1, 1)
    flows = [CashFlow(start, -1000), CashFlow(start + timedelta(days=365), 1200)]
    assert approximate_xirr(flows) == pytest.approx(20.0)


def test_xirr_two_years_compounds():
    start = date(2022, 1, 1)
    flows = [CashFlow(start, -1000), CashFlow(start + timedelta(days=730), 1210)]
    assert approximate_xirr(flows) == pytest.approx(10.0)


def test_xirr_bought_today_is_zero():
    today = date.today()
    flows = build_cash_flows(
        [{"amount_invested": 1000, "current_value": 1500, "date_purchased": today}],
        as_of=today,
    )
    assert approximate_xirr(flows) == 0.0


def test_xirr_degenerate_inputs():
    assert approximate_xirr([]) == 0.0
    assert approximate_xirr([CashFlow(date(2023, 1, 1), -1000)]) == 0.0
    zero_invested = [CashFlow(date(2023, 1, 1), 0), CashFlow(date(2024, 1, 1), 500)]
    assert approximate_xirr(zero_invested) == 0.0


def test_xirr_total_loss_is_finite():
    flows = [CashFlow(date(2023, 1, 1), -1000), CashFlow(date(2023, 1, 2), 0)]
    assert approximate_xirr(flows) == pytest.approx(-100.0)


def test_xirr_overflow_returns_zero():
    flows = [CashFlow(date(2023, 1, 1), -1), CashFlow(date(2023, 1, 2), 1e12)]
    assert approximate_xirr(flows) == 0.0


def test_solve_xirr_single_period_matches_roi():
    start = date(2023, 1, 1)
    flows = [CashFlow(start, -1000), CashFlow(start + timedelta(days=365), 1200)]
    assert solve_xirr(flows) == pytest.approx(20.0, abs=1e-6)


def test_solve_xirr_weights_later_contributions():
    start = date(2022, 1, 1)
    flows = [
        CashFlow(start, -1000),
        CashFlow(start + timedelta(days=365), -1000),
        CashFlow(start + timedelta(days=730), 2310),
    ]
    # 1000 * 1.1^2 + 1000 * 1.1 = 2310
    assert solve_xirr(flows) == pytest.approx(10.0, abs=1e-4)


def test_solve_xirr_without_sign_change_is_none():
    flows = [CashFlow(date(2023, 1, 1), 1000), CashFlow(date(2024, 1, 1), 1000)]
    assert solve_xirr(flows) is None
    assert solve_xirr([]) is None


def test_solve_xirr_same_day_is_none():
    today = date(2024, 1, 1)
    assert solve_xirr([CashFlow(today, -1000), CashFlow(today, 1100)]) is None


def test_malformed_purchase_date_counts_as_absent():
    as_of = date(2024, 1, 1)
    rows = [{"amount_invested": 1000, "current_value": 1200, "date_purchased": "12/04/2023"}]
    flows = build_cash_flows(rows, as_of=as_of)
    assert flows[0] == CashFlow(as_of, -1000.0)
    assert approximate_xirr(flows) == 0.0

    summary = compute_dashboard_summary(rows, as_of=as_of)
    assert summary.roi == pytest.approx(20.0)
    assert summary.xirr == 0.0


def test_xirr_span_starts_at_first_flow_not_earliest_purchase():
    # The first holding is the newer one; the span is 2023-01-01 -> 2024-01-01
    rows = [
        {"amount_invested": 1000, "current_value": 1200, "date_purchased": date(2023, 1, 1)},
        {"amount_invested": 1000, "current_value": 1200, "date_purchased": date(2022, 1, 1)},
    ]
    flows = build_cash_flows(rows, as_of=date(2024, 1, 1))
    assert (flows[-1].date - flows[0].date).days == 365
    assert approximate_xirr(flows) == pytest.approx(20.0)


def test_return_estimators_are_repeatable():
    start = date(2022, 1, 1)
    flows = [
        CashFlow(start, -1000),
        CashFlow(start + timedelta(days=365), -1000),
        CashFlow(start + timedelta(days=730), 2310),
    ]
    snapshot = list(flows)

    assert compute_roi(2000, 2310) == compute_roi(2000, 2310)
    assert approximate_xirr(flows) == approximate_xirr(flows)
    assert solve_xirr(flows) == solve_xirr(flows)
    assert flows == snapshot
