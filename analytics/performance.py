"""
Return estimation module.

Provides the headline return figures shown on the dashboard:
- ROI: simple return on the invested total
- Approximate XIRR: single-period geometric annualization of ROI over the
  span of the cash flows. This is the figure historically labelled "XIRR";
  it is NOT an internal-rate-of-return solve and is kept as-is for
  compatibility.
- Solved XIRR: a true multi-cash-flow internal rate of return, found by
  bracketing the root of the NPV function. Reported alongside the
  approximation.

Cash-flow convention: one negative outflow per position (its invested
amount, dated at its purchase date or the valuation date when absent),
followed by one positive inflow for the current total on the valuation
date. Dates are calendar days; elapsed time is counted in whole days.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Sequence

import numpy as np
from scipy import optimize

from analytics.portfolio import field_value, numeric
from config import config


@dataclass(frozen=True)
class CashFlow:
    """A dated, signed cash amount (negative = money invested)."""
    date: date
    amount: float


def _as_date(value: date | datetime | str | None, default: date) -> date:
    if value is None or value == "":
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return default


def compute_roi(total_invested: float, total_current: float) -> float:
    """
    Return on investment in percent.

    Returns 0 when nothing was invested.
    """
    if total_invested > 0:
        return (total_current - total_invested) / total_invested * 100
    return 0.0


def build_cash_flows(
    investments: Sequence[Any],
    as_of: date | datetime | None = None,
) -> list[CashFlow]:
    """
    Build the cash-flow series for the given holdings.

    Args:
        investments: Holdings (already filtered by category if needed).
        as_of: Valuation date; defaults to today.

    Returns:
        One outflow per holding in input order, then the current-total inflow.
    """
    valuation_date = _as_date(as_of, date.today())

    flows = []
    total_current = 0.0
    for inv in investments:
        flows.append(CashFlow(
            date=_as_date(field_value(inv, "date_purchased"), valuation_date),
            amount=-numeric(inv, "amount_invested"),
        ))
        total_current += numeric(inv, "current_value")

    flows.append(CashFlow(date=valuation_date, amount=total_current))
    return flows


def approximate_xirr(cash_flows: Sequence[CashFlow]) -> float:
    """
    Approximate annualized return in percent.

    Compounds the overall ROI over the years between the first and the
    last cash flow: ((1 + roi) ** (1 / years) - 1) * 100.

    Returns 0 for fewer than two flows, a non-positive span, nothing
    invested, or a non-finite result.
    """
    if len(cash_flows) < 2:
        return 0.0

    total_invested = sum(abs(cf.amount) for cf in cash_flows[:-1])
    current_value = cash_flows[-1].amount
    days = (cash_flows[-1].date - cash_flows[0].date).days
    years = days / config.analytics.days_per_year

    if years <= 0 or total_invested <= 0:
        return 0.0

    roi = (current_value - total_invested) / total_invested
    try:
        xirr = ((1 + roi) ** (1 / years) - 1) * 100
    except (OverflowError, ZeroDivisionError):
        return 0.0

    if isinstance(xirr, complex) or not math.isfinite(xirr):
        return 0.0
    return xirr


def _npv(rate: float, amounts: np.ndarray, year_fractions: np.ndarray) -> float:
    return float(np.sum(amounts / np.power(1.0 + rate, year_fractions)))


def solve_xirr(cash_flows: Sequence[CashFlow]) -> float | None:
    """
    Internal rate of return over dated cash flows, in percent.

    Solves NPV(rate) = 0 with Brent's method. The bracket starts at
    (-99.99%, 100%) and widens upward until the NPV changes sign.

    Returns:
        Annual rate in percent, or None when the flows do not contain both
        an outflow and an inflow or no root can be bracketed.
    """
    if len(cash_flows) < 2:
        return None

    amounts = np.array([cf.amount for cf in cash_flows], dtype=float)
    if not (np.any(amounts < 0) and np.any(amounts > 0)):
        return None

    start = min(cf.date for cf in cash_flows)
    year_fractions = np.array(
        [(cf.date - start).days / config.analytics.days_per_year for cf in cash_flows],
        dtype=float,
    )
    if not np.any(year_fractions > 0):
        return None

    low, high = -0.9999, 1.0
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        npv_low = _npv(low, amounts, year_fractions)
        npv_high = _npv(high, amounts, year_fractions)
        while math.isfinite(npv_high) and npv_low * npv_high > 0 and high < 1e6:
            high *= 10
            npv_high = _npv(high, amounts, year_fractions)

        if not (math.isfinite(npv_low) and math.isfinite(npv_high)) or npv_low * npv_high > 0:
            return None

        try:
            rate = optimize.brentq(_npv, low, high, args=(amounts, year_fractions), maxiter=200)
        except (ValueError, RuntimeError):
            return None

    return rate * 100
