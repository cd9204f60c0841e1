"""
What-if scenario projection.

Applies a hypothetical percentage move to the current portfolio value.
"""

from dataclasses import dataclass

from config import config


WHAT_IF_PRESETS: tuple[float, ...] = config.analytics.what_if_presets


@dataclass(frozen=True)
class WhatIfResult:
    """Projected value under a percentage move."""
    delta_pct: float
    current_value: float
    what_if_value: float
    impact: float


def project_what_if(total_current: float, delta_pct: float) -> WhatIfResult:
    """
    Project the portfolio value after a `delta_pct` percent move.

    Example:
        project_what_if(10000, -10) -> what_if_value=9000, impact=-1000
    """
    what_if_value = total_current * (1 + delta_pct / 100)
    return WhatIfResult(
        delta_pct=delta_pct,
        current_value=total_current,
        what_if_value=what_if_value,
        impact=what_if_value - total_current,
    )


def project_presets(total_current: float) -> list[WhatIfResult]:
    """Projection for every preset move."""
    return [project_what_if(total_current, delta) for delta in WHAT_IF_PRESETS]
