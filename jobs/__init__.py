"""
Jobs package initialization.

Exports job runners for scheduled tasks.
"""

from jobs.price_refresh import (
    JobResult,
    PriceRefreshJob,
    run_price_refresh,
)

__all__ = [
    "JobResult",
    "PriceRefreshJob",
    "run_price_refresh",
]
