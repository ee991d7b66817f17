"""
Daily evaluation quota per user and pricing plan.
Supports the free, pro and max plans with lazily reset daily limits.
"""

from .models import (
    Plan,
    PlanLimitTable,
    UserQuotaRecord,
    QuotaCheckResult,
    PlanUpdateResult,
    QuotaExceeded,
)
from .manager import QuotaTracker

__all__ = [
    "Plan",
    "PlanLimitTable",
    "UserQuotaRecord",
    "QuotaCheckResult",
    "PlanUpdateResult",
    "QuotaExceeded",
    "QuotaTracker",
]
