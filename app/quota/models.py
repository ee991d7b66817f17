"""
Data models for the daily evaluation quota system.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class Plan(Enum):
    """Subscription plans that determine the daily evaluation quota."""
    FREE = "free"
    PRO = "pro"
    MAX = "max"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Plan"]:
        """Return the matching plan, or None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None


VALID_PLANS = tuple(plan.value for plan in Plan)


class PlanLimitTable:
    """Lookup from plan identifier to daily evaluation limit.

    Unknown or missing plans map to the free-tier limit.
    """

    def __init__(self, free: int = 1, pro: int = 20, max: int = 99):
        self._limits = {
            Plan.FREE.value: free,
            Plan.PRO.value: pro,
            Plan.MAX.value: max,
        }

    @classmethod
    def from_config(cls, plan_config) -> "PlanLimitTable":
        """Create from a PlanLimitsConfig."""
        return cls(
            free=plan_config.free_daily_evals,
            pro=plan_config.pro_daily_evals,
            max=plan_config.max_daily_evals,
        )

    def limit_for(self, plan: Optional[str]) -> int:
        return self._limits.get(plan, self._limits[Plan.FREE.value])


@dataclass
class UserQuotaRecord:
    """Per-user quota state, stored on the user document."""
    plan: str = Plan.FREE.value
    remaining: Optional[int] = None  # None until first written: treated as the full limit
    reset_date: Optional[str] = None  # UTC day (YYYY-MM-DD) remaining was last reset

    @classmethod
    def from_user_data(cls, data: dict) -> "UserQuotaRecord":
        return cls(
            plan=data.get("pricing_plan") or Plan.FREE.value,
            remaining=data.get("evaluation_times"),
            reset_date=data.get("evaluation_reset_date"),
        )

    def to_user_data(self) -> dict:
        return {
            "pricing_plan": self.plan,
            "evaluation_times": self.remaining,
            "evaluation_reset_date": self.reset_date,
        }


@dataclass
class QuotaCheckResult:
    """Result of a quota check."""
    allowed: bool
    remaining: int  # -1 when the check failed open
    message: Optional[str] = None
    plan: Optional[str] = None
    limit: Optional[int] = None

    @property
    def failed_open(self) -> bool:
        return self.allowed and self.remaining < 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {"allowed": self.allowed, "remaining": self.remaining}
        if self.message:
            result["message"] = self.message
        return result


@dataclass
class PlanUpdateResult:
    """Result of changing a user's plan."""
    success: bool
    message: Optional[str] = None
    invalid_plan: bool = False

    def to_dict(self) -> dict:
        return {"success": self.success, "message": self.message}


class QuotaExceeded(Exception):
    """Raised when a user has no evaluations left for today."""

    def __init__(self, plan: str, limit: int, message: Optional[str] = None):
        super().__init__(message or limit_reached_message(plan, limit))
        self.plan = plan
        self.limit = limit
        self.message = str(self)

    def to_dict(self) -> dict:
        return {
            "error": "Quota exceeded",
            "message": self.message,
            "plan": self.plan,
            "limit": self.limit,
        }


def limit_reached_message(plan: str, limit: int) -> str:
    """User-facing message for an exhausted daily quota."""
    plural = "" if limit == 1 else "s"
    return (
        f"Daily evaluation limit reached. Your {plan} plan allows {limit} "
        f"evaluation{plural} per day. Upgrade your plan for more."
    )
