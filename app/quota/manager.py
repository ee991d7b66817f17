"""
Quota tracker for the per-user daily evaluation limit.

Resets are lazy: there is no scheduled job. The first access on a new UTC
day notices that ``reset_date`` is stale and restores the plan's full limit.

check() and decrement() are separate read-modify-write operations. Two
concurrent evaluations for the same user can both pass check() and the
store may end up decremented once or twice; the quota is a soft usage cap,
so a small over-grant is accepted.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from claim_store.record_store import RecordStore, Collections, DocumentNotFound, StorageError
from app.permissions import compose_user_permissions, to_permission_strings

from .models import (
    Plan,
    PlanLimitTable,
    UserQuotaRecord,
    QuotaCheckResult,
    PlanUpdateResult,
    VALID_PLANS,
    limit_reached_message,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuotaTracker:
    """
    Reads and writes the per-user quota record and enforces the plan limit.

    Failure policy:
    - check(): storage faults fail open (allowed, remaining=-1)
    - decrement(): storage faults are logged and swallowed
    """

    def __init__(
        self,
        record_store: RecordStore,
        limit_table: PlanLimitTable,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize QuotaTracker.

        Args:
            record_store: Store holding the users collection
            limit_table: Plan to daily limit lookup
            clock: Returns the current time; defaults to UTC wall clock
        """
        self.record_store = record_store
        self.limit_table = limit_table
        self._clock = clock or utc_now

    def today(self) -> str:
        """Current calendar day in UTC (YYYY-MM-DD)."""
        return self._clock().astimezone(timezone.utc).date().isoformat()

    def check(self, user_id: str) -> QuotaCheckResult:
        """
        Check whether the user may run another evaluation today.

        Persists a reset when the stored day is stale. Never raises for
        storage faults.
        """
        try:
            record, exists = self._load_record(user_id)
            today = self.today()
            limit = self.limit_table.limit_for(record.plan)
            remaining = self._effective_remaining(record, limit)

            if record.reset_date != today:
                remaining = limit
                self._save_record(
                    user_id,
                    UserQuotaRecord(plan=record.plan, remaining=limit, reset_date=today),
                    exists,
                )
                logger.info(f"Quota reset for {user_id}: {limit} ({record.plan}) on {today}")

            if remaining <= 0:
                logger.info(f"Quota exhausted for {user_id} on plan {record.plan}")
                return QuotaCheckResult(
                    allowed=False,
                    remaining=0,
                    message=limit_reached_message(record.plan, limit),
                    plan=record.plan,
                    limit=limit,
                )

            return QuotaCheckResult(allowed=True, remaining=remaining, plan=record.plan, limit=limit)
        except Exception as e:
            # Fail open: an infrastructure fault must not block evaluations
            logger.exception(f"Failed to check evaluation limit for {user_id}: {e}")
            return QuotaCheckResult(allowed=True, remaining=-1)

    def decrement(self, user_id: str) -> None:
        """
        Consume one evaluation for today. Best-effort: never raises for
        storage faults, so an already completed evaluation is not failed.
        """
        try:
            record, exists = self._load_record(user_id)
            today = self.today()
            limit = self.limit_table.limit_for(record.plan)
            remaining = self._effective_remaining(record, limit)

            if record.reset_date != today:
                remaining = limit

            new_remaining = max(0, remaining - 1)
            self._save_record(
                user_id,
                UserQuotaRecord(plan=record.plan, remaining=new_remaining, reset_date=today),
                exists,
            )
            logger.info(f"Decremented quota for {user_id}: {new_remaining}/{limit}")
        except Exception as e:
            logger.exception(f"Failed to decrement evaluation limit for {user_id}: {e}")

    def set_plan(self, user_id: str, plan: str) -> PlanUpdateResult:
        """
        Move the user to a new plan and grant that plan's full limit for today.

        Args:
            user_id: User ID
            plan: One of free, pro, max
        """
        if Plan.parse(plan) is None:
            return PlanUpdateResult(success=False, message="Invalid plan", invalid_plan=True)

        try:
            _, exists = self._load_record(user_id)
            limit = self.limit_table.limit_for(plan)
            self._save_record(
                user_id,
                UserQuotaRecord(plan=plan, remaining=limit, reset_date=self.today()),
                exists,
            )
            logger.info(f"Set plan for {user_id}: {plan} ({limit}/day)")
            return PlanUpdateResult(success=True)
        except StorageError as e:
            logger.error(f"Failed to update plan for {user_id}: {e}")
            return PlanUpdateResult(success=False, message=str(e) or "Failed to update plan")

    def get_quota_info(self, user_id: str) -> dict:
        """
        Get quota information for display without writing anything.

        Returns dict with:
        - plan: Plan name
        - daily_limit: Limit of the plan
        - remaining: Evaluations left today
        - reset_date: Day of the last reset, or None
        """
        record, _ = self._load_record(user_id)
        limit = self.limit_table.limit_for(record.plan)
        remaining = self._effective_remaining(record, limit)
        if record.reset_date != self.today():
            remaining = limit

        return {
            "plan": record.plan,
            "daily_limit": limit,
            "remaining": max(0, remaining),
            "reset_date": record.reset_date,
            "valid_plans": list(VALID_PLANS),
        }

    # =====================
    # Private helper methods
    # =====================

    @staticmethod
    def _effective_remaining(record: UserQuotaRecord, limit: int) -> int:
        """Stored remaining clamped to the current plan limit (handles downgrades)."""
        remaining = record.remaining if record.remaining is not None else limit
        return min(remaining, limit)

    def _load_record(self, user_id: str) -> Tuple[UserQuotaRecord, bool]:
        """Load the quota record; a missing user yields the free-plan default."""
        try:
            document = self.record_store.get_document(Collections.USERS, user_id)
        except DocumentNotFound:
            return UserQuotaRecord(), False
        return UserQuotaRecord.from_user_data(document.data), True

    def _save_record(self, user_id: str, record: UserQuotaRecord, exists: bool) -> None:
        """Persist the quota fields, creating a private user document if needed."""
        if exists:
            self.record_store.update_document(Collections.USERS, user_id, record.to_user_data())
        else:
            self.record_store.create_document(
                Collections.USERS,
                user_id,
                record.to_user_data(),
                to_permission_strings(compose_user_permissions(user_id)),
            )
