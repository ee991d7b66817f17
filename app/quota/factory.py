"""
Factory for creating quota management components.
"""

from typing import Callable, Optional
from datetime import datetime

from claim_store.record_store import RecordStore

from .models import PlanLimitTable
from .manager import QuotaTracker
from .routes import create_quota_routes


def create_quota_module(
    record_store: RecordStore,
    plan_config,
    user_service,
    clock: Optional[Callable[[], datetime]] = None,
) -> dict:
    """
    Create quota management module.
    
    Args:
        record_store: Store holding the users collection
        plan_config: PlanLimitsConfig with per-plan daily limits
        user_service: UserService for authentication and admin checks
        clock: Optional clock override (tests)
        
    Returns:
        Dictionary with:
        - tracker: QuotaTracker instance
        - limit_table: PlanLimitTable instance
        - blueprint: Flask blueprint
    """
    limit_table = PlanLimitTable.from_config(plan_config)
    tracker = QuotaTracker(
        record_store=record_store,
        limit_table=limit_table,
        clock=clock,
    )
    blueprint = create_quota_routes(tracker, user_service)
    
    return {
        "tracker": tracker,
        "limit_table": limit_table,
        "blueprint": blueprint,
    }
