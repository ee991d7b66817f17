"""
Factory for creating the claim write path.
"""
from datetime import datetime
from typing import Callable, Optional

from claim_store.record_store import RecordStore
from app.quota import QuotaTracker

from .services import Analyzer, ClaimService, EvaluationService
from .routes import create_claims_routes


def create_claims_module(
    record_store: RecordStore,
    quota_tracker: QuotaTracker,
    user_service,
    analyzer: Optional[Analyzer] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> dict:
    """
    Create claims module.

    Args:
        record_store: Store for the claim collections
        quota_tracker: Daily evaluation quota
        user_service: UserService for authentication and admin checks
        analyzer: Turns a submission payload into an analysis; defaults to
            reading a precomputed ``analysis`` field
        clock: Optional clock override (tests)

    Returns:
        Dictionary with claim_service, evaluation_service and blueprint
    """
    claim_service = ClaimService(record_store, clock=clock)
    evaluation_service = EvaluationService(
        record_store=record_store,
        claim_service=claim_service,
        quota_tracker=quota_tracker,
        analyzer=analyzer,
    )
    blueprint = create_claims_routes(evaluation_service, claim_service, user_service)

    return {
        "claim_service": claim_service,
        "evaluation_service": evaluation_service,
        "blueprint": blueprint,
    }
