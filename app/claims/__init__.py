"""
Claim write path: AI evaluation under the daily quota, claim bundles with
composed permissions, and status/visibility review.
"""

from .models import ClaimAnalysis, ClaimValidationError, ClaimCreationResult, EvaluationResult
from .services import ClaimService, EvaluationService, generate_claim_number, passthrough_analyzer

__all__ = [
    "ClaimAnalysis",
    "ClaimValidationError",
    "ClaimCreationResult",
    "EvaluationResult",
    "ClaimService",
    "EvaluationService",
    "generate_claim_number",
    "passthrough_analyzer",
]
