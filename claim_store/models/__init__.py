"""
Models package for claim documents.
"""

from .documents import (
    UserDocument,
    InsuranceCompanyDocument,
    ClaimDocument,
    DamageDetailDocument,
    VehicleVerificationDocument,
    AssessmentDocument,
    CLAIM_STATUSES,
    to_model,
)

__all__ = [
    "UserDocument",
    "InsuranceCompanyDocument",
    "ClaimDocument",
    "DamageDetailDocument",
    "VehicleVerificationDocument",
    "AssessmentDocument",
    "CLAIM_STATUSES",
    "to_model",
]
