"""
Document models for the claims collections.

These Pydantic models describe the ``data`` payload stored for each
collection. Stored documents are validated into them on read so that
formatting code works against typed fields rather than raw dicts.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from ..record_store import StoredDocument


ClaimStatus = Literal["pending", "analyzed", "approved", "denied", "partial", "needs_investigation"]
DamageType = Literal["collision", "comprehensive", "weather", "vandalism", "unknown"]
Severity = Literal["minor", "moderate", "severe", "total_loss"]
RepairComplexity = Literal["simple", "moderate", "complex", "extensive"]
VerificationStatus = Literal["matched", "mismatched", "insufficient_data"]
AssessmentStatus = Literal["approved", "denied", "partial", "needs_investigation"]

CLAIM_STATUSES = ("pending", "analyzed", "approved", "denied", "partial", "needs_investigation")


class UserDocument(BaseModel):
    """User profile plus the embedded daily evaluation quota fields."""
    id: str
    full_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    role: Literal["user", "admin", "insurance_adjuster"] = "user"
    insurance_company_id: Optional[str] = None
    onboarding_completed: bool = False
    pricing_plan: Optional[str] = None
    evaluation_times: Optional[int] = None
    evaluation_reset_date: Optional[str] = None


class InsuranceCompanyDocument(BaseModel):
    """Insurance company directory entry."""
    id: str
    name: str
    company_code: str
    team_id: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website: Optional[str] = None
    is_active: bool = True


class ClaimDocument(BaseModel):
    """Top-level claim record."""
    id: str
    user_id: str
    insurance_company_id: Optional[str] = None
    claim_number: str
    claim_status: ClaimStatus = "pending"
    damage_type: DamageType = "unknown"
    damage_cause: Optional[str] = None
    overall_severity: Severity = "moderate"
    estimated_repair_complexity: RepairComplexity = "moderate"
    estimated_total_repair_cost: float = 0.0
    confidence_score: float = 0.0
    confidence_reasoning: Optional[str] = None
    vehicle_verification_status: VerificationStatus = "insufficient_data"
    investigation_needed: bool = False
    investigation_reason: Optional[str] = None
    safety_concerns: List[str] = Field(default_factory=list)
    recommended_actions: List[str] = Field(default_factory=list)
    media_file_ids: List[str] = Field(default_factory=list)
    policy_file_id: Optional[str] = None
    analysis_timestamp: Optional[str] = None
    is_public: bool = False


class DamageDetailDocument(BaseModel):
    """One damaged part, either observed or inferred from the observed damage."""
    id: str
    claim_id: str
    part_name: str
    severity: Literal["minor", "moderate", "severe"] = "moderate"
    description: str = ""
    estimated_repair_cost: Optional[str] = Field(default=None, description='e.g. "$500 - $800"')
    repair_or_replace: Optional[str] = None
    repair_or_replace_reason: Optional[str] = None
    sort_order: int = 0
    is_inferred: bool = False
    inferred_likelihood: Optional[str] = None
    inferred_based_on: Optional[str] = None


class VehicleVerificationDocument(BaseModel):
    """Comparison of the filmed vehicle against the policy vehicle."""
    id: str
    claim_id: str
    video_make: Optional[str] = None
    video_model: Optional[str] = None
    video_year: Optional[int] = None
    video_color: Optional[str] = None
    policy_make: Optional[str] = None
    policy_model: Optional[str] = None
    policy_year: Optional[int] = None
    policy_color: Optional[str] = None
    verification_status: VerificationStatus = "insufficient_data"
    confidence_score: float = 0.0
    notes: Optional[str] = None


class AssessmentDocument(BaseModel):
    """Coverage and payout assessment for a claim."""
    id: str
    claim_id: str
    assessment_status: AssessmentStatus = "needs_investigation"
    total_repair_estimate: float = 0.0
    covered_amount: float = 0.0
    deductible: float = 0.0
    non_covered_items: float = 0.0
    estimated_payout: float = 0.0
    reasoning: Optional[str] = None


def to_model(model_cls, document: StoredDocument):
    """Validate a stored document's payload into a document model."""
    return model_cls.model_validate({**document.data, "id": document.id})
