"""
Claim analysis input models and write-path results.

The analysis payload is produced by the external AI analyzer in camelCase;
the models accept both camelCase and snake_case keys.
"""
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _AnalysisModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DamagedPart(_AnalysisModel):
    """A part with damage visible in the submitted media."""
    part: str
    severity: Optional[str] = None
    description: str = ""
    estimated_repair_cost: Optional[str] = None
    repair_or_replace: Optional[str] = None
    repair_or_replace_reason: Optional[str] = None


class InferredDamage(_AnalysisModel):
    """Internal damage inferred from what is visible."""
    component: str
    likelihood: Optional[str] = None
    description: str = ""
    based_on: Optional[str] = None


class VehicleDetails(_AnalysisModel):
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    color: Optional[str] = None


class VehicleVerification(_AnalysisModel):
    video_vehicle: VehicleDetails = Field(default_factory=VehicleDetails)
    policy_vehicle: VehicleDetails = Field(default_factory=VehicleDetails)
    verification_status: str = "insufficient_data"
    mismatches: List[str] = Field(default_factory=list)
    confidence_score: float = 0.0
    notes: Optional[str] = None


class FinancialBreakdown(_AnalysisModel):
    total_repair_estimate: float = 0.0
    covered_amount: float = 0.0
    deductible: float = 0.0
    non_covered_items: float = 0.0
    estimated_payout: float = 0.0


class ClaimAssessment(_AnalysisModel):
    status: str = "needs_investigation"
    financial_breakdown: FinancialBreakdown = Field(default_factory=FinancialBreakdown)
    reasoning: Optional[str] = None


class ClaimAnalysis(_AnalysisModel):
    """Complete AI damage analysis for one claim."""
    damaged_parts: List[DamagedPart] = Field(default_factory=list)
    inferred_internal_damages: List[InferredDamage] = Field(default_factory=list)
    overall_severity: Optional[str] = None
    estimated_repair_complexity: Optional[str] = None
    estimated_total_repair_cost: float = Field(default=0.0, ge=0)
    damage_type: Optional[str] = None
    damage_cause: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0, le=1)
    confidence_reasoning: Optional[str] = None
    safety_concerns: List[str] = Field(default_factory=list)
    recommended_actions: List[str] = Field(default_factory=list)
    investigation_needed: bool = False
    investigation_reason: Optional[str] = None
    vehicle_verification: Optional[VehicleVerification] = None
    claim_assessment: Optional[ClaimAssessment] = None


class ClaimValidationError(ValueError):
    """Raised for an invalid claim payload or status change."""


@dataclass
class ClaimCreationResult:
    """Ids of the documents written for one claim bundle."""
    claim_id: str
    claim_number: str
    damage_detail_ids: List[str]
    vehicle_verification_id: Optional[str] = None
    assessment_id: Optional[str] = None


@dataclass
class EvaluationResult:
    """Result of a quota-gated evaluation submission."""
    success: bool
    claim_id: str
    claim_number: str
    remaining: Optional[int] = None  # evaluations left after this one; -1 if the check failed open
    replayed: bool = False  # True when a retried request returned the earlier result

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "claim_id": self.claim_id,
            "claim_number": self.claim_number,
            "remaining": self.remaining,
            "replayed": self.replayed,
        }
