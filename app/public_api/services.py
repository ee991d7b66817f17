"""
Public read gate for claim reports.

Visibility is decided by the claim's ``is_public`` flag, not by its ACL:
reads here run with full store access on behalf of an API key holder.
"""
import hmac
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from claim_store.bundle import ClaimBundle, load_claim_bundle
from claim_store.models import ClaimDocument, to_model
from claim_store.record_store import Collections, DocumentNotFound, RecordStore, StorageError

from .models import Forbidden, NotFound, PublicListingError, Unauthorized

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20


def format_report_response(bundle: ClaimBundle) -> Dict[str, Any]:
    """Shape a claim bundle into the public aggregated view."""
    claim = bundle.claim
    verification = bundle.vehicle_verification
    assessment = bundle.assessment

    return {
        "id": claim.id,
        "claimNumber": claim.claim_number,
        "status": claim.claim_status,
        "createdAt": claim.analysis_timestamp,
        "damage": {
            "type": claim.damage_type,
            "cause": claim.damage_cause,
            "overallSeverity": claim.overall_severity,
            "repairComplexity": claim.estimated_repair_complexity,
            "estimatedTotalCost": claim.estimated_total_repair_cost,
            "confidenceScore": claim.confidence_score,
            "parts": [
                {
                    "name": d.part_name,
                    "severity": d.severity,
                    "description": d.description,
                    "estimatedCost": d.estimated_repair_cost,
                    "repairOrReplace": d.repair_or_replace or None,
                    "repairOrReplaceReason": d.repair_or_replace_reason or None,
                }
                for d in bundle.visible_damages
            ],
            "inferredInternalDamages": [
                {
                    "component": d.part_name,
                    "likelihood": d.inferred_likelihood,
                    "description": d.description,
                    "basedOn": d.inferred_based_on,
                }
                for d in bundle.inferred_damages
            ],
        },
        "vehicleVerification": {
            "status": verification.verification_status,
            "confidenceScore": verification.confidence_score,
            "videoVehicle": {
                "make": verification.video_make,
                "model": verification.video_model,
                "year": verification.video_year,
                "color": verification.video_color,
            },
            "policyVehicle": {
                "make": verification.policy_make,
                "model": verification.policy_model,
                "year": verification.policy_year,
                "color": verification.policy_color,
            },
        } if verification else None,
        "financials": {
            "totalRepairEstimate": assessment.total_repair_estimate,
            "coveredAmount": assessment.covered_amount,
            "deductible": assessment.deductible,
            "nonCoveredItems": assessment.non_covered_items,
            "estimatedPayout": assessment.estimated_payout,
            "assessmentStatus": assessment.assessment_status,
        } if assessment else None,
        "investigation": {
            "needed": claim.investigation_needed,
            "reason": claim.investigation_reason or None,
        },
        "safetyConcerns": list(claim.safety_concerns or []),
        "recommendedActions": list(claim.recommended_actions or []),
    }


def format_report_summary(claim: ClaimDocument) -> Dict[str, Any]:
    """Shape a claim into a listing row."""
    return {
        "id": claim.id,
        "claimNumber": claim.claim_number,
        "status": claim.claim_status,
        "damageType": claim.damage_type,
        "overallSeverity": claim.overall_severity,
        "estimatedTotalCost": claim.estimated_total_repair_cost,
        "confidenceScore": claim.confidence_score,
        "createdAt": claim.analysis_timestamp,
    }


def _parse_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class PublicAccessGate:
    """API-keyed read access to public claims."""

    def __init__(self, record_store: RecordStore, public_api_config):
        self.record_store = record_store
        self.api_key = public_api_config.api_key or ""
        self.list_max_limit = public_api_config.list_max_limit
        self.hide_private_reports = public_api_config.hide_private_reports

    def authenticate(self, credential: Optional[str]) -> None:
        """Raise Unauthorized unless the credential equals the configured key.

        An unset key rejects every caller.
        """
        if not self.api_key or not credential:
            raise Unauthorized()
        if not hmac.compare_digest(credential.encode("utf-8"), self.api_key.encode("utf-8")):
            raise Unauthorized()

    def load_public_bundle(self, record_id: str, credential: Optional[str]) -> ClaimBundle:
        """Authenticate, then load a claim bundle that is public.

        Raises:
            Unauthorized: missing or wrong API key
            NotFound: unknown claim or failed lookup
            Forbidden: claim is private
        """
        self.authenticate(credential)

        try:
            bundle = load_claim_bundle(self.record_store, record_id)
        except DocumentNotFound:
            raise NotFound()
        except StorageError as e:
            logger.error(f"Error loading claim {record_id} for public read: {e}")
            raise NotFound()
        except ValidationError as e:
            logger.error(f"Stored claim {record_id} is malformed: {e.error_count()} error(s): {e}")
            raise NotFound()

        if not bundle.claim.is_public:
            if self.hide_private_reports:
                raise NotFound()
            raise Forbidden()
        return bundle

    def get_public_record(self, record_id: str, credential: Optional[str]) -> Dict[str, Any]:
        """Aggregated view of a public claim."""
        return format_report_response(self.load_public_bundle(record_id, credential))

    def list_public_records(self, credential: Optional[str], limit: Any = DEFAULT_LIST_LIMIT,
                            offset: Any = 0) -> Dict[str, Any]:
        """Public claims, newest first.

        Args:
            credential: API key
            limit: Page size, clamped to [1, list_max_limit]
            offset: Rows to skip, at least 0
        """
        self.authenticate(credential)

        limit = min(max(_parse_int(limit, DEFAULT_LIST_LIMIT), 1), self.list_max_limit)
        offset = max(_parse_int(offset, 0), 0)

        try:
            result = self.record_store.list_documents(
                Collections.CLAIMS,
                filters={"is_public": True},
                order_by="created_at",
                descending=True,
                limit=limit,
                offset=offset,
            )
            summaries = [format_report_summary(to_model(ClaimDocument, doc)) for doc in result.documents]
        except (StorageError, ValidationError) as e:
            logger.error(f"Error listing public claims: {e}")
            raise PublicListingError()

        return {
            "data": summaries,
            "total": result.total,
            "limit": limit,
            "offset": offset,
        }
