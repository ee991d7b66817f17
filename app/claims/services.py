"""
Claim write path: bundle creation, status changes and quota-gated evaluations.
"""
import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from claim_store.models import CLAIM_STATUSES, ClaimDocument, to_model
from claim_store.record_store import Collections, DocumentNotFound, RecordStore, StorageError
from app.permissions import (
    compose_claim_permissions,
    compose_claim_related_permissions,
    compose_user_permissions,
    to_permission_strings,
)
from app.quota import QuotaExceeded, QuotaTracker

from .models import (
    ClaimAnalysis,
    ClaimCreationResult,
    ClaimValidationError,
    DamagedPart,
    EvaluationResult,
    InferredDamage,
)
from .normalize import (
    ASSESSMENT_STATUSES,
    VERIFICATION_STATUSES,
    normalize_choice,
    normalize_damage_type,
    normalize_part_severity,
    normalize_repair_complexity,
    normalize_severity,
    to_valid_string,
    to_valid_string_list,
)

logger = logging.getLogger(__name__)

Analyzer = Callable[[Dict[str, Any]], Union[ClaimAnalysis, Dict[str, Any]]]

_CLAIM_NUMBER_ALPHABET = string.digits + string.ascii_uppercase
MAX_REQUEST_ID_LENGTH = 128


def generate_claim_number() -> str:
    """CLM-<epoch ms>-<9 upper-case base36 chars>."""
    suffix = "".join(secrets.choice(_CLAIM_NUMBER_ALPHABET) for _ in range(9))
    return f"CLM-{int(time.time() * 1000)}-{suffix}"


def parse_analysis(raw: Union[ClaimAnalysis, Dict[str, Any], None]) -> ClaimAnalysis:
    """Validate analyzer output into a ClaimAnalysis."""
    if isinstance(raw, ClaimAnalysis):
        return raw
    if not isinstance(raw, dict):
        raise ClaimValidationError("Analysis result must be an object")
    try:
        return ClaimAnalysis.model_validate(raw)
    except ValidationError as e:
        raise ClaimValidationError(f"Invalid analysis: {e.error_count()} error(s): {e.errors()[0]['msg']}") from e


def passthrough_analyzer(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Use an analysis computed upstream and posted with the submission."""
    analysis = payload.get("analysis")
    if analysis is None:
        raise ClaimValidationError("Missing analysis")
    return analysis


class ClaimService:
    """Creates claim bundles and changes claim status and visibility."""

    def __init__(self, record_store: RecordStore, clock: Optional[Callable[[], datetime]] = None):
        self.record_store = record_store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def resolve_team_id(self, insurance_company_id: Optional[str]) -> Optional[str]:
        """
        Team id of the insurance company a claim is routed to, or None.

        Raises:
            StorageError: the directory could not be read
        """
        if not insurance_company_id:
            return None
        try:
            company = self.record_store.get_document(Collections.INSURANCE_COMPANIES, insurance_company_id)
        except DocumentNotFound:
            logger.warning(f"Insurance company {insurance_company_id} not found, claim not routed to a team")
            return None

        team_id = company.get("team_id")
        if not isinstance(team_id, str) or not team_id.strip():
            return None
        return team_id.strip()

    def create_claim_bundle(
        self,
        user_id: str,
        insurance_company_id: Optional[str],
        analysis: ClaimAnalysis,
        media_file_ids: Optional[List[str]] = None,
        policy_file_id: Optional[str] = None,
    ) -> ClaimCreationResult:
        """
        Create a private claim and all of its dependent records.

        Args:
            user_id: Owner of the claim
            insurance_company_id: Company the claim is filed with, if any
            analysis: Validated analyzer output
            media_file_ids: Uploaded media referenced by the claim
            policy_file_id: Uploaded policy document, if any

        Returns:
            ClaimCreationResult with the ids of every created document

        Raises:
            StorageError: a write failed; documents already written for the
                bundle are deleted before the error is re-raised
        """
        team_id = self.resolve_team_id(insurance_company_id)
        claim_permissions = to_permission_strings(compose_claim_permissions(user_id, team_id, False))
        related_permissions = to_permission_strings(compose_claim_related_permissions(user_id, team_id))

        verification = analysis.vehicle_verification
        claim_number = generate_claim_number()
        claim = self.record_store.create_document(
            Collections.CLAIMS,
            None,
            {
                "user_id": user_id,
                "insurance_company_id": insurance_company_id or None,
                "claim_number": claim_number,
                "claim_status": "pending",
                "damage_type": normalize_damage_type(analysis.damage_type),
                "damage_cause": to_valid_string(analysis.damage_cause, 500),
                "overall_severity": normalize_severity(analysis.overall_severity),
                "estimated_repair_complexity": normalize_repair_complexity(analysis.estimated_repair_complexity),
                "estimated_total_repair_cost": analysis.estimated_total_repair_cost,
                "confidence_score": analysis.confidence,
                "confidence_reasoning": to_valid_string(analysis.confidence_reasoning, 1000),
                "vehicle_verification_status": normalize_choice(
                    verification.verification_status if verification else None,
                    VERIFICATION_STATUSES,
                    "insufficient_data",
                ),
                "investigation_needed": analysis.investigation_needed,
                "investigation_reason": (
                    to_valid_string(analysis.investigation_reason, 500) if analysis.investigation_reason else None
                ),
                "safety_concerns": to_valid_string_list(analysis.safety_concerns, 1200),
                "recommended_actions": to_valid_string_list(analysis.recommended_actions, 1200),
                "media_file_ids": [str(file_id) for file_id in media_file_ids or []],
                "policy_file_id": policy_file_id or None,
                "analysis_timestamp": self._clock().astimezone(timezone.utc).isoformat(),
                "is_public": False,
            },
            claim_permissions,
        )
        claim_id = claim.id
        logger.info(f"Created claim {claim_id} ({claim_number}) for {user_id}, team={team_id}")

        created = [(Collections.CLAIMS, claim_id)]
        try:
            detail_ids = []
            sort_order = 0
            for part in analysis.damaged_parts:
                detail_ids.append(self._create_dependent(
                    created,
                    Collections.CLAIM_DAMAGE_DETAILS,
                    self._observed_damage_data(claim_id, part, sort_order),
                    related_permissions,
                ))
                sort_order += 1

            for damage in analysis.inferred_internal_damages:
                detail_ids.append(self._create_dependent(
                    created,
                    Collections.CLAIM_DAMAGE_DETAILS,
                    self._inferred_damage_data(claim_id, damage, sort_order),
                    related_permissions,
                ))
                sort_order += 1

            verification_id = None
            if verification is not None:
                video = verification.video_vehicle
                policy = verification.policy_vehicle
                verification_id = self._create_dependent(
                    created,
                    Collections.CLAIM_VEHICLE_VERIFICATION,
                    {
                        "claim_id": claim_id,
                        "video_make": video.make,
                        "video_model": video.model,
                        "video_year": _valid_year(video.year),
                        "video_color": video.color,
                        "policy_make": policy.make,
                        "policy_model": policy.model,
                        "policy_year": _valid_year(policy.year),
                        "policy_color": policy.color,
                        "verification_status": normalize_choice(
                            verification.verification_status, VERIFICATION_STATUSES, "insufficient_data"
                        ),
                        "mismatches": ", ".join(verification.mismatches),
                        "confidence_score": verification.confidence_score,
                        "notes": verification.notes,
                    },
                    related_permissions,
                )

            assessment_id = None
            if analysis.claim_assessment is not None:
                assessment = analysis.claim_assessment
                financials = assessment.financial_breakdown
                assessment_id = self._create_dependent(
                    created,
                    Collections.CLAIM_ASSESSMENTS,
                    {
                        "claim_id": claim_id,
                        "assessment_status": normalize_choice(
                            assessment.status, ASSESSMENT_STATUSES, "needs_investigation"
                        ),
                        "total_repair_estimate": financials.total_repair_estimate,
                        "covered_amount": financials.covered_amount,
                        "deductible": financials.deductible,
                        "non_covered_items": financials.non_covered_items,
                        "estimated_payout": financials.estimated_payout,
                        "reasoning": to_valid_string(assessment.reasoning, 2000),
                    },
                    related_permissions,
                )
        except Exception:
            logger.error(f"Failed to write records for claim {claim_id}, rolling back {len(created)} document(s)")
            self._rollback(created)
            raise

        return ClaimCreationResult(
            claim_id=claim_id,
            claim_number=claim_number,
            damage_detail_ids=detail_ids,
            vehicle_verification_id=verification_id,
            assessment_id=assessment_id,
        )

    def _create_dependent(self, created: list, collection: str, data: dict, permissions: List[str]) -> str:
        document = self.record_store.create_document(collection, None, data, permissions)
        created.append((collection, document.id))
        return document.id

    def _rollback(self, created: list) -> None:
        """Delete documents of a partially written bundle, newest first."""
        for collection, document_id in reversed(created):
            try:
                self.record_store.delete_document(collection, document_id)
            except StorageError as e:
                logger.error(f"Rollback could not delete {collection}/{document_id}: {e}")

    def get_claim(self, claim_id: str) -> ClaimDocument:
        """Raises DocumentNotFound for unknown claims."""
        return to_model(ClaimDocument, self.record_store.get_document(Collections.CLAIMS, claim_id))

    def update_claim_status(self, claim_id: str, status: str, is_public: bool = False) -> ClaimDocument:
        """
        Change a claim's status and visibility.

        The claim is public only when publication is requested and the status
        is approved. The stored is_public flag and the claim ACL are rewritten
        together; dependent records keep their ACL.

        Raises:
            ClaimValidationError: unknown status
            DocumentNotFound: unknown claim
        """
        if status not in CLAIM_STATUSES:
            raise ClaimValidationError(f"Invalid status: {status}")

        claim = self.get_claim(claim_id)
        public = bool(is_public) and status == "approved"
        if is_public and not public:
            logger.info(f"Claim {claim_id} stays private: only approved claims can be published")

        team_id = self.resolve_team_id(claim.insurance_company_id)
        permissions = to_permission_strings(compose_claim_permissions(claim.user_id, team_id, public))
        document = self.record_store.update_document(
            Collections.CLAIMS,
            claim_id,
            {"claim_status": status, "is_public": public},
            permissions,
        )
        logger.info(f"Claim {claim_id} status={status} public={public}")
        return to_model(ClaimDocument, document)

    @staticmethod
    def _observed_damage_data(claim_id: str, part: DamagedPart, sort_order: int) -> dict:
        severity = normalize_part_severity(part.severity)
        if part.severity and part.severity != severity:
            logger.debug(f"Normalized severity for {part.part!r}: {part.severity!r} -> {severity!r}")
        return {
            "claim_id": claim_id,
            "part_name": to_valid_string(part.part, 200),
            "severity": severity,
            "description": to_valid_string(part.description, 1000),
            "estimated_repair_cost": part.estimated_repair_cost or None,
            "repair_or_replace": part.repair_or_replace or None,
            "repair_or_replace_reason": part.repair_or_replace_reason or None,
            "sort_order": sort_order,
            "is_inferred": False,
        }

    @staticmethod
    def _inferred_damage_data(claim_id: str, damage: InferredDamage, sort_order: int) -> dict:
        return {
            "claim_id": claim_id,
            "part_name": to_valid_string(damage.component, 200),
            "severity": "moderate",
            "description": to_valid_string(damage.description, 1000),
            "sort_order": sort_order,
            "is_inferred": True,
            "inferred_likelihood": damage.likelihood,
            "inferred_based_on": damage.based_on,
        }


def _valid_year(year: Optional[int]) -> Optional[int]:
    if year is None or not 1900 <= year <= 2100:
        return None
    return year


class EvaluationService:
    """Runs AI evaluations under the daily quota."""

    def __init__(
        self,
        record_store: RecordStore,
        claim_service: ClaimService,
        quota_tracker: QuotaTracker,
        analyzer: Optional[Analyzer] = None,
    ):
        self.record_store = record_store
        self.claim_service = claim_service
        self.quota_tracker = quota_tracker
        self.analyzer = analyzer or passthrough_analyzer

    def submit_evaluation(
        self,
        user_id: str,
        payload: Dict[str, Any],
        insurance_company_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> EvaluationResult:
        """
        Evaluate a submission and store the resulting claim.

        A request id that already completed for this user returns the earlier
        result without consuming quota again.

        Raises:
            QuotaExceeded: no evaluations left today
            ClaimValidationError: invalid payload or analyzer output
            StorageError: the claim could not be stored; no quota is consumed
        """
        if request_id is not None:
            request_id = _validate_request_id(request_id)
            previous = self._find_completed_request(user_id, request_id)
            if previous is not None:
                logger.info(f"Replaying evaluation request {request_id} for {user_id}")
                return previous

        quota = self.quota_tracker.check(user_id)
        if not quota.allowed:
            raise QuotaExceeded(quota.plan, quota.limit, quota.message)
        if quota.failed_open:
            logger.warning(f"Quota check for {user_id} failed open, evaluating anyway")

        media_file_ids = payload.get("media_file_ids") or []
        if not isinstance(media_file_ids, list):
            raise ClaimValidationError("media_file_ids must be a list")

        analysis = parse_analysis(self.analyzer(payload))
        creation = self.claim_service.create_claim_bundle(
            user_id,
            insurance_company_id,
            analysis,
            media_file_ids=media_file_ids,
            policy_file_id=payload.get("policy_file_id"),
        )

        remaining = max(0, quota.remaining - 1) if quota.remaining >= 0 else -1
        result = EvaluationResult(
            success=True,
            claim_id=creation.claim_id,
            claim_number=creation.claim_number,
            remaining=remaining,
        )
        if request_id is not None:
            self._record_request(user_id, request_id, result)

        self.quota_tracker.decrement(user_id)
        return result

    # =====================
    # Idempotency ledger
    # =====================

    @staticmethod
    def _ledger_id(user_id: str, request_id: str) -> str:
        return f"{user_id}:{request_id}"

    def _find_completed_request(self, user_id: str, request_id: str) -> Optional[EvaluationResult]:
        try:
            document = self.record_store.get_document(
                Collections.EVALUATION_REQUESTS, self._ledger_id(user_id, request_id)
            )
        except DocumentNotFound:
            return None
        return EvaluationResult(
            success=True,
            claim_id=document.get("claim_id"),
            claim_number=document.get("claim_number"),
            remaining=document.get("remaining"),
            replayed=True,
        )

    def _record_request(self, user_id: str, request_id: str, result: EvaluationResult) -> None:
        try:
            self.record_store.create_document(
                Collections.EVALUATION_REQUESTS,
                self._ledger_id(user_id, request_id),
                {
                    "user_id": user_id,
                    "request_id": request_id,
                    "claim_id": result.claim_id,
                    "claim_number": result.claim_number,
                    "remaining": result.remaining,
                },
                to_permission_strings(compose_user_permissions(user_id)),
            )
        except StorageError as e:
            # The claim exists already; a lost ledger entry only weakens replay
            logger.error(f"Failed to record evaluation request {request_id} for {user_id}: {e}")


def _validate_request_id(request_id: Any) -> str:
    if not isinstance(request_id, str) or not request_id.strip():
        raise ClaimValidationError("request_id must be a non-empty string")
    request_id = request_id.strip()
    if len(request_id) > MAX_REQUEST_ID_LENGTH:
        raise ClaimValidationError(f"request_id must be at most {MAX_REQUEST_ID_LENGTH} characters")
    return request_id
