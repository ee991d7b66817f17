"""
Claim routes: quota-gated evaluation submission and status changes.
"""
import logging

from flask import Blueprint, request, jsonify

from claim_store.record_store import DocumentNotFound, StorageError
from app.quota import QuotaExceeded

from .models import ClaimValidationError
from .services import ClaimService, EvaluationService

logger = logging.getLogger(__name__)


def create_claims_routes(evaluation_service: EvaluationService,
                         claim_service: ClaimService,
                         user_service) -> Blueprint:
    """Create Flask routes for claim submission and review."""
    bp = Blueprint('claims', __name__)

    @bp.route("/api/claims", methods=["POST"])
    def submit_claim():
        """Run an evaluation and store the resulting claim."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401

        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid payload", "message": "Expected a JSON object"}), 400

        request_id = data.get("request_id") or request.headers.get("Idempotency-Key")

        try:
            result = evaluation_service.submit_evaluation(
                uid,
                data,
                insurance_company_id=data.get("insurance_company_id"),
                request_id=request_id,
            )
        except QuotaExceeded as e:
            return jsonify(e.to_dict()), 429
        except ClaimValidationError as e:
            return jsonify({"error": "Invalid payload", "message": str(e)}), 400
        except StorageError as e:
            logger.error(f"Storage error during evaluation for {uid}: {e}")
            return jsonify({"error": "Failed to store claim"}), 503
        except Exception as e:
            logger.exception(f"Evaluation failed for {uid}: {e}")
            return jsonify({
                "error": "Evaluation failed",
                "message": "The claim could not be evaluated"
            }), 500

        return jsonify(result.to_dict()), 200 if result.replayed else 201

    @bp.route("/api/claims/<claim_id>/status", methods=["POST"])
    def update_claim_status(claim_id):
        """Change status and visibility (admins and the claim's adjuster team)."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401

        try:
            claim = claim_service.get_claim(claim_id)
            allowed = user_service.is_admin_user(uid)
            if not allowed:
                claim_team = claim_service.resolve_team_id(claim.insurance_company_id)
                user_team = claim_service.resolve_team_id(user_service.get_insurance_company_id(uid))
                allowed = bool(claim_team) and claim_team == user_team
        except DocumentNotFound:
            return jsonify({"error": "Not Found", "message": "Claim not found"}), 404
        except StorageError as e:
            logger.error(f"Error loading claim {claim_id}: {e}")
            return jsonify({"error": "Failed to load claim"}), 503

        if not allowed:
            return jsonify({"error": "Forbidden", "message": "Not allowed to review this claim"}), 403

        data = request.get_json(silent=True) or {}
        status = str(data.get("status", "")).strip()
        is_public = data.get("is_public") is True

        try:
            updated = claim_service.update_claim_status(claim_id, status, is_public)
        except ClaimValidationError as e:
            return jsonify({"error": "Invalid payload", "message": str(e)}), 400
        except StorageError as e:
            logger.error(f"Error updating claim {claim_id}: {e}")
            return jsonify({"error": "Failed to update claim"}), 503

        logger.info(f"{uid} set claim {claim_id} to {status}")
        return jsonify({
            "success": True,
            "claim_id": updated.id,
            "status": updated.claim_status,
            "is_public": updated.is_public,
        })

    return bp
