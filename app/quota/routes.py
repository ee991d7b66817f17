"""
Quota routes: current user's quota and admin plan changes.
"""
import logging

from flask import Blueprint, request, jsonify

from claim_store.record_store import StorageError
from .manager import QuotaTracker

logger = logging.getLogger(__name__)


def create_quota_routes(tracker: QuotaTracker, user_service) -> Blueprint:
    """Create quota routes."""
    bp = Blueprint('quota', __name__)
    
    @bp.route("/api/quota", methods=["GET"])
    def get_quota():
        """Get the current user's quota information."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        
        try:
            return jsonify({"success": True, "quota": tracker.get_quota_info(uid)})
        except StorageError as e:
            logger.error(f"Error loading quota for {uid}: {e}")
            return jsonify({
                "error": "Failed to get quota information",
                "message": "Quota information is temporarily unavailable"
            }), 503
    
    @bp.route("/admin/users/<user_id>/plan", methods=["POST"])
    def set_plan(user_id):
        """Change a user's pricing plan (admin only)."""
        uid, error = user_service.require_admin_json()
        if error:
            return jsonify(error), 403
        
        data = request.get_json(silent=True) or {}
        plan = str(data.get("plan", "")).strip().lower()
        
        result = tracker.set_plan(user_id, plan)
        if result.success:
            logger.info(f"Admin {uid} set plan {plan} for {user_id}")
            return jsonify(result.to_dict())
        return jsonify(result.to_dict()), 400 if result.invalid_plan else 500
    
    return bp
