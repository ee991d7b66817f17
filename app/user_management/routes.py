"""
User management routes for profiles.
"""
import logging

from flask import Blueprint, request, jsonify
from pydantic import ValidationError

from claim_store.record_store import StorageError
from .models import ProfileError, ProfileRequest
from .services import UserService

logger = logging.getLogger(__name__)


def create_user_routes(user_service: UserService) -> Blueprint:
    """Create user management routes."""
    bp = Blueprint('user_management', __name__)
    
    @bp.route("/api/profile", methods=["GET"])
    def get_profile():
        """Get the current user's profile."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        
        try:
            profile = user_service.get_profile(uid)
        except StorageError as e:
            logger.error(f"Error loading profile for {uid}: {e}")
            return jsonify({"error": "Failed to load profile"}), 503
        
        if profile is None:
            return jsonify({"error": "Not Found", "message": "Profile not found"}), 404
        
        return jsonify({
            "success": True,
            "profile": profile.model_dump(exclude={"evaluation_times", "evaluation_reset_date"}),
            "is_admin": user_service.is_admin_user(uid),
        })
    
    @bp.route("/api/profile", methods=["POST"])
    def save_profile():
        """Create or complete the current user's profile."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401
        
        try:
            profile_request = ProfileRequest.model_validate(request.get_json(silent=True) or {})
        except ValidationError as e:
            return jsonify({"success": False, "message": e.errors()[0]["msg"]}), 400
        
        try:
            profile = user_service.complete_onboarding(uid, profile_request)
        except ProfileError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except StorageError as e:
            logger.error(f"Error saving profile for {uid}: {e}")
            return jsonify({"success": False, "message": "Failed to save profile"}), 503
        
        return jsonify({
            "success": True,
            "profile": profile.model_dump(exclude={"evaluation_times", "evaluation_reset_date"}),
        })
    
    return bp
