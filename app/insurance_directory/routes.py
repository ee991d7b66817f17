"""
Insurance directory routes.
"""
import logging

from flask import Blueprint, request, jsonify

from claim_store.record_store import StorageError
from .services import DirectoryError, InsuranceDirectoryService

logger = logging.getLogger(__name__)


def create_directory_routes(directory_service: InsuranceDirectoryService, user_service) -> Blueprint:
    """Create insurance directory routes."""
    bp = Blueprint('insurance_directory', __name__)

    @bp.route("/api/insurance_companies", methods=["GET"])
    def list_companies():
        """List active insurance companies (public fields only)."""
        try:
            companies = directory_service.list_companies(active_only=True)
        except StorageError as e:
            logger.error(f"Error listing insurance companies: {e}")
            return jsonify({"error": "Failed to list insurance companies"}), 503

        return jsonify({
            "success": True,
            "companies": [
                {"id": c.id, "name": c.name, "website": c.website}
                for c in companies
            ],
        })

    @bp.route("/admin/insurance_companies", methods=["POST"])
    def create_company():
        """Register an insurance company (admin only)."""
        uid, error = user_service.require_admin_json()
        if error:
            return jsonify(error), 403

        data = request.get_json(silent=True) or {}
        try:
            company = directory_service.create_company(
                name=data.get("name", ""),
                contact_email=data.get("contact_email", ""),
                company_code=data.get("company_code"),
                team_id=data.get("team_id"),
                contact_phone=data.get("contact_phone"),
                website=data.get("website"),
            )
        except DirectoryError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except StorageError as e:
            logger.error(f"Error registering insurance company: {e}")
            return jsonify({"success": False, "message": "Registration failed"}), 503

        logger.info(f"Admin {uid} registered company {company.id}")
        return jsonify({"success": True, "company": company.model_dump()}), 201

    return bp
