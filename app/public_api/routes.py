"""
Public API routes: API-keyed reads of public claims and the embeddable widget.
"""
import logging
from typing import Optional

from flask import Blueprint, request, jsonify, make_response, render_template_string

from .models import PublicApiError
from .services import PublicAccessGate

logger = logging.getLogger(__name__)

SEVERITY_COLORS = {
    "minor": "#22c55e",
    "moderate": "#eab308",
    "severe": "#f97316",
    "total_loss": "#ef4444",
}


def extract_api_key() -> Optional[str]:
    """API key from ``Authorization: Bearer <key>`` or the ``api_key`` query parameter."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):]
    return request.args.get("api_key")


def create_public_api_routes(gate: PublicAccessGate, widget_template: str) -> Blueprint:
    """Create Flask routes for the public read API."""
    bp = Blueprint('public_api', __name__)

    @bp.errorhandler(PublicApiError)
    def handle_public_api_error(e: PublicApiError):
        return jsonify(e.to_dict()), e.status_code

    @bp.route("/api/v1/reports/<report_id>", methods=["GET"])
    def get_report(report_id):
        """Get one public claim report."""
        return jsonify({"data": gate.get_public_record(report_id, extract_api_key())})

    @bp.route("/api/v1/reports", methods=["GET"])
    def list_reports():
        """List public claim reports, newest first."""
        return jsonify(gate.list_public_records(
            extract_api_key(),
            limit=request.args.get("limit", 20),
            offset=request.args.get("offset", 0),
        ))

    @bp.route("/api/v1/widget/<report_id>", methods=["GET"])
    def render_widget(report_id):
        """HTML summary for embedding in third-party pages."""
        try:
            bundle = gate.load_public_bundle(report_id, extract_api_key())
        except PublicApiError as e:
            resp = make_response(e.message, e.status_code)
            resp.headers["Content-Type"] = "text/plain; charset=utf-8"
            return resp

        html = render_template_string(
            widget_template,
            claim=bundle.claim,
            parts=bundle.visible_damages,
            assessment=bundle.assessment,
            severity_colors=SEVERITY_COLORS,
        )
        resp = make_response(html)
        resp.headers["Content-Type"] = "text/html; charset=utf-8"
        resp.headers["Access-Control-Allow-Origin"] = "*"
        return resp

    return bp
