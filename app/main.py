import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

# Import configuration management
import sys
sys.path.append(str(Path(__file__).parent.parent))
from config_manager import ConfigManager

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from claim_store.record_store import JsonRecordStore, RecordStore
from app.user_management.factory import create_user_management_module
from app.quota.factory import create_quota_module
from app.claims.factory import create_claims_module
from app.insurance_directory.factory import create_insurance_directory_module
from app.public_api.factory import create_public_api_module

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent.parent


def _resolve(path_value: str) -> Path:
    path = Path(path_value)
    return path if path.is_absolute() else BASE_DIR / path


def create_app(
    config_manager: Optional[ConfigManager] = None,
    record_store: Optional[RecordStore] = None,
    analyzer=None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Flask:
    """
    Build the Flask application.

    Args:
        config_manager: Configuration source; defaults to claim_guard_config.json + env
        record_store: Document store; defaults to a JSON store under paths.data_dir
        analyzer: Turns a claim submission into an analysis
        clock: Optional clock override (tests)
    """
    config_manager = config_manager or ConfigManager()
    app_config = config_manager.get_app_config()
    paths_config = config_manager.get_paths_config()
    public_api_config = config_manager.get_public_api_config()

    # -------------------------------------------------------------------------
    # Storage and templates
    # -------------------------------------------------------------------------

    if record_store is None:
        record_store = JsonRecordStore(_resolve(paths_config.data_dir))

    widget_template = (_resolve(paths_config.ui_dir) / "widget.html").read_text(encoding="utf-8")

    app = Flask(__name__, static_folder=None)
    app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_proto = 1,     # trust 1 hop for X-Forwarded-Proto
            x_host  = 1,     # trust 1 hop for X-Forwarded-Host
            x_prefix= 1)     # <-- pay attention to X-Forwarded-Prefix

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    user_management_module = create_user_management_module(
        record_store=record_store,
        admin_user_ids=app_config.admin_user_ids,
    )
    user_service = user_management_module["service"]

    quota_module = create_quota_module(
        record_store=record_store,
        plan_config=config_manager.get_plan_limits_config(),
        user_service=user_service,
        clock=clock,
    )

    claims_module = create_claims_module(
        record_store=record_store,
        quota_tracker=quota_module["tracker"],
        user_service=user_service,
        analyzer=analyzer,
        clock=clock,
    )

    directory_module = create_insurance_directory_module(
        record_store=record_store,
        user_service=user_service,
    )

    public_api_module = create_public_api_module(
        record_store=record_store,
        public_api_config=public_api_config,
        widget_template=widget_template,
    )

    app.register_blueprint(user_management_module["blueprint"])
    app.register_blueprint(quota_module["blueprint"])
    app.register_blueprint(claims_module["blueprint"])
    app.register_blueprint(directory_module["blueprint"])
    app.register_blueprint(public_api_module["blueprint"])

    app.extensions["claim_guard"] = {
        "record_store": record_store,
        "user_service": user_service,
        "quota_tracker": quota_module["tracker"],
        "claim_service": claims_module["claim_service"],
        "evaluation_service": claims_module["evaluation_service"],
        "directory_service": directory_module["service"],
        "public_gate": public_api_module["gate"],
    }

    if not public_api_config.api_key:
        logger.warning("No public API key configured; every public API request will be rejected")

    @app.get("/actuator/health")
    def actuator_health():
        """Health check endpoint for monitoring tools and cloud platforms."""
        return jsonify({
            "status": "UP",
            "service": "claim-guard"
        }), 200

    return app


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    from claim_store.logging_config import setup_logging

    # Parse command line arguments
    parser = argparse.ArgumentParser(description="Claim evaluation and public report service")
    parser.add_argument("--port", type=int, help="Port to run the server on")
    parser.add_argument("--host", type=str, help="Host to bind the server to")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args()

    setup_logging(debug=args.debug)

    config_manager = ConfigManager()
    app_config = config_manager.get_app_config()

    # Override configuration with command line arguments
    if args.port:
        app_config.port = args.port
    if args.host:
        app_config.host = args.host
    if args.debug:
        app_config.debug = args.debug

    plan_limits = config_manager.get_plan_limits_config()
    logger.info(f"Data directory: {_resolve(config_manager.get_paths_config().data_dir).resolve()}")
    logger.info(
        f"Plan limits: free={plan_limits.free_daily_evals}, pro={plan_limits.pro_daily_evals}, "
        f"max={plan_limits.max_daily_evals}"
    )
    logger.info(f"Server: {app_config.host}:{app_config.port}")

    app = create_app(config_manager)
    app.run(
        host=app_config.host,
        port=app_config.port,
        debug=app_config.debug
    )
