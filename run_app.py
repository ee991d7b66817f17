#!/usr/bin/env python3
"""
Simple runner script for the Flask application.
This script ensures the correct Python path is set and runs the app.
"""

import sys
import logging
from pathlib import Path

# Add the current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from claim_store.logging_config import setup_logging
from config_manager import ConfigManager
from app.main import create_app

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    config_manager = ConfigManager()
    app_config = config_manager.get_app_config()
    setup_logging(debug=app_config.debug)

    logger.info("Starting Flask application...")
    logger.info(f"Working directory: {current_dir}")

    app = create_app(config_manager)

    # Run the Flask app
    app.run(
        host=app_config.host,
        port=app_config.port,
        debug=app_config.debug
    )
