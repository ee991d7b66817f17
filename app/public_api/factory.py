"""
Factory for creating the public read API.
"""
from claim_store.record_store import RecordStore

from .services import PublicAccessGate
from .routes import create_public_api_routes


def create_public_api_module(record_store: RecordStore, public_api_config, widget_template: str) -> dict:
    """Create public API module.

    Args:
        record_store: Store holding the claim collections
        public_api_config: PublicApiConfig with the API key and listing limits
        widget_template: Jinja template for the embeddable widget

    Returns:
        Dictionary with the gate and blueprint
    """
    gate = PublicAccessGate(record_store, public_api_config)
    blueprint = create_public_api_routes(gate, widget_template)
    return {
        "gate": gate,
        "blueprint": blueprint,
    }
