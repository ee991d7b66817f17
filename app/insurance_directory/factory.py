"""
Factory for creating the insurance directory module.
"""
from claim_store.record_store import RecordStore

from .services import InsuranceDirectoryService
from .routes import create_directory_routes


def create_insurance_directory_module(record_store: RecordStore, user_service) -> dict:
    """Create insurance directory module.

    Returns:
        Dictionary containing the service and blueprint
    """
    directory_service = InsuranceDirectoryService(record_store)
    blueprint = create_directory_routes(directory_service, user_service)
    return {
        "service": directory_service,
        "blueprint": blueprint,
    }
