# Claim store package: document persistence, claim bundles and logging setup

from .record_store import (
    RecordStore,
    JsonRecordStore,
    StoredDocument,
    ListResult,
    Collections,
    StorageError,
    DocumentNotFound,
    new_document_id,
)
from .bundle import ClaimBundle, load_claim_bundle
from .logging_config import (
    setup_logging,
    stop_logging,
    get_logger,
    ThreadSafeLoggingConfig,
)

__all__ = [
    "RecordStore",
    "JsonRecordStore",
    "StoredDocument",
    "ListResult",
    "Collections",
    "StorageError",
    "DocumentNotFound",
    "new_document_id",
    "ClaimBundle",
    "load_claim_bundle",
    "setup_logging",
    "stop_logging",
    "get_logger",
    "ThreadSafeLoggingConfig",
]
