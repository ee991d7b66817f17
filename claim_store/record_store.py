"""
Generic document store for claim records.

Documents live in named collections, are keyed by id, and carry the ACL
(as permission strings) that was composed for them at write time. The JSON
implementation keeps one file per collection under a data directory.
"""

import json
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class Collections:
    """Collection names used by the claims application."""
    USERS = "users"
    INSURANCE_COMPANIES = "insurance_companies"
    CLAIMS = "claims"
    CLAIM_DAMAGE_DETAILS = "claim_damage_details"
    CLAIM_VEHICLE_VERIFICATION = "claim_vehicle_verification"
    CLAIM_ASSESSMENTS = "claim_assessments"
    EVALUATION_REQUESTS = "evaluation_requests"


class StorageError(Exception):
    """Raised when the store cannot read or write a document."""


class DocumentNotFound(StorageError):
    """Raised when a document id does not exist in a collection."""

    def __init__(self, collection: str, document_id: str):
        super().__init__(f"Document {document_id} not found in {collection}")
        self.collection = collection
        self.document_id = document_id


def new_document_id() -> str:
    """Generate a unique document id."""
    return uuid.uuid4().hex[:20]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


@dataclass
class StoredDocument:
    """A document with its id, ACL and timestamps."""
    id: str
    collection: str
    data: Dict[str, Any] = field(default_factory=dict)
    permissions: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> dict:
        return {
            "data": self.data,
            "permissions": list(self.permissions),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, collection: str, document_id: str, data: dict) -> "StoredDocument":
        return cls(
            id=document_id,
            collection=collection,
            data=dict(data.get("data", {})),
            permissions=list(data.get("permissions", [])),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class ListResult:
    """Page of documents plus the total number of matches."""
    documents: List[StoredDocument]
    total: int


class RecordStore:
    """Interface of the document store used by the claims core."""

    def get_document(self, collection: str, document_id: str) -> StoredDocument:
        raise NotImplementedError

    def create_document(
        self,
        collection: str,
        document_id: Optional[str],
        data: Dict[str, Any],
        permissions: List[str],
    ) -> StoredDocument:
        raise NotImplementedError

    def update_document(
        self,
        collection: str,
        document_id: str,
        data: Dict[str, Any],
        permissions: Optional[List[str]] = None,
    ) -> StoredDocument:
        raise NotImplementedError

    def delete_document(self, collection: str, document_id: str) -> None:
        raise NotImplementedError

    def list_documents(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> ListResult:
        raise NotImplementedError


class JsonRecordStore(RecordStore):
    """Record store persisting each collection as a JSON file.

    File shape (``<data_dir>/<collection>.json``)::

        {"<id>": {"data": {...}, "permissions": [...],
                  "created_at": ISO8601, "updated_at": ISO8601}, ...}

    Unlike a best-effort cache, read and write failures are raised as
    StorageError so that callers can apply their own failure policy.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()

    def _collection_file(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _load_collection(self, collection: str) -> Dict[str, dict]:
        path = self._collection_file(collection)
        if not path.exists():
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read collection {collection}: {e}") from e
        if not isinstance(raw, dict):
            raise StorageError(f"Collection {collection} is not a JSON object")
        return raw

    def _save_collection(self, collection: str, documents: Dict[str, dict]) -> None:
        path = self._collection_file(collection)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(documents, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Could not write collection {collection}: {e}") from e

    def get_document(self, collection: str, document_id: str) -> StoredDocument:
        documents = self._load_collection(collection)
        raw = documents.get(document_id)
        if raw is None:
            raise DocumentNotFound(collection, document_id)
        return StoredDocument.from_dict(collection, document_id, raw)

    def create_document(self, collection, document_id, data, permissions):
        with self._lock:
            documents = self._load_collection(collection)
            document_id = document_id or new_document_id()
            if document_id in documents:
                raise StorageError(f"Document {document_id} already exists in {collection}")

            now = _now_iso()
            document = StoredDocument(
                id=document_id,
                collection=collection,
                data=dict(data),
                permissions=list(permissions),
                created_at=now,
                updated_at=now,
            )
            documents[document_id] = document.to_dict()
            self._save_collection(collection, documents)
            logger.debug(f"Created {collection}/{document_id}")
            return document

    def update_document(self, collection, document_id, data, permissions=None):
        with self._lock:
            documents = self._load_collection(collection)
            raw = documents.get(document_id)
            if raw is None:
                raise DocumentNotFound(collection, document_id)

            document = StoredDocument.from_dict(collection, document_id, raw)
            document.data.update(data)
            if permissions is not None:
                document.permissions = list(permissions)
            document.updated_at = _now_iso()

            documents[document_id] = document.to_dict()
            self._save_collection(collection, documents)
            logger.debug(f"Updated {collection}/{document_id}")
            return document

    def delete_document(self, collection, document_id):
        with self._lock:
            documents = self._load_collection(collection)
            if documents.pop(document_id, None) is None:
                raise DocumentNotFound(collection, document_id)
            self._save_collection(collection, documents)
            logger.debug(f"Deleted {collection}/{document_id}")

    def list_documents(self, collection, filters=None, order_by=None, descending=False,
                       limit=None, offset=0):
        documents = [
            StoredDocument.from_dict(collection, doc_id, raw)
            for doc_id, raw in self._load_collection(collection).items()
        ]

        if filters:
            documents = [
                doc for doc in documents
                if all(doc.get(key) == value for key, value in filters.items())
            ]

        if order_by == "created_at":
            documents.sort(key=lambda doc: doc.created_at or "", reverse=descending)
        elif order_by:
            # Missing values sort first; mixed types are not expected per field
            documents.sort(
                key=lambda doc: (doc.get(order_by) is not None, doc.get(order_by)),
                reverse=descending,
            )

        total = len(documents)
        offset = max(0, offset)
        page = documents[offset:offset + limit] if limit is not None else documents[offset:]
        return ListResult(documents=page, total=total)
