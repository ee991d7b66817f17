"""
Insurance company directory: registration and lookup.
"""
import logging
import re
import secrets
import time
from typing import List, Optional

from claim_store.models import InsuranceCompanyDocument, to_model
from claim_store.record_store import Collections, RecordStore
from app.permissions import compose_directory_permissions, to_permission_strings

logger = logging.getLogger(__name__)

_CODE_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"  # no I or O
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_CODE_ATTEMPTS = 10


class DirectoryError(ValueError):
    """Raised for invalid company registration data."""


class InsuranceDirectoryService:
    """Directory of insurance companies; entries are readable by anyone."""

    def __init__(self, record_store: RecordStore):
        self.record_store = record_store

    def generate_company_code(self) -> str:
        """Unique join code of the form ABCD-1234."""
        for _ in range(MAX_CODE_ATTEMPTS):
            code = self._random_code()
            existing = self.record_store.list_documents(
                Collections.INSURANCE_COMPANIES, filters={"company_code": code}, limit=1
            )
            if not existing.documents:
                return code
        letters = "".join(secrets.choice(_CODE_LETTERS) for _ in range(4))
        return f"{letters}-{str(int(time.time() * 1000))[-4:]}"

    @staticmethod
    def _random_code() -> str:
        letters = "".join(secrets.choice(_CODE_LETTERS) for _ in range(4))
        digits = "".join(secrets.choice("0123456789") for _ in range(4))
        return f"{letters}-{digits}"

    def create_company(
        self,
        name: str,
        contact_email: str,
        company_code: Optional[str] = None,
        team_id: Optional[str] = None,
        contact_phone: Optional[str] = None,
        website: Optional[str] = None,
    ) -> InsuranceCompanyDocument:
        """
        Register an insurance company.

        Args:
            name: Company name
            contact_email: Where the join code is sent
            company_code: Join code; generated when omitted
            team_id: Adjuster team claims are routed to
            contact_phone: Optional phone number
            website: Optional website

        Raises:
            DirectoryError: missing name, invalid email or duplicate code
        """
        name = (name or "").strip()
        contact_email = (contact_email or "").strip()
        if not name or not contact_email:
            raise DirectoryError("Company name and contact email are required")
        if not _EMAIL_RE.match(contact_email):
            raise DirectoryError("Invalid email address")

        if company_code:
            company_code = company_code.strip().upper()
            existing = self.record_store.list_documents(
                Collections.INSURANCE_COMPANIES, filters={"company_code": company_code}, limit=1
            )
            if existing.documents:
                raise DirectoryError(f"Company code {company_code} is already taken")
        else:
            company_code = self.generate_company_code()

        document = self.record_store.create_document(
            Collections.INSURANCE_COMPANIES,
            None,
            {
                "name": name,
                "company_code": company_code,
                "team_id": (team_id or "").strip() or None,
                "contact_email": contact_email,
                "contact_phone": contact_phone,
                "website": website,
                "is_active": True,
            },
            to_permission_strings(compose_directory_permissions()),
        )
        logger.info(f"Registered insurance company {document.id} ({name}, {company_code})")
        return to_model(InsuranceCompanyDocument, document)

    def list_companies(self, active_only: bool = True) -> List[InsuranceCompanyDocument]:
        """Companies ordered by name."""
        filters = {"is_active": True} if active_only else None
        result = self.record_store.list_documents(
            Collections.INSURANCE_COMPANIES, filters=filters, order_by="name"
        )
        return [to_model(InsuranceCompanyDocument, doc) for doc in result.documents]
