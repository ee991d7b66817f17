"""
User management services: current-user lookup, admin checks and profiles.
"""
import logging
from typing import Optional, List

from flask import request

from claim_store.models import UserDocument, to_model
from claim_store.record_store import Collections, DocumentNotFound, RecordStore, StorageError
from app.permissions import compose_user_permissions, to_permission_strings

from .models import ProfileError, ProfileRequest

logger = logging.getLogger(__name__)


class UserService:
    """Service for the current user and user profiles."""
    
    def __init__(self, record_store: RecordStore, admin_user_ids: List[str]):
        self.record_store = record_store
        self.admin_user_ids = admin_user_ids
    
    def get_current_user_id(self) -> Optional[str]:
        """Get the current user ID from cookies."""
        uid = request.cookies.get("uid")
        return uid.strip() if uid and uid.strip() else None
    
    def is_authenticated(self) -> bool:
        """Check if the current user is authenticated."""
        return bool(self.get_current_user_id())
    
    def is_admin_user(self, uid: Optional[str]) -> bool:
        """Check if the user is an admin based on configuration."""
        return bool(uid) and uid.strip() in self.admin_user_ids
    
    def require_auth_json(self) -> tuple[Optional[str], Optional[dict]]:
        """Require authentication for JSON endpoints, return error if not authenticated."""
        uid = self.get_current_user_id()
        if not uid:
            return None, {"error": "no-uid"}
        return uid, None
    
    def require_admin_json(self) -> tuple[Optional[str], Optional[dict]]:
        """Require an admin user for JSON endpoints."""
        uid = self.get_current_user_id()
        if not self.is_admin_user(uid):
            return uid, {"error": "Admin access required"}
        return uid, None
    
    def get_profile(self, uid: str) -> Optional[UserDocument]:
        """Load a user profile, or None if the user has none."""
        try:
            return to_model(UserDocument, self.record_store.get_document(Collections.USERS, uid))
        except DocumentNotFound:
            return None
    
    def get_insurance_company_id(self, uid: Optional[str]) -> Optional[str]:
        """Insurance company the user works for, if any."""
        if not uid:
            return None
        try:
            profile = self.get_profile(uid)
        except StorageError as e:
            logger.error(f"Error loading profile for {uid}: {e}")
            return None
        return profile.insurance_company_id if profile else None
    
    def find_company_by_code(self, company_code: str) -> Optional[dict]:
        """Look up an insurance company by its join code."""
        result = self.record_store.list_documents(
            Collections.INSURANCE_COMPANIES,
            filters={"company_code": company_code},
            limit=1,
        )
        if not result.documents:
            return None
        document = result.documents[0]
        return {"id": document.id, **document.data}
    
    def create_user_profile(
        self,
        uid: str,
        full_name: str,
        email: str,
        role: str = "user",
        insurance_company_id: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> UserDocument:
        """
        Create or complete a user's profile with owner-only permissions.
        
        Quota fields already stored on the user document are left untouched.
        """
        data = {
            "full_name": full_name,
            "email": email,
            "role": role,
            "insurance_company_id": insurance_company_id,
            "phone": phone,
            "onboarding_completed": True,
        }
        permissions = to_permission_strings(compose_user_permissions(uid))
        
        try:
            self.record_store.get_document(Collections.USERS, uid)
            document = self.record_store.update_document(Collections.USERS, uid, data, permissions)
            logger.info(f"Updated profile for {uid}")
        except DocumentNotFound:
            document = self.record_store.create_document(Collections.USERS, uid, data, permissions)
            logger.info(f"Created profile for {uid} (role={role})")
        
        return to_model(UserDocument, document)
    
    def complete_onboarding(self, uid: str, profile: ProfileRequest) -> UserDocument:
        """
        Create the profile from onboarding data.
        
        Insurance adjusters must supply the join code of an active company.
        
        Raises:
            ProfileError: missing, unknown or inactive company code
        """
        insurance_company_id = None
        if profile.role == "insurance_adjuster":
            if not profile.company_code:
                raise ProfileError("Company code is required for insurance employees")
            
            company = self.find_company_by_code(profile.company_code)
            if company is None:
                raise ProfileError("Invalid company code. Please check with your administrator.")
            if not company.get("is_active", True):
                raise ProfileError("This insurance company is not currently active.")
            insurance_company_id = company["id"]
        
        return self.create_user_profile(
            uid,
            full_name=profile.full_name,
            email=profile.email,
            role=profile.role,
            insurance_company_id=insurance_company_id,
            phone=profile.phone,
        )
