"""
User management models.
"""
import re
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ProfileError(ValueError):
    """Raised when a profile cannot be created from the submitted data."""


class ProfileRequest(BaseModel):
    """Profile data submitted during onboarding."""
    full_name: str = Field(min_length=1, max_length=200)
    email: str
    role: Literal["user", "insurance_adjuster"] = "user"
    company_code: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("full_name must not be empty")
        return value

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = value.strip()
        if not _EMAIL_RE.match(value):
            raise ValueError("Invalid email address")
        return value

    @field_validator("company_code")
    @classmethod
    def normalize_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip().upper() or None
