"""
API-keyed public read access to claims marked public.
"""

from .models import PublicApiError, Unauthorized, Forbidden, NotFound, PublicListingError
from .services import PublicAccessGate, format_report_response, format_report_summary

__all__ = [
    "PublicApiError",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "PublicListingError",
    "PublicAccessGate",
    "format_report_response",
    "format_report_summary",
]
