"""
Errors raised by the public read gate.
"""


class PublicApiError(Exception):
    """Base class for errors surfaced verbatim to public API callers."""
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class Unauthorized(PublicApiError):
    status_code = 401
    error = "Unauthorized"

    def __init__(self, message: str = "Invalid or missing API key"):
        super().__init__(message)


class Forbidden(PublicApiError):
    status_code = 403
    error = "Forbidden"

    def __init__(self, message: str = "Report is not publicly accessible"):
        super().__init__(message)


class NotFound(PublicApiError):
    status_code = 404
    error = "Not Found"

    def __init__(self, message: str = "Report not found"):
        super().__init__(message)


class PublicListingError(PublicApiError):
    """Listing failed for a reason other than the caller's request."""
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str = "Failed to fetch reports"):
        super().__init__(message)
