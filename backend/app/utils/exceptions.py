"""
Custom exception classes
"""
from fastapi import HTTPException


class AuthenticationRequiredError(HTTPException):
    """Raised when no auth cookie or bearer token was sent"""
    def __init__(self):
        super().__init__(
            status_code=401,
            detail="Authentication required"
        )


class InvalidTokenError(HTTPException):
    """Raised when the JWT fails verification"""
    def __init__(self):
        super().__init__(
            status_code=403,
            detail="Invalid token"
        )


class AdminRequiredError(HTTPException):
    """Raised when a non-staff user hits an admin route"""
    def __init__(self):
        super().__init__(
            status_code=403,
            detail="Admin access required"
        )


class AccessDeniedError(HTTPException):
    """Raised when user doesn't own resource"""
    def __init__(self):
        super().__init__(
            status_code=403,
            detail="Access denied"
        )


class NotFoundError(HTTPException):
    """Raised when a row doesn't exist, e.g. NotFoundError("Case")"""
    def __init__(self, resource: str):
        super().__init__(
            status_code=404,
            detail=f"{resource} not found"
        )


class UploadFailedError(HTTPException):
    """Raised when storing an upload fails"""
    def __init__(self, reason: str = "Unknown error"):
        super().__init__(
            status_code=500,
            detail=f"Upload failed: {reason}"
        )
