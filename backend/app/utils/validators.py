"""
Custom validators
"""
import re
from typing import Optional

from app.db.models import DocumentCategory

ALLOWED_UPLOAD_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/jpg",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def validate_password_strength(password: str) -> str:
    """
    At least 8 characters with one uppercase letter, one lowercase
    letter and one digit. Returns the password unchanged.
    """
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        raise ValueError("Password must contain at least one number")
    return password


def is_allowed_upload_type(content_type: Optional[str]) -> bool:
    return (content_type or "").lower() in ALLOWED_UPLOAD_TYPES


def resolve_document_category(value: Optional[str]) -> DocumentCategory:
    """Unknown or missing categories fall back to ``other``."""
    try:
        return DocumentCategory((value or "").strip().lower())
    except ValueError:
        return DocumentCategory.other
