"""
Utility helper functions
"""
import random
import re
import time
from typing import Optional


def sanitize_filename(name: str, max_length: int = 100) -> str:
    """Replace anything outside [A-Za-z0-9.-] with underscores."""
    cleaned = re.sub(r"[^a-zA-Z0-9.-]", "_", name or "file")
    return cleaned[:max_length]


def unique_storage_name(original_name: str) -> str:
    """``{epoch_ms}-{random}-{sanitized}``, used for both R2 keys and local files."""
    timestamp = int(time.time() * 1000)
    suffix = random.randint(0, 10**9)
    return f"{timestamp}-{suffix}-{sanitize_filename(original_name)}"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def email_local_part(email: Optional[str]) -> str:
    value = (email or "").strip()
    return value.split("@", 1)[0] if value else ""


def split_full_name(name: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    parts = (name or "").strip().split(None, 1)
    if not parts:
        return None, None
    return parts[0], (parts[1] if len(parts) > 1 else None)
