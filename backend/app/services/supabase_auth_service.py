from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.logger import logger


@dataclass
class ProviderSession:
    """What Supabase knows about a signed-in provider user."""
    access_token: str
    user: Optional[Dict[str, Any]] = field(default=None)


class SupabaseAuthService:
    """Looks up the provider session behind a Supabase access token."""

    def __init__(
        self,
        url: str = "",
        anon_key: str = "",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = (url or settings.SUPABASE_URL or "").rstrip("/")
        self.anon_key = anon_key or settings.SUPABASE_ANON_KEY
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)

    def get_session(self, access_token: Optional[str]) -> Optional[ProviderSession]:
        """
        Returns None when Supabase is not configured, when no token was
        supplied, or when Supabase rejects the token.  Raises ValueError on
        any other upstream failure.
        """
        token = (access_token or "").strip()
        if not self.configured:
            logger.warning("Supabase is not configured; OAuth sessions unavailable")
            return None
        if not token:
            return None

        headers = {
            "Authorization": f"Bearer {token}",
            "apikey": self.anon_key,
        }
        with httpx.Client(timeout=20.0, transport=self.transport) as client:
            resp = client.get(f"{self.url}/auth/v1/user", headers=headers)
        if resp.status_code in (401, 403):
            logger.info("Supabase rejected access token (%s)", resp.status_code)
            return None
        if resp.status_code >= 400:
            raise ValueError(f"Supabase user lookup failed: {resp.status_code} {resp.text[:200]}")

        return ProviderSession(access_token=token, user=resp.json())


supabase_auth_service = SupabaseAuthService()
