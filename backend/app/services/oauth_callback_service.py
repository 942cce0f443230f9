"""
services/oauth_callback_service.py

Completes a federated sign-in that the identity provider handed back to
/auth/callback.

Flow (single attempt, no retry):
  1. get_session()            -> provider session, or None
  2. map_provider_profile()   -> OAuthLoginRequest(email, name, provider, provider_id)
  3. login(profile)           -> local user (created or reused)
  4. redirect by role         -> admin/preparer: /admin, others: /dashboard

Any failure in 1-3 yields a failed outcome that sends the visitor back to
the login page after ``error_redirect_delay_ms``.

Redirect targets, the display-name fallback chain and the user-facing
texts all live in CallbackConfig so every deployment runs this one flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import HTTPException

from app.core.config import settings
from app.core.logger import logger
from app.db.schemas import OAuthLoginRequest
from app.services.route_guard import STAFF_ROLE_NAMES, role_of
from app.services.supabase_auth_service import ProviderSession
from app.utils.helpers import email_local_part


@dataclass
class CallbackConfig:
    login_path: str = field(default_factory=lambda: settings.LOGIN_PATH)
    admin_path: str = field(default_factory=lambda: settings.ADMIN_PATH)
    dashboard_path: str = field(default_factory=lambda: settings.DASHBOARD_PATH)
    error_redirect_delay_ms: int = field(default_factory=lambda: settings.OAUTH_ERROR_REDIRECT_DELAY_MS)

    # user_metadata keys tried in order, then the email local-part, then default_name
    name_fields: Tuple[str, ...] = ("full_name", "name")
    default_name: str = "User"
    default_provider: str = "oauth"

    missing_session_message: str = "OAuth no está configurado o no se encontró sesión."
    fallback_error_message: str = "Authentication failed"
    success_title: str = "Welcome!"
    success_description: str = "You have successfully logged in."
    error_title: str = "Authentication Error"


@dataclass
class Toast:
    title: str
    description: str
    variant: str = "default"


@dataclass
class CallbackOutcome:
    success: bool
    redirect_to: str
    delay_ms: int = 0
    error: Optional[str] = None
    toast: Optional[Toast] = None
    user: Any = None


class OAuthSessionError(Exception):
    """Provider session missing or unusable."""


def map_provider_profile(session: ProviderSession, config: CallbackConfig) -> OAuthLoginRequest:
    user: Dict[str, Any] = session.user or {}
    email = user.get("email") or ""
    metadata = user.get("user_metadata") or {}
    app_metadata = user.get("app_metadata") or {}

    name = next((metadata[key] for key in config.name_fields if metadata.get(key)), None)
    name = name or email_local_part(email) or config.default_name

    return OAuthLoginRequest(
        email=email,
        name=name,
        provider=app_metadata.get("provider") or config.default_provider,
        provider_id=str(user.get("id")),
    )


class OAuthCallbackHandler:
    def __init__(
        self,
        get_session: Callable[[], Optional[ProviderSession]],
        login: Callable[[OAuthLoginRequest], Any],
        config: Optional[CallbackConfig] = None,
    ) -> None:
        self.get_session = get_session
        self.login = login
        self.config = config or CallbackConfig()

    def handle(self) -> CallbackOutcome:
        try:
            session = self.get_session()
            if session is None or not session.user or not session.user.get("id"):
                raise OAuthSessionError(self.config.missing_session_message)

            profile = map_provider_profile(session, self.config)
            user = self.login(profile)
        except Exception as exc:
            return self._failure(exc)

        logger.info("OAuth sign-in completed for provider=%s user=%s", profile.provider, getattr(user, "id", None))
        return CallbackOutcome(
            success=True,
            redirect_to=self.redirect_for(user),
            toast=Toast(self.config.success_title, self.config.success_description),
            user=user,
        )

    def redirect_for(self, user: Any) -> str:
        if role_of(user) in STAFF_ROLE_NAMES:
            return self.config.admin_path
        return self.config.dashboard_path

    def _failure(self, exc: Exception) -> CallbackOutcome:
        if isinstance(exc, HTTPException):
            message = str(exc.detail or "")
        else:
            message = str(exc)
        message = message or self.config.fallback_error_message
        logger.warning("OAuth callback failed: %s", message)
        return CallbackOutcome(
            success=False,
            redirect_to=self.config.login_path,
            delay_ms=self.config.error_redirect_delay_ms,
            error=message,
            toast=Toast(self.config.error_title, message, variant="destructive"),
        )
