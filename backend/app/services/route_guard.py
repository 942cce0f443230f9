"""
services/route_guard.py

Access decision for protected portal routes.

    evaluate(user, is_loading, required_role, redirect_to) -> GuardDecision

    is_loading                               -> loading (no redirect)
    no user                                  -> redirect to redirect_to
    required admin|preparer, user staff      -> render
    required admin|preparer, anyone else     -> redirect /dashboard
    required client, user client             -> render
    required client, user staff              -> redirect /admin
    required client, anyone else             -> redirect to redirect_to
    no required role                         -> render

``evaluate`` is pure.  ``ProtectedRoute`` binds it to an AuthSession and
re-runs it whenever the session changes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional

from app.core.config import settings
from app.services.auth_session import AuthSession

STAFF_ROLE_NAMES = frozenset({"admin", "preparer"})


class GuardAction(str, enum.Enum):
    render = "render"
    redirect = "redirect"   # render nothing; navigation pending
    loading = "loading"


@dataclass(frozen=True)
class GuardDecision:
    action: GuardAction
    location: Optional[str] = None

    @property
    def renders_children(self) -> bool:
        return self.action is GuardAction.render


LOADING = GuardDecision(GuardAction.loading)
RENDER = GuardDecision(GuardAction.render)


def role_of(user: Any) -> Optional[str]:
    """Role name from an ORM user, a pydantic model or a plain dict."""
    if user is None:
        return None
    role = user.get("role") if isinstance(user, dict) else getattr(user, "role", None)
    return getattr(role, "value", role)


def evaluate(
    user: Any,
    is_loading: bool,
    required_role: Optional[str] = None,
    redirect_to: Optional[str] = None,
) -> GuardDecision:
    login_path = redirect_to or settings.LOGIN_PATH

    if is_loading:
        return LOADING

    if user is None:
        return GuardDecision(GuardAction.redirect, login_path)

    role = role_of(user)

    if required_role in STAFF_ROLE_NAMES:
        if role in STAFF_ROLE_NAMES:
            return RENDER
        return GuardDecision(GuardAction.redirect, settings.DASHBOARD_PATH)

    if required_role == "client":
        if role == "client":
            return RENDER
        if role in STAFF_ROLE_NAMES:
            return GuardDecision(GuardAction.redirect, settings.ADMIN_PATH)
        return GuardDecision(GuardAction.redirect, login_path)

    return RENDER


def evaluate_session(
    session: AuthSession,
    required_role: Optional[str] = None,
    redirect_to: Optional[str] = None,
) -> GuardDecision:
    return evaluate(session.user, session.is_loading, required_role, redirect_to)


class ProtectedRoute:
    """
    Keeps a guard decision in sync with an AuthSession.

    ``navigate`` is invoked once per distinct redirect decision, never while
    the session is loading, and never after close().
    """

    def __init__(
        self,
        session: AuthSession,
        navigate: Callable[[str], None],
        required_role: Optional[str] = None,
        redirect_to: Optional[str] = None,
    ) -> None:
        self.session = session
        self.required_role = required_role
        self.redirect_to = redirect_to
        self._navigate = navigate
        self._last_redirect: Optional[str] = None
        self.decision = evaluate_session(session, required_role, redirect_to)
        self._unsubscribe: Optional[Callable[[], None]] = session.subscribe(self._on_change)
        self._maybe_navigate()

    def render(self) -> GuardDecision:
        return self.decision

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, session: AuthSession) -> None:
        self.decision = evaluate_session(session, self.required_role, self.redirect_to)
        self._maybe_navigate()

    def _maybe_navigate(self) -> None:
        if self.decision.action is not GuardAction.redirect:
            self._last_redirect = None
            return
        if self.decision.location != self._last_redirect:
            self._last_redirect = self.decision.location
            self._navigate(self.decision.location)
