"""
services/auth_session.py

Single reactive holder for "who is signed in".

State machine:

    loading ──resolve(user|None)──▶ resolved
       │                              │
       └──────fail(error)───────▶   error
                                      │
    any state ──load(fetcher)──▶ loading

Listeners registered with subscribe() are called after every transition
with the session itself.  The route guard only reads ``user`` and
``is_loading``; an error state carries no user, so guarded routes send the
visitor back to the login page.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[["AuthSession"], None]


class SessionState(str, enum.Enum):
    loading = "loading"
    resolved = "resolved"
    error = "error"


class AuthSession:
    def __init__(self, user: Any = None, state: SessionState = SessionState.loading) -> None:
        self._state = state
        self._user = user
        self._error: Optional[str] = None
        self._listeners: List[Listener] = []

    # ── read side ────────────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Any:
        return self._user

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def is_loading(self) -> bool:
        return self._state is SessionState.loading

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.resolved and self._user is not None

    # ── transitions ──────────────────────────────────────────────────────────

    def begin_load(self) -> None:
        self._set(SessionState.loading, self._user, None)

    def resolve(self, user: Any) -> None:
        self._set(SessionState.resolved, user, None)

    def fail(self, error: Any) -> None:
        self._set(SessionState.error, None, str(error) or "Authentication failed")

    def reset(self) -> None:
        """Logout: resolved with nobody signed in."""
        self._set(SessionState.resolved, None, None)

    def load(self, fetcher: Callable[[], Any]) -> Any:
        """
        Run ``fetcher`` and settle the session with its result.

        Exceptions from the fetcher put the session in the error state and
        are not re-raised: a failed session check means "not signed in".
        """
        self.begin_load()
        try:
            user = fetcher()
        except Exception as exc:
            logger.warning("Session check failed: %s", exc)
            self.fail(exc)
            return None
        self.resolve(user)
        return user

    # ── subscription ─────────────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, state: SessionState, user: Any, error: Optional[str]) -> None:
        self._state = state
        self._user = user
        self._error = error
        for listener in list(self._listeners):
            listener(self)

    def __repr__(self) -> str:
        return f"AuthSession(state={self._state.value}, user={self._user!r})"
