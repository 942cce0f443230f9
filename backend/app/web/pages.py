"""
Page Routes - server-rendered HTML

Routes:
- Marketing site (/)
- Portal login (/portal) and password reset (/reset-password)
- Guarded areas: client dashboard (/dashboard), staff back office (/admin)
- OAuth return (/auth/callback)

Guarded pages resolve an AuthSession from the request cookie and let the
route guard decide between rendering, redirecting (303) and the loading view.
"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from app.api.deps import current_user_or_none
from app.api.endpoints.auth import set_auth_cookie
from app.core.config import settings
from app.db.database import get_db
from app.db.models import User, UserRole
from app.services import user_service, whatsapp_service
from app.services.auth_session import AuthSession
from app.services.oauth_callback_service import OAuthCallbackHandler
from app.services.route_guard import GuardAction, evaluate_session
from app.services.supabase_auth_service import supabase_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])

_templates_dir = os.path.join(os.path.dirname(__file__), "templates")
templates = Jinja2Templates(directory=_templates_dir)


def _page_context(**extra) -> dict:
    return {
        "app_name": settings.APP_NAME,
        "login_path": settings.LOGIN_PATH,
        "whatsapp_url": whatsapp_service.build_link(whatsapp_service.greeting_message()),
        **extra,
    }


def resolve_session(request: Request, db: Session) -> AuthSession:
    """Settle an AuthSession from the request's token; bad tokens end in the error state."""
    session = AuthSession()
    session.load(lambda: current_user_or_none(request, db))
    return session


def _guarded_page(
    request: Request,
    db: Session,
    template: str,
    required_role: Optional[str] = None,
    **extra,
):
    session = resolve_session(request, db)
    decision = evaluate_session(session, required_role=required_role)

    if decision.action == GuardAction.redirect:
        return RedirectResponse(decision.location, status_code=303)
    if decision.action == GuardAction.loading:
        return templates.TemplateResponse(request, "loading.html", _page_context())

    user = session.user
    context = _page_context(user=user)
    for key, build in extra.items():
        context[key] = build(user)
    return templates.TemplateResponse(request, template, context)


# =============================================================================
# PUBLIC PAGES
# =============================================================================

@router.get("/", response_class=HTMLResponse)
def landing_page(request: Request, lang: Optional[str] = Query(None)):
    """Marketing landing page with WhatsApp lead links per service."""
    language = whatsapp_service.normalize_language(lang)
    return templates.TemplateResponse(
        request,
        "landing.html",
        _page_context(
            language=language,
            services=whatsapp_service.service_catalog(language),
            whatsapp_url=whatsapp_service.build_link(whatsapp_service.greeting_message(language)),
        ),
    )


@router.get("/portal", response_class=HTMLResponse)
def portal_page(request: Request):
    """Login / registration page."""
    return templates.TemplateResponse(
        request,
        "portal.html",
        _page_context(oauth_enabled=settings.supabase_configured, supabase_url=settings.SUPABASE_URL),
    )


@router.get("/reset-password", response_class=HTMLResponse)
def reset_password_page(request: Request, token: str = Query("")):
    return templates.TemplateResponse(request, "reset_password.html", _page_context(token=token))


# =============================================================================
# GUARDED PAGES
# =============================================================================

@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(request: Request, db: Session = Depends(get_db)):
    """Client dashboard - clients only, staff are sent to /admin."""
    return _guarded_page(
        request,
        db,
        "dashboard.html",
        required_role=UserRole.client.value,
        cases=lambda user: sorted(user.tax_cases, key=lambda c: c.created_at, reverse=True),
        documents=lambda user: sorted(user.documents, key=lambda d: d.created_at, reverse=True),
    )


@router.get("/admin", response_class=HTMLResponse)
def admin_page(request: Request, db: Session = Depends(get_db)):
    """Staff back office - admin and preparer."""
    return _guarded_page(
        request,
        db,
        "admin.html",
        required_role=UserRole.admin.value,
        client_count=lambda _user: db.query(User).filter(User.role == UserRole.client).count(),
    )


# =============================================================================
# OAUTH RETURN
# =============================================================================

@router.get("/auth/callback", response_class=HTMLResponse)
def auth_callback_page(
    request: Request,
    access_token: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Finish a Supabase sign-in.

    Success sets the auth cookie and redirects by role. Failure shows the
    error and refreshes to the login page after the configured delay. Tokens
    delivered in the URL fragment are forwarded to the query by the page.
    """
    handler = OAuthCallbackHandler(
        get_session=lambda: supabase_auth_service.get_session(access_token),
        login=lambda profile: user_service.login_with_oauth(db, profile),
    )
    outcome = handler.handle()

    if outcome.success:
        response = RedirectResponse(outcome.redirect_to, status_code=303)
        set_auth_cookie(response, user_service.issue_access_token(outcome.user))
        return response

    return templates.TemplateResponse(
        request,
        "auth_callback.html",
        _page_context(
            outcome=outcome,
            delay_seconds=max(outcome.delay_ms // 1000, 0),
            has_token=bool(access_token),
        ),
    )
