from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logger import logger
from app.db.database import get_db
from app.db import models, schemas
from app.api.deps import get_current_user
from app.services import background_jobs, user_service
from app.services.oauth_callback_service import OAuthCallbackHandler
from app.services.supabase_auth_service import supabase_auth_service

router = APIRouter()

AUTH_COOKIE_MAX_AGE = 7 * 24 * 60 * 60


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=AUTH_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")


def _signed_in(response: Response, user: models.User) -> schemas.AuthResponse:
    set_auth_cookie(response, user_service.issue_access_token(user))
    return schemas.AuthResponse(user=schemas.UserPublic.model_validate(user))


@router.post("/register", response_model=schemas.AuthResponse)
def register(
    body: schemas.RegisterRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Create a client account and sign it in."""
    user = user_service.register_user(db, body)
    background_tasks.add_task(background_jobs.notify_welcome, user.name or "", user.email)
    logger.info("Registered client %s", user.id)
    return _signed_in(response, user)


@router.post("/login", response_model=schemas.AuthResponse)
def login(body: schemas.LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Email/password login. Email is matched case-insensitively."""
    user = user_service.authenticate(db, body.email, body.password)
    return _signed_in(response, user)


@router.post("/oauth", response_model=schemas.AuthResponse)
def oauth_login(body: schemas.OAuthTokenRequest, response: Response, db: Session = Depends(get_db)):
    """
    Sign in with a provider access token, creating or linking the local account.

    The profile comes from the provider's own user lookup. 401 when the token
    does not resolve to a provider session.
    """
    outcome = OAuthCallbackHandler(
        get_session=lambda: supabase_auth_service.get_session(body.access_token),
        login=lambda profile: user_service.login_with_oauth(db, profile),
    ).handle()
    if not outcome.success:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=outcome.error)
    return _signed_in(response, outcome.user)


@router.get("/me", response_model=schemas.AuthResponse)
def get_current_user_info(current_user: models.User = Depends(get_current_user)):
    """Get current user"""
    return schemas.AuthResponse(user=schemas.UserPublic.model_validate(current_user))


@router.post("/logout")
def logout(response: Response):
    """Logout endpoint (stateless JWT - cookie is dropped)"""
    clear_auth_cookie(response)
    return {"message": "Logged out successfully"}


@router.post("/forgot-password", response_model=schemas.MessageResponse)
def forgot_password(
    body: schemas.ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """
    Request password reset. Always returns success to prevent email enumeration.
    """
    user = user_service.get_user_by_email(db, body.email)
    if user and user.is_active:
        raw_token, _ = user_service.create_password_reset(db, user)
        background_tasks.add_task(
            background_jobs.notify_password_reset, user.name or "", user.email, raw_token
        )

    return schemas.MessageResponse(
        message="If an account exists with this email, you will receive reset instructions.",
    )


@router.get("/verify-reset-token", response_model=schemas.VerifyResetTokenResponse)
def verify_reset_token(token: str = Query(""), db: Session = Depends(get_db)):
    return schemas.VerifyResetTokenResponse(
        valid=user_service.find_valid_reset_token(db, token) is not None
    )


@router.post("/reset-password", response_model=schemas.MessageResponse)
def reset_password(body: schemas.ResetPasswordRequest, db: Session = Depends(get_db)):
    """
    Reset password using token from forgot-password email/link.
    """
    user_service.reset_password(db, body.token, body.password)
    return schemas.MessageResponse(message="Your password has been reset. You can sign in now.")
