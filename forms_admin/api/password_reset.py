"""Forgot-password, reset-token validation and password reset endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from forms_admin.api.deps import clear_session_cookie, get_mailer, get_session_cookie, get_session_manager
from forms_admin.config import Settings, get_settings
from forms_admin.database import get_db
from forms_admin.middleware.rate_limit import get_client_ip, get_rate_limit, limiter
from forms_admin.schemas.auth import ForgotPasswordRequest, MessageResponse, ResetPasswordRequest, ResetTokenStatus
from forms_admin.services.password_reset import PasswordResetService
from forms_admin.services.sessions import SessionManager
from forms_admin.utils.errors import RateLimitError
from forms_admin.utils.logger import logger
from forms_admin.utils.mailer import Mailer, build_link

router = APIRouter(prefix="/admin", tags=["password-reset"])

GENERIC_RESET_MESSAGE = "If an account with that email exists, a password reset link has been sent."
RESET_PATH = "/admin/reset-password"


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(get_rate_limit("forgot_password"))
def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
):
    """Email a reset link if the account exists.

    The answer is the same whether the account exists, is inactive, or the
    request was throttled.
    """
    service = PasswordResetService(db, settings)
    try:
        issued = service.create_reset_token(
            payload.email, get_client_ip(request), request.headers.get("user-agent")
        )
    except RateLimitError:
        issued = None

    if issued is not None:
        mailer.send_reset_email(issued.user.email, build_link(settings, RESET_PATH, issued.token), is_onboarding=False)
        logger.info("Password reset email queued", extra={"admin_user_id": issued.user.id})

    return {"success": True, "message": GENERIC_RESET_MESSAGE}


@router.get("/validate-reset-token", response_model=ResetTokenStatus, response_model_exclude_none=True)
def validate_reset_token(
    token: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Check a reset link before showing the new-password form."""
    if not token:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"valid": False, "error": "Token is required"},
        )

    validation = PasswordResetService(db, settings).validate_reset_token(token)
    if not validation.valid:
        logger.info("Reset token rejected", extra={"reason": validation.reason})
        return {"valid": False, "error": validation.error}

    return {"valid": True, "email": validation.email}


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(get_rate_limit("reset_password"))
def reset_password(
    request: Request,
    response: Response,
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    cookie: Optional[str] = Depends(get_session_cookie),
    manager: SessionManager = Depends(get_session_manager),
):
    """Set a new password with a reset token; signs the account out everywhere."""
    validation = PasswordResetService(db, settings).reset_password(payload.token, payload.new_password)

    manager.destroy(cookie)
    revoked = manager.destroy_all_for_user(validation.user_id)
    clear_session_cookie(response, settings)
    logger.info(
        f"Revoked {revoked} session(s) after password reset",
        extra={"admin_user_id": validation.user_id},
    )

    return {"success": True, "message": "Password has been reset successfully"}
