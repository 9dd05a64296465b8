"""Admin login, session check, logout and password change endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from forms_admin.api.deps import (
    clear_session_cookie,
    get_session_cookie,
    get_session_manager,
    require_admin_session,
    set_session_cookie,
)
from forms_admin.config import Settings, get_settings
from forms_admin.database import get_db
from forms_admin.middleware.rate_limit import get_client_ip, get_rate_limit, limiter
from forms_admin.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    SessionStatus,
)
from forms_admin.services.login import LoginService
from forms_admin.services.sessions import SessionCheck, SessionManager, user_projection
from forms_admin.utils.errors import AppError
from forms_admin.utils.logger import logger

router = APIRouter(prefix="/admin", tags=["authentication"])


# ---------------------------------------------------------------------------
# POST /admin/login
# ---------------------------------------------------------------------------

@router.post("/login", response_model=LoginResponse)
@limiter.limit(get_rate_limit("login"))
def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    cookie: Optional[str] = Depends(get_session_cookie),
):
    """Authenticate with email and password and start a fresh session.

    All rejections answer 401 ``Invalid email or password``. Five consecutive
    wrong passwords freeze the account.
    """
    client_ip = get_client_ip(request)

    try:
        user = LoginService(db, settings).login(payload.email, payload.password, client_ip)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Login failed", extra={"client_ip": client_ip}, exc_info=True)
        raise AppError("Login failed") from exc

    try:
        session_cookie = SessionManager(db, settings).regenerate(
            cookie, user, client_ip, request.headers.get("user-agent")
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Session creation failed", extra={"admin_user_id": user.id}, exc_info=True)
        raise AppError("Failed to create session") from exc

    set_session_cookie(response, settings, session_cookie)
    return {"success": True, "user": user_projection(user)}


# ---------------------------------------------------------------------------
# GET /admin/check-session
# ---------------------------------------------------------------------------

@router.get("/check-session", response_model=SessionStatus, response_model_exclude_none=True)
def check_session(
    response: Response,
    cookie: Optional[str] = Depends(get_session_cookie),
    manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_settings),
):
    """Report whether the caller holds a live session. Always answers 200."""
    try:
        check = manager.check_session(cookie)
    except SQLAlchemyError:
        logger.error("Session check error", exc_info=True)
        return {"authenticated": False}

    if not check.authenticated:
        if cookie:
            clear_session_cookie(response, settings)
        return {"authenticated": False}

    set_session_cookie(response, settings, check.cookie)
    return {"authenticated": True, "user": check.user}


# ---------------------------------------------------------------------------
# POST /admin/logout
# ---------------------------------------------------------------------------

@router.post("/logout", response_model=MessageResponse, response_model_exclude_none=True)
def logout(
    response: Response,
    cookie: Optional[str] = Depends(get_session_cookie),
    manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_settings),
):
    """Destroy the caller's session. Calling it without a session is harmless."""
    try:
        manager.destroy(cookie)
    except SQLAlchemyError as exc:
        logger.error("Logout error", exc_info=True)
        raise AppError("Logout failed") from exc

    clear_session_cookie(response, settings)
    return {"success": True}


# ---------------------------------------------------------------------------
# POST /admin/change-password
# ---------------------------------------------------------------------------

@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    session: SessionCheck = Depends(require_admin_session),
):
    """Change the signed-in user's password (requires the current password)."""
    LoginService(db, settings).change_password(
        session.user["id"], payload.current_password, payload.new_password
    )
    return {"success": True, "message": "Password changed successfully"}
