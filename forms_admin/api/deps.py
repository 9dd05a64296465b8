"""API dependencies: configuration, collaborators and the admin session gate.

The session gate is the only authorization mechanism: any handler depending on
:func:`require_admin_session` is reachable only with a live session belonging to
an active, unfrozen account.  There are no per-resource permissions.
"""
from typing import Optional

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from forms_admin.config import Settings, get_settings
from forms_admin.database import get_db
from forms_admin.services.sessions import SessionCheck, SessionManager
from forms_admin.utils.errors import AuthenticationError
from forms_admin.utils.logger import logger
from forms_admin.utils.mailer import Mailer


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return Mailer(settings)


def get_session_manager(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SessionManager:
    return SessionManager(db, settings)


def get_session_cookie(request: Request, settings: Settings = Depends(get_settings)) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def set_session_cookie(response: Response, settings: Settings, value: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=value,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


# ---------------------------------------------------------------------------
# require_admin_session: fail-closed gate for protected routes
# ---------------------------------------------------------------------------

def require_admin_session(
    request: Request,
    response: Response,
    cookie: Optional[str] = Depends(get_session_cookie),
    manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_settings),
) -> SessionCheck:
    """Require a valid admin session.

    Revalidates the account on every call and slides the session expiry.
    Raises 401 when there is no session or the account is no longer usable.
    """
    check = manager.check_session(cookie)
    if not check.authenticated:
        logger.info(
            "Unauthenticated request to protected route",
            extra={"path": request.url.path, "method": request.method},
        )
        raise AuthenticationError("Unauthorized. Please log in.")

    request.state.admin_user_id = check.user["id"]
    set_session_cookie(response, settings, check.cookie)
    return check
