"""Server-side admin sessions"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from forms_admin.config import Settings
from forms_admin.models.admin_session import AdminSession
from forms_admin.models.admin_user import AdminUser
from forms_admin.repositories import AdminUserRepository, SessionRepository
from forms_admin.utils.logger import logger
from forms_admin.utils.session_tokens import decode_session_cookie, encode_session_cookie
from forms_admin.utils.tokens import generate_token, hash_token, utcnow


def user_projection(user: AdminUser) -> Dict[str, Any]:
    """The identity stored in a session and returned to the browser. Never includes credentials."""
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "role": user.role,
    }


@dataclass
class SessionCheck:
    authenticated: bool
    user: Optional[Dict[str, Any]] = None
    session: Optional[AdminSession] = None
    cookie: Optional[str] = None  # re-signed cookie for rolling expiry


class SessionManager:
    """Creates, resolves and destroys admin sessions.

    The browser holds a signed cookie naming a session id; the session is valid
    only while the matching ``admin_sessions`` row exists and has not expired.
    Only the SHA-256 of the session id is stored.
    """

    def __init__(self, db: Session, settings: Settings):
        self.settings = settings
        self.sessions = SessionRepository(db)
        self.users = AdminUserRepository(db)

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.settings.SESSION_TTL_SECONDS)

    def _sign(self, session_id: str) -> str:
        return encode_session_cookie(session_id, self.settings.session_secret, self.settings.SESSION_TTL_SECONDS)

    def create(self, user: AdminUser, ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> str:
        """Persist a new session for ``user`` and return the cookie value"""
        session_id = generate_token()
        now = utcnow()
        self.sessions.create(
            session_id=hash_token(session_id),
            admin_user_id=user.id,
            data=user_projection(user),
            expires_at=now + self.ttl,
            ip_address=ip_address,
            user_agent=user_agent,
            now=now,
        )
        return self._sign(session_id)

    def regenerate(
        self,
        old_cookie: Optional[str],
        user: AdminUser,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> str:
        """Drop whatever session the caller presented and issue a fresh id (session fixation)"""
        self.destroy(old_cookie)
        return self.create(user, ip_address, user_agent)

    def load(self, cookie: Optional[str]) -> Optional[AdminSession]:
        session_id = decode_session_cookie(cookie, self.settings.session_secret)
        if not session_id:
            return None
        return self.sessions.find_active(hash_token(session_id), utcnow())

    def check_session(self, cookie: Optional[str]) -> SessionCheck:
        """Resolve ``cookie`` and revalidate the account behind it.

        A session whose account was deleted, deactivated or frozen since login is
        destroyed on the spot.
        """
        session = self.load(cookie)
        if session is None:
            return SessionCheck(authenticated=False)

        user = self.users.find_by_id(session.admin_user_id)
        if user is None or not user.is_active or user.is_frozen:
            logger.info(
                "Session revoked for unavailable account",
                extra={"admin_user_id": session.admin_user_id},
            )
            self.destroy(cookie)
            return SessionCheck(authenticated=False)

        now = utcnow()
        self.sessions.touch(session, now, now + self.ttl)
        session_id = decode_session_cookie(cookie, self.settings.session_secret)
        return SessionCheck(
            authenticated=True,
            user=user_projection(user),
            session=session,
            cookie=self._sign(session_id),
        )

    def destroy(self, cookie: Optional[str]) -> bool:
        """Invalidate the session named by ``cookie``. Safe to call repeatedly."""
        session_id = decode_session_cookie(cookie, self.settings.session_secret)
        if not session_id:
            return False
        return self.sessions.delete(hash_token(session_id)) > 0

    def destroy_all_for_user(self, user_id: int) -> int:
        return self.sessions.delete_for_user(user_id)

    def purge_expired(self) -> int:
        return self.sessions.purge_expired(utcnow())
