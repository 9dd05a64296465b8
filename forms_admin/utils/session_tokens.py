"""Session cookie signing: HS256 JWTs that reference a server-side session row"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from forms_admin.utils.logger import logger

ALGORITHM = "HS256"
TOKEN_TYPE = "admin_session"


def encode_session_cookie(session_id: str, secret: str, ttl_seconds: int) -> str:
    """Sign and return the cookie value for ``session_id``.

    The signature only proves the cookie was issued by this server; the session
    is valid only while its row exists in ``admin_sessions``.
    """
    now = int(datetime.now(timezone.utc).timestamp())
    payload: Dict[str, Any] = {
        "sid": session_id,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": TOKEN_TYPE,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_session_cookie(cookie: Optional[str], secret: str) -> Optional[str]:
    """Return the session id carried by ``cookie``, or None if it is absent, forged or expired"""
    if not cookie:
        return None
    try:
        payload = jwt.decode(cookie, secret, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.debug(f"Session cookie rejected: {exc}")
        return None

    if payload.get("type") != TOKEN_TYPE:
        return None
    return payload.get("sid")
