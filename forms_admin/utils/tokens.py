"""Token utilities for onboarding and password-reset links"""
import hashlib
import secrets
from datetime import datetime
from typing import Optional

TOKEN_BYTES = 32


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how every DateTime column is stored"""
    return datetime.utcnow()


def generate_token() -> str:
    """Generate a secure random token (32 bytes, hex encoded)"""
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Hash a raw token using SHA256.

    Only this digest is persisted; a token presented later is hashed again and
    compared against the stored value.
    """
    return hashlib.sha256(token.encode()).hexdigest()


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """A missing expiry counts as expired"""
    if expires_at is None:
        return True
    return (now or utcnow()) >= expires_at
