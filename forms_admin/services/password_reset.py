"""Password reset: token issuance, validation and single-use consumption"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from forms_admin.config import Settings
from forms_admin.middleware.monitoring import record_password_reset_request
from forms_admin.models.admin_user import AdminUser
from forms_admin.repositories import AdminUserRepository, PasswordResetTokenRepository, normalize_email
from forms_admin.repositories.password_reset_repository import TokenAlreadyConsumed
from forms_admin.utils.errors import RateLimitError, ValidationError
from forms_admin.utils.logger import logger
from forms_admin.utils.passwords import hash_password
from forms_admin.utils.tokens import generate_token, hash_token, is_expired, utcnow

RATE_LIMIT_WINDOW = timedelta(hours=1)

INVALID_LINK = "Reset link is invalid or has expired"
EXPIRED_LINK = "Reset link has expired. Please request a new one"
USED_LINK = "This reset link has already been used"

# Internal reason -> the only wording a caller ever sees
_PUBLIC_ERRORS = {
    "missing": INVALID_LINK,
    "not_found": INVALID_LINK,
    "consumed": USED_LINK,
    "expired": EXPIRED_LINK,
    "inactive": INVALID_LINK,
    "frozen": INVALID_LINK,
}


@dataclass
class IssuedResetToken:
    token: str  # raw token; goes into the email and nowhere else
    user: AdminUser
    expires_at: datetime


@dataclass
class ResetTokenValidation:
    valid: bool
    reason: Optional[str] = None
    token_id: Optional[int] = None
    user_id: Optional[int] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def error(self) -> Optional[str]:
        if self.valid:
            return None
        return _PUBLIC_ERRORS.get(self.reason, INVALID_LINK)


class PasswordResetService:
    """Reset tokens live ``RESET_TOKEN_TTL_MINUTES`` (30) and are stored as SHA-256 hashes.

    Requests are throttled per email (``RESET_RL_PER_EMAIL_HOURLY``, 3) and per
    client IP (``RESET_RL_PER_IP_HOURLY``, 5) over a trailing hour.
    """

    def __init__(self, db: Session, settings: Settings):
        self.settings = settings
        self.users = AdminUserRepository(db)
        self.tokens = PasswordResetTokenRepository(db)

    def create_reset_token(
        self,
        email: str,
        client_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[IssuedResetToken]:
        """Issue a token for ``email``.

        Returns None for unknown or inactive accounts and raises
        :class:`RateLimitError` when a throttle is hit; the HTTP layer answers
        both exactly like a success.
        """
        email = normalize_email(email)
        client_ip = client_ip or "unknown"
        now = utcnow()

        self.tokens.purge_expired_unconsumed(now)

        since = now - RATE_LIMIT_WINDOW
        if self.tokens.count_recent_for_email(email, since) >= self.settings.RESET_RL_PER_EMAIL_HOURLY:
            record_password_reset_request("rate_limited_email")
            logger.warning("Password reset rate limit hit for email", extra={"email": email, "client_ip": client_ip})
            raise RateLimitError("Too many password reset requests for this email. Please try again later.")
        if self.tokens.count_recent_for_ip(client_ip, since) >= self.settings.RESET_RL_PER_IP_HOURLY:
            record_password_reset_request("rate_limited_ip")
            logger.warning("Password reset rate limit hit for IP", extra={"email": email, "client_ip": client_ip})
            raise RateLimitError("Too many password reset requests from this location. Please try again later.")

        user = self.users.find_by_email(email)
        if user is None or not user.is_active:
            record_password_reset_request("no_account")
            logger.info(
                "Password reset requested for unknown or inactive account",
                extra={"email": email, "client_ip": client_ip},
            )
            return None

        token = generate_token()
        expires_at = now + self.settings.reset_token_ttl
        self.tokens.create(
            admin_user_id=user.id,
            token_hash=hash_token(token),
            expires_at=expires_at,
            issued_ip=client_ip,
            issued_user_agent=user_agent,
            now=now,
        )

        record_password_reset_request("issued")
        logger.info("Password reset token issued", extra={"admin_user_id": user.id, "client_ip": client_ip})
        return IssuedResetToken(token=token, user=user, expires_at=expires_at)

    def validate_reset_token(self, token: Optional[str]) -> ResetTokenValidation:
        if not token:
            return ResetTokenValidation(valid=False, reason="missing")

        record = self.tokens.find_by_hash(hash_token(token))
        if record is None:
            return ResetTokenValidation(valid=False, reason="not_found")

        if record.consumed_at is not None:
            return ResetTokenValidation(valid=False, reason="consumed", token_id=record.id)

        if is_expired(record.expires_at):
            token_id = record.id
            self.tokens.delete(token_id)
            return ResetTokenValidation(valid=False, reason="expired", token_id=token_id)

        user = record.admin_user
        if not user.is_active:
            return ResetTokenValidation(valid=False, reason="inactive", token_id=record.id, user_id=user.id)
        if user.is_frozen:
            return ResetTokenValidation(valid=False, reason="frozen", token_id=record.id, user_id=user.id)

        return ResetTokenValidation(
            valid=True,
            token_id=record.id,
            user_id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
        )

    def consume_reset_token(self, token_id: int, user_id: int, new_password_hash: str) -> None:
        """Mark the token used and set the new credential atomically.

        Also clears the failed-login counter and any freeze.
        """
        try:
            self.tokens.consume(token_id, user_id, new_password_hash, utcnow())
        except TokenAlreadyConsumed:
            raise ValidationError(USED_LINK)

    def reset_password(self, token: Optional[str], new_password: str) -> ResetTokenValidation:
        """Validate ``token`` then replace the password. Raises ValidationError on any bad token."""
        validation = self.validate_reset_token(token)
        if not validation.valid:
            logger.warning(
                "Password reset rejected",
                extra={"reason": validation.reason, "admin_user_id": validation.user_id},
            )
            raise ValidationError(validation.error)

        new_hash = hash_password(new_password, self.settings.BCRYPT_ROUNDS)
        self.consume_reset_token(validation.token_id, validation.user_id, new_hash)

        logger.info("Password reset completed", extra={"admin_user_id": validation.user_id})
        return validation
