"""Admin login with failed-attempt tracking and automatic freeze"""
from typing import NoReturn, Optional

from sqlalchemy.orm import Session

from forms_admin.config import Settings
from forms_admin.middleware.monitoring import record_account_frozen, record_login_failure
from forms_admin.models.admin_user import AdminUser
from forms_admin.repositories import AdminUserRepository, normalize_email
from forms_admin.utils.errors import AuthenticationError, NotFoundError, ValidationError
from forms_admin.utils.logger import logger
from forms_admin.utils.passwords import hash_password, verify_password
from forms_admin.utils.tokens import utcnow

GENERIC_LOGIN_FAILURE = "Invalid email or password"


class LoginService:
    """Credential check for the admin portal.

    Every rejection raises the same :class:`AuthenticationError` so callers
    cannot tell a missing account from a wrong password, an inactive account or
    a frozen one.  The specific reason is logged server-side.
    """

    def __init__(self, db: Session, settings: Settings):
        self.settings = settings
        self.users = AdminUserRepository(db)

    def _reject(self, reason: str, email: str, client_ip: Optional[str], **extra) -> NoReturn:
        record_login_failure(reason)
        logger.warning(
            f"Login rejected: {reason}",
            extra={"reason": reason, "email": email, "client_ip": client_ip, **extra},
        )
        raise AuthenticationError(GENERIC_LOGIN_FAILURE)

    def login(self, email: str, password: str, client_ip: Optional[str] = None) -> AdminUser:
        email = normalize_email(email)
        user = self.users.find_by_email(email)

        if user is None:
            self._reject("unknown_account", email, client_ip)

        # Never onboarded
        if not user.password_hash:
            self._reject("no_password", email, client_ip)

        # Password is verified before account status so locked and wrong-password
        # attempts cost the same
        if not verify_password(password, user.password_hash):
            attempts, frozen = self.users.register_failed_login(
                user.id, self.settings.MAX_FAILED_LOGIN_ATTEMPTS, utcnow()
            )
            if frozen:
                record_account_frozen()
                self._reject("frozen_after_failures", email, client_ip, failed_attempts=attempts)
            self._reject("wrong_password", email, client_ip, failed_attempts=attempts)

        if not user.is_active:
            self._reject("inactive", email, client_ip)
        if user.is_frozen:
            self._reject("frozen", email, client_ip)

        self.users.record_successful_login(user.id, utcnow())
        user = self.users.find_by_id(user.id)

        logger.info("Admin login succeeded", extra={"admin_user_id": user.id, "client_ip": client_ip})
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        """Replace the password of a signed-in user after re-checking the current one"""
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if not user.password_hash:
            logger.warning("Change password attempt for account without password hash", extra={"admin_user_id": user_id})
            raise ValidationError(
                "No password set for this account. Please use the forgot password flow to set a password."
            )

        if not verify_password(current_password, user.password_hash):
            logger.warning("Change password rejected: wrong current password", extra={"admin_user_id": user_id})
            raise AuthenticationError("Current password is incorrect")

        self.users.update(
            user_id,
            password_hash=hash_password(new_password, self.settings.BCRYPT_ROUNDS),
            last_password_reset_at=utcnow(),
        )
        logger.info("Password changed", extra={"admin_user_id": user_id})
