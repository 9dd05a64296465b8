"""First-password setup for newly created admin accounts"""
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from forms_admin.config import Settings
from forms_admin.repositories import AdminUserRepository
from forms_admin.utils.errors import NotFoundError, ValidationError
from forms_admin.utils.logger import logger
from forms_admin.utils.passwords import hash_password
from forms_admin.utils.tokens import hash_token, utcnow


class OnboardingService:
    def __init__(self, db: Session, settings: Settings):
        self.settings = settings
        self.users = AdminUserRepository(db)

    def _find_pending(self, token: str):
        return self.users.find_by_onboarding_token_hash(hash_token(token), utcnow())

    def verify_onboarding_token(self, token: Optional[str]) -> Dict[str, Any]:
        """Report whether ``token`` can still be used; never says why it cannot."""
        if not token:
            raise ValidationError("Token is required")

        user = self._find_pending(token)
        if user is None:
            return {"valid": False}

        return {
            "valid": True,
            "user": {
                "email": user.email,
                "firstName": user.first_name,
                "lastName": user.last_name,
            },
        }

    def complete_onboarding(self, token: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """Set the first password, activate the account and burn the token"""
        if not token or not password:
            raise ValidationError("Token and password are required")

        token_hash = hash_token(token)
        user = self.users.find_by_onboarding_token_hash(token_hash, utcnow())
        if user is None:
            raise NotFoundError("Invalid or expired onboarding token")

        password_hash = hash_password(password, self.settings.BCRYPT_ROUNDS)
        if not self.users.complete_onboarding(user.id, token_hash, password_hash, utcnow()):
            # Another request completed or the token expired while hashing
            logger.warning("Onboarding token already used", extra={"admin_user_id": user.id})
            raise NotFoundError("Invalid or expired onboarding token")

        logger.info("User onboarding completed", extra={"admin_user_id": user.id, "email": user.email})

        return {
            "success": True,
            "message": "Password set successfully. You can now log in.",
        }
