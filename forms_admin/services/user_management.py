"""Admin user administration: creation with onboarding tokens, edits, activation and unfreeze"""
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from forms_admin.config import Settings
from forms_admin.models.admin_user import AdminUser
from forms_admin.repositories import AdminUserRepository, normalize_email
from forms_admin.utils.errors import ConflictError, NotFoundError
from forms_admin.utils.logger import logger
from forms_admin.utils.mailer import build_link
from forms_admin.utils.tokens import generate_token, hash_token, utcnow

ONBOARDING_PATH = "/setup-password"


@dataclass
class CreatedUser:
    user: AdminUser
    onboarding_token: str  # raw token, handed out once
    onboarding_url: str


class UserManagementService:
    def __init__(self, db: Session, settings: Settings):
        self.settings = settings
        self.users = AdminUserRepository(db)

    def _get_or_404(self, user_id: int) -> AdminUser:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_users(self) -> List[AdminUser]:
        return self.users.list_all()

    def create_user(self, first_name: str, last_name: str, email: str, role: str) -> CreatedUser:
        """Create an inactive account without a password.

        Only the hash of the onboarding token is stored; the raw token is
        returned once so it can be emailed to the new user.
        """
        if self.users.find_by_email(email):
            raise ConflictError("Email already exists")

        token = generate_token()
        user = self.users.create(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            role=role,
            password_hash=None,
            onboarding_token=hash_token(token),
            onboarding_token_expiry=utcnow() + self.settings.onboarding_token_ttl,
            is_active=False,
            is_frozen=False,
            failed_login_attempts=0,
        )

        logger.info("New admin user created", extra={"admin_user_id": user.id, "role": role})

        return CreatedUser(
            user=user,
            onboarding_token=token,
            onboarding_url=build_link(self.settings, ONBOARDING_PATH, token),
        )

    def update_user(self, user_id: int, first_name: str, last_name: str, email: str, role: str) -> AdminUser:
        existing = self._get_or_404(user_id)

        if normalize_email(email) != existing.email and self.users.email_exists_excluding(email, user_id):
            raise ConflictError("Email already in use")

        user = self.users.update(
            user_id,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            role=role,
        )
        logger.info("Admin user updated", extra={"admin_user_id": user_id})
        return user

    def toggle_user_status(self, user_id: int) -> bool:
        user = self._get_or_404(user_id)
        new_status = not user.is_active
        self.users.set_active(user_id, new_status)
        logger.info(f"User status toggled to {'active' if new_status else 'inactive'}", extra={"admin_user_id": user_id})
        return new_status

    def set_user_status(self, user_id: int, is_active: bool, should_unfreeze: Optional[bool] = False) -> AdminUser:
        user = self._get_or_404(user_id)

        if is_active and should_unfreeze and user.is_frozen:
            self.users.unfreeze(user_id)
            self.users.set_active(user_id, True)
            logger.info("User account unfrozen and activated", extra={"admin_user_id": user_id})
        elif is_active:
            self.users.set_active(user_id, True)
            logger.info("User activated", extra={"admin_user_id": user_id})
        else:
            self.users.set_active(user_id, False)
            logger.info("User deactivated", extra={"admin_user_id": user_id})

        return self.users.find_by_id(user_id)

    def unfreeze_user(self, user_id: int) -> AdminUser:
        self._get_or_404(user_id)
        user = self.users.unfreeze(user_id)
        logger.info("User account unfrozen", extra={"admin_user_id": user_id})
        return user
