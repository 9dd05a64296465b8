"""Account store for admin users"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session

from forms_admin.models.admin_user import AdminUser
from forms_admin.utils.tokens import utcnow


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AdminUserRepository:
    """Reads and mutates ``admin_users`` rows.

    Emails are normalised on every lookup and write, so callers may pass them
    as typed by the user.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: int) -> Optional[AdminUser]:
        return self.db.query(AdminUser).filter(AdminUser.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[AdminUser]:
        return self.db.query(AdminUser).filter(AdminUser.email == normalize_email(email)).first()

    def find_by_onboarding_token_hash(self, token_hash: str, now: datetime) -> Optional[AdminUser]:
        """Match a pending onboarding: token hash, unexpired, and no password set yet"""
        return self.db.query(AdminUser).filter(
            AdminUser.onboarding_token == token_hash,
            AdminUser.onboarding_token_expiry > now,
            AdminUser.password_hash.is_(None),
        ).first()

    def list_all(self) -> List[AdminUser]:
        return self.db.query(AdminUser).order_by(AdminUser.created_at.desc(), AdminUser.id.desc()).all()

    def email_exists_excluding(self, email: str, user_id: int) -> bool:
        return self.db.query(AdminUser.id).filter(
            AdminUser.email == normalize_email(email),
            AdminUser.id != user_id,
        ).first() is not None

    def create(self, **fields) -> AdminUser:
        fields["email"] = normalize_email(fields.get("email"))
        user = AdminUser(**fields)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update(self, user_id: int, **fields) -> Optional[AdminUser]:
        user = self.find_by_id(user_id)
        if not user:
            return None
        if "email" in fields:
            fields["email"] = normalize_email(fields["email"])
        for name, value in fields.items():
            setattr(user, name, value)
        user.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(user)
        return user

    def register_failed_login(self, user_id: int, max_attempts: int, now: datetime) -> Tuple[int, bool]:
        """Atomically bump the failed-login counter and freeze at ``max_attempts``.

        The increment is a single ``UPDATE ... RETURNING`` so concurrent wrong
        passwords never lose an update; the freeze decision uses the returned
        post-increment value.  Returns ``(attempts, frozen_now)``.
        """
        attempts = self.db.execute(
            update(AdminUser)
            .where(AdminUser.id == user_id)
            .values(
                failed_login_attempts=AdminUser.failed_login_attempts + 1,
                last_failed_login_at=now,
                updated_at=now,
            )
            .returning(AdminUser.failed_login_attempts)
            .execution_options(synchronize_session=False)
        ).scalar_one()

        frozen_now = False
        if attempts >= max_attempts:
            # Only the request that flips the flag reports the freeze
            result = self.db.execute(
                update(AdminUser)
                .where(AdminUser.id == user_id, AdminUser.is_frozen.is_(False))
                .values(is_frozen=True, frozen_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            frozen_now = result.rowcount == 1
        self.db.commit()
        return attempts, frozen_now

    def complete_onboarding(self, user_id: int, token_hash: str, password_hash: str, now: datetime) -> bool:
        """Set the first password and burn the onboarding token in one conditional update.

        The row must still be pending (same token hash, unexpired, no password),
        so only one of several concurrent completions can match.  Returns whether
        this call won.
        """
        result = self.db.execute(
            update(AdminUser)
            .where(
                AdminUser.id == user_id,
                AdminUser.onboarding_token == token_hash,
                AdminUser.onboarding_token_expiry > now,
                AdminUser.password_hash.is_(None),
            )
            .values(
                password_hash=password_hash,
                is_active=True,
                onboarding_token=None,
                onboarding_token_expiry=None,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def record_successful_login(self, user_id: int, now: datetime) -> None:
        self.db.execute(
            update(AdminUser)
            .where(AdminUser.id == user_id)
            .values(
                last_login_at=now,
                failed_login_attempts=0,
                last_failed_login_at=None,
                is_frozen=False,
                frozen_at=None,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def unfreeze(self, user_id: int) -> Optional[AdminUser]:
        return self.update(
            user_id,
            is_frozen=False,
            frozen_at=None,
            failed_login_attempts=0,
            last_failed_login_at=None,
        )

    def set_active(self, user_id: int, is_active: bool) -> Optional[AdminUser]:
        return self.update(user_id, is_active=is_active)
