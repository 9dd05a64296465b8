"""Store for password-reset tokens"""
from datetime import datetime
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from forms_admin.models.admin_user import AdminUser
from forms_admin.models.password_reset_token import PasswordResetToken
from forms_admin.repositories.admin_user_repository import normalize_email


class TokenAlreadyConsumed(Exception):
    """Raised by :meth:`PasswordResetTokenRepository.consume` when another request won the race"""


class PasswordResetTokenRepository:
    def __init__(self, db: Session):
        self.db = db

    def purge_expired_unconsumed(self, now: datetime) -> int:
        deleted = self.db.query(PasswordResetToken).filter(
            PasswordResetToken.expires_at < now,
            PasswordResetToken.consumed_at.is_(None),
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def count_recent_for_email(self, email: str, since: datetime) -> int:
        return self.db.query(func.count(PasswordResetToken.id)).join(
            AdminUser, PasswordResetToken.admin_user_id == AdminUser.id
        ).filter(
            AdminUser.email == normalize_email(email),
            PasswordResetToken.created_at > since,
        ).scalar() or 0

    def count_recent_for_ip(self, ip: str, since: datetime) -> int:
        return self.db.query(func.count(PasswordResetToken.id)).filter(
            PasswordResetToken.issued_ip == ip,
            PasswordResetToken.created_at > since,
        ).scalar() or 0

    def create(
        self,
        admin_user_id: int,
        token_hash: str,
        expires_at: datetime,
        issued_ip: Optional[str],
        issued_user_agent: Optional[str],
        now: datetime,
    ) -> PasswordResetToken:
        token = PasswordResetToken(
            admin_user_id=admin_user_id,
            token_hash=token_hash,
            issued_ip=issued_ip,
            issued_user_agent=(issued_user_agent or "")[:512] or None,
            created_at=now,
            expires_at=expires_at,
        )
        self.db.add(token)
        self.db.commit()
        self.db.refresh(token)
        return token

    def find_by_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        return self.db.query(PasswordResetToken).filter(
            PasswordResetToken.token_hash == token_hash
        ).first()

    def delete(self, token_id: int) -> None:
        self.db.query(PasswordResetToken).filter(
            PasswordResetToken.id == token_id
        ).delete(synchronize_session=False)
        self.db.commit()

    def consume(self, token_id: int, admin_user_id: int, new_password_hash: str, now: datetime) -> None:
        """Mark the token used and replace the account credential in one transaction.

        The token update is conditional on ``consumed_at IS NULL``; if no row
        matches, nothing is written and :class:`TokenAlreadyConsumed` is raised.
        """
        try:
            marked = self.db.execute(
                update(PasswordResetToken)
                .where(
                    PasswordResetToken.id == token_id,
                    PasswordResetToken.consumed_at.is_(None),
                )
                .values(consumed_at=now)
                .execution_options(synchronize_session=False)
            )
            if marked.rowcount != 1:
                raise TokenAlreadyConsumed(token_id)

            self.db.execute(
                update(AdminUser)
                .where(AdminUser.id == admin_user_id)
                .values(
                    password_hash=new_password_hash,
                    failed_login_attempts=0,
                    last_failed_login_at=None,
                    is_frozen=False,
                    frozen_at=None,
                    last_password_reset_at=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
