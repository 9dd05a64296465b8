"""Server-side session store"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from forms_admin.models.admin_session import AdminSession


class SessionRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        session_id: str,
        admin_user_id: int,
        data: dict,
        expires_at: datetime,
        ip_address: Optional[str],
        user_agent: Optional[str],
        now: datetime,
    ) -> AdminSession:
        session = AdminSession(
            session_id=session_id,
            admin_user_id=admin_user_id,
            data=data,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:512] or None,
            created_at=now,
            last_seen_at=now,
            expires_at=expires_at,
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def find_active(self, session_id: str, now: datetime) -> Optional[AdminSession]:
        return self.db.query(AdminSession).filter(
            AdminSession.session_id == session_id,
            AdminSession.expires_at > now,
        ).first()

    def touch(self, session: AdminSession, now: datetime, expires_at: datetime) -> None:
        session.last_seen_at = now
        session.expires_at = expires_at
        self.db.commit()

    def delete(self, session_id: str) -> int:
        deleted = self.db.query(AdminSession).filter(
            AdminSession.session_id == session_id
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def delete_for_user(self, admin_user_id: int) -> int:
        deleted = self.db.query(AdminSession).filter(
            AdminSession.admin_user_id == admin_user_id
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def purge_expired(self, now: datetime) -> int:
        deleted = self.db.query(AdminSession).filter(
            AdminSession.expires_at <= now
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted
