"""PasswordResetToken model: single-use, time-limited reset credentials"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from forms_admin.database import Base


class PasswordResetToken(Base):
    """Stores the SHA-256 hash of a reset token; the raw token is only ever emailed.

    ``consumed_at`` is set exactly once.  Rows past ``expires_at`` that were never
    consumed are purged on the next reset request.
    """

    __tablename__ = "admin_password_reset_tokens"

    id = Column(Integer, primary_key=True, index=True)
    admin_user_id = Column(Integer, ForeignKey("admin_users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    issued_ip = Column(String(64), nullable=True, index=True)
    issued_user_agent = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    consumed_at = Column(DateTime, nullable=True)

    # Relationships
    admin_user = relationship("AdminUser", back_populates="reset_tokens")
