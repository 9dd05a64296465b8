"""AdminSession model: server-side session store"""
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from forms_admin.database import Base


class AdminSession(Base):
    """Server-side state for one browser session.

    The cookie only carries a signed reference to ``session_id``; deleting the row
    invalidates the cookie immediately.  ``expires_at`` slides forward on use.
    """

    __tablename__ = "admin_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), unique=True, nullable=False, index=True)
    admin_user_id = Column(Integer, ForeignKey("admin_users.id", ondelete="CASCADE"), nullable=False, index=True)
    data = Column(JSON, nullable=False, default=dict)  # user projection: id, name, email, role
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_seen_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)

    # Relationships
    admin_user = relationship("AdminUser", back_populates="sessions")
