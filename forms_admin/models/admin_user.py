"""AdminUser model: back-office accounts that review form submissions"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from forms_admin.database import Base

ROLE_ADMINISTRATOR = "administrator"
ROLE_USER = "user"
VALID_ROLES = (ROLE_ADMINISTRATOR, ROLE_USER)


class AdminUser(Base):
    """An admin account.

    Accounts are created inactive with no password and an onboarding token; the
    owner activates the account by setting a first password.  Five consecutive
    wrong passwords freeze the account until an administrator unfreezes it or the
    owner completes a password reset.
    """

    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)       # always lowercase + trimmed
    password_hash = Column(String(255), nullable=True)                         # null until onboarding completes
    role = Column(String(20), nullable=False, default=ROLE_USER)               # administrator | user
    is_active = Column(Boolean, default=False, nullable=False)
    is_frozen = Column(Boolean, default=False, nullable=False)
    frozen_at = Column(DateTime, nullable=True)
    failed_login_attempts = Column(Integer, default=0, nullable=False)
    last_failed_login_at = Column(DateTime, nullable=True)
    onboarding_token = Column(String(64), unique=True, nullable=True)          # SHA-256 of raw token
    onboarding_token_expiry = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)
    last_password_reset_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    reset_tokens = relationship("PasswordResetToken", back_populates="admin_user", cascade="all, delete-orphan")
    sessions = relationship("AdminSession", back_populates="admin_user", cascade="all, delete-orphan")
