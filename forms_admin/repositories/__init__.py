"""Data-access layer: every read and write of account, token and session state goes through here"""
from forms_admin.repositories.admin_user_repository import AdminUserRepository, normalize_email
from forms_admin.repositories.password_reset_repository import PasswordResetTokenRepository
from forms_admin.repositories.session_repository import SessionRepository

__all__ = [
    "AdminUserRepository",
    "PasswordResetTokenRepository",
    "SessionRepository",
    "normalize_email",
]
