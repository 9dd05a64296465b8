"""Database models"""
from forms_admin.models.admin_session import AdminSession
from forms_admin.models.admin_user import AdminUser
from forms_admin.models.password_reset_token import PasswordResetToken

__all__ = ["AdminSession", "AdminUser", "PasswordResetToken"]
