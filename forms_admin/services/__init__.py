"""Account lifecycle services"""
from forms_admin.services.login import LoginService
from forms_admin.services.onboarding import OnboardingService
from forms_admin.services.password_reset import PasswordResetService
from forms_admin.services.sessions import SessionCheck, SessionManager, user_projection
from forms_admin.services.user_management import UserManagementService

__all__ = [
    "LoginService",
    "OnboardingService",
    "PasswordResetService",
    "SessionCheck",
    "SessionManager",
    "UserManagementService",
    "user_projection",
]
