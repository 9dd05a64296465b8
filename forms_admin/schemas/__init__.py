"""Pydantic schemas for request/response validation"""
from forms_admin.schemas.admin_user import (
    AdminUserCreate,
    AdminUserResponse,
    AdminUserStatusUpdate,
    AdminUserUpdate,
)
from forms_admin.schemas.auth import (
    ChangePasswordRequest,
    CompleteOnboardingRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    OnboardingTokenRequest,
    ResetPasswordRequest,
    ResetTokenStatus,
    SessionStatus,
    UserSummary,
)

__all__ = [
    "AdminUserCreate",
    "AdminUserResponse",
    "AdminUserStatusUpdate",
    "AdminUserUpdate",
    "ChangePasswordRequest",
    "CompleteOnboardingRequest",
    "ForgotPasswordRequest",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "OnboardingTokenRequest",
    "ResetPasswordRequest",
    "ResetTokenStatus",
    "SessionStatus",
    "UserSummary",
]
