"""Request/response schemas for login, sessions, password reset and onboarding"""
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from forms_admin.utils.passwords import password_policy

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_and_check_email(value: str) -> str:
    value = (value or "").strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Valid email is required")
    return value


class UserSummary(BaseModel):
    """Identity projection kept in the session; never carries credentials"""
    id: int
    firstName: str
    lastName: str
    email: str
    role: str


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_and_check_email(value)


class LoginResponse(BaseModel):
    success: bool = True
    user: UserSummary


class SessionStatus(BaseModel):
    authenticated: bool
    user: Optional[UserSummary] = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword")

    class Config:
        populate_by_name = True

    @field_validator("new_password")
    @classmethod
    def check_policy(cls, value: str) -> str:
        return password_policy.validate(value)

    @model_validator(mode="after")
    def passwords_match(self) -> "ChangePasswordRequest":
        if self.confirm_password != self.new_password:
            raise ValueError("Password confirmation does not match new password")
        return self


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_and_check_email(value)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., alias="newPassword")

    class Config:
        populate_by_name = True

    @field_validator("new_password")
    @classmethod
    def check_policy(cls, value: str) -> str:
        return password_policy.validate(value)


class ResetTokenStatus(BaseModel):
    valid: bool
    email: Optional[str] = None
    error: Optional[str] = None


class OnboardingTokenRequest(BaseModel):
    token: Optional[str] = None


class CompleteOnboardingRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str

    @field_validator("password")
    @classmethod
    def check_policy(cls, value: str) -> str:
        return password_policy.validate(value)


class MessageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
