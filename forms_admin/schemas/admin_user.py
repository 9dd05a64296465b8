"""AdminUser schemas"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from forms_admin.models.admin_user import VALID_ROLES
from forms_admin.schemas.auth import normalize_and_check_email


def _not_blank(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("must not be empty")
    return value


def _valid_role(value: str) -> str:
    if value not in VALID_ROLES:
        raise ValueError("Invalid role")
    return value


class AdminUserUpdate(BaseModel):
    first_name: str = Field(..., alias="firstName", description="First name")
    last_name: str = Field(..., alias="lastName", description="Last name")
    email: str
    role: str = Field(..., description="Role: administrator | user")

    class Config:
        populate_by_name = True

    @field_validator("first_name", "last_name")
    @classmethod
    def check_names(cls, value: str) -> str:
        return _not_blank(value)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_and_check_email(value)

    @field_validator("role")
    @classmethod
    def check_role(cls, value: str) -> str:
        return _valid_role(value)


class AdminUserCreate(AdminUserUpdate):
    should_send_email: bool = Field(False, alias="shouldSendEmail")


class AdminUserStatusUpdate(BaseModel):
    is_active: bool = Field(..., alias="isActive")
    should_unfreeze: bool = Field(False, alias="shouldUnfreeze")

    class Config:
        populate_by_name = True


class AdminUserResponse(BaseModel):
    """Admin listing row. Credentials and onboarding token hashes are never exposed."""
    id: int
    first_name: str = Field(..., serialization_alias="firstName")
    last_name: str = Field(..., serialization_alias="lastName")
    email: str
    role: str
    is_active: bool = Field(..., serialization_alias="isActive")
    is_frozen: bool = Field(..., serialization_alias="isFrozen")
    failed_login_attempts: int = Field(..., serialization_alias="failedLoginAttempts")
    last_login_at: Optional[datetime] = Field(None, serialization_alias="lastLoginAt")
    onboarding_token_expiry: Optional[datetime] = Field(None, serialization_alias="onboardingTokenExpiry")
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")

    class Config:
        from_attributes = True
