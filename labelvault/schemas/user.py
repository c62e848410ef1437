"""User and authentication schemas."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import AliasChoices, EmailStr, Field, field_validator

from labelvault.models.user import Permission, UserRole
from .base import BaseSchema, UpdateSchema

KNOWN_PERMISSIONS = {p.value for p in Permission}


def _validate_permission_keys(v: Optional[Dict[str, bool]]) -> Optional[Dict[str, bool]]:
    if v is None:
        return v
    unknown = set(v) - KNOWN_PERMISSIONS
    if unknown:
        raise ValueError(f"Unknown permissions: {sorted(unknown)}")
    return v


class UserResponse(BaseSchema):
    id: str
    name: str
    email: str
    role: str
    designation: Optional[str] = None
    label_id: Optional[str] = None
    label_name: Optional[str] = None
    artist_id: Optional[str] = None
    artist_name: Optional[str] = None
    permissions: Dict[str, bool] = Field(default_factory=dict)
    is_blocked: bool = False
    block_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class UserCreateRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    role: UserRole
    designation: Optional[str] = Field(None, max_length=255)
    label_id: Optional[str] = None
    artist_id: Optional[str] = None
    permissions: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: Dict[str, bool]) -> Dict[str, bool]:
        return _validate_permission_keys(v)


class UserUpdateRequest(UpdateSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[UserRole] = None
    designation: Optional[str] = Field(None, max_length=255)
    permissions: Optional[Dict[str, bool]] = None
    is_blocked: Optional[bool] = None
    block_reason: Optional[str] = None

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: Optional[Dict[str, bool]]) -> Optional[Dict[str, bool]]:
        return _validate_permission_keys(v)


class UserCreatedResponse(BaseSchema):
    """New user plus the password it was created with, shown once."""

    user: UserResponse
    password: str


class LoginRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)
    captcha_token: Optional[str] = Field(
        None, validation_alias=AliasChoices("captchaToken", "captcha_token", "token")
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class LoginResponse(BaseSchema):
    token: str
    user: UserResponse


class VerifyResponse(BaseSchema):
    valid: bool
    user: Optional[UserResponse] = None


class ChangePasswordRequest(BaseSchema):
    old_pass: str = Field(..., min_length=1)
    new_pass: str = Field(..., min_length=8, max_length=128)


class ResetPasswordRequest(BaseSchema):
    email: str = Field(..., min_length=1)
