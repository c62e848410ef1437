"""Label schemas."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import EmailStr, Field, field_validator

from labelvault.utils.validators import PhoneValidator, first_error_message
from .base import BaseSchema, UpdateSchema
from .user import UserResponse, _validate_permission_keys

LABEL_STATUSES = {"Active", "Suspended"}


def _validate_phone(v: Optional[str]) -> Optional[str]:
    if not v:
        return v
    message = first_error_message(PhoneValidator.validate(v))
    if message:
        raise ValueError(message)
    return PhoneValidator.format_international(v)


class LabelResponse(BaseSchema):
    id: str
    name: str
    parent_label_id: Optional[str] = None
    owner_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    tax_id: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    revenue_share: Optional[float] = None
    max_artists: Optional[int] = None
    status: str
    created_at: Optional[datetime] = None


class LabelFields(BaseSchema):
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    tax_id: Optional[str] = Field(None, max_length=50)
    website: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=50)
    revenue_share: Optional[float] = Field(None, ge=0, le=100)
    max_artists: Optional[int] = Field(None, ge=0)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _validate_phone(v)


class LabelCreateRequest(LabelFields):
    """Creates a label together with its administrator account."""

    name: str = Field(..., min_length=1, max_length=255)
    parent_label_id: Optional[str] = None
    admin_name: str = Field(..., min_length=1, max_length=255)
    admin_email: EmailStr
    admin_password: Optional[str] = Field(None, min_length=8, max_length=128)
    permissions: Optional[Dict[str, bool]] = None

    @field_validator("admin_email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: Optional[Dict[str, bool]]) -> Optional[Dict[str, bool]]:
        return _validate_permission_keys(v)

    def label_fields(self) -> dict:
        return self.model_dump(
            exclude={"admin_name", "admin_email", "admin_password", "permissions"}
        )


class LabelUpdateRequest(UpdateSchema, LabelFields):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    parent_label_id: Optional[str] = None
    owner_id: Optional[str] = None
    status: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in LABEL_STATUSES:
            raise ValueError(f"Status must be one of: {sorted(LABEL_STATUSES)}")
        return v


class LabelCreatedResponse(BaseSchema):
    label: LabelResponse
    user: UserResponse
    password: str
