"""User schemas used for account management and responses."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from facturo.app.models.user import Role
from facturo.app.schemas.common import UTCDateTime


def _lower(value: Optional[str]) -> Optional[str]:
    return value.strip().lower() if isinstance(value, str) else value


class UserProfileBase(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    discount: Optional[Decimal] = Field(default=None, ge=0, le=100)
    code: Optional[str] = None
    turnover: Optional[Decimal] = None
    payment_method: Optional[str] = None


class UserCreate(UserProfileBase):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Role
    is_active: Optional[bool] = None
    # Only honoured for SUPER_ADMIN callers; everyone else creates in their own tenant
    company_id: Optional[int] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _lower(value)


class UserUpdate(UserProfileBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    # Only honoured for SUPER_ADMIN callers
    company_id: Optional[int] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _lower(value)


class UserSummary(BaseModel):
    id: int
    name: Optional[str] = None
    email: EmailStr
    code: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserRead(UserProfileBase):
    id: int
    name: Optional[str] = None
    email: EmailStr
    role: Role
    company_id: Optional[int] = None
    is_active: bool
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    model_config = ConfigDict(from_attributes=True)
