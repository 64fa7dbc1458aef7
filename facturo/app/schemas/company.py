"""Company schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from facturo.app.schemas.common import UTCDateTime


class CompanyBase(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    code_postal: Optional[str] = None
    description: Optional[str] = None
    bank: Optional[str] = None
    account: Optional[str] = None
    iban: Optional[str] = None


class CompanyCreate(CompanyBase):
    name: str = Field(min_length=1, max_length=255)


class CompanyUpdate(CompanyBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)


class CompanyRead(CompanyBase):
    id: int
    name: str
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    model_config = ConfigDict(from_attributes=True)


class CompanyWithCountRead(CompanyRead):
    user_count: int
