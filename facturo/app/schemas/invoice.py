"""Invoice and invoice item schemas."""

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from facturo.app.schemas.common import UTCDateTime
from facturo.app.schemas.user import UserSummary

InvoiceType = Literal["invoice", "avoir", "devis"]


class InvoiceItemCreate(BaseModel):
    product: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, decimal_places=2)
    quantity: Decimal = Field(gt=0, decimal_places=3)
    discount: float = Field(default=0, ge=0, le=100, allow_inf_nan=False)
    tax: float = Field(default=0, ge=0, le=100, allow_inf_nan=False)
    intern_ref: Optional[str] = None
    description: Optional[str] = None
    unite: Optional[str] = None
    group_id: Optional[int] = None


class InvoiceItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_id: int
    product: str
    price: Decimal
    quantity: Decimal
    discount: float
    tax: float
    intern_ref: Optional[str] = None
    description: Optional[str] = None
    unite: Optional[str] = None
    group_id: Optional[int] = None


class InvoiceFields(BaseModel):
    wording: Optional[str] = None
    commentary: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    valid_until: Optional[UTCDateTime] = None
    subscription_months: Optional[List[int]] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)


class InvoiceCreate(InvoiceFields):
    ref: Optional[str] = Field(default=None, max_length=50)
    type: InvoiceType
    subscription: bool = False
    client_id: int
    employee_id: Optional[int] = None
    items: List[InvoiceItemCreate] = []


class InvoiceUpdate(InvoiceFields):
    ref: Optional[str] = Field(default=None, min_length=1, max_length=50)
    type: Optional[InvoiceType] = None
    subscription: Optional[bool] = None
    client_id: Optional[int] = None
    employee_id: Optional[int] = None
    paid: Optional[bool] = None
    archived: Optional[bool] = None
    payment_date: Optional[UTCDateTime] = None
    last_payment_method: Optional[str] = None
    items: Optional[List[InvoiceItemCreate]] = None


class InvoiceRead(InvoiceFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ref: str
    type: InvoiceType
    subscription: bool
    total_ht: Decimal
    total: Decimal
    paid: bool
    archived: bool
    payment_date: Optional[UTCDateTime] = None
    last_payment_method: Optional[str] = None

    client_id: int
    employee_id: Optional[int] = None
    company_id: int
    client: Optional[UserSummary] = None
    employee: Optional[UserSummary] = None
    items: List[InvoiceItemRead] = []

    created_at: UTCDateTime
    updated_at: UTCDateTime
