"""Transfer schemas."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from facturo.app.schemas.common import UTCDateTime


class TransferCreate(BaseModel):
    ref: Optional[str] = Field(default=None, max_length=50)
    amount: Decimal = Field(gt=0, decimal_places=2)
    payment_date: Optional[UTCDateTime] = None
    invoice_ids: List[int] = []


class TransferUpdate(BaseModel):
    ref: Optional[str] = Field(default=None, min_length=1, max_length=50)
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    payment_date: Optional[UTCDateTime] = None
    invoice_ids: Optional[List[int]] = None


class TransferRead(BaseModel):
    id: int
    ref: str
    amount: Decimal
    payment_date: Optional[UTCDateTime] = None
    company_id: int
    invoice_ids: List[int]
    # Advisory reconciliation against the linked invoices
    invoiced_total: Decimal
    difference: Decimal
    reconciled: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime
