"""Tax rate schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from facturo.app.schemas.common import UTCDateTime


class TaxCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    percent: float = Field(ge=0, le=100, allow_inf_nan=False)


class TaxUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    percent: Optional[float] = Field(default=None, ge=0, le=100, allow_inf_nan=False)


class TaxRead(BaseModel):
    id: int
    name: str
    percent: float
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    model_config = ConfigDict(from_attributes=True)
