"""Group and article schemas."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from facturo.app.schemas.common import UTCDateTime


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    account: Optional[str] = None
    color: Optional[str] = None


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    account: Optional[str] = None
    color: Optional[str] = None


class ArticleBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(decimal_places=2)
    code: Optional[str] = None
    intern_ref: Optional[str] = None
    unite: Optional[str] = None
    description: Optional[str] = None
    tax: Optional[str] = None


class ArticleCreate(ArticleBase):
    pass


class ArticleRead(ArticleBase):
    id: int
    group_id: int

    model_config = ConfigDict(from_attributes=True)


class GroupRead(BaseModel):
    id: int
    name: str
    account: Optional[str] = None
    color: Optional[str] = None
    company_id: int
    articles: List[ArticleRead] = []
    article_count: int
    created_at: Optional[UTCDateTime] = None

    model_config = ConfigDict(from_attributes=True)
