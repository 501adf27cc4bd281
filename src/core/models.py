# src/core/models.py
from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DiscountType(str, enum.Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class OfferStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class SubCategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    type_id: Optional[str] = None
    type_slug: Optional[str] = None


class TypeCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    category_id: Optional[str] = None
    category_slug: Optional[str] = None
    category_name: Optional[str] = None
    sub_categories: list[SubCategoryCreate] = Field(default_factory=list)


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    types: list[TypeCreate] = Field(default_factory=list)


class StoreSettingsUpdate(BaseModel):
    store_name: Optional[str] = None
    contact_email: Optional[str] = None
    currency: Optional[str] = None
    shipping_fee: Optional[float] = Field(default=None, ge=0)
    free_shipping_threshold: Optional[float] = Field(default=None, ge=0)
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if len(v) != 3:
            raise ValueError("currency must be a 3-letter code")
        return v.upper()


class OfferQuote(BaseModel):
    offer_id: str
    name: str
    code: Optional[str] = None
    discount_type: DiscountType
    discount_value: float
    cart_total: float
    discount: float
    final_amount: float
    valid: bool = True
