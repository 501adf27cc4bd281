# src/storage/orm_models.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, String, Text, Float, Integer, DateTime, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship

SETTINGS_ID = "00000000-0000-0000-0000-000000000001"


class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CategoryORM(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    image = Column(String(2000), nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    types = relationship("TypeORM", back_populates="category", order_by="TypeORM.name")
    products = relationship("ProductORM", back_populates="category")


class TypeORM(Base):
    __tablename__ = "types"
    __table_args__ = (
        UniqueConstraint("category_id", "slug", name="uq_types_category_slug"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(2000), nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    category = relationship("CategoryORM", back_populates="types")
    sub_categories = relationship("SubCategoryORM", back_populates="type", order_by="SubCategoryORM.name")


class SubCategoryORM(Base):
    __tablename__ = "sub_categories"
    __table_args__ = (
        UniqueConstraint("type_id", "slug", name="uq_sub_categories_type_slug"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(2000), nullable=True)
    type_id = Column(String(36), ForeignKey("types.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    type = relationship("TypeORM", back_populates="sub_categories")
    products = relationship("ProductORM", back_populates="sub_category")


class BrandORM(Base):
    __tablename__ = "brands"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    logo = Column(String(2000), nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    products = relationship("ProductORM", back_populates="brand")


class ProductORM(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(500), nullable=False)
    slug = Column(String(500), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    stock = Column(Integer, nullable=False, default=0)
    image_url = Column(String(2000), nullable=True)
    brand_id = Column(String(36), ForeignKey("brands.id"), nullable=True, index=True)
    # Legacy two-level link, kept nullable once products move to sub-categories
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True, index=True)
    sub_category_id = Column(String(36), ForeignKey("sub_categories.id"), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    brand = relationship("BrandORM", back_populates="products")
    category = relationship("CategoryORM", back_populates="products")
    sub_category = relationship("SubCategoryORM", back_populates="products")


class ConcernORM(Base):
    __tablename__ = "concerns"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)


class OfferORM(Base):
    __tablename__ = "offers"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=True, unique=True)
    description = Column(Text, nullable=True)
    discount_type = Column(String(20), nullable=False, default="PERCENTAGE")
    discount_value = Column(Float, nullable=False, default=0.0)
    min_purchase = Column(Float, nullable=False, default=0.0)
    max_discount = Column(Float, nullable=True)
    usage_limit = Column(Integer, nullable=False, default=0)
    usage_count = Column(Integer, nullable=False, default=0)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="ACTIVE")
    display_on_homepage = Column(Boolean, nullable=False, default=False)
    priority = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=_utcnow)


class StoreSettingsORM(Base):
    __tablename__ = "store_settings"

    id = Column(String(36), primary_key=True, default=SETTINGS_ID)
    store_name = Column(String(255), nullable=False, default="Storefront")
    contact_email = Column(String(255), nullable=True)
    currency = Column(String(3), nullable=False, default="BDT")
    shipping_fee = Column(Float, nullable=False, default=0.0)
    free_shipping_threshold = Column(Float, nullable=True)
    tax_rate = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)
