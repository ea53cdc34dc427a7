"""Catalog data models."""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import (
    Column, String, Float, Integer, Boolean, DateTime, Text, JSON, ForeignKey
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


# ============ SQLAlchemy ORM Models ============

class ProductORM(Base):
    """SQLAlchemy model for products table."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    category = Column(String, index=True)
    brand = Column(String, index=True)
    sku = Column(String)
    model = Column(String)
    price = Column(Float, nullable=False, default=0)
    original_price = Column(Float)
    rating = Column(Float, default=0)
    reviews = Column(Integer, default=0)
    in_stock = Column(Boolean)
    stock_quantity = Column(Integer)
    free_delivery = Column(Boolean, default=False)
    same_day_delivery = Column(Boolean, default=False)
    image = Column(String)
    gallery = Column(JSON, default=list)
    video = Column(String)
    view360 = Column(String)
    views = Column(Integer, default=0)
    variant_images = Column(JSON, default=list)
    variant_config = Column(JSON)
    specifications = Column(JSON, default=dict)
    # Lower-cased, word-normalized name/description/category/brand/sku
    search_text = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    variants = relationship(
        "VariantORM",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="VariantORM.id",
    )


class VariantORM(Base):
    """SQLAlchemy model for product_variants table."""
    __tablename__ = "product_variants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False
    )
    sku = Column(String)
    model = Column(String)
    price = Column(Float)
    image = Column(String)
    variant_type = Column(String)
    attributes = Column(JSON, default=dict)
    primary_attribute = Column(String)
    dependencies = Column(JSON, default=dict)
    primary_values = Column(JSON, default=list)
    multi_values = Column(JSON, default=dict)
    stock_quantity = Column(Integer)

    product = relationship("ProductORM", back_populates="variants")


# ============ Pydantic Models (API) ============

class PrimaryValue(BaseModel):
    """One attribute/value/quantity entry of a variant."""
    attribute: Optional[str] = None
    value: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)


class VariantCreate(BaseModel):
    """Schema for a variant supplied alongside a product."""
    sku: Optional[str] = None
    model: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    variant_type: Optional[str] = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    primary_attribute: Optional[str] = None
    dependencies: dict[str, Any] = Field(default_factory=dict)
    primary_values: list[PrimaryValue] = Field(default_factory=list)
    multi_values: dict[str, list[str]] = Field(default_factory=dict)
    stock_quantity: Optional[int] = Field(None, ge=0)


class ProductCreate(BaseModel):
    """Schema for populating the catalog with a product."""
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    sku: Optional[str] = None
    model: Optional[str] = None
    price: float = Field(0, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    rating: float = Field(0, ge=0, le=5)
    reviews: int = Field(0, ge=0)
    in_stock: Optional[bool] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    free_delivery: bool = False
    same_day_delivery: bool = False
    image: Optional[str] = None
    gallery: list[str] = Field(default_factory=list)
    video: Optional[str] = None
    view360: Optional[str] = None
    variant_images: list[Any] = Field(default_factory=list)
    variant_config: Optional[dict[str, Any]] = None
    specifications: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    variants: list[VariantCreate] = Field(default_factory=list)


class CamelModel(BaseModel):
    """Base for response models serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VariantResponse(CamelModel):
    """Variant summary kept in every payload for client-side selection."""
    id: int
    price: Optional[float] = None
    image: Optional[str] = None
    sku: Optional[str] = None
    model: Optional[str] = None
    variant_type: Optional[str] = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    primary_attribute: Optional[str] = None
    dependencies: dict[str, Any] = Field(default_factory=dict)
    primary_values: list[dict[str, Any]] = Field(default_factory=list)
    multi_values: dict[str, Any] = Field(default_factory=dict)
    stock_quantity: Optional[int] = None
    in_stock: bool = True


class ProductSummary(CamelModel):
    """Minimal product payload."""
    id: int
    name: str
    original_price: float
    price: float
    rating: float
    reviews: int
    image: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    in_stock: bool
    stock_quantity: Optional[int] = None
    free_delivery: bool = False
    same_day_delivery: bool = False
    variants: list[VariantResponse] = Field(default_factory=list)
    variant_config: Optional[dict[str, Any]] = None


class ProductDetail(ProductSummary):
    """Full product payload."""
    description: Optional[str] = None
    specifications: dict[str, Any] = Field(default_factory=dict)
    gallery: list[str] = Field(default_factory=list)
    sku: Optional[str] = None
    model: Optional[str] = None
    views: int = 0
    video: Optional[str] = None
    view360: Optional[str] = None
    variant_images: list[Any] = Field(default_factory=list)


class SearchMetadata(CamelModel):
    """Search statistics reported when a term was supplied."""
    original_query: str
    matched_count: int
    total_searched: int


class Pagination(CamelModel):
    """Pagination block of a catalog page."""
    limit: int
    offset: int
    total: int
    has_more: bool
    current_page: int
    total_pages: int
    returned: int
    search_metadata: Optional[SearchMetadata] = None
