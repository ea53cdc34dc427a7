"""Strict internal product records.

Storage rows are loosely typed: prices may arrive as strings, stock
quantities as empty strings, specifications maps as JSON text. Rows are
mapped into these records right after a fetch so that search, scoring and
assembly only ever deal with clean values.
"""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float, falling back to ``default``."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def to_quantity(value: Any) -> Optional[int]:
    """Stock quantity: None when untracked, otherwise a non-negative int."""
    if value is None or value == "":
        return None
    number = to_number(value, default=math.nan)
    if math.isnan(number):
        return None
    return max(0, int(number))


def to_mapping(value: Any) -> dict:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    return value if isinstance(value, dict) else {}


def to_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def dump_json(value: Any) -> str:
    """Compact JSON used when variant structures are searched as text."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


@dataclass(frozen=True)
class VariantRecord:
    id: int
    sku: str = ""
    model: str = ""
    price: Optional[float] = None
    image: Optional[str] = None
    variant_type: Optional[str] = None
    attributes: dict = field(default_factory=dict)
    primary_attribute: Optional[str] = None
    dependencies: dict = field(default_factory=dict)
    primary_values: list = field(default_factory=list)
    multi_values: dict = field(default_factory=dict)
    stock_quantity: Optional[int] = None

    @property
    def in_stock(self) -> bool:
        if self.stock_quantity is None:
            return True
        return self.stock_quantity > 0

    @property
    def serialized_text(self) -> str:
        """SKU, model and the JSON of every structured field, lower-cased."""
        return " ".join([
            self.sku,
            self.model,
            dump_json(self.attributes),
            dump_json(self.primary_values),
            dump_json(self.multi_values),
        ]).lower()

    def searchable_texts(self) -> list[str]:
        """Serialized fields plus the individual values they contain."""
        texts = [
            self.sku,
            self.model,
            dump_json(self.attributes),
            dump_json(self.primary_values),
            dump_json(self.multi_values),
        ]
        for entry in self.primary_values:
            if not isinstance(entry, dict):
                continue
            if entry.get("value"):
                texts.append(str(entry["value"]))
            if entry.get("attribute"):
                texts.append(str(entry["attribute"]))
        for values in self.multi_values.values():
            if isinstance(values, list):
                texts.extend(str(v) for v in values)
            elif isinstance(values, str):
                texts.append(values)
        return texts


@dataclass(frozen=True)
class ProductRecord:
    id: int
    name: str
    price: float
    original_price: float
    rating: float
    reviews: int
    in_stock: bool
    description: str = ""
    category: str = ""
    brand: str = ""
    sku: str = ""
    model: str = ""
    stock_quantity: Optional[int] = None
    free_delivery: bool = False
    same_day_delivery: bool = False
    image: Optional[str] = None
    gallery: list = field(default_factory=list)
    video: Optional[str] = None
    view360: Optional[str] = None
    views: int = 0
    variant_images: list = field(default_factory=list)
    variant_config: Optional[dict] = None
    specifications: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
    variants: tuple[VariantRecord, ...] = ()

    @property
    def core_text(self) -> str:
        return f"{self.name} {self.description} {self.category} {self.brand}".lower()


def variant_from_row(row: Any) -> VariantRecord:
    """Map a variant ORM row (or any object with the same attributes)."""
    primary_values = to_list(getattr(row, "primary_values", None))
    return VariantRecord(
        id=int(row.id),
        sku=row.sku or "",
        model=row.model or "",
        price=to_number(row.price) if row.price is not None else None,
        image=row.image,
        variant_type=row.variant_type,
        attributes=to_mapping(row.attributes),
        primary_attribute=row.primary_attribute,
        dependencies=to_mapping(row.dependencies),
        primary_values=primary_values,
        multi_values=to_mapping(row.multi_values),
        stock_quantity=row.stock_quantity if isinstance(row.stock_quantity, int) else None,
    )


def product_from_row(row: Any) -> ProductRecord:
    """Map a product ORM row into a ProductRecord."""
    price = to_number(row.price)
    stock_quantity = to_quantity(row.stock_quantity)
    if row.in_stock is not None:
        in_stock = bool(row.in_stock)
    else:
        in_stock = stock_quantity is None or stock_quantity > 0

    variant_config = row.variant_config
    if isinstance(variant_config, str):
        variant_config = to_mapping(variant_config) or None

    return ProductRecord(
        id=int(row.id),
        name=row.name or "",
        description=row.description or "",
        category=row.category or "",
        brand=row.brand or "",
        sku=row.sku or "",
        model=row.model or "",
        price=price,
        original_price=to_number(row.original_price, default=price) or price,
        rating=to_number(row.rating),
        reviews=int(to_number(row.reviews)),
        in_stock=in_stock,
        stock_quantity=stock_quantity,
        free_delivery=bool(row.free_delivery),
        same_day_delivery=bool(row.same_day_delivery),
        image=row.image,
        gallery=to_list(row.gallery),
        video=row.video,
        view360=row.view360,
        views=int(to_number(row.views)),
        variant_images=to_list(row.variant_images),
        variant_config=variant_config if isinstance(variant_config, dict) else None,
        specifications=to_mapping(row.specifications),
        created_at=row.created_at,
        variants=tuple(variant_from_row(v) for v in (row.variants or [])),
    )
