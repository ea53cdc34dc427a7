"""Normalized catalog request shape."""

from typing import Optional
from pydantic import BaseModel, ConfigDict

from ..config import catalog_config
from .cache import build_cache_key

TRUTHY = {"true", "1", "yes", "on"}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _parse_flag(value: Optional[str]) -> bool:
    return value is not None and str(value).strip().lower() in TRUTHY


class QuerySpec(BaseModel):
    """
    One catalog request, reduced to the fields that shape its result.

    Filter values stay as received; the filter builder decides which of
    them are usable. Limit and offset are already resolved to integers.
    """
    model_config = ConfigDict(frozen=True)

    search: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    min_price: Optional[str] = None
    max_price: Optional[str] = None
    in_stock: bool = False
    categories: Optional[str] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"
    limit: int = catalog_config.default_limit
    offset: int = 0
    minimal: bool = False

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        category: Optional[str] = None,
        brand: Optional[str] = None,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
        in_stock: Optional[str] = None,
        categories: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        limit: Optional[str] = None,
        offset: Optional[str] = None,
        minimal: Optional[str] = None,
        config=catalog_config,
    ) -> "QuerySpec":
        """Build a QuerySpec from raw query-string values. Never raises."""
        parsed_limit = _parse_int(limit)
        if parsed_limit is None or parsed_limit <= 0:
            parsed_limit = config.default_limit
        parsed_limit = min(parsed_limit, config.max_limit)

        parsed_offset = _parse_int(offset)
        if parsed_offset is None or parsed_offset < 0:
            parsed_offset = 0

        return cls(
            search=_clean(search),
            category=_clean(category),
            brand=_clean(brand),
            min_price=_clean(min_price),
            max_price=_clean(max_price),
            in_stock=_parse_flag(in_stock),
            categories=_clean(categories),
            sort_by=(_clean(sort_by) or "created_at").lower(),
            sort_order=(_clean(sort_order) or "desc").lower(),
            limit=parsed_limit,
            offset=parsed_offset,
            minimal=_parse_flag(minimal),
        )

    @property
    def has_term(self) -> bool:
        return self.search is not None

    def cache_key(self) -> str:
        """Canonical serialization; equal QuerySpecs share one cache entry."""
        return build_cache_key("products", self.model_dump())
