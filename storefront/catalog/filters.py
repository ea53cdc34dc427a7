"""Translate a QuerySpec into storage-layer filter predicates."""

import math
from dataclasses import dataclass
from typing import Any, Optional

from .query import QuerySpec

SORT_FIELDS = {
    "created_at": "created_at",
    "created": "created_at",
    "price": "price",
    "rating": "rating",
    "name": "name",
    "reviews": "reviews",
}
DEFAULT_SORT = "created_at"


@dataclass(frozen=True)
class Predicate:
    """One filter: ``field <op> value`` where op is eq, gte, lte or in."""
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class FetchPlan:
    """Row-fetch query: the shared filters plus ordering and a window."""
    filters: tuple[Predicate, ...]
    sort_field: str = DEFAULT_SORT
    ascending: bool = False
    limit: int = 1000
    offset: int = 0


def parse_price(value: Optional[str]) -> Optional[float]:
    """A usable price bound is a finite number >= 0; anything else is ignored."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def parse_categories(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [c.strip() for c in value.split(",") if c.strip()]


def resolve_sort(sort_by: Optional[str], sort_order: Optional[str]) -> tuple[str, bool]:
    """Return (column, ascending). Unknown fields sort by creation time, newest first."""
    field = SORT_FIELDS.get((sort_by or "").lower(), DEFAULT_SORT)
    ascending = (sort_order or "").lower() == "asc"
    return field, ascending


def build_filters(spec: QuerySpec) -> tuple[Predicate, ...]:
    """Filters shared by the row fetch and the count query."""
    filters = []
    if spec.category:
        filters.append(Predicate("category", "eq", spec.category))
    if spec.brand:
        filters.append(Predicate("brand", "eq", spec.brand))

    min_price = parse_price(spec.min_price)
    if min_price is not None:
        filters.append(Predicate("price", "gte", min_price))
    max_price = parse_price(spec.max_price)
    if max_price is not None:
        filters.append(Predicate("price", "lte", max_price))

    if spec.in_stock:
        filters.append(Predicate("in_stock", "eq", True))

    category_list = parse_categories(spec.categories)
    if category_list:
        filters.append(Predicate("category", "in", tuple(category_list)))

    return tuple(filters)


def build_query(
    spec: QuerySpec, pool_limit: int = 1000, search: Optional[bool] = None
) -> tuple[FetchPlan, tuple[Predicate, ...]]:
    """
    Build the row-fetch plan and the count filters for a request.

    Without a search term the caller's page and sort go to storage. With a
    term the whole filtered pool (up to ``pool_limit`` rows, newest first)
    is fetched, since ranking has to see every candidate before paging.
    ``search`` overrides whether the query counts as a search request.
    """
    filters = build_filters(spec)
    if search is None:
        search = spec.has_term

    if search:
        plan = FetchPlan(filters=filters, limit=pool_limit, offset=0)
    else:
        sort_field, ascending = resolve_sort(spec.sort_by, spec.sort_order)
        plan = FetchPlan(
            filters=filters,
            sort_field=sort_field,
            ascending=ascending,
            limit=spec.limit,
            offset=spec.offset,
        )
    return plan, filters
