"""Product storage layer."""

import asyncio
from typing import Iterable, Optional

from sqlalchemy import select, func, or_, not_, and_
from sqlalchemy.ext.asyncio import AsyncEngine

from ..config import catalog_config
from ..database import get_session
from .filters import FetchPlan, Predicate
from .models import ProductORM, VariantORM, ProductCreate
from .records import ProductRecord, product_from_row
from .websearch import Term, index_text, parse_websearch

FILTER_COLUMNS = {
    "category": ProductORM.category,
    "brand": ProductORM.brand,
    "price": ProductORM.price,
    "in_stock": ProductORM.in_stock,
}

SORT_COLUMNS = {
    "created_at": ProductORM.created_at,
    "price": ProductORM.price,
    "rating": ProductORM.rating,
    "name": ProductORM.name,
    "reviews": ProductORM.reviews,
}

TEXT_COLUMNS = (
    ProductORM.name,
    ProductORM.description,
    ProductORM.category,
    ProductORM.brand,
    ProductORM.sku,
)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def apply_filters(query, filters: Iterable[Predicate]):
    """Add equality, range and set-membership predicates to a select."""
    for predicate in filters:
        column = FILTER_COLUMNS.get(predicate.field)
        if column is None:
            raise ValueError(f"Unknown filter field: {predicate.field}")

        if predicate.op == "eq":
            query = query.where(column == predicate.value)
        elif predicate.op == "gte":
            query = query.where(column >= predicate.value)
        elif predicate.op == "lte":
            query = query.where(column <= predicate.value)
        elif predicate.op == "in":
            query = query.where(column.in_(list(predicate.value)))
        else:
            raise ValueError(f"Unknown filter operator: {predicate.op}")
    return query


def _term_condition(term: Term):
    pattern = "% " + " ".join(_escape_like(w) for w in term.words) + "%"
    return ProductORM.search_text.like(pattern, escape="\\")


class ProductStore:
    """Async access to the products table for the catalog engine."""

    def __init__(self, engine: AsyncEngine, timeout: Optional[float] = None):
        self.engine = engine
        self.timeout = timeout if timeout is not None else catalog_config.storage_timeout

    async def _bounded(self, coro):
        """Run one storage call under the configured timeout."""
        return await asyncio.wait_for(coro, timeout=self.timeout)

    async def save_product(self, data: ProductCreate) -> int:
        """Insert a product with its variants. Returns the new product id."""
        async with get_session(self.engine) as session:
            values = data.model_dump(exclude={"variants", "created_at"})
            if values["in_stock"] is None:
                values["in_stock"] = data.stock_quantity is None or data.stock_quantity > 0
            product = ProductORM(
                **values,
                search_text=index_text(
                    data.name, data.description, data.category, data.brand, data.sku
                ),
            )
            if data.created_at is not None:
                product.created_at = data.created_at
            for variant in data.variants:
                product.variants.append(VariantORM(**variant.model_dump()))

            session.add(product)
            await session.flush()
            return product.id

    async def fetch(self, plan: FetchPlan) -> list[ProductRecord]:
        """Fetch one window of filtered, ordered products."""
        return await self._bounded(self._fetch(plan))

    async def _fetch(self, plan: FetchPlan) -> list[ProductRecord]:
        async with get_session(self.engine) as session:
            query = apply_filters(select(ProductORM), plan.filters)

            column = SORT_COLUMNS[plan.sort_field]
            order = column.asc() if plan.ascending else column.desc()
            query = query.order_by(order, ProductORM.id.desc())
            query = query.offset(plan.offset).limit(plan.limit)

            result = await session.execute(query)
            return [product_from_row(p) for p in result.scalars()]

    async def count(self, filters: Iterable[Predicate]) -> int:
        """Count products matching filters, ignoring any window or order."""
        return await self._bounded(self._count(tuple(filters)))

    async def _count(self, filters: tuple[Predicate, ...]) -> int:
        async with get_session(self.engine) as session:
            query = apply_filters(select(ProductORM.id), filters)
            result = await session.execute(
                select(func.count()).select_from(query.subquery())
            )
            return result.scalar() or 0

    async def full_text_ids(
        self, term: str, filters: Iterable[Predicate] = (), limit: int = 1000
    ) -> list[int]:
        """Ids matching a web-style tokenized query over the indexed text."""
        return await self._bounded(self._full_text_ids(term, tuple(filters), limit))

    async def _full_text_ids(
        self, term: str, filters: tuple[Predicate, ...], limit: int
    ) -> list[int]:
        text_query = parse_websearch(term)
        if text_query.is_empty:
            return []

        conditions = []
        for clause in text_query.clauses:
            condition = or_(*[_term_condition(t) for t in clause.alternatives])
            conditions.append(not_(condition) if clause.negated else condition)

        async with get_session(self.engine) as session:
            query = apply_filters(select(ProductORM.id), filters)
            query = query.where(and_(*conditions)).limit(limit)
            result = await session.execute(query)
            return list(result.scalars())

    async def substring_ids(
        self, term: str, filters: Iterable[Predicate] = (), limit: int = 1000
    ) -> list[int]:
        """Ids whose name, description, category, brand or SKU contain ``term``."""
        return await self._bounded(self._substring_ids(term, tuple(filters), limit))

    async def _substring_ids(
        self, term: str, filters: tuple[Predicate, ...], limit: int
    ) -> list[int]:
        needle = term.lower()
        async with get_session(self.engine) as session:
            query = apply_filters(select(ProductORM.id), filters)
            query = query.where(or_(*[
                func.lower(column).contains(needle, autoescape=True)
                for column in TEXT_COLUMNS
            ])).limit(limit)
            result = await session.execute(query)
            return list(result.scalars())

    async def get_product(self, product_id: int) -> Optional[ProductRecord]:
        """Get product by ID."""
        return await self._bounded(self._get_product(product_id))

    async def _get_product(self, product_id: int) -> Optional[ProductRecord]:
        async with get_session(self.engine) as session:
            result = await session.execute(
                select(ProductORM).where(ProductORM.id == product_id)
            )
            product = result.scalar_one_or_none()
            return product_from_row(product) if product else None

    async def get_products(self, product_ids: list[int]) -> list[ProductRecord]:
        """Get several products by ID, newest first."""
        if not product_ids:
            return []
        return await self._bounded(self._get_products(product_ids))

    async def _get_products(self, product_ids: list[int]) -> list[ProductRecord]:
        async with get_session(self.engine) as session:
            result = await session.execute(
                select(ProductORM)
                .where(ProductORM.id.in_(product_ids))
                .order_by(ProductORM.created_at.desc(), ProductORM.id.desc())
            )
            return [product_from_row(p) for p in result.scalars()]
