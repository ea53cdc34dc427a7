"""Catalog query engine: filters, search, ranking, pagination and caching."""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

from ..config import CatalogConfig, catalog_config
from ..utils.logger import get_logger
from .assembler import assemble_page, product_payload
from .cache import CacheBackend, build_cache_key
from .filters import build_query
from .models import SearchMetadata
from .query import QuerySpec
from .scoring import rank_candidates
from .search import SearchResolver, sanitize_term

logger = get_logger("catalog.engine")


class CatalogFetchError(Exception):
    """The base product fetch or count failed; there is nothing to serve."""


@dataclass
class CatalogResult:
    """Assembled payload plus how it was produced."""
    payload: dict[str, Any]
    cache_hit: bool
    search_applied: bool = False


class CatalogEngine:
    """Turn a QuerySpec into a ranked, paginated, cached product page."""

    def __init__(
        self,
        store,
        cache: CacheBackend,
        config: CatalogConfig = catalog_config,
        resolver: Optional[SearchResolver] = None,
    ):
        self.store = store
        self.cache = cache
        self.config = config
        self.resolver = resolver or SearchResolver(store, pool_limit=config.search_pool_limit)

    async def query(self, spec: QuerySpec) -> CatalogResult:
        """Serve a catalog page, from cache when possible."""
        cache_key = spec.cache_key()
        term = sanitize_term(spec.search, self.config.max_term_length)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit: %s", cache_key)
            return CatalogResult(payload=cached, cache_hit=True, search_applied=bool(term))

        logger.debug("Cache miss: %s", cache_key)
        if term:
            payload = await self._search_page(spec, term)
        else:
            payload = await self._browse_page(spec)

        empty = not payload["products"]
        ttl = self.config.empty_cache_ttl if empty else self.config.cache_ttl
        self.cache.set(cache_key, payload, ttl)
        return CatalogResult(payload=payload, cache_hit=False, search_applied=bool(term))

    async def _browse_page(self, spec: QuerySpec) -> dict[str, Any]:
        """No term: storage does the paging and a count query gives the total."""
        plan, count_filters = build_query(spec, self.config.search_pool_limit, search=False)
        products, total = await asyncio.gather(
            self.store.fetch(plan),
            self.store.count(count_filters),
            return_exceptions=True,
        )
        for outcome in (products, total):
            if isinstance(outcome, BaseException):
                logger.error("Error fetching products: %s", outcome)
                raise CatalogFetchError("Failed to fetch products") from outcome

        return assemble_page(
            products,
            limit=spec.limit,
            offset=spec.offset,
            total=total,
            minimal=spec.minimal,
            empty_fetch=not products,
        )

    async def _search_page(self, spec: QuerySpec, term: str) -> dict[str, Any]:
        """Term present: rank the whole filtered pool, then slice the page."""
        plan, filters = build_query(spec, self.config.search_pool_limit, search=True)
        try:
            pool = await self.store.fetch(plan)
        except Exception as e:
            logger.error("Error fetching products: %s", e)
            raise CatalogFetchError("Failed to fetch products") from e

        if not pool:
            return assemble_page(
                [],
                limit=spec.limit,
                offset=spec.offset,
                total=0,
                minimal=spec.minimal,
                empty_fetch=True,
                search_metadata=SearchMetadata(
                    original_query=spec.search, matched_count=0, total_searched=0
                ),
            )

        resolution = await self.resolver.resolve(pool, term, filters)
        ranked = [c.product for c in rank_candidates(resolution.candidates, term)]
        metadata = SearchMetadata(
            original_query=spec.search,
            matched_count=len(ranked),
            total_searched=len(pool),
        )

        page = ranked[spec.offset:spec.offset + spec.limit]
        return assemble_page(
            page,
            limit=spec.limit,
            offset=spec.offset,
            total=len(ranked),
            minimal=spec.minimal,
            search_metadata=metadata,
        )

    async def product_detail(self, product_id: int) -> Optional[dict[str, Any]]:
        """Full payload for one product, or None when it does not exist."""
        cache_key = build_cache_key("product", {"id": product_id})
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            product = await self.store.get_product(product_id)
        except Exception as e:
            logger.error("Error fetching product %s: %s", product_id, e)
            raise CatalogFetchError("Failed to fetch product") from e

        if product is None:
            return None
        payload = product_payload(product)
        self.cache.set(cache_key, payload, self.config.detail_cache_ttl)
        return payload

    async def products_by_ids(self, product_ids: list[int]) -> list[dict[str, Any]]:
        """Full payloads for the given ids that exist, newest first."""
        try:
            products = await self.store.get_products(product_ids)
        except Exception as e:
            logger.error("Error fetching products by ids: %s", e)
            raise CatalogFetchError("Failed to fetch products") from e
        return [product_payload(p) for p in products]
