"""Tiered free-text search over a filtered product pool.

Tiers, in precedence order:

A. tokenized full-text query in storage (substring query if that fails)
B. variant scan: SKU, model and structured variant fields
C. plain substring scan of name, description, category and brand

Each tier is a pure function of the pool and the ids matched so far. The
union keeps A's products first, then B's, then C's. No tier failure is
allowed to fail the request; the worst case is an empty candidate list.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..config import catalog_config
from ..utils.logger import get_logger
from .filters import Predicate
from .records import ProductRecord

logger = get_logger("catalog.search")

_MARKUP_RE = re.compile(r"[<>]")


def sanitize_term(term: Optional[str], max_length: int = 1000) -> str:
    """Trim, strip angle brackets and cap the length."""
    if not term:
        return ""
    return _MARKUP_RE.sub("", term.strip())[:max_length].strip()


def select_ids(pool: list[ProductRecord], ids: Iterable[int]) -> list[ProductRecord]:
    """Pool members whose id is in ``ids``, in pool order."""
    wanted = set(ids)
    return [p for p in pool if p.id in wanted]


def variant_matches(product: ProductRecord, term: str) -> bool:
    """True when the term, or any word of it, occurs in a variant's text."""
    needle = term.lower()
    words = needle.split()
    for variant in product.variants:
        text = " ".join(variant.searchable_texts()).lower()
        if needle in text or any(word in text for word in words):
            return True
    return False


def match_variants(
    pool: list[ProductRecord], term: str, matched: frozenset = frozenset()
) -> list[ProductRecord]:
    """Tier B: products not yet matched whose variants mention the term."""
    return [p for p in pool if p.id not in matched and variant_matches(p, term)]


def match_substring(pool: list[ProductRecord], term: str) -> list[ProductRecord]:
    """Tier C: plain containment of the whole term in the core fields."""
    needle = term.lower()
    return [p for p in pool if needle in p.core_text]


def union_tiers(*tiers: list[ProductRecord]) -> list[ProductRecord]:
    """Concatenate tiers and drop repeats, keeping first-seen order."""
    seen = set()
    combined = []
    for tier in tiers:
        for product in tier:
            if product.id in seen:
                continue
            seen.add(product.id)
            combined.append(product)
    return combined


@dataclass
class SearchResolution:
    """Candidate pool for one term, with per-tier match counts."""
    term: str
    candidates: list[ProductRecord] = field(default_factory=list)
    tier_counts: dict[str, int] = field(default_factory=dict)
    degraded: bool = False


class SearchResolver:
    """Resolve a search term against a filtered pool using the storage tiers."""

    def __init__(self, store, pool_limit: int = None):
        self.store = store
        self.pool_limit = pool_limit or catalog_config.search_pool_limit

    async def full_text_tier(
        self, term: str, filters: tuple[Predicate, ...] = ()
    ) -> tuple[list[int], bool]:
        """
        Tier A ids and whether the tier had to degrade.

        A failing full-text query falls back to a substring query over the
        same fields; if that fails as well the tier contributes nothing.
        """
        try:
            return await self.store.full_text_ids(term, filters, limit=self.pool_limit), False
        except Exception as e:
            logger.warning("Full-text search failed for %r: %s", term, e)

        try:
            return await self.store.substring_ids(term, filters, limit=self.pool_limit), True
        except Exception as e:
            logger.warning("Fallback substring search failed for %r: %s", term, e)
            return [], True

    async def resolve(
        self,
        pool: list[ProductRecord],
        term: str,
        filters: tuple[Predicate, ...] = (),
    ) -> SearchResolution:
        """Run every tier and return the de-duplicated candidate pool."""
        try:
            return await self._resolve(pool, term, filters)
        except Exception as e:
            logger.error("Search execution error for %r: %s", term, e)
            return await self._last_resort(pool, term, filters)

    async def _resolve(
        self, pool: list[ProductRecord], term: str, filters: tuple[Predicate, ...]
    ) -> SearchResolution:
        full_text_ids, degraded = await self.full_text_tier(term, filters)
        tier_a = select_ids(pool, full_text_ids)
        matched = frozenset(p.id for p in tier_a)

        tier_b = match_variants(pool, term, matched)
        tier_c = match_substring(pool, term)

        candidates = union_tiers(tier_a, tier_b, tier_c)
        logger.info(
            "Search %r matched %d/%d products (full-text=%d, variants=%d, substring=%d)",
            term, len(candidates), len(pool), len(tier_a), len(tier_b), len(tier_c),
        )
        return SearchResolution(
            term=term,
            candidates=candidates,
            tier_counts={"full_text": len(tier_a), "variants": len(tier_b), "substring": len(tier_c)},
            degraded=degraded,
        )

    async def _last_resort(
        self, pool: list[ProductRecord], term: str, filters: tuple[Predicate, ...]
    ) -> SearchResolution:
        try:
            ids = await self.store.substring_ids(term, filters, limit=self.pool_limit)
        except Exception as e:
            logger.error("Fallback search error for %r: %s", term, e)
            return SearchResolution(term=term, degraded=True)

        candidates = select_ids(pool, ids)
        return SearchResolution(
            term=term,
            candidates=candidates,
            tier_counts={"substring": len(candidates)},
            degraded=True,
        )
