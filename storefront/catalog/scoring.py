"""Relevance scoring for search candidates."""

import math
import re
from dataclasses import dataclass

from .records import ProductRecord

NAME_PREFIX = 120
NAME_WORD = 80
NAME_CONTAINS = 60
CODE_PREFIX = 40
BRAND_CATEGORY_PREFIX = 30
BRAND_CATEGORY_CONTAINS = 20
DESCRIPTION_CONTAINS = 10
VARIANT_CODE_PREFIX = 25
VARIANT_TEXT_CONTAINS = 10
MAX_RATING_BONUS = 10
MAX_POPULARITY_BONUS = 10


@dataclass(frozen=True)
class SearchCandidate:
    product: ProductRecord
    score: float


def word_boundary(text: str, word: str) -> bool:
    """Whole-word match; plain containment if the pattern cannot be built."""
    try:
        pattern = re.compile(rf"(^|\b){re.escape(word)}(\b|$)", re.IGNORECASE)
    except re.error:
        return word in text
    return pattern.search(text) is not None


def score_product(product: ProductRecord, term: str) -> float:
    """Additive relevance score of one product for a search term."""
    query = term.lower()
    words = query.split()
    head = words[0] if words else query

    name = product.name.lower()
    description = product.description.lower()
    brand = product.brand.lower()
    category = product.category.lower()
    sku = product.sku.lower()
    model = product.model.lower()

    score = 0.0
    if name.startswith(head):
        score += NAME_PREFIX
    if word_boundary(name, head):
        score += NAME_WORD
    if query in name:
        score += NAME_CONTAINS
    if sku.startswith(head) or model.startswith(head):
        score += CODE_PREFIX
    if brand.startswith(head) or category.startswith(head):
        score += BRAND_CATEGORY_PREFIX
    if query in brand or query in category:
        score += BRAND_CATEGORY_CONTAINS
    if query in description:
        score += DESCRIPTION_CONTAINS

    for variant in product.variants:
        if variant.sku.lower().startswith(head) or variant.model.lower().startswith(head):
            score += VARIANT_CODE_PREFIX
        if query in variant.serialized_text:
            score += VARIANT_TEXT_CONTAINS
            break

    rating = max(product.rating, 0.0)
    reviews = max(product.reviews, 0)
    score += min(MAX_RATING_BONUS, rating * 1.5)
    score += min(MAX_POPULARITY_BONUS, math.log10(reviews + 1) * 3)
    return score


def rank_candidates(candidates: list[ProductRecord], term: str) -> list[SearchCandidate]:
    """Score and sort descending; equal scores keep their incoming order."""
    scored = [SearchCandidate(product=p, score=score_product(p, term)) for p in candidates]
    return sorted(scored, key=lambda c: c.score, reverse=True)
