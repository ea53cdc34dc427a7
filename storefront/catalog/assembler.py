"""Pagination metadata and response normalization."""

import math
from typing import Any, Optional

from .models import (
    ProductDetail, ProductSummary, VariantResponse, Pagination, SearchMetadata
)
from .records import ProductRecord, VariantRecord


def variant_payload(variant: VariantRecord) -> VariantResponse:
    return VariantResponse(
        id=variant.id,
        price=variant.price,
        image=variant.image,
        sku=variant.sku or None,
        model=variant.model or None,
        variant_type=variant.variant_type,
        attributes=variant.attributes,
        primary_attribute=variant.primary_attribute,
        dependencies=variant.dependencies,
        primary_values=variant.primary_values,
        multi_values=variant.multi_values,
        stock_quantity=variant.stock_quantity,
        in_stock=variant.in_stock,
    )


def product_payload(product: ProductRecord, minimal: bool = False) -> dict[str, Any]:
    """
    Map a record into the response shape.

    Minimal payloads drop description, specifications, gallery and media
    fields but always keep variants for client-side selection.
    """
    base = dict(
        id=product.id,
        name=product.name,
        original_price=product.original_price,
        price=product.price,
        rating=product.rating,
        reviews=product.reviews,
        image=product.image,
        category=product.category or None,
        brand=product.brand or None,
        in_stock=product.in_stock,
        stock_quantity=product.stock_quantity,
        free_delivery=product.free_delivery,
        same_day_delivery=product.same_day_delivery,
        variants=[variant_payload(v) for v in product.variants],
        variant_config=product.variant_config,
    )
    if minimal:
        return ProductSummary(**base).model_dump(by_alias=True, mode="json")

    return ProductDetail(
        **base,
        description=product.description or None,
        specifications=product.specifications,
        gallery=product.gallery,
        sku=product.sku or None,
        model=product.model or None,
        views=product.views,
        video=product.video,
        view360=product.view360,
        variant_images=product.variant_images,
    ).model_dump(by_alias=True, mode="json")


def paginate(
    limit: int,
    offset: int,
    total: int,
    returned: int,
    empty_fetch: bool = False,
    search_metadata: Optional[SearchMetadata] = None,
) -> Pagination:
    """
    Pagination block for one page.

    ``empty_fetch`` marks a page whose base fetch found no rows at all; it
    reports zero pages instead of one when the total is zero.
    """
    total_pages = math.ceil(total / limit) if limit else 0
    if not total_pages and not empty_fetch:
        total_pages = 1

    return Pagination(
        limit=limit,
        offset=offset,
        total=total,
        has_more=offset + returned < total,
        current_page=offset // limit + 1 if limit else 1,
        total_pages=total_pages,
        returned=returned,
        search_metadata=search_metadata,
    )


def assemble_page(
    products: list[ProductRecord],
    limit: int,
    offset: int,
    total: int,
    minimal: bool = False,
    empty_fetch: bool = False,
    search_metadata: Optional[SearchMetadata] = None,
) -> dict[str, Any]:
    """Build the ``{products, pagination}`` payload for already-paged products."""
    items = [product_payload(p, minimal=minimal) for p in products]
    pagination = paginate(
        limit=limit,
        offset=offset,
        total=total,
        returned=len(items),
        empty_fetch=empty_fetch,
        search_metadata=search_metadata,
    )
    return {
        "products": items,
        "pagination": pagination.model_dump(by_alias=True, exclude_none=True),
    }
