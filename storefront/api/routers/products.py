"""API endpoints for querying the product catalog."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from ...catalog import CatalogEngine, CatalogFetchError, QuerySpec
from ...catalog.cache import TTLCache
from ...catalog.store import ProductStore
from ...config import catalog_config
from ...database import get_engine

router = APIRouter()

# Global engine and cache (initialized on startup)
_engine = None
_cache = None


def get_response_cache() -> TTLCache:
    """Dependency to get the shared response cache."""
    global _cache
    if _cache is None:
        _cache = TTLCache(max_size=catalog_config.cache_max_entries)
    return _cache


def get_catalog_engine(cache: TTLCache = Depends(get_response_cache)) -> CatalogEngine:
    """Dependency to get the catalog engine."""
    global _engine
    if _engine is None:
        _engine = get_engine()
    return CatalogEngine(ProductStore(_engine), cache)


@router.get("")
async def list_products(
    search: Optional[str] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    in_stock: Optional[str] = Query(None, alias="inStock"),
    categories: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    minimal: Optional[str] = None,
    catalog: CatalogEngine = Depends(get_catalog_engine),
):
    """
    Query the catalog.

    - search: free-text term, ranked by relevance
    - category / brand: exact match filters
    - minPrice / maxPrice: inclusive price bounds
    - inStock: only in-stock products when "true"
    - categories: comma-separated category list
    - sortBy / sortOrder: created_at, price, rating, name or reviews; asc or desc
    - limit / offset: page window
    - minimal: lighter payload when "true"

    Malformed values are ignored rather than rejected.
    """
    spec = QuerySpec.from_params(
        search=search,
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        categories=categories,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
        minimal=minimal,
    )

    try:
        result = await catalog.query(spec)
    except CatalogFetchError:
        raise HTTPException(status_code=500, detail="Failed to fetch products")

    pagination = result.payload["pagination"]
    headers = {
        "X-Cache": "HIT" if result.cache_hit else "MISS",
        "X-Payload-Size": "minimal" if spec.minimal else "full",
        "X-Products-Count": str(pagination["returned"]),
        "X-Total-Count": str(pagination["total"]),
        "X-Has-More": str(pagination["hasMore"]).lower(),
    }
    if result.search_applied:
        headers["X-Search-Applied"] = "true"
        headers["X-Search-Matched"] = str(pagination["searchMetadata"]["matchedCount"])

    return JSONResponse(content=result.payload, headers=headers)


@router.get("/by-ids")
async def get_products_by_ids(
    ids: Optional[str] = None,
    catalog: CatalogEngine = Depends(get_catalog_engine),
):
    """
    Get several products at once.

    - ids: comma-separated product IDs; non-numeric entries are skipped
    """
    product_ids = []
    for raw in (ids or "").split(","):
        try:
            product_ids.append(int(raw.strip()))
        except ValueError:
            continue

    if not product_ids:
        return {"products": []}

    try:
        products = await catalog.products_by_ids(product_ids)
    except CatalogFetchError:
        raise HTTPException(status_code=500, detail="Failed to fetch products")

    return {"products": products}


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    catalog: CatalogEngine = Depends(get_catalog_engine),
):
    """
    Get product by ID.

    - product_id: catalog product ID
    """
    try:
        product = await catalog.product_detail(product_id)
    except CatalogFetchError:
        raise HTTPException(status_code=500, detail="Failed to fetch product")

    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    return product
