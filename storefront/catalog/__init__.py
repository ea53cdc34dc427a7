"""Product catalog query and relevance-ranking engine."""

from .cache import TTLCache
from .engine import CatalogEngine, CatalogFetchError, CatalogResult
from .query import QuerySpec

__all__ = ["CatalogEngine", "CatalogFetchError", "CatalogResult", "QuerySpec", "TTLCache"]
