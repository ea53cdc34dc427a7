"""Configuration management."""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class CatalogConfig:
    """Catalog engine configuration."""

    database_path: str = os.getenv("DATABASE_PATH", "data/storefront.db")

    # Response cache
    cache_ttl: int = int(os.getenv("CATALOG_CACHE_TTL_SECONDS", "900"))
    empty_cache_ttl: int = int(os.getenv("CATALOG_EMPTY_CACHE_TTL_SECONDS", "60"))
    detail_cache_ttl: int = int(os.getenv("PRODUCT_DETAIL_CACHE_TTL_SECONDS", "1800"))
    cache_max_entries: int = int(os.getenv("CATALOG_CACHE_MAX_ENTRIES", "1000"))

    # Query shaping
    search_pool_limit: int = int(os.getenv("CATALOG_SEARCH_POOL_LIMIT", "1000"))
    default_limit: int = int(os.getenv("CATALOG_DEFAULT_LIMIT", "1000"))
    max_term_length: int = int(os.getenv("CATALOG_MAX_TERM_LENGTH", "1000"))

    # Storage calls
    storage_timeout: float = float(os.getenv("CATALOG_STORAGE_TIMEOUT_SECONDS", "10"))

    @property
    def max_limit(self) -> int:
        """Largest page a caller may request."""
        return self.search_pool_limit


catalog_config = CatalogConfig()
