"""In-process TTL cache for assembled catalog responses."""

import time
from typing import Any, Callable, Optional, Protocol

from ..utils.logger import get_logger

logger = get_logger("catalog.cache")


def build_cache_key(endpoint: str, params: Optional[dict[str, Any]] = None) -> str:
    """
    Build a deterministic key from request parameters.

    Keys are sorted, None values are skipped, lists are sorted and
    nested dicts are serialized recursively, so
    ``{"brand": "acme", "category": "tools"}`` and
    ``{"category": "tools", "brand": "acme"}`` give the same key:
    ``products:brand=acme&category=tools``.
    """
    if not params:
        return endpoint

    pairs = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            if not value:
                continue
            pairs.append(f"{key}={','.join(sorted(str(v) for v in value))}")
        elif isinstance(value, dict):
            pairs.append(f"{key}={build_cache_key('', value)}")
        elif isinstance(value, bool):
            pairs.append(f"{key}={'true' if value else 'false'}")
        else:
            pairs.append(f"{key}={value}")

    param_string = "&".join(pairs)
    return f"{endpoint}:{param_string}" if param_string else endpoint


class CacheBackend(Protocol):
    """What the catalog engine needs from a cache."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl: float) -> None: ...


class TTLCache:
    """
    Key/value store with per-entry TTL.

    Expired entries are dropped when read. When the cache is full the
    oldest inserted entry is evicted to make room. There is no locking:
    two requests racing on an expired key both recompute and both write,
    and the last write wins.
    """

    def __init__(self, max_size: int = 1000, clock: Callable[[], float] = time.monotonic):
        self.max_size = max_size
        self._clock = clock
        self._store: dict[str, tuple[Any, float, float]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return cached value if present and not expired, else None."""
        entry = self._store.get(key)
        if entry is None:
            self.misses += 1
            return None

        value, created_at, ttl = entry
        if self._clock() - created_at >= ttl:
            self._store.pop(key, None)
            self.misses += 1
            logger.debug("Cache entry expired: %s", key)
            return None

        self.hits += 1
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value for ``ttl`` seconds."""
        if self.max_size <= 0:
            return
        if key not in self._store and len(self._store) >= self.max_size:
            oldest = next(iter(self._store))
            del self._store[oldest]
        else:
            self._store.pop(key, None)
        self._store[key] = (value, self._clock(), ttl)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)

    def stats(self) -> dict[str, Any]:
        """Size, capacity and hit/miss counters."""
        size = len(self._store)
        return {
            "size": size,
            "max_size": self.max_size,
            "utilization": (size / self.max_size) * 100 if self.max_size else 0.0,
            "hits": self.hits,
            "misses": self.misses,
        }
