"""Tests for the response cache."""

from storefront.catalog.cache import TTLCache, build_cache_key


class FakeClock:
    """Manually advanced clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_build_cache_key_sorted():
    """Keys are order independent."""
    a = build_cache_key("products", {"brand": "acme", "category": "tools"})
    b = build_cache_key("products", {"category": "tools", "brand": "acme"})

    assert a == b == "products:brand=acme&category=tools"


def test_build_cache_key_skips_none_and_empty():
    key = build_cache_key("products", {"brand": None, "ids": [], "limit": 10})
    assert key == "products:limit=10"


def test_build_cache_key_normalizes_values():
    """Lists are sorted, booleans lower-cased, nested dicts flattened."""
    key = build_cache_key("products", {"ids": [3, 1, 2], "minimal": True, "range": {"max": 5, "min": 1}})
    assert key == "products:ids=1,2,3&minimal=true&range=:max=5&min=1"


def test_build_cache_key_no_params():
    assert build_cache_key("products") == "products"
    assert build_cache_key("products", {"brand": None}) == "products"


def test_get_set():
    cache = TTLCache()
    cache.set("k", {"value": 1}, ttl=60)

    assert cache.get("k") == {"value": 1}
    assert cache.get("missing") is None


def test_entry_expires():
    """Entries disappear once their TTL has elapsed."""
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("k", "v", ttl=60)

    clock.advance(59)
    assert cache.get("k") == "v"

    clock.advance(1)
    assert cache.get("k") is None
    assert len(cache) == 0


def test_per_entry_ttl():
    """Short-lived entries expire while long-lived ones stay."""
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("empty", [], ttl=60)
    cache.set("full", [1], ttl=900)

    clock.advance(120)

    assert cache.get("empty") is None
    assert cache.get("full") == [1]


def test_oldest_entry_evicted_at_capacity():
    cache = TTLCache(max_size=2)
    cache.set("a", 1, ttl=60)
    cache.set("b", 2, ttl=60)
    cache.set("c", 3, ttl=60)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_overwrite_does_not_evict():
    """Rewriting an existing key (e.g. two racing requests) keeps other entries."""
    cache = TTLCache(max_size=2)
    cache.set("a", 1, ttl=60)
    cache.set("b", 2, ttl=60)
    cache.set("b", 3, ttl=60)

    assert cache.get("a") == 1
    assert cache.get("b") == 3


def test_stats_and_clear():
    cache = TTLCache(max_size=4)
    cache.set("a", 1, ttl=60)
    cache.get("a")
    cache.get("b")

    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["max_size"] == 4
    assert stats["utilization"] == 25.0
    assert stats["hits"] == 1
    assert stats["misses"] == 1

    cache.clear()
    assert len(cache) == 0


def test_zero_capacity_stores_nothing():
    """A cache sized to zero disables caching instead of failing."""
    cache = TTLCache(max_size=0)
    cache.set("a", 1, ttl=60)

    assert cache.get("a") is None
    assert len(cache) == 0
    assert cache.stats()["utilization"] == 0.0
