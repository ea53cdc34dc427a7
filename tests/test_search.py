"""Tests for the tiered search resolver."""

import asyncio

import pytest

from storefront.catalog.search import (
    SearchResolver, match_substring, match_variants, sanitize_term, select_ids, union_tiers
)

from helpers import make_product, make_variant


class FakeSearchStore:
    """Store double whose text queries return fixed ids or raise."""

    def __init__(self, full_text=None, substring=None):
        self.full_text = full_text if full_text is not None else []
        self.substring = substring if substring is not None else []
        self.calls = []

    async def full_text_ids(self, term, filters=(), limit=1000):
        self.calls.append("full_text")
        if isinstance(self.full_text, Exception):
            raise self.full_text
        return list(self.full_text)

    async def substring_ids(self, term, filters=(), limit=1000):
        self.calls.append("substring")
        if isinstance(self.substring, Exception):
            raise self.substring
        return list(self.substring)


@pytest.fixture
def pool():
    return [
        make_product(1, "Arduino Uno R3", brand="Arduino"),
        make_product(2, "Sensor Kit", description="works great with arduino uno boards"),
        make_product(3, "Weather Station", variants=[
            make_variant(10, sku="DHT22-01", model="Outdoor"),
        ]),
        make_product(4, "Relay Module", variants=[
            make_variant(11, primary_values=[{"attribute": "Channels", "value": "Quad", "quantity": 3}]),
            make_variant(12, multi_values={"Voltage": ["5V", "12V"]}),
        ]),
    ]


def test_sanitize_term():
    """Terms are trimmed, stripped of angle brackets and capped."""
    assert sanitize_term("  <b>uno</b>  ") == "buno/b"
    assert sanitize_term("<>") == ""
    assert sanitize_term(None) == ""
    assert sanitize_term("x" * 2000, max_length=1000) == "x" * 1000


def test_select_ids_keeps_pool_order(pool):
    """Ids outside the pool are ignored."""
    assert [p.id for p in select_ids(pool, [3, 1, 99])] == [1, 3]


def test_match_variants_sku(pool):
    assert [p.id for p in match_variants(pool, "dht22")] == [3]


def test_match_variants_any_word(pool):
    """Any single word of the term is enough for a variant match."""
    assert [p.id for p in match_variants(pool, "outdoor thermometer")] == [3]


def test_match_variants_individual_values(pool):
    assert [p.id for p in match_variants(pool, "quad")] == [4]
    assert [p.id for p in match_variants(pool, "12v")] == [4]


def test_match_variants_excludes_matched(pool):
    assert match_variants(pool, "dht22", frozenset({3})) == []


def test_match_substring(pool):
    """Whole term containment over name, description, category and brand."""
    assert [p.id for p in match_substring(pool, "Arduino Uno")] == [1, 2]
    assert [p.id for p in match_substring(pool, "rel")] == [4]


def test_union_tiers_dedupes_in_order(pool):
    p1, p2, p3, _ = pool
    assert [p.id for p in union_tiers([p2], [p3, p2], [p1, p3])] == [2, 3, 1]


@pytest.mark.asyncio
async def test_resolve_union_order(pool):
    """Full-text matches come first, then variant, then substring matches."""
    store = FakeSearchStore(full_text=[2])
    resolver = SearchResolver(store)

    resolution = await resolver.resolve(pool, "arduino uno")

    assert [p.id for p in resolution.candidates] == [2, 1]
    assert resolution.tier_counts == {"full_text": 1, "variants": 0, "substring": 2}
    assert resolution.degraded is False


@pytest.mark.asyncio
async def test_full_text_ids_limited_to_pool(pool):
    """Full-text ids outside the filtered pool are dropped."""
    store = FakeSearchStore(full_text=[99, 1])
    resolution = await SearchResolver(store).resolve(pool, "arduino")

    assert [p.id for p in resolution.candidates] == [1, 2]


@pytest.mark.asyncio
async def test_full_text_error_falls_back_to_substring(pool):
    store = FakeSearchStore(full_text=RuntimeError("index unavailable"), substring=[4])
    resolution = await SearchResolver(store).resolve(pool, "module")

    assert store.calls == ["full_text", "substring"]
    assert [p.id for p in resolution.candidates] == [4]
    assert resolution.degraded is True


@pytest.mark.asyncio
async def test_full_text_timeout_treated_as_error(pool):
    store = FakeSearchStore(full_text=asyncio.TimeoutError(), substring=[1])
    resolution = await SearchResolver(store).resolve(pool, "uno r3")

    assert [p.id for p in resolution.candidates] == [1]


@pytest.mark.asyncio
async def test_variant_sku_found_when_full_text_fails(pool):
    """A term that only appears in a variant SKU still resolves its product."""
    store = FakeSearchStore(full_text=RuntimeError("boom"), substring=RuntimeError("boom"))
    resolution = await SearchResolver(store).resolve(pool, "dht22")

    assert [p.id for p in resolution.candidates] == [3]
    assert resolution.tier_counts["full_text"] == 0


@pytest.mark.asyncio
async def test_unexpected_error_uses_last_resort(pool, monkeypatch):
    """An exception outside the tiers falls back to one substring query."""
    import storefront.catalog.search as search

    def explode(*args, **kwargs):
        raise ValueError("bad variant data")

    monkeypatch.setattr(search, "match_variants", explode)
    store = FakeSearchStore(full_text=[1], substring=[2])

    resolution = await SearchResolver(store).resolve(pool, "arduino")

    assert [p.id for p in resolution.candidates] == [2]
    assert resolution.degraded is True


@pytest.mark.asyncio
async def test_last_resort_failure_returns_empty(pool, monkeypatch):
    """Resolution never raises, even when every fallback fails."""
    import storefront.catalog.search as search

    def explode(*args, **kwargs):
        raise ValueError("bad variant data")

    monkeypatch.setattr(search, "match_variants", explode)
    store = FakeSearchStore(full_text=[1], substring=RuntimeError("down"))

    resolution = await SearchResolver(store).resolve(pool, "arduino")

    assert resolution.candidates == []
