"""Tests for relevance scoring."""

import math

import pytest

from storefront.catalog.scoring import rank_candidates, score_product, word_boundary

from helpers import make_product, make_variant


def test_word_boundary():
    assert word_boundary("arduino uno r3", "uno")
    assert word_boundary("uno", "uno")
    assert not word_boundary("unofficial board", "uno")
    assert word_boundary("usb-c cable", "usb")


def test_name_prefix_weights():
    """Name starting with the head word earns prefix, whole-word and contains bonuses."""
    product = make_product(1, "Arduino Uno R3")
    assert score_product(product, "arduino uno") == 120 + 80 + 60


def test_whole_word_without_prefix():
    product = make_product(1, "Genuine Arduino Board")
    assert score_product(product, "arduino") == 80 + 60


def test_code_brand_category_description():
    product = make_product(
        1, "Board",
        sku="UNO-R3",
        brand="Uno Labs",
        category="Uno",
        description="an uno clone",
    )
    # sku prefix 40, brand/category prefix 30, contains 20, description 10
    assert score_product(product, "uno") == 40 + 30 + 20 + 10


def test_variant_bonuses():
    """Every variant code prefix counts; variant text counts once."""
    product = make_product(1, "Board", variants=[
        make_variant(1, sku="UNO-1"),
        make_variant(2, sku="UNO-2"),
        make_variant(3, model="uno"),
    ])
    # first variant: prefix 25 + text 10, then the loop stops
    assert score_product(product, "uno") == 25 + 10


def test_variant_prefix_without_text_match():
    product = make_product(1, "Board", variants=[
        make_variant(1, sku="uno-a"),
        make_variant(2, model="uno-b"),
    ])
    assert score_product(product, "uno x") == 25 + 25


def test_rating_and_popularity_capped():
    """A top rating gives 7.5; popularity stops at 10."""
    product = make_product(1, "Thing", rating=5.0, reviews=10 ** 6)
    assert score_product(product, "zzz") == 7.5 + 10


def test_rating_and_popularity_partial():
    product = make_product(1, "Thing", rating=2.0, reviews=9)
    assert score_product(product, "zzz") == pytest.approx(3.0 + math.log10(10) * 3)


def test_name_prefix_outranks_description_only():
    """A literal name prefix beats a description-only match."""
    prefix = make_product(1, "Servo Motor")
    described = make_product(2, "Pan Tilt Bracket", description="fits any servo motor",
                             rating=5.0, reviews=10 ** 6)

    ranked = rank_candidates([described, prefix], "servo motor")

    assert [c.product.id for c in ranked] == [1, 2]


def test_arduino_uno_scenario():
    board = make_product(1, "Arduino Uno R3", brand="Arduino")
    kit = make_product(2, "Sensor Kit", description="works great with arduino uno boards")

    ranked = rank_candidates([kit, board], "arduino uno")

    assert ranked[0].product.id == 1
    assert ranked[0].score > ranked[1].score


def test_ties_keep_incoming_order():
    """Equal scores keep the resolver's order."""
    products = [make_product(i, f"Widget {i}") for i in (5, 3, 9)]
    ranked = rank_candidates(products, "gadget")
    assert [c.product.id for c in ranked] == [5, 3, 9]
