import pytest

from schemas.catalog import Product, ProductSet, SetItem
from services.pricing import (
    clamp_quantity,
    configuration_for,
    configuration_total,
    default_configuration,
    discount_exceeds_price,
    effective_price,
    quantity_bounds,
    set_default_total,
    set_item_problems,
    set_total,
)

from conftest import PRODUCTS, SETS


@pytest.fixture
def products():
    return [Product.model_validate(p) for p in PRODUCTS]


@pytest.fixture
def bedroom_set():
    return ProductSet.model_validate(SETS[0])


@pytest.mark.parametrize(
    "price, discount, expected",
    [
        (1000, None, 1000),
        (1000, 0, 1000),
        (1000, 250, 750),
        (1000, 1000, 0),
        (1000, 1500, 0),
    ],
)
def test_effective_price_never_negative(price, discount, expected):
    assert effective_price({"price": price, "discount": discount}) == expected


def test_negative_discount_is_ignored():
    assert effective_price({"price": 400, "discount": -50}) == 400


def test_effective_price_on_models(products):
    assert effective_price(products[0]) == 900
    assert effective_price(products[1]) == 2000


def test_default_set_total(bedroom_set, products):
    # P1 900 x 1 + P2 2000 x 1
    assert set_default_total(bedroom_set, products) == 2900


def test_set_total_with_overrides_is_clamped(bedroom_set, products):
    # Required P1 can not drop below 1, P2 is capped at 2
    assert set_total(bedroom_set, products, {"P1": 0, "P2": 5}) == 900 + 2 * 2000


def test_set_total_skips_unknown_products(products):
    product_set = ProductSet(
        id="S9",
        name="Broken",
        slug="broken",
        items=[SetItem(product_id="P3", default_quantity=2), SetItem(product_id="GONE", default_quantity=3)],
    )
    assert set_total(product_set, products) == 1000


def test_required_item_bounds():
    item = SetItem(product_id="P1", default_quantity=1, min_quantity=0, max_quantity=3, required=True)
    assert quantity_bounds(item) == (1, 3)
    assert clamp_quantity(item, 0) == 1
    assert clamp_quantity(item, 7) == 3


def test_configuration_drops_zero_quantities(bedroom_set):
    assert configuration_for(bedroom_set, {"P2": 0}) == [{"productId": "P1", "quantity": 1}]
    assert default_configuration(bedroom_set) == [
        {"productId": "P1", "quantity": 1},
        {"productId": "P2", "quantity": 1},
    ]


def test_configuration_total(products):
    configuration = [{"productId": "P1", "quantity": 2}, {"productId": "P3", "quantity": 1}]
    assert configuration_total(configuration, products) == 2 * 900 + 500


def test_set_item_problems():
    assert set_item_problems(SetItem(product_id="P1")) == []

    bad = SetItem(product_id="P1", default_quantity=5, min_quantity=3, max_quantity=2)
    problems = set_item_problems(bad)
    assert "minQuantity is greater than maxQuantity" in problems
    assert "defaultQuantity is above maxQuantity" in problems

    required = SetItem(product_id="P1", default_quantity=0, min_quantity=0, max_quantity=0, required=True)
    assert "required item must allow at least one unit" in set_item_problems(required)


def test_discount_exceeds_price():
    assert discount_exceeds_price({"price": 100, "discount": 150})
    assert not discount_exceeds_price({"price": 100, "discount": 100})
    assert not discount_exceeds_price({"price": 100})
