from decimal import Decimal
from datetime import datetime

import pytest

from stockroom.records import ProductRecord
from stockroom.services.pricing_service import (
    DEFAULT_PROFIT_MARGIN,
    default_profit_margin,
    derive_sale_price,
    price_product,
    resolve_margin,
)


def _product(**overrides) -> ProductRecord:
    values = dict(
        id=1,
        name="ARROZ",
        purchase_price=Decimal("10.00"),
        sale_price=Decimal("13.50"),
        profit_margin=Decimal("35.00"),
        created_at=datetime(2026, 1, 1),
        updated_at=datetime(2026, 1, 1),
    )
    values.update(overrides)
    return ProductRecord(**values)


@pytest.mark.parametrize(
    "purchase,margin,expected",
    [
        ("100.00", "20", "120.00"),
        ("49.99", "20", "59.99"),
        ("10.00", "0", "10.00"),
        ("0.01", "20", "0.01"),
        ("33.33", "12.5", "37.50"),
        ("1.05", "50", "1.58"),
    ],
)
def test_derive_sale_price(purchase, margin, expected):
    assert derive_sale_price(Decimal(purchase), Decimal(margin)) == Decimal(expected)


def test_derive_sale_price_always_has_two_places():
    price = derive_sale_price(Decimal("7"), Decimal("20"))
    assert price == Decimal("8.40")
    assert price.as_tuple().exponent == -2


def test_resolve_margin_prefers_patch_value():
    assert resolve_margin({"profit_margin": Decimal("15.00")}, _product()) == Decimal("15.00")


def test_resolve_margin_inherits_stored_margin_on_update():
    assert resolve_margin({}, _product()) == Decimal("35.00")


def test_resolve_margin_uses_default_on_create():
    assert resolve_margin({}) == DEFAULT_PROFIT_MARGIN


def test_default_margin_reads_app_config(backend):
    from stockroom import create_app

    app = create_app({
        "TESTING": True,
        "STORE_BACKEND": backend,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "DEFAULT_PROFIT_MARGIN": "30",
    })
    with app.app_context():
        assert default_profit_margin() == Decimal("30.00")
        assert price_product({"purchase_price": Decimal("10.00")})["sale_price"] == Decimal("13.00")


def test_price_product_on_update_keeps_price_and_margin():
    priced = price_product({"name": "ARROZ BLANCO"}, _product())
    assert priced == {
        "purchase_price": Decimal("10.00"),
        "profit_margin": Decimal("35.00"),
        "sale_price": Decimal("13.50"),
    }


def test_price_product_on_update_recomputes_from_new_price():
    priced = price_product({"purchase_price": Decimal("20.00")}, _product())
    assert priced["sale_price"] == Decimal("27.00")


def test_price_product_requires_purchase_price_on_create():
    with pytest.raises(ValueError):
        price_product({"name": "ARROZ"})
