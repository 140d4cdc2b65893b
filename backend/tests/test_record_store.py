"""
Record store contract tests, run against both backends.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from stockroom.stores import build_record_store
from stockroom.validation import DuplicateKeyError


T = datetime(2026, 3, 7, 12, 0, 0)


def _product_fields(name, price="10.00", **extra):
    fields = {
        "name": name,
        "purchase_price": Decimal(price),
        "profit_margin": Decimal("20.00"),
        "sale_price": (Decimal(price) * Decimal("1.2")).quantize(Decimal("0.01")),
        "stock": 0,
        "min_stock": 0,
    }
    fields.update(extra)
    return fields


def _news_fields(created_at, expires_at, is_permanent=False):
    return {
        "title": "AVISO",
        "content": "Texto",
        "is_permanent": is_permanent,
        "created_at": created_at,
        "expires_at": expires_at,
    }


def test_backend_name_matches_selection(store, backend):
    assert store.backend_name == backend


def test_unknown_backend_rejected():
    with pytest.raises(ValueError):
        build_record_store("redis")


def test_insert_and_get_product(store):
    created = store.insert_product(_product_fields("ARROZ", barcode="779"))
    loaded = store.get_product(created.id)

    assert loaded == created
    assert loaded.name == "ARROZ"
    assert loaded.barcode == "779"
    assert loaded.sale_price == Decimal("12.00")
    assert store.get_product_by_name("ARROZ").id == created.id


def test_insert_fills_column_defaults(store):
    product = store.insert_product({
        "name": "ARROZ",
        "purchase_price": Decimal("10.00"),
        "sale_price": Decimal("12.00"),
    })
    assert (product.stock, product.min_stock) == (0, 0)
    assert product.profit_margin == Decimal("20.00")
    assert product.barcode is None
    assert product.buyer_name is None


def test_missing_product_returns_none(store):
    assert store.get_product(9999) is None
    assert store.get_product_by_name("NOPE") is None
    assert store.update_product(9999, {"stock": 1}) is None


def test_ids_are_not_reused_after_delete(store):
    first = store.insert_product(_product_fields("ARROZ"))
    assert store.delete_product(first.id) is True
    second = store.insert_product(_product_fields("AZUCAR"))
    assert second.id > first.id


def test_delete_missing_returns_false(store):
    product = store.insert_product(_product_fields("ARROZ"))
    assert store.delete_product(product.id) is True
    assert store.delete_product(product.id) is False
    assert store.delete_product(12345) is False


def test_duplicate_name_on_insert(store):
    store.insert_product(_product_fields("ARROZ"))
    with pytest.raises(DuplicateKeyError) as exc:
        store.insert_product(_product_fields("ARROZ", price="5.00"))
    assert exc.value.field == "name"
    assert store.counts()["products"] == 1


def test_duplicate_name_on_update(store):
    store.insert_product(_product_fields("ARROZ"))
    other = store.insert_product(_product_fields("AZUCAR"))
    with pytest.raises(DuplicateKeyError):
        store.update_product(other.id, {"name": "ARROZ"})
    assert store.get_product(other.id).name == "AZUCAR"


def test_update_to_own_name_is_allowed(store):
    product = store.insert_product(_product_fields("ARROZ"))
    updated = store.update_product(product.id, {"name": "ARROZ", "stock": 4})
    assert updated.name == "ARROZ"
    assert updated.stock == 4


def test_update_merges_fields(store):
    product = store.insert_product(_product_fields("ARROZ", barcode="779", buyer_name="JUAN"))
    updated = store.update_product(product.id, {"stock": 7, "updated_at": T})

    assert updated.stock == 7
    assert updated.barcode == "779"
    assert updated.buyer_name == "JUAN"
    assert updated.purchase_price == Decimal("10.00")
    assert updated.updated_at == T
    assert updated.created_at == product.created_at


def test_list_products_sorted_by_name(store):
    for name in ("CAFE", "ARROZ", "BANANA"):
        store.insert_product(_product_fields(name))
    assert [p.name for p in store.list_products()] == ["ARROZ", "BANANA", "CAFE"]


def test_search_is_case_insensitive_substring(store):
    for name in ("ARROZ", "AZUCAR", "HARINA", "LECHE"):
        store.insert_product(_product_fields(name))

    assert [p.name for p in store.search_products("ar")] == ["ARROZ", "AZUCAR", "HARINA"]
    assert [p.name for p in store.search_products("che")] == ["LECHE"]
    assert store.search_products("zzz") == []


def test_search_sorts_before_truncating(store):
    # Inserted in reverse so insertion order differs from name order
    names = [f"ITEM {i:02d}" for i in range(15)]
    for name in reversed(names):
        store.insert_product(_product_fields(name))

    results = store.search_products("ITEM", limit=10)
    assert [p.name for p in results] == names[:10]


def test_search_treats_wildcards_literally(store):
    store.insert_product(_product_fields("ARROZ"))
    store.insert_product(_product_fields("DESCUENTO 10%"))
    assert [p.name for p in store.search_products("%")] == ["DESCUENTO 10%"]
    assert store.search_products("_") == []


def test_users_unique_by_username(store):
    user = store.insert_user({"username": "ADMIN", "password_hash": "x", "created_at": T})
    assert store.get_user(user.id) == user
    assert store.get_user_by_username("ADMIN").id == user.id
    with pytest.raises(DuplicateKeyError):
        store.insert_user({"username": "ADMIN", "password_hash": "y", "created_at": T})


def test_news_listing_and_sweep(store):
    old = store.insert_news(_news_fields(T, T + timedelta(days=3)))
    fresh = store.insert_news(_news_fields(T + timedelta(days=2), T + timedelta(days=5)))
    pinned = store.insert_news(_news_fields(T - timedelta(days=30), None, is_permanent=True))

    now = T + timedelta(days=4)
    assert [n.id for n in store.list_active_news(now)] == [pinned.id, fresh.id]

    assert store.delete_expired_news(now) == 1
    assert store.delete_expired_news(now) == 0
    assert store.get_news(old.id) is None
    assert store.counts()["business_news"] == 2


def test_news_expiring_exactly_now_is_not_active(store):
    item = store.insert_news(_news_fields(T, T + timedelta(days=3)))
    boundary = T + timedelta(days=3)
    assert store.list_active_news(boundary - timedelta(seconds=1))[0].id == item.id
    assert store.list_active_news(boundary) == []
    assert store.delete_expired_news(boundary) == 1


def test_delete_news(store):
    item = store.insert_news(_news_fields(T, None, is_permanent=True))
    assert store.delete_news(item.id) is True
    assert store.delete_news(item.id) is False


def test_counts(store):
    store.insert_user({"username": "ADMIN", "password_hash": "x"})
    store.insert_product(_product_fields("ARROZ"))
    assert store.counts() == {"users": 1, "products": 1, "business_news": 0}
