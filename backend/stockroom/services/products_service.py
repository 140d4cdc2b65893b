# Overview: Service-layer operations for products; duplicate checks, pricing and store writes.

"""
Products Service

Routes validate payloads first (validation.validate_product_payload) and hand
the cleaned patch here. Every write follows the same order:

1. duplicate-name check (fast, user-friendly rejection)
2. pricing_service.price_product (sale price derived exactly once)
3. store write (the store's own uniqueness guard is authoritative)
"""
from __future__ import annotations

from flask import current_app

from ..stores import NotFoundError, get_record_store
from ..validation import DuplicateKeyError
from .pricing_service import price_product
from stockroom.time_utils import utcnow

DUPLICATE_NAME_MESSAGE = "Product with this name already exists"

# Type-specific defaults for optional fields on create
PRODUCT_CREATE_DEFAULTS = {
    "barcode": None,
    "buyer_name": None,
    "stock": 0,
    "min_stock": 0,
}


def list_products() -> dict:
    """All products ordered by name."""
    products = get_record_store().list_products()
    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }


def search_products(query: str | None, limit: int | None = None) -> dict:
    """
    Case-insensitive substring search on product name.

    Blank queries match nothing. Results are sorted by name and then cut to
    `limit` (SEARCH_LIMIT by default).
    """
    query = (query or "").strip()
    if not query:
        return {"items": [], "count": 0}
    if limit is None:
        limit = int(current_app.config.get("SEARCH_LIMIT", 10))
    products = get_record_store().search_products(query, limit=limit)
    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }


def get_product(product_id: int) -> dict:
    product = get_record_store().get_product(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product.to_dict()


def create_product(*, patch: dict) -> dict:
    """
    Create product using a validated patch dict.

    Raises:
        DuplicateKeyError: If a product with the same name exists
    """
    store = get_record_store()

    if store.get_product_by_name(patch["name"]) is not None:
        raise DuplicateKeyError("name", DUPLICATE_NAME_MESSAGE)

    fields = dict(PRODUCT_CREATE_DEFAULTS)
    fields.update(patch)
    fields.update(price_product(patch))

    now = utcnow()
    fields["created_at"] = now
    fields["updated_at"] = now

    product = store.insert_product(fields)
    current_app.logger.info("Created product id=%s name=%s", product.id, product.name)
    return product.to_dict()


def update_product(*, product_id: int, patch: dict) -> dict:
    """
    Update a product.

    Fields missing from the patch keep their stored values, including the
    product's own profit margin. The sale price is re-derived on every update.

    Raises:
        NotFoundError: If the product does not exist
        DuplicateKeyError: If the new name belongs to a different product
    """
    store = get_record_store()

    existing = store.get_product(product_id)
    if existing is None:
        raise NotFoundError("Product not found")

    new_name = patch.get("name")
    if new_name is not None and new_name != existing.name:
        clash = store.get_product_by_name(new_name)
        if clash is not None and clash.id != product_id:
            raise DuplicateKeyError("name", DUPLICATE_NAME_MESSAGE)

    fields = dict(patch)
    fields.update(price_product(patch, existing))
    fields["updated_at"] = utcnow()

    updated = store.update_product(product_id, fields)
    if updated is None:
        # Deleted between the existence check and the write
        raise NotFoundError("Product not found")

    current_app.logger.info(
        "Updated product id=%s fields=%s", product_id, ", ".join(sorted(patch.keys()))
    )
    return updated.to_dict()


def delete_product(product_id: int) -> bool:
    """
    Hard-delete a product.

    Returns True if deleted, False if there was nothing to delete.
    """
    deleted = get_record_store().delete_product(product_id)
    if deleted:
        current_app.logger.info("Deleted product id=%s", product_id)
    return deleted
