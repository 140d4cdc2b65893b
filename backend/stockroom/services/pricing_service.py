# Overview: Margin-based sale price derivation shared by product create and update.

"""
Pricing Engine

sale_price = round(purchase_price * (1 + profit_margin / 100), 2)

Rounding is ROUND_HALF_UP to cents. The sale price is never a direct input:
products_service calls price_product() once per create/update, after
validation and the duplicate-name check and right before the store write.

Policy: every product carries its own profit_margin. A product created
without one gets the configured DEFAULT_PROFIT_MARGIN; an update without one
keeps the margin already stored on that product.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping

from flask import current_app, has_app_context

from ..records import ProductRecord


DEFAULT_PROFIT_MARGIN = Decimal("20.00")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def derive_sale_price(purchase_price: Decimal, profit_margin: Decimal) -> Decimal:
    """Purchase price plus margin percent, rounded half-up to 2 decimal places."""
    purchase_price = Decimal(purchase_price)
    profit_margin = Decimal(profit_margin)
    raw = purchase_price * (1 + profit_margin / HUNDRED)
    return raw.quantize(CENT, rounding=ROUND_HALF_UP)


def default_profit_margin() -> Decimal:
    if has_app_context():
        configured = current_app.config.get("DEFAULT_PROFIT_MARGIN")
        if configured is not None:
            return Decimal(str(configured)).quantize(CENT, rounding=ROUND_HALF_UP)
    return DEFAULT_PROFIT_MARGIN


def resolve_margin(patch: Mapping, existing: ProductRecord | None = None) -> Decimal:
    """
    Margin precedence: patch value, then the product's stored margin, then
    the configured default.
    """
    margin = patch.get("profit_margin")
    if margin is not None:
        return Decimal(margin)
    if existing is not None:
        return existing.profit_margin
    return default_profit_margin()


def price_product(patch: Mapping, existing: ProductRecord | None = None) -> dict:
    """
    Merge a validated patch over an existing product (or nothing, on create)
    and return the full pricing triple to write.
    """
    purchase_price = patch.get("purchase_price")
    if purchase_price is None:
        if existing is None:
            raise ValueError("purchase_price is required to price a new product")
        purchase_price = existing.purchase_price

    margin = resolve_margin(patch, existing)
    return {
        "purchase_price": Decimal(purchase_price),
        "profit_margin": margin,
        "sale_price": derive_sale_price(purchase_price, margin),
    }
