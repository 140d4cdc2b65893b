from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


# Maximum purchase price: 9,999,999.99
# Keeps derived sale prices inside the NUMERIC(12, 2) column even at the maximum margin
MAX_PURCHASE_PRICE = Decimal("9999999.99")
MAX_PROFIT_MARGIN = Decimal("999.99")
MIN_PASSWORD_LENGTH = 8
PASSWORD_PATTERN = re.compile(r"^[A-Z0-9]+$")
INTEGER_PATTERN = re.compile(r"^-?\d+$")
CENT = Decimal("0.01")

MAX_USERNAME_LENGTH = 64
MAX_NAME_LENGTH = 255
MAX_BARCODE_LENGTH = 64
MAX_TITLE_LENGTH = 255
MAX_CONTENT_LENGTH = 5000

PRODUCT_WRITABLE_FIELDS = {
    "name",
    "purchase_price",
    "profit_margin",
    "barcode",
    "buyer_name",
    "stock",
    "min_stock",
}
# Server-owned fields a client may echo back; silently dropped.
PRODUCT_READ_ONLY_FIELDS = {"id", "sale_price", "created_at", "updated_at"}
PRODUCT_REQUIRED_ON_CREATE = ("name", "purchase_price")

NEWS_WRITABLE_FIELDS = {"title", "content", "is_permanent"}
NEWS_READ_ONLY_FIELDS = {"id", "created_at", "expires_at"}


class ValidationError(ValueError):
    """
    400-level input problem.

    Carries every offending field at once as (field, message) pairs so the
    caller can report them together.
    """

    def __init__(self, errors: list[tuple[str, str]]):
        self.errors = list(errors)
        super().__init__("; ".join(f"{field}: {message}" for field, message in self.errors))

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([(field, message)])

    def to_list(self) -> list[dict]:
        return [{"field": field, "message": message} for field, message in self.errors]


class DuplicateKeyError(ValueError):
    """409-level uniqueness conflict (duplicate product name or username)."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


def _require_mapping(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError.single("payload", "Invalid JSON payload")
    return payload


def _check_unknown_fields(payload: dict, writable: set[str], read_only: set[str], errors: list) -> None:
    for key in payload:
        if key not in writable and key not in read_only:
            errors.append((key, f"Field not allowed: {key}"))


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    return value.strip()


def _uppercase_name(field: str, value: Any, label: str, max_length: int, errors: list) -> str | None:
    text = _clean_text(value)
    if text is None:
        errors.append((field, f"{label} must be a string"))
        return None
    if not text:
        errors.append((field, f"{label} is required"))
        return None
    if text != text.upper():
        errors.append((field, f"{label} must be in uppercase"))
        return None
    if len(text) > max_length:
        errors.append((field, f"{label} exceeds max length {max_length}"))
        return None
    return text


def _parse_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            return Decimal(stripped)
        except InvalidOperation:
            return None
    return None


def _coerce_int(field: str, value: Any, errors: list) -> int | None:
    """Strict integer coercion: rejects floats, decimals and scientific notation."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if INTEGER_PATTERN.fullmatch(stripped):
            return int(stripped)
    errors.append((field, f"{field} must be an integer"))
    return None


def validate_purchase_price(value: Any, errors: list) -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        errors.append(("purchase_price", "Purchase price is required"))
        return None

    price = _parse_decimal(value)
    if price is None or not price.is_finite() or price <= 0:
        errors.append(("purchase_price", "Purchase price must be a positive number"))
        return None

    # Bound check first: quantize raises InvalidOperation past the context precision
    if price > MAX_PURCHASE_PRICE:
        errors.append(("purchase_price", f"Purchase price cannot exceed {MAX_PURCHASE_PRICE:,}"))
        return None
    price = price.quantize(CENT, rounding=ROUND_HALF_UP)
    if price <= 0:
        errors.append(("purchase_price", "Purchase price must be at least 0.01"))
        return None
    return price


def validate_profit_margin(value: Any, errors: list) -> Decimal | None:
    margin = _parse_decimal(value)
    if margin is None or not margin.is_finite():
        errors.append(("profit_margin", "Profit margin must be a number"))
        return None
    if margin < 0:
        errors.append(("profit_margin", "Profit margin must be >= 0"))
        return None
    if margin > MAX_PROFIT_MARGIN:
        errors.append(("profit_margin", f"Profit margin cannot exceed {MAX_PROFIT_MARGIN}"))
        return None
    return margin.quantize(CENT, rounding=ROUND_HALF_UP)


def validate_user_payload(payload: Any) -> dict:
    """
    Registration contract:
    - username: non-empty, already uppercase
    - password: at least 8 characters, uppercase letters and digits only
    """
    payload = _require_mapping(payload)
    errors: list[tuple[str, str]] = []

    username = _uppercase_name("username", payload.get("username"), "Username", MAX_USERNAME_LENGTH, errors)

    password = payload.get("password")
    if not isinstance(password, str) or not password:
        errors.append(("password", "Password is required"))
    else:
        if len(password) < MIN_PASSWORD_LENGTH:
            errors.append(("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters"))
        if not PASSWORD_PATTERN.fullmatch(password):
            errors.append(("password", "Password must contain only uppercase letters and numbers"))

    if errors:
        raise ValidationError(errors)
    return {"username": username, "password": password}


def validate_product_payload(payload: Any, *, partial: bool) -> dict:
    """
    Validates + normalizes an incoming product payload.

    partial=False: create semantics (name and purchase_price required)
    partial=True: update semantics (validate only provided keys)

    Returns a cleaned patch dict holding only writable fields. sale_price is
    never accepted; it is always derived from purchase_price and profit_margin.
    """
    payload = _require_mapping(payload)
    errors: list[tuple[str, str]] = []

    _check_unknown_fields(payload, PRODUCT_WRITABLE_FIELDS, PRODUCT_READ_ONLY_FIELDS, errors)

    if not partial:
        for field in PRODUCT_REQUIRED_ON_CREATE:
            if field not in payload:
                errors.append((field, f"{field} is required"))

    patch: dict = {}

    if "name" in payload:
        name = _uppercase_name("name", payload["name"], "Product name", MAX_NAME_LENGTH, errors)
        if name is not None:
            patch["name"] = name

    if "purchase_price" in payload:
        price = validate_purchase_price(payload["purchase_price"], errors)
        if price is not None:
            patch["purchase_price"] = price

    # Blank margin means "not supplied": the stored or default margin applies.
    raw_margin = payload.get("profit_margin")
    if raw_margin is not None and not (isinstance(raw_margin, str) and not raw_margin.strip()):
        margin = validate_profit_margin(raw_margin, errors)
        if margin is not None:
            patch["profit_margin"] = margin

    for field, max_length in (("barcode", MAX_BARCODE_LENGTH), ("buyer_name", MAX_NAME_LENGTH)):
        if field not in payload:
            continue
        raw = payload[field]
        if raw is None:
            patch[field] = None
            continue
        if not isinstance(raw, str):
            errors.append((field, f"{field} must be a string"))
            continue
        text = raw.strip()
        if len(text) > max_length:
            errors.append((field, f"{field} exceeds max length {max_length}"))
            continue
        patch[field] = text or None

    for field in ("stock", "min_stock"):
        if field not in payload:
            continue
        raw = payload[field]
        if raw is None:
            patch[field] = None
            continue
        value = _coerce_int(field, raw, errors)
        if value is None:
            continue
        if value < 0:
            errors.append((field, f"{field} must be >= 0"))
            continue
        patch[field] = value

    if errors:
        raise ValidationError(errors)
    return patch


def validate_news_payload(payload: Any) -> dict:
    payload = _require_mapping(payload)
    errors: list[tuple[str, str]] = []

    _check_unknown_fields(payload, NEWS_WRITABLE_FIELDS, NEWS_READ_ONLY_FIELDS, errors)

    cleaned: dict = {}
    for field, label, max_length in (
        ("title", "Title", MAX_TITLE_LENGTH),
        ("content", "Content", MAX_CONTENT_LENGTH),
    ):
        text = _clean_text(payload.get(field))
        if not text:
            errors.append((field, f"{label} is required"))
        elif len(text) > max_length:
            errors.append((field, f"{label} exceeds max length {max_length}"))
        else:
            cleaned[field] = text

    is_permanent = payload.get("is_permanent", False)
    if is_permanent is None:
        is_permanent = False
    if not isinstance(is_permanent, bool):
        errors.append(("is_permanent", "is_permanent must be a boolean"))
    else:
        cleaned["is_permanent"] = is_permanent

    if errors:
        raise ValidationError(errors)
    return cleaned
