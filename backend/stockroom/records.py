# Overview: Immutable record snapshots handed out by every RecordStore backend.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from stockroom.time_utils import to_utc_z


def _money(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return f"{value:.2f}"


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    password_hash: str
    created_at: datetime

    def to_dict(self) -> dict:
        # password_hash never leaves the server
        return {
            "id": self.id,
            "username": self.username,
            "created_at": to_utc_z(self.created_at),
        }


@dataclass(frozen=True)
class ProductRecord:
    id: int
    name: str
    purchase_price: Decimal
    sale_price: Decimal
    profit_margin: Decimal
    created_at: datetime
    updated_at: datetime
    barcode: str | None = None
    buyer_name: str | None = None
    stock: int | None = None
    min_stock: int | None = None

    @property
    def is_low_stock(self) -> bool:
        if self.stock is None or self.min_stock is None:
            return False
        return self.stock < self.min_stock

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "barcode": self.barcode,
            "purchase_price": _money(self.purchase_price),
            "sale_price": _money(self.sale_price),
            "profit_margin": _money(self.profit_margin),
            "buyer_name": self.buyer_name,
            "stock": self.stock,
            "min_stock": self.min_stock,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


@dataclass(frozen=True)
class NewsRecord:
    id: int
    title: str
    content: str
    is_permanent: bool
    created_at: datetime
    expires_at: datetime | None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "is_permanent": self.is_permanent,
            "created_at": to_utc_z(self.created_at),
            "expires_at": to_utc_z(self.expires_at),
        }


@dataclass(frozen=True)
class SessionRecord:
    """Server-side view of a login session. Only the token hash is kept."""
    token_hash: str
    user_id: int
    created_at: datetime
    last_used_at: datetime
    expires_at: datetime
    is_revoked: bool = False
    revoked_at: datetime | None = None
    revoked_reason: str | None = None
    user_agent: str | None = None
    ip_address: str | None = None
