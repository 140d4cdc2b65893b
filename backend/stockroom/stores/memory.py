# Overview: Process-local RecordStore for tests and lightweight single-process deployments.

from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping

from ..records import NewsRecord, ProductRecord, SessionRecord, UserRecord
from ..services.expiry_service import is_active, is_expired
from ..validation import DuplicateKeyError
from .base import DEFAULT_SEARCH_LIMIT, RecordStore, SessionStore
from stockroom.time_utils import utcnow


PRODUCT_FIELDS = (
    "name",
    "barcode",
    "purchase_price",
    "sale_price",
    "profit_margin",
    "buyer_name",
    "stock",
    "min_stock",
)

# Column defaults of the products table for fields left out of an insert
PRODUCT_INSERT_DEFAULTS = {
    "profit_margin": Decimal("20.00"),
    "stock": 0,
    "min_stock": 0,
}


class MemorySessionStore(SessionStore):
    def __init__(self, lock: threading.RLock):
        self._lock = lock
        self._sessions: dict[str, SessionRecord] = {}

    def add(self, record: SessionRecord) -> SessionRecord:
        with self._lock:
            self._sessions[record.token_hash] = record
            return record

    def get(self, token_hash: str) -> SessionRecord | None:
        with self._lock:
            return self._sessions.get(token_hash)

    def touch(self, token_hash: str, when: datetime) -> None:
        with self._lock:
            record = self._sessions.get(token_hash)
            if record is not None:
                self._sessions[token_hash] = replace(record, last_used_at=when)

    def revoke(self, token_hash: str, when: datetime, reason: str) -> bool:
        with self._lock:
            record = self._sessions.get(token_hash)
            if record is None or record.is_revoked:
                return False
            self._sessions[token_hash] = replace(
                record, is_revoked=True, revoked_at=when, revoked_reason=reason
            )
            return True

    def purge(self, *, expired_before: datetime, created_before: datetime) -> int:
        with self._lock:
            doomed = [
                key for key, record in self._sessions.items()
                if (record.expires_at < expired_before or record.is_revoked)
                and record.created_at < created_before
            ]
            for key in doomed:
                del self._sessions[key]
            return len(doomed)


class MemoryRecordStore(RecordStore):
    """
    Dict-backed store.

    Every mutation runs under a single re-entrant lock, so a uniqueness
    check and the write that follows it are one atomic step. Ids come from
    per-collection counters and are never handed out twice.
    """

    backend_name = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self._users: dict[int, UserRecord] = {}
        self._products: dict[int, ProductRecord] = {}
        self._news: dict[int, NewsRecord] = {}
        self._user_ids = itertools.count(1)
        self._product_ids = itertools.count(1)
        self._news_ids = itertools.count(1)
        self._sessions = MemorySessionStore(self._lock)

    @property
    def session_store(self) -> SessionStore:
        return self._sessions

    # Users

    def get_user(self, user_id: int) -> UserRecord | None:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> UserRecord | None:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user
            return None

    def insert_user(self, fields: Mapping[str, Any]) -> UserRecord:
        with self._lock:
            username = fields["username"]
            if self.get_user_by_username(username) is not None:
                raise DuplicateKeyError("username", "Username already exists")
            user = UserRecord(
                id=next(self._user_ids),
                username=username,
                password_hash=fields["password_hash"],
                created_at=fields.get("created_at") or utcnow(),
            )
            self._users[user.id] = user
            return user

    # Products

    def get_product(self, product_id: int) -> ProductRecord | None:
        with self._lock:
            return self._products.get(product_id)

    def get_product_by_name(self, name: str) -> ProductRecord | None:
        with self._lock:
            return self._find_product_by_name(name)

    def _find_product_by_name(self, name: str) -> ProductRecord | None:
        for product in self._products.values():
            if product.name == name:
                return product
        return None

    @staticmethod
    def _product_sort_key(product: ProductRecord):
        return (product.name, product.id)

    def list_products(self) -> list[ProductRecord]:
        with self._lock:
            return sorted(self._products.values(), key=self._product_sort_key)

    def search_products(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[ProductRecord]:
        needle = query.upper()
        with self._lock:
            matches = [p for p in self._products.values() if needle in p.name]
        matches.sort(key=self._product_sort_key)
        return matches[:limit]

    def insert_product(self, fields: Mapping[str, Any]) -> ProductRecord:
        with self._lock:
            if self._find_product_by_name(fields["name"]) is not None:
                raise DuplicateKeyError("name", "Product with this name already exists")
            now = utcnow()
            values = {key: fields.get(key, PRODUCT_INSERT_DEFAULTS.get(key)) for key in PRODUCT_FIELDS}
            product = ProductRecord(
                id=next(self._product_ids),
                created_at=fields.get("created_at") or now,
                updated_at=fields.get("updated_at") or now,
                **values,
            )
            self._products[product.id] = product
            return product

    def update_product(self, product_id: int, fields: Mapping[str, Any]) -> ProductRecord | None:
        with self._lock:
            current = self._products.get(product_id)
            if current is None:
                return None

            new_name = fields.get("name")
            if new_name is not None and new_name != current.name:
                clash = self._find_product_by_name(new_name)
                if clash is not None and clash.id != product_id:
                    raise DuplicateKeyError("name", "Product with this name already exists")

            changes = {key: fields[key] for key in PRODUCT_FIELDS if key in fields}
            changes["updated_at"] = fields.get("updated_at") or utcnow()
            updated = replace(current, **changes)
            self._products[product_id] = updated
            return updated

    def delete_product(self, product_id: int) -> bool:
        with self._lock:
            return self._products.pop(product_id, None) is not None

    # Business news

    def get_news(self, news_id: int) -> NewsRecord | None:
        with self._lock:
            return self._news.get(news_id)

    def list_active_news(self, now: datetime) -> list[NewsRecord]:
        with self._lock:
            active = [
                item for item in self._news.values()
                if is_active(now, item.expires_at, item.is_permanent)
            ]
        active.sort(key=lambda item: (item.created_at, item.id))
        return active

    def insert_news(self, fields: Mapping[str, Any]) -> NewsRecord:
        with self._lock:
            item = NewsRecord(
                id=next(self._news_ids),
                title=fields["title"],
                content=fields["content"],
                is_permanent=bool(fields.get("is_permanent", False)),
                created_at=fields.get("created_at") or utcnow(),
                expires_at=fields.get("expires_at"),
            )
            self._news[item.id] = item
            return item

    def delete_news(self, news_id: int) -> bool:
        with self._lock:
            return self._news.pop(news_id, None) is not None

    def delete_expired_news(self, now: datetime) -> int:
        with self._lock:
            doomed = [
                item.id for item in self._news.values()
                if is_expired(now, item.expires_at, item.is_permanent)
            ]
            for news_id in doomed:
                del self._news[news_id]
            return len(doomed)

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {
                "users": len(self._users),
                "products": len(self._products),
                "business_news": len(self._news),
            }
