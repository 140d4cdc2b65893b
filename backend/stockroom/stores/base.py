# Overview: RecordStore contract shared by the SQL and in-memory backends.

"""
Record Store contract

One interface over users, products, business news and login sessions.
Both backends expose identical semantics:

- reads return frozen records (see records.py) or None
- ids are assigned by the store and never reused, even after deletion
- products list and search ascending by name; active news ascending by created_at
- search sorts first and truncates second
- delete_* returns False (not an error) when nothing matched
- username and product name uniqueness is enforced at the store as the
  authoritative guard (DuplicateKeyError); services check first for a
  friendlier rejection

The store never derives prices, never uppercases names and never computes
expiry timestamps; it persists the fields the services hand it.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Mapping

from ..records import NewsRecord, ProductRecord, SessionRecord, UserRecord


DEFAULT_SEARCH_LIMIT = 10


class NotFoundError(LookupError):
    """404-level: an id-scoped operation targeted a record that does not exist."""


class StoreError(RuntimeError):
    """500-level: unexpected backend failure. Message is safe to log, not to show."""


class SessionStore(ABC):
    """
    Persistence for login sessions.

    Owned by the record store but consumed only by session_service.
    """

    @abstractmethod
    def add(self, record: SessionRecord) -> SessionRecord: ...

    @abstractmethod
    def get(self, token_hash: str) -> SessionRecord | None: ...

    @abstractmethod
    def touch(self, token_hash: str, when: datetime) -> None: ...

    @abstractmethod
    def revoke(self, token_hash: str, when: datetime, reason: str) -> bool: ...

    @abstractmethod
    def purge(self, *, expired_before: datetime, created_before: datetime) -> int: ...


class RecordStore(ABC):
    """Capability interface selected once at startup (see stores/__init__.py)."""

    backend_name: str = "abstract"

    @property
    @abstractmethod
    def session_store(self) -> SessionStore: ...

    # Users

    @abstractmethod
    def get_user(self, user_id: int) -> UserRecord | None: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> UserRecord | None: ...

    @abstractmethod
    def insert_user(self, fields: Mapping[str, Any]) -> UserRecord: ...

    # Products

    @abstractmethod
    def get_product(self, product_id: int) -> ProductRecord | None: ...

    @abstractmethod
    def get_product_by_name(self, name: str) -> ProductRecord | None: ...

    @abstractmethod
    def list_products(self) -> list[ProductRecord]: ...

    @abstractmethod
    def search_products(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[ProductRecord]: ...

    @abstractmethod
    def insert_product(self, fields: Mapping[str, Any]) -> ProductRecord: ...

    @abstractmethod
    def update_product(self, product_id: int, fields: Mapping[str, Any]) -> ProductRecord | None: ...

    @abstractmethod
    def delete_product(self, product_id: int) -> bool: ...

    # Business news

    @abstractmethod
    def get_news(self, news_id: int) -> NewsRecord | None: ...

    @abstractmethod
    def list_active_news(self, now: datetime) -> list[NewsRecord]: ...

    @abstractmethod
    def insert_news(self, fields: Mapping[str, Any]) -> NewsRecord: ...

    @abstractmethod
    def delete_news(self, news_id: int) -> bool: ...

    @abstractmethod
    def delete_expired_news(self, now: datetime) -> int: ...

    # Housekeeping

    @abstractmethod
    def counts(self) -> dict[str, int]:
        """Row counts per collection; doubles as a connectivity probe."""
