# Overview: Durable RecordStore backed by Flask-SQLAlchemy.

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import BusinessNews, Product, SessionToken, User
from ..records import NewsRecord, ProductRecord, SessionRecord, UserRecord
from ..validation import DuplicateKeyError
from .base import DEFAULT_SEARCH_LIMIT, RecordStore, SessionStore, StoreError
from stockroom.time_utils import utcnow


PRODUCT_MUTABLE_FIELDS = {
    "name",
    "barcode",
    "purchase_price",
    "sale_price",
    "profit_margin",
    "buyer_name",
    "stock",
    "min_stock",
}

logger = logging.getLogger(__name__)


@contextmanager
def _guarded(operation: str, duplicate: tuple[str, str] | None = None):
    """
    Run a unit of work against the session and translate backend failures.

    IntegrityError on a write guarded by `duplicate` becomes DuplicateKeyError:
    the UNIQUE constraint is the authoritative duplicate check. Anything else
    from SQLAlchemy is rolled back, logged and re-raised as StoreError.
    """
    try:
        yield
    except IntegrityError as exc:
        db.session.rollback()
        if duplicate is not None:
            field, message = duplicate
            raise DuplicateKeyError(field, message) from exc
        logger.exception("Integrity failure during %s", operation)
        raise StoreError(f"{operation} failed") from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Database failure during %s", operation)
        raise StoreError(f"{operation} failed") from exc


class SqlSessionStore(SessionStore):
    def _row(self, token_hash: str) -> SessionToken | None:
        return db.session.query(SessionToken).filter_by(token_hash=token_hash).first()

    def add(self, record: SessionRecord) -> SessionRecord:
        with _guarded("create session"):
            row = SessionToken(
                user_id=record.user_id,
                token_hash=record.token_hash,
                created_at=record.created_at,
                last_used_at=record.last_used_at,
                expires_at=record.expires_at,
                is_revoked=record.is_revoked,
                user_agent=record.user_agent,
                ip_address=record.ip_address,
            )
            db.session.add(row)
            db.session.commit()
            return row.to_record()

    def get(self, token_hash: str) -> SessionRecord | None:
        with _guarded("load session"):
            row = self._row(token_hash)
            return row.to_record() if row else None

    def touch(self, token_hash: str, when: datetime) -> None:
        with _guarded("touch session"):
            row = self._row(token_hash)
            if row is not None:
                row.last_used_at = when
                db.session.commit()

    def revoke(self, token_hash: str, when: datetime, reason: str) -> bool:
        with _guarded("revoke session"):
            row = db.session.query(SessionToken).filter_by(
                token_hash=token_hash,
                is_revoked=False,
            ).first()
            if not row:
                return False
            row.is_revoked = True
            row.revoked_at = when
            row.revoked_reason = reason
            db.session.commit()
            return True

    def purge(self, *, expired_before: datetime, created_before: datetime) -> int:
        with _guarded("purge sessions"):
            deleted = db.session.query(SessionToken).filter(
                db.or_(
                    SessionToken.expires_at < expired_before,
                    SessionToken.is_revoked == True,  # noqa: E712
                ),
                SessionToken.created_at < created_before,
            ).delete(synchronize_session=False)
            db.session.commit()
            return deleted


class SqlRecordStore(RecordStore):
    """
    Relational backend.

    Ids come from autoincrement columns (sqlite_autoincrement on SQLite,
    sequences elsewhere) and are never reused. Each mutating call commits
    its own transaction.
    """

    backend_name = "sql"

    def __init__(self):
        self._sessions = SqlSessionStore()

    @property
    def session_store(self) -> SessionStore:
        return self._sessions

    # Users

    def get_user(self, user_id: int) -> UserRecord | None:
        with _guarded("load user"):
            user = db.session.get(User, user_id)
            return user.to_record() if user else None

    def get_user_by_username(self, username: str) -> UserRecord | None:
        with _guarded("load user by username"):
            user = db.session.query(User).filter_by(username=username).first()
            return user.to_record() if user else None

    def insert_user(self, fields: Mapping[str, Any]) -> UserRecord:
        with _guarded("create user", duplicate=("username", "Username already exists")):
            user = User(
                username=fields["username"],
                password_hash=fields["password_hash"],
                created_at=fields.get("created_at") or utcnow(),
            )
            db.session.add(user)
            db.session.commit()
            return user.to_record()

    # Products

    def get_product(self, product_id: int) -> ProductRecord | None:
        with _guarded("load product"):
            product = db.session.get(Product, product_id)
            return product.to_record() if product else None

    def get_product_by_name(self, name: str) -> ProductRecord | None:
        with _guarded("load product by name"):
            product = db.session.query(Product).filter_by(name=name).first()
            return product.to_record() if product else None

    def list_products(self) -> list[ProductRecord]:
        with _guarded("list products"):
            rows = (
                db.session.query(Product)
                .order_by(Product.name.asc(), Product.id.asc())
                .all()
            )
            return [p.to_record() for p in rows]

    def search_products(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[ProductRecord]:
        needle = query.upper()
        with _guarded("search products"):
            rows = (
                db.session.query(Product)
                .filter(Product.name.contains(needle, autoescape=True))
                .order_by(Product.name.asc(), Product.id.asc())
                .limit(limit)
                .all()
            )
            return [p.to_record() for p in rows]

    def insert_product(self, fields: Mapping[str, Any]) -> ProductRecord:
        duplicate = ("name", "Product with this name already exists")
        with _guarded("create product", duplicate=duplicate):
            now = utcnow()
            product = Product(
                created_at=fields.get("created_at") or now,
                updated_at=fields.get("updated_at") or now,
            )
            for key in PRODUCT_MUTABLE_FIELDS:
                if key in fields:
                    setattr(product, key, fields[key])
            db.session.add(product)
            db.session.commit()
            return product.to_record()

    def update_product(self, product_id: int, fields: Mapping[str, Any]) -> ProductRecord | None:
        duplicate = ("name", "Product with this name already exists")
        with _guarded("update product", duplicate=duplicate):
            product = db.session.get(Product, product_id)
            if product is None:
                return None
            for key, value in fields.items():
                if key in PRODUCT_MUTABLE_FIELDS:
                    setattr(product, key, value)
            product.updated_at = fields.get("updated_at") or utcnow()
            db.session.commit()
            return product.to_record()

    def delete_product(self, product_id: int) -> bool:
        with _guarded("delete product"):
            deleted = (
                db.session.query(Product)
                .filter(Product.id == product_id)
                .delete(synchronize_session=False)
            )
            db.session.commit()
            return deleted > 0

    # Business news

    def get_news(self, news_id: int) -> NewsRecord | None:
        with _guarded("load business news"):
            item = db.session.get(BusinessNews, news_id)
            return item.to_record() if item else None

    def list_active_news(self, now: datetime) -> list[NewsRecord]:
        # Same predicate as expiry_service.is_active
        with _guarded("list business news"):
            rows = (
                db.session.query(BusinessNews)
                .filter(
                    db.or_(
                        BusinessNews.is_permanent == True,  # noqa: E712
                        BusinessNews.expires_at.is_(None),
                        BusinessNews.expires_at > now,
                    )
                )
                .order_by(BusinessNews.created_at.asc(), BusinessNews.id.asc())
                .all()
            )
            return [n.to_record() for n in rows]

    def insert_news(self, fields: Mapping[str, Any]) -> NewsRecord:
        with _guarded("create business news"):
            item = BusinessNews(
                title=fields["title"],
                content=fields["content"],
                is_permanent=bool(fields.get("is_permanent", False)),
                created_at=fields.get("created_at") or utcnow(),
                expires_at=fields.get("expires_at"),
            )
            db.session.add(item)
            db.session.commit()
            return item.to_record()

    def delete_news(self, news_id: int) -> bool:
        with _guarded("delete business news"):
            deleted = (
                db.session.query(BusinessNews)
                .filter(BusinessNews.id == news_id)
                .delete(synchronize_session=False)
            )
            db.session.commit()
            return deleted > 0

    def delete_expired_news(self, now: datetime) -> int:
        # Same predicate as expiry_service.is_expired
        with _guarded("sweep business news"):
            deleted = (
                db.session.query(BusinessNews)
                .filter(
                    BusinessNews.is_permanent == False,  # noqa: E712
                    BusinessNews.expires_at.isnot(None),
                    BusinessNews.expires_at <= now,
                )
                .delete(synchronize_session=False)
            )
            db.session.commit()
            return deleted

    def counts(self) -> dict[str, int]:
        with _guarded("count records"):
            return {
                "users": db.session.query(User).count(),
                "products": db.session.query(Product).count(),
                "business_news": db.session.query(BusinessNews).count(),
            }
