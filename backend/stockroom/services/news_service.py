# Overview: Service-layer operations for business news; expiry stamping and sweeps.

from __future__ import annotations

from datetime import datetime

from flask import current_app

from ..stores import get_record_store
from .expiry_service import compute_expiry, sweep_expired
from stockroom.time_utils import utcnow


def list_active_news(now: datetime | None = None) -> list[dict]:
    """
    Active announcements, oldest first.

    With NEWS_SWEEP_ON_READ enabled, expired rows are purged first using the
    same cutoff, so the read and the sweep agree on what is expired.
    """
    if now is None:
        now = utcnow()
    store = get_record_store()
    if current_app.config.get("NEWS_SWEEP_ON_READ", True):
        sweep_expired(store, now)
    return [item.to_dict() for item in store.list_active_news(now)]


def create_news(*, data: dict, now: datetime | None = None) -> dict:
    """Create an announcement from a validated payload; expiry is computed server-side."""
    created_at = now or utcnow()
    is_permanent = bool(data.get("is_permanent", False))
    item = get_record_store().insert_news({
        "title": data["title"],
        "content": data["content"],
        "is_permanent": is_permanent,
        "created_at": created_at,
        "expires_at": compute_expiry(created_at, is_permanent),
    })
    current_app.logger.info("Created business news id=%s permanent=%s", item.id, item.is_permanent)
    return item.to_dict()


def delete_news(news_id: int) -> bool:
    return get_record_store().delete_news(news_id)


def cleanup_expired_news(now: datetime | None = None) -> int:
    """On-demand sweep; returns how many announcements were removed."""
    return sweep_expired(get_record_store(), now)
