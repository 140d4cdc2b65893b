# Overview: Dashboard counters over products and business news.

from __future__ import annotations

from ..stores import get_record_store
from .news_service import list_active_news
from stockroom.time_utils import to_utc_z, utcnow


def dashboard_stats() -> dict:
    """
    Counters for the dashboard header.

    last_update is the most recent product change, or now when the
    inventory is empty.
    """
    now = utcnow()
    products = get_record_store().list_products()
    active_news = list_active_news(now)

    last_update = max((p.updated_at for p in products), default=now)

    return {
        "total_products": len(products),
        "low_stock_products": sum(1 for p in products if p.is_low_stock),
        "active_news": len(active_news),
        "last_update": to_utc_z(last_update),
    }
