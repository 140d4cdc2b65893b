# Overview: Expiration timestamps and active/expired checks for business news.

"""
Expiry Engine

An announcement is active iff it is permanent or now < expires_at.
It is expired (eligible for a sweep) iff it is not permanent and
expires_at <= now. Both store backends implement the same two predicates,
so the active list and the sweep never disagree about a record.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from flask import current_app, has_app_context

from stockroom.time_utils import utcnow


DEFAULT_NEWS_LIFETIME_DAYS = 3

logger = logging.getLogger(__name__)


def news_lifetime_days() -> int:
    if has_app_context():
        return int(current_app.config.get("NEWS_LIFETIME_DAYS", DEFAULT_NEWS_LIFETIME_DAYS))
    return DEFAULT_NEWS_LIFETIME_DAYS


def compute_expiry(
    created_at: datetime,
    is_permanent: bool,
    lifetime_days: int | None = None,
) -> datetime | None:
    """
    Expiration timestamp fixed at creation time.

    Permanent announcements never expire (None). Otherwise the lifetime is
    added in whole calendar days; created_at is UTC-naive so no DST shift applies.
    """
    if is_permanent:
        return None
    if lifetime_days is None:
        lifetime_days = news_lifetime_days()
    return created_at + timedelta(days=lifetime_days)


def is_active(now: datetime, expires_at: datetime | None, is_permanent: bool) -> bool:
    if is_permanent:
        return True
    if expires_at is None:
        # Non-permanent rows always carry an expiry; treat a missing one as never expiring.
        return True
    return now < expires_at


def is_expired(now: datetime, expires_at: datetime | None, is_permanent: bool) -> bool:
    return not is_active(now, expires_at, is_permanent)


def sweep_expired(store, now: datetime | None = None) -> int:
    """
    Remove every expired announcement from the store in one pass.

    Returns the number removed; a second call over an unchanged store returns 0.
    """
    if now is None:
        now = utcnow()
    removed = store.delete_expired_news(now)
    if removed:
        logger.info("Swept %d expired business news item(s)", removed)
    return removed
