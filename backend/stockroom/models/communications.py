from __future__ import annotations

from ..extensions import db
from ..records import NewsRecord
from stockroom.time_utils import to_naive_utc


class BusinessNews(db.Model):
    """
    Business announcements shown on the dashboard.

    expires_at is fixed at creation (created_at + NEWS_LIFETIME_DAYS) and is
    NULL for permanent announcements. Expired rows are removed by sweeps.
    """
    __tablename__ = "business_news"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_permanent = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    def to_record(self) -> NewsRecord:
        return NewsRecord(
            id=self.id,
            title=self.title,
            content=self.content,
            is_permanent=self.is_permanent,
            created_at=to_naive_utc(self.created_at),
            expires_at=to_naive_utc(self.expires_at),
        )
