from __future__ import annotations

from ..extensions import db
from ..records import SessionRecord, UserRecord
from stockroom.time_utils import to_naive_utc


class User(db.Model):
    """
    User accounts for authentication.

    Usernames are stored exactly as validated (uppercase) and are globally unique.
    Users are created once at registration and never modified afterwards.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"

    def to_record(self) -> UserRecord:
        return UserRecord(
            id=self.id,
            username=self.username,
            password_hash=self.password_hash,
            created_at=to_naive_utc(self.created_at),
        )


class SessionToken(db.Model):
    """
    Login sessions backing bearer-token authentication.

    SECURITY NOTES:
    - Tokens stored hashed in database (SHA-256)
    - Absolute and idle timeouts enforced by session_service
    - Revocable on logout
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_active", "user_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    # Client information (for security monitoring)
    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)  # IPv6 max length

    user = db.relationship("User", backref=db.backref("session_tokens", lazy=True))

    def to_record(self) -> SessionRecord:
        return SessionRecord(
            token_hash=self.token_hash,
            user_id=self.user_id,
            created_at=to_naive_utc(self.created_at),
            last_used_at=to_naive_utc(self.last_used_at),
            expires_at=to_naive_utc(self.expires_at),
            is_revoked=self.is_revoked,
            revoked_at=to_naive_utc(self.revoked_at),
            revoked_reason=self.revoked_reason,
            user_agent=self.user_agent,
            ip_address=self.ip_address,
        )
