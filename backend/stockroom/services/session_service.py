# Overview: Service-layer operations for session; bearer tokens over the store's session side channel.

"""
Session Token Management Service

Tokens are cryptographically secure, hashed before storage, and time-limited.
Session rows live in the record store's session_store; nothing else in the
application reads them.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout (SESSION_ABSOLUTE_TIMEOUT_HOURS, default 24)
- Idle timeout (SESSION_IDLE_TIMEOUT_HOURS, default 2)
- Revocable on logout
"""

import secrets
import hashlib
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..records import SessionRecord, UserRecord
from ..stores import get_record_store
from stockroom.time_utils import utcnow


@dataclass
class SessionContext:
    """Complete session context returned by validate_session."""
    user: UserRecord
    session: SessionRecord


def _absolute_timeout() -> timedelta:
    return timedelta(hours=int(current_app.config.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24)))


def _idle_timeout() -> timedelta:
    return timedelta(hours=int(current_app.config.get("SESSION_IDLE_TIMEOUT_HOURS", 2)))


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """Hash token for storage using SHA-256 (tokens are already high-entropy)."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[SessionRecord, str]:
    """
    Create new session token for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, the store keeps only the hash.
    """
    plaintext_token = generate_token()
    now = utcnow()

    record = get_record_store().session_store.add(SessionRecord(
        token_hash=hash_token(plaintext_token),
        user_id=user_id,
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_timeout(),
        user_agent=user_agent,
        ip_address=ip_address,
    ))
    return record, plaintext_token


def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if the token is unknown, revoked, past its absolute
    timeout, idle for too long, or its user no longer exists.
    Updates last_used_at on success.
    """
    store = get_record_store()
    sessions = store.session_store
    token_hash = hash_token(token)
    now = utcnow()

    session = sessions.get(token_hash)
    if session is None or session.is_revoked:
        return None

    if session.expires_at < now:
        return None

    if now - session.last_used_at > _idle_timeout():
        sessions.revoke(token_hash, now, "Idle timeout")
        return None

    user = store.get_user(session.user_id)
    if user is None:
        sessions.revoke(token_hash, now, "User not found")
        return None

    sessions.touch(token_hash, now)
    return SessionContext(user=user, session=session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """
    Revoke session token.

    Returns True if session was revoked, False if not found or already revoked.
    """
    return get_record_store().session_store.revoke(hash_token(token), utcnow(), reason)


def cleanup_expired_sessions() -> int:
    """Delete expired or revoked sessions older than 30 days."""
    now = utcnow()
    return get_record_store().session_store.purge(
        expired_before=now,
        created_before=now - timedelta(days=30),
    )
