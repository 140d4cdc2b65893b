# Overview: Service-layer operations for auth; password hashing, registration and login checks.

"""
Authentication Service

Passwords are validated by validation.validate_user_payload (at least 8
characters, uppercase letters and digits only) before they reach this module,
then hashed with bcrypt for storage. Both store backends keep only the hash.
"""

import bcrypt
from flask import current_app, has_app_context

from ..records import UserRecord
from ..stores import get_record_store
from ..validation import DuplicateKeyError
from stockroom.time_utils import utcnow


DEFAULT_BCRYPT_ROUNDS = 12


def _bcrypt_rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS))
    return DEFAULT_BCRYPT_ROUNDS


def hash_password(password: str) -> str:
    """Hash password using bcrypt (BCRYPT_ROUNDS cost factor)."""
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() compares in constant time. Malformed hashes fail closed.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def register_user(*, username: str, password: str) -> UserRecord:
    """
    Create a user from validated credentials.

    Raises DuplicateKeyError if the username is taken.
    """
    store = get_record_store()
    if store.get_user_by_username(username) is not None:
        raise DuplicateKeyError("username", "Username already exists")

    user = store.insert_user({
        "username": username,
        "password_hash": hash_password(password),
        "created_at": utcnow(),
    })
    current_app.logger.info("Registered user id=%s username=%s", user.id, user.username)
    return user


def authenticate(username: str, password: str) -> UserRecord | None:
    """Return the user if the credentials match, None otherwise."""
    user = get_record_store().get_user_by_username(username)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
