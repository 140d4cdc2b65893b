# backend/stockroom/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stockroom.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" (durable, SQLAlchemy) or "memory" (process-local)
    STORE_BACKEND = os.environ.get("STORE_BACKEND", "sql")

    # Pricing: percentage added to purchase price when a product has no margin of its own
    DEFAULT_PROFIT_MARGIN = os.environ.get("DEFAULT_PROFIT_MARGIN", "20.00")

    # Business news
    NEWS_LIFETIME_DAYS = int(os.environ.get("NEWS_LIFETIME_DAYS", "3"))
    NEWS_SWEEP_ON_READ = _env_bool("NEWS_SWEEP_ON_READ", True)

    SEARCH_LIMIT = int(os.environ.get("SEARCH_LIMIT", "10"))

    # Auth
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
    SESSION_ABSOLUTE_TIMEOUT_HOURS = int(os.environ.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", "24"))
    SESSION_IDLE_TIMEOUT_HOURS = int(os.environ.get("SESSION_IDLE_TIMEOUT_HOURS", "2"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
