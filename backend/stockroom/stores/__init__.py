# Overview: Record store selection at startup and per-request access.

from __future__ import annotations

from flask import Flask, current_app

from .base import NotFoundError, RecordStore, SessionStore, StoreError
from .memory import MemoryRecordStore
from .sql import SqlRecordStore

EXTENSION_KEY = "record_store"

BACKENDS = {
    "sql": SqlRecordStore,
    "memory": MemoryRecordStore,
}


def build_record_store(backend: str) -> RecordStore:
    try:
        factory = BACKENDS[backend.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown STORE_BACKEND {backend!r}; expected one of: {', '.join(sorted(BACKENDS))}"
        ) from None
    return factory()


def init_record_store(app: Flask) -> RecordStore:
    store = build_record_store(app.config.get("STORE_BACKEND", "sql"))
    app.extensions[EXTENSION_KEY] = store
    return store


def get_record_store() -> RecordStore:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "RecordStore", "SessionStore", "NotFoundError", "StoreError",
    "MemoryRecordStore", "SqlRecordStore",
    "build_record_store", "init_record_store", "get_record_store",
]
