# backend/stockroom/routes/system.py
"""
System health and dashboard stats endpoints.
"""

import time
from flask import Blueprint, jsonify, current_app

from ..decorators import require_auth
from ..services import reporting_service
from ..stores import get_record_store

system_bp = Blueprint("system", __name__)


def check_store_health() -> dict:
    """
    Check record store connectivity with a count per collection.

    Returns dict with status and details.
    """
    store = get_record_store()
    start_time = time.time()
    try:
        counts = store.counts()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "backend": store.backend_name,
            "latency_ms": round(elapsed_ms, 2),
            "details": counts,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Record store health check failed")
        return {
            "status": "unhealthy",
            "backend": store.backend_name,
            "latency_ms": round(elapsed_ms, 2),
            "error": "Store error",
        }


@system_bp.get("/api/health")
def health():
    store_health = check_store_health()
    status = 200 if store_health["status"] == "healthy" else 503
    return jsonify({"status": store_health["status"], "store": store_health}), status


@system_bp.get("/api/stats")
@require_auth
def stats():
    """Dashboard counters: products, low stock, active news, last update."""
    try:
        return jsonify(reporting_service.dashboard_stats())
    except Exception:
        current_app.logger.exception("Failed to compute dashboard stats")
        return jsonify({"error": "Internal server error"}), 500
