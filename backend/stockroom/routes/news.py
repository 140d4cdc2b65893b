# Overview: Flask API routes for business news; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import news_service
from ..validation import validate_news_payload, ValidationError
from ..decorators import require_auth

news_bp = Blueprint("business_news", __name__, url_prefix="/api/business-news")


@news_bp.get("")
@require_auth
def list_news():
    """Active announcements, oldest first."""
    try:
        return jsonify(news_service.list_active_news())
    except Exception:
        current_app.logger.exception("Failed to list business news")
        return jsonify({"error": "Internal server error"}), 500


@news_bp.post("")
@require_auth
def create_news():
    """
    Create an announcement.

    Body: title, content, optional is_permanent. expires_at is computed
    server-side (created_at + NEWS_LIFETIME_DAYS unless permanent).
    """
    try:
        data = validate_news_payload(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Validation error", "errors": e.to_list()}), 400

    try:
        created = news_service.create_news(data=data)
    except Exception:
        current_app.logger.exception("Failed to create business news")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(created), 201


@news_bp.delete("/<int:news_id>")
@require_auth
def delete_news(news_id: int):
    try:
        deleted = news_service.delete_news(news_id)
    except Exception:
        current_app.logger.exception("Failed to delete business news")
        return jsonify({"error": "Internal server error"}), 500

    if not deleted:
        return jsonify({"error": "News not found"}), 404

    return "", 204


@news_bp.post("/cleanup")
@require_auth
def cleanup_news():
    """Remove every expired announcement now."""
    try:
        deleted_count = news_service.cleanup_expired_news()
    except Exception:
        current_app.logger.exception("Failed to clean up expired business news")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"deleted_count": deleted_count}), 200
