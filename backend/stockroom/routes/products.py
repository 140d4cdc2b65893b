# Overview: Flask API routes for products operations; parses input and returns JSON responses.

"""
Product management routes.

SECURITY: All routes require authentication.
Validation runs before any store call; sale_price in a payload is ignored.
"""
from flask import Blueprint, request, jsonify, current_app

from ..services import products_service
from ..stores import NotFoundError
from ..validation import (
    validate_product_payload,
    ValidationError,
    DuplicateKeyError,
)
from ..decorators import require_auth

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _validation_failed(e: ValidationError):
    return jsonify({"error": "Validation error", "errors": e.to_list()}), 400


@products_bp.get("")
@require_auth
def list_products():
    """List all products ordered by name."""
    try:
        return jsonify(products_service.list_products())
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/search")
@require_auth
def search_products():
    """
    Search products by name.

    Query params:
    - q: str - case-insensitive substring of the name. Blank matches nothing.
    """
    try:
        return jsonify(products_service.search_products(request.args.get("q")))
    except Exception:
        current_app.logger.exception("Failed to search products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<int:product_id>")
@require_auth
def get_product(product_id: int):
    try:
        return jsonify(products_service.get_product(product_id))
    except NotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except Exception:
        current_app.logger.exception("Failed to load product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("")
@require_auth
def create_product_route():
    """Create a new product. The sale price is derived server-side."""
    try:
        patch = validate_product_payload(request.get_json(silent=True), partial=False)
    except ValidationError as e:
        return _validation_failed(e)

    try:
        created = products_service.create_product(patch=patch)
    except DuplicateKeyError as e:
        return jsonify({"error": str(e), "field": e.field}), 409
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(created), 201


@products_bp.put("/<int:product_id>")
@products_bp.patch("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    """
    Update a product.

    Omitted fields keep their stored values; the sale price is re-derived.
    """
    try:
        patch = validate_product_payload(request.get_json(silent=True), partial=True)
    except ValidationError as e:
        return _validation_failed(e)

    try:
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except NotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except DuplicateKeyError as e:
        return jsonify({"error": str(e), "field": e.field}), 409
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(updated), 200


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    try:
        deleted = products_service.delete_product(product_id)
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500

    if not deleted:
        return jsonify({"error": "Product not found"}), 404

    return "", 204
