# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- POST /api/auth/register  create an account and start a session
- POST /api/auth/login     exchange credentials for a bearer token
- POST /api/auth/logout    revoke the current token
- GET  /api/auth/user      the authenticated user
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..validation import ValidationError, DuplicateKeyError, validate_user_payload
from ..decorators import bearer_token, require_auth
from stockroom.time_utils import to_utc_z


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_response(user, status: int):
    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify({
        "user": user.to_dict(),
        "token": token,
        "expires_at": to_utc_z(session.expires_at),
    }), status


@auth_bp.post("/register")
def register_route():
    """
    Register a new user and log them in.

    Username must be uppercase; password at least 8 characters of A-Z/0-9.
    """
    try:
        data = validate_user_payload(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Validation error", "errors": e.to_list()}), 400

    try:
        user = auth_service.register_user(username=data["username"], password=data["password"])
        return _session_response(user, 201)
    except DuplicateKeyError as e:
        return jsonify({"error": str(e), "field": e.field}), 409
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """Authenticate user and create session token."""
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")

    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        return jsonify({"error": "username and password required"}), 400

    try:
        user = auth_service.authenticate(username, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401
        return _session_response(user, 200)
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    """
    token = bearer_token()
    if token is None:
        return jsonify({"error": "Authorization header required"}), 401

    try:
        revoked = session_service.revoke_session(token, reason="User logout")
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500

    if not revoked:
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/user")
@require_auth
def current_user_route():
    return jsonify(g.current_user.to_dict()), 200
