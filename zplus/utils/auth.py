"""
Authorization helpers for word-list administration.

The word list is shared by every user, so mutations can be restricted to
holders of an admin token (MODERATION_ADMIN_TOKEN). When no token is
configured the decorator is a no-op.
"""

from __future__ import annotations
from functools import wraps
import secrets
from flask import current_app, jsonify, request

ADMIN_TOKEN_HEADER = "X-Admin-Token"


def has_admin_token() -> bool:
    """Check the request's admin token against config (constant-time compare)."""
    expected = current_app.config.get("MODERATION_ADMIN_TOKEN", "")
    if not expected:
        return True
    supplied = request.headers.get(ADMIN_TOKEN_HEADER, "")
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def require_admin_token(f):
    """
    Decorator to require the admin token for a route.

    Usage:
        @moderation_bp.route("/words", methods=["POST"])
        @require_admin_token
        def add_word():
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not has_admin_token():
            current_app.logger.warning(f"Rejected word-list change without admin token: {request.path}")
            return jsonify({
                "success": False,
                "error": "permission",
                "message": "Admin token required.",
            }), 401

        return f(*args, **kwargs)

    return decorated_function
