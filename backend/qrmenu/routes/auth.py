# Overview: Flask API routes for admin authentication; tokens in, tokens out.

# backend/qrmenu/routes/auth.py
"""
Authentication API routes

- POST /login    email + password -> access/refresh token pair
- POST /refresh  refreshToken -> new pair (refresh tokens only)
- GET  /me       the authenticated principal
"""

from flask import Blueprint, request

from ..decorators import require_auth
from ..models import User
from ..extensions import db
from ..request_context import get_request_context
from ..services import auth_service
from ..services.restaurant_service import list_accessible_restaurants
from ..services.token_service import get_token_codec
from ..validation import require_text


auth_bp = Blueprint("auth", __name__, url_prefix="/api/admin/auth")


@auth_bp.post("/login")
def login_route():
    """Authenticate with email and password."""
    data = request.get_json(silent=True) or {}
    email = require_text(data, "email")
    password = require_text(data, "password")

    tokens = auth_service.login(email, password, get_token_codec())
    return tokens.to_dict(), 200


@auth_bp.post("/refresh")
def refresh_route():
    """Exchange a refresh token for a new token pair."""
    data = request.get_json(silent=True) or {}
    refresh_token = require_text(data, "refreshToken")

    tokens = auth_service.refresh_tokens(refresh_token, get_token_codec())
    return tokens.to_dict(), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    principal = get_request_context().principal
    user = db.session.get(User, principal.id)
    return {
        "user": user.to_dict(),
        "restaurant": user.restaurant.to_dict() if user.restaurant else None,
        "restaurants": [r.to_dict() for r in list_accessible_restaurants(principal)],
    }, 200
