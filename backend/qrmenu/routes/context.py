# Overview: Flask API routes for the selected-restaurant context.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth
from ..request_context import get_request_context
from ..services import restaurant_service
from ..services.token_service import get_token_codec
from ..validation import require_text


context_bp = Blueprint("context", __name__, url_prefix="/api/admin/context")


@context_bp.get("/restaurants")
@require_auth
def list_restaurants_route():
    """Restaurants the caller may switch to."""
    principal = get_request_context().principal
    restaurants = restaurant_service.list_accessible_restaurants(principal)
    return jsonify([r.to_dict() for r in restaurants])


@context_bp.post("/restaurant")
@require_auth
def switch_restaurant_route():
    """
    Select the restaurant to work in.

    The access token carries the selected restaurant, so the response holds a
    new token pair; the old access token keeps the old selection until it
    expires.
    """
    data = request.get_json(silent=True) or {}
    restaurant_uuid = require_text(data, "restaurant_uuid")

    restaurant, tokens = restaurant_service.switch_restaurant(
        get_request_context(), restaurant_uuid, get_token_codec()
    )
    body = tokens.to_dict()
    body["restaurant"] = restaurant.to_dict()
    return body, 200
