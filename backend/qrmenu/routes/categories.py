# Overview: Flask API routes for categories of the selected restaurant.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_restaurant
from ..request_context import get_request_context
from ..services import category_service


categories_bp = Blueprint("categories", __name__, url_prefix="/api/admin/categories")


@categories_bp.get("")
@require_auth
@require_restaurant
def list_categories_route():
    categories = category_service.list_categories(get_request_context())
    return jsonify([c.to_dict() for c in categories])


@categories_bp.post("")
@require_auth
@require_restaurant
def create_category_route():
    payload = request.get_json(silent=True) or {}
    restaurant_id = payload.pop("restaurant_id", None)
    category = category_service.create_category(get_request_context(), payload, restaurant_id)
    return category.to_dict(), 201


@categories_bp.get("/<uuid>")
@require_auth
@require_restaurant
def get_category_route(uuid: str):
    return category_service.get_category(get_request_context(), uuid).to_dict()


@categories_bp.post("/import-defaults")
@require_auth
@require_restaurant
def import_defaults_route():
    """Copy missing global default categories into the selected restaurant."""
    created = category_service.import_default_categories(get_request_context())
    return jsonify([c.to_dict() for c in created]), 201
