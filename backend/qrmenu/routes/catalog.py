# Overview: Flask API routes for the shared product catalog.

# backend/qrmenu/routes/catalog.py
"""
Catalog routes.

GET lists approved products of all active restaurants (name and
description only). POST /<uuid>/clone copies one into a category of the
selected restaurant.
"""

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_restaurant
from ..request_context import get_request_context
from ..services import product_service


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/admin/catalog")


@catalog_bp.get("")
@require_auth
@require_restaurant
def browse_catalog_route():
    products = product_service.list_catalog(get_request_context())
    return jsonify([product_service.catalog_to_dict(p) for p in products])


@catalog_bp.post("/<uuid>/clone")
@require_auth
@require_restaurant
def clone_catalog_product_route(uuid: str):
    """Body: {"category_uuid": ..., "price": "12.99"}."""
    payload = request.get_json(silent=True) or {}
    product = product_service.clone_from_catalog(get_request_context(), uuid, payload)
    return product.to_dict(), 201
