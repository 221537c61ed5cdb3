# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/qrmenu/routes/products.py
"""
Product management routes with multi-tenant support.

MULTI-TENANT: All product operations go through the request's TenantScope.
A product of another restaurant answers exactly like a missing one (404).

WORKFLOW: POST /<uuid>/submit moves DRAFT or REJECTED products to
PENDING_APPROVAL; approval itself lives under /api/super-admin/approvals.
"""

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_restaurant
from ..request_context import get_request_context
from ..services import product_service


products_bp = Blueprint("products", __name__, url_prefix="/api/admin/products")


@products_bp.get("")
@require_auth
@require_restaurant
def list_products_route():
    """
    List products of the selected restaurant.

    Query params:
    - category: category uuid (optional)
    - status: DRAFT | PENDING_APPROVAL | APPROVED | REJECTED (optional)
    """
    products = product_service.list_products(
        get_request_context(),
        category_uuid=request.args.get("category"),
        status=request.args.get("status"),
    )
    return jsonify([p.to_dict() for p in products])


@products_bp.post("")
@require_auth
@require_restaurant
def create_product_route():
    payload = request.get_json(silent=True) or {}
    product = product_service.create_product(get_request_context(), payload)
    return product.to_dict(), 201


@products_bp.get("/<uuid>")
@require_auth
@require_restaurant
def get_product_route(uuid: str):
    return product_service.get_product(get_request_context(), uuid).to_dict()


@products_bp.put("/<uuid>")
@require_auth
@require_restaurant
def update_product_route(uuid: str):
    payload = request.get_json(silent=True) or {}
    product = product_service.update_product(get_request_context(), uuid, payload)
    return product.to_dict()


@products_bp.delete("/<uuid>")
@require_auth
@require_restaurant
def delete_product_route(uuid: str):
    product_service.delete_product(get_request_context(), uuid)
    return "", 204


@products_bp.post("/reorder")
@require_auth
@require_restaurant
def reorder_products_route():
    """Body: {"category_uuid": ..., "uuids": [...]} in the new order."""
    payload = request.get_json(silent=True) or {}
    uuids = payload.get("uuids")
    product_service.reorder_products(
        get_request_context(),
        payload.get("category_uuid"),
        uuids if isinstance(uuids, list) else [],
    )
    return "", 204


@products_bp.post("/<uuid>/submit")
@require_auth
@require_restaurant
def submit_product_route(uuid: str):
    """Submit for super-admin approval."""
    product = product_service.submit_product(get_request_context(), uuid)
    return product.to_dict()
