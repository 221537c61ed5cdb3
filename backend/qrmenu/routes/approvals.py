# Overview: Flask API routes for the super-admin product approval queue.

# backend/qrmenu/routes/approvals.py
"""
Approval routes.

The product status voter decides who may approve or reject: super-admins
only, and only while the product is PENDING_APPROVAL. Every route first
checks the super-admin capability, so anyone else gets 403 before a product
is looked up; a product in the wrong state gets 400.
"""

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_capability
from ..permissions import SuperAdminAction
from ..request_context import get_request_context
from ..services import approval_service


approvals_bp = Blueprint("approvals", __name__, url_prefix="/api/super-admin/approvals")


@approvals_bp.get("/pending")
@require_auth
@require_capability(SuperAdminAction.MANAGE_CATALOG)
def list_pending_route():
    products = approval_service.list_pending(get_request_context())
    return jsonify([approval_service.detail_to_dict(p) for p in products])


@approvals_bp.get("/<uuid>")
@require_auth
@require_capability(SuperAdminAction.MANAGE_CATALOG)
def get_approval_detail_route(uuid: str):
    product = approval_service.get_detail(get_request_context(), uuid)
    return approval_service.detail_to_dict(product)


@approvals_bp.post("/<uuid>/approve")
@require_auth
@require_capability(SuperAdminAction.MANAGE_CATALOG)
def approve_route(uuid: str):
    product = approval_service.approve(get_request_context(), uuid)
    return approval_service.detail_to_dict(product)


@approvals_bp.post("/<uuid>/reject")
@require_auth
@require_capability(SuperAdminAction.MANAGE_CATALOG)
def reject_route(uuid: str):
    """Body: {"note": "..."} (required)."""
    payload = request.get_json(silent=True) or {}
    product = approval_service.reject(get_request_context(), uuid, payload)
    return approval_service.detail_to_dict(product)
