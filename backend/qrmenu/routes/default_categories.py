# Overview: Flask API routes for the global default category templates.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_capability
from ..permissions import SuperAdminAction
from ..services import default_category_service


default_categories_bp = Blueprint(
    "default_categories", __name__, url_prefix="/api/super-admin/default-categories"
)


@default_categories_bp.get("")
@require_auth
@require_capability(SuperAdminAction.MANAGE_DEFAULTS)
def list_default_categories_route():
    return jsonify([c.to_dict() for c in default_category_service.list_default_categories()])


@default_categories_bp.post("")
@require_auth
@require_capability(SuperAdminAction.MANAGE_DEFAULTS)
def create_default_category_route():
    payload = request.get_json(silent=True) or {}
    category = default_category_service.create_default_category(payload)
    return category.to_dict(), 201
