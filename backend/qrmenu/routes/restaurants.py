# Overview: Flask API routes for super-admin restaurant management.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_capability
from ..permissions import SuperAdminAction
from ..services import restaurant_service


restaurants_bp = Blueprint("restaurants", __name__, url_prefix="/api/super-admin/restaurants")


@restaurants_bp.get("")
@require_auth
@require_capability(SuperAdminAction.MANAGE_RESTAURANTS)
def list_restaurants_route():
    return jsonify([r.to_dict() for r in restaurant_service.list_restaurants()])


@restaurants_bp.post("")
@require_auth
@require_capability(SuperAdminAction.MANAGE_RESTAURANTS)
def onboard_restaurant_route():
    """
    Create a restaurant with its owner account.

    Body: name, slug, owner_email, owner_password, optional
    owner_first_name, owner_last_name, description.
    """
    payload = request.get_json(silent=True) or {}
    restaurant = restaurant_service.onboard_restaurant(payload)
    return restaurant.to_dict(), 201


@restaurants_bp.post("/<uuid>/activate")
@require_auth
@require_capability(SuperAdminAction.MANAGE_RESTAURANTS)
def activate_restaurant_route(uuid: str):
    return restaurant_service.set_restaurant_active(uuid, True).to_dict()


@restaurants_bp.post("/<uuid>/deactivate")
@require_auth
@require_capability(SuperAdminAction.MANAGE_RESTAURANTS)
def deactivate_restaurant_route(uuid: str):
    return restaurant_service.set_restaurant_active(uuid, False).to_dict()
