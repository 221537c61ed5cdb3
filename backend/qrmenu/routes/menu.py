# Overview: Public menu API; anonymous reads by restaurant slug.

from flask import Blueprint

from ..request_context import get_request_context
from ..services import menu_service


menu_bp = Blueprint("menu", __name__, url_prefix="/api/menu")


@menu_bp.get("/<slug>")
def get_menu_route(slug: str):
    return menu_service.assemble_menu(get_request_context().scope, slug)
