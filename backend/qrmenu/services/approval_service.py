# Overview: Service-layer operations for the super-admin approval queue.

from __future__ import annotations

from ..enums import ApprovalAction, ProductStatus
from ..errors import EntityNotFound
from ..models import Product
from ..permissions import ProductStatusAction
from ..validation import require_text
from . import permission_service
from .product_service import transition_product_status


def list_pending(ctx) -> list[Product]:
    """Products waiting for a decision, oldest submission first."""
    return (
        ctx.scope.query(Product)
        .filter(Product.status == ProductStatus.PENDING_APPROVAL)
        .order_by(Product.submitted_at.asc(), Product.id.asc())
        .all()
    )


def get_detail(ctx, uuid: str) -> Product:
    product = ctx.scope.get(Product, uuid)
    if product is None:
        raise EntityNotFound("Product", uuid)
    return product


def approve(ctx, uuid: str) -> Product:
    product = get_detail(ctx, uuid)
    permission_service.deny_unless_product_action(ProductStatusAction.APPROVE, product, ctx.principal)
    return transition_product_status(ctx, product, ProductStatus.APPROVED, ApprovalAction.APPROVED)


def reject(ctx, uuid: str, payload: dict) -> Product:
    """Reject with a mandatory note explaining why."""
    product = get_detail(ctx, uuid)
    permission_service.deny_unless_product_action(ProductStatusAction.REJECT, product, ctx.principal)
    note = require_text(payload, "note")
    return transition_product_status(ctx, product, ProductStatus.REJECTED, ApprovalAction.REJECTED, note=note)


def detail_to_dict(product: Product) -> dict:
    data = product.to_dict()
    data["restaurant"] = product.restaurant.to_dict() if product.restaurant else None
    data["approval_history"] = [log.to_dict() for log in product.approval_logs]
    return data
