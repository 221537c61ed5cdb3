"""
Multi-Tenant Service: Request-Scoped Tenant Predicate

WHY: Every tenant-owned read and write must stay inside one restaurant.
Instead of an ambient ORM filter, each request gets an explicit TenantScope
and every tenant-owned query is built through it.

SECURITY INVARIANTS:
1. A restricted scope adds restaurant_id == <scope restaurant> to every query
2. New tenant-owned rows get their restaurant from the scope, never from input
3. Restaurant ids from client input are validated against the principal
4. Cross-tenant access attempts are logged as security events

USAGE:
    from qrmenu.request_context import get_request_context

    scope = get_request_context().scope
    products = scope.query(Product).order_by(Product.sort_order).all()
    product = scope.get(Product, product_uuid)

    with scope.lifted():
        purge_deleted_media(scope, days=30)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from flask import current_app

from ..errors import EntityNotFound, ValidationError
from ..extensions import db
from ..models import Restaurant, TenantOwnedMixin
from ..permissions import Principal
from .permission_service import log_security_event


class TenantAccessError(Exception):
    """Raised when a write would cross the scope's restaurant."""
    pass


class TenantScope:
    """
    Tenant predicate of one request.

    restaurant_id None means unrestricted. lifted() suspends the predicate
    temporarily and restores it on exit, even when the block raises.
    """

    def __init__(self, restaurant_id: Optional[int] = None):
        self._restaurant_id = restaurant_id
        self._lift_depth = 0

    def __repr__(self) -> str:
        return f"<TenantScope restaurant_id={self._restaurant_id} lifted={self.is_lifted}>"

    @property
    def restaurant_id(self) -> Optional[int]:
        """Restaurant the predicate currently filters on, or None."""
        if self._lift_depth:
            return None
        return self._restaurant_id

    @property
    def is_restricted(self) -> bool:
        return self.restaurant_id is not None

    @property
    def is_lifted(self) -> bool:
        return self._lift_depth > 0

    @contextmanager
    def lifted(self) -> Iterator["TenantScope"]:
        self._lift_depth += 1
        try:
            yield self
        finally:
            self._lift_depth -= 1

    def query(self, model, include_deleted: bool = False):
        """
        Base query on a tenant-owned model with the predicate applied.

        Soft-deleted rows are excluded unless include_deleted is set.
        """
        _require_tenant_owned(model)

        query = db.session.query(model)
        if self.is_restricted:
            query = query.filter(model.restaurant_id == self.restaurant_id)
        if model.soft_deletes and not include_deleted:
            query = query.filter(model.deleted_at.is_(None))
        return query

    def get(self, model, uuid: str, include_deleted: bool = False):
        """Entity by uuid inside the scope, or None."""
        return self.query(model, include_deleted=include_deleted).filter(model.uuid == uuid).first()

    def get_or_404(self, model, uuid: str, entity_name: Optional[str] = None):
        entity = self.get(model, uuid)
        if entity is None:
            raise EntityNotFound(entity_name or model.__name__, uuid)
        return entity

    def assign(self, entity, restaurant_id: Optional[int] = None):
        """
        Give a new tenant-owned entity its restaurant.

        Restricted scopes always use their own restaurant. Unrestricted
        scopes need an explicit restaurant_id (or one already set).
        """
        _require_tenant_owned(type(entity))

        if self.is_restricted:
            if restaurant_id is not None and restaurant_id != self.restaurant_id:
                raise TenantAccessError("Entity cannot be created for another restaurant")
            entity.restaurant_id = self.restaurant_id
            return entity

        if restaurant_id is not None:
            entity.restaurant_id = restaurant_id
        if entity.restaurant_id is None:
            raise ValidationError(
                errors=[{"field": "restaurant_id", "message": "Restaurant is required."}]
            )
        return entity


def unrestricted() -> TenantScope:
    return TenantScope(None)


def build_tenant_scope(principal: Optional[Principal], path: str, config) -> TenantScope:
    """
    Decide the tenant predicate of one request.

    Unrestricted for the public menu API, the super-admin API, anonymous
    callers, super-admins and principals without a restaurant. Otherwise
    restricted to the principal's selected restaurant.
    """
    if path.startswith(config["PUBLIC_API_PREFIX"]):
        return unrestricted()
    if path.startswith(config["SUPER_ADMIN_API_PREFIX"]):
        return unrestricted()
    if principal is None or principal.is_super_admin:
        return unrestricted()
    if principal.restaurant_id is None:
        return unrestricted()
    return TenantScope(principal.restaurant_id)


def require_restaurant_access(principal: Principal, restaurant_uuid: str) -> Restaurant:
    """
    Validate that principal may work inside the restaurant.

    SECURITY: Core check for restaurant ids coming from client input (the
    context switch). Super-admins may enter any restaurant. Unknown and
    foreign restaurants raise the same EntityNotFound.
    """
    restaurant = (
        db.session.query(Restaurant)
        .filter(Restaurant.uuid == restaurant_uuid, Restaurant.deleted_at.is_(None))
        .first()
    )

    if restaurant is None:
        _log_cross_tenant_attempt(principal, f"Restaurant {restaurant_uuid} not found")
        raise EntityNotFound("Restaurant", restaurant_uuid)

    if not principal.is_super_admin and restaurant.id not in principal.accessible_restaurant_ids:
        # Don't reveal it exists
        _log_cross_tenant_attempt(
            principal,
            f"Restaurant {restaurant.id} is not accessible to user {principal.id}",
        )
        raise EntityNotFound("Restaurant", restaurant_uuid)

    return restaurant


def _require_tenant_owned(model) -> None:
    if not (isinstance(model, type) and issubclass(model, TenantOwnedMixin)):
        raise TypeError(f"{model!r} is not a tenant-owned model")


def _log_cross_tenant_attempt(principal: Optional[Principal], reason: str) -> None:
    """
    Log a cross-tenant access attempt as a security event.

    SECURITY: Audit trail for detecting probing of other tenants.
    """
    current_app.logger.warning("Cross-tenant access denied: %s", reason)
    log_security_event(
        user_id=principal.id if principal is not None else None,
        event_type="CROSS_TENANT_ACCESS_DENIED",
        success=False,
        reason=reason,
        restaurant_id=principal.restaurant_id if principal is not None else None,
    )
