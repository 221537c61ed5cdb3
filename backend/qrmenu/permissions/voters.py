# Overview: Capability voters; pure functions of (action, subject, principal).

"""
Capability Voters

Each voter decides one family of actions. Voters never touch the database or
the request; they see only the principal and a Subject snapshot. Callers go
through services/permission_service.py, which turns votes into errors and
audit events.

DECISION RULES:
- Ownership: super-admin always; otherwise the subject's restaurant must be
  one of the principal's accessible restaurants.
- Super-admin capability: super-admin only, no subject.
- Product status: who may ask (role) first, then whether the product's
  current status allows the move.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..enums import ProductStatus
from .actions import ProductStatusAction, ResourceAction, SuperAdminAction, Vote
from .principal import Principal
from .roles import MENU_EDITOR_ROLES
from .subjects import Subject, SubjectKind


# Status each workflow action moves a product to
PRODUCT_ACTION_TARGETS = {
    ProductStatusAction.SUBMIT: ProductStatus.PENDING_APPROVAL,
    ProductStatusAction.APPROVE: ProductStatus.APPROVED,
    ProductStatusAction.REJECT: ProductStatus.REJECTED,
}


def vote_ownership(action: ResourceAction, subject: Optional[Subject], principal: Optional[Principal]) -> Vote:
    if principal is None or subject is None:
        return Vote.DENY

    if principal.is_super_admin:
        return Vote.GRANT

    if not principal.accessible_restaurant_ids:
        return Vote.DENY

    if subject.restaurant_id is None:
        return Vote.DENY

    if subject.restaurant_id in principal.accessible_restaurant_ids:
        return Vote.GRANT
    return Vote.DENY


def vote_super_admin(action: SuperAdminAction, subject: Optional[Subject], principal: Optional[Principal]) -> Vote:
    if principal is not None and principal.is_super_admin:
        return Vote.GRANT
    return Vote.DENY


def vote_product_status(
    action: ProductStatusAction, subject: Optional[Subject], principal: Optional[Principal]
) -> Vote:
    if principal is None or subject is None or subject.kind is not SubjectKind.PRODUCT:
        return Vote.DENY

    current = ProductStatus(subject.status)

    if action is ProductStatusAction.SUBMIT:
        if principal.is_super_admin:
            return Vote.DENY
        if not any(principal.has_role(role) for role in MENU_EDITOR_ROLES):
            return Vote.DENY
        if not current.can_transition_to(ProductStatus.PENDING_APPROVAL):
            return Vote.INVALID_STATE
        return Vote.GRANT

    # APPROVE and REJECT
    if not principal.is_super_admin:
        return Vote.DENY
    if current is not ProductStatus.PENDING_APPROVAL:
        return Vote.INVALID_STATE
    return Vote.GRANT


Voter = Callable[[object, Optional[Subject], Optional[Principal]], Vote]

# Dispatch by action family; every action enum has exactly one voter.
VOTERS: dict[type, Voter] = {
    ResourceAction: vote_ownership,
    SuperAdminAction: vote_super_admin,
    ProductStatusAction: vote_product_status,
}
