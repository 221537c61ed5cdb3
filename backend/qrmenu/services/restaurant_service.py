# Overview: Service-layer operations for restaurants; onboarding and the context switch.

"""
Restaurant Service

Super-admin side: list, onboard (restaurant + billing account + owner +
copied default categories in one commit), activate and deactivate.

Tenant side: switch_restaurant() moves a user's selected restaurant to one
of the restaurants they can access and hands back fresh tokens, since the
access token carries the selected restaurant.
"""

from __future__ import annotations

import re

from ..errors import ConflictError, EntityNotFound, ValidationError
from ..extensions import db
from ..models import Category, CustomerAccount, DefaultCategory, Restaurant, Role, User
from ..permissions import ROLE_RESTAURANT_OWNER
from ..validation import require_text
from .auth_service import PasswordValidationError, hash_password, issue_token_pair
from .permission_service import log_security_event
from .tenant_service import require_restaurant_access

_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def list_restaurants() -> list[Restaurant]:
    return (
        db.session.query(Restaurant)
        .filter(Restaurant.deleted_at.is_(None))
        .order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
        .all()
    )


def get_restaurant(uuid: str) -> Restaurant:
    restaurant = (
        db.session.query(Restaurant)
        .filter(Restaurant.uuid == uuid, Restaurant.deleted_at.is_(None))
        .first()
    )
    if restaurant is None:
        raise EntityNotFound("Restaurant", uuid)
    return restaurant


def onboard_restaurant(payload: dict) -> Restaurant:
    """
    Create a restaurant with its owner.

    Payload: name, slug, owner_email, owner_password, optional
    owner_first_name / owner_last_name / description.
    """
    name = require_text(payload, "name")
    slug = require_text(payload, "slug").lower()
    owner_email = require_text(payload, "owner_email").lower()
    owner_password = require_text(payload, "owner_password")

    if not _SLUG_RE.match(slug):
        raise ValidationError(errors=[{"field": "slug", "message": "Use lowercase letters, digits and dashes."}])

    if db.session.query(Restaurant).filter(Restaurant.slug == slug).first() is not None:
        raise ConflictError(f'Restaurant with slug "{slug}" already exists.')
    if db.session.query(User).filter(User.email == owner_email).first() is not None:
        raise ConflictError(f'User with email "{owner_email}" already exists.')

    try:
        password_hash = hash_password(owner_password)
    except PasswordValidationError as exc:
        raise ValidationError(errors=[{"field": "owner_password", "message": str(exc)}])

    account = CustomerAccount(name=name, email=owner_email)
    restaurant = Restaurant(
        name=name,
        slug=slug,
        description=payload.get("description"),
        customer_account=account,
    )
    owner = User(
        email=owner_email,
        password_hash=password_hash,
        first_name=payload.get("owner_first_name") or "",
        last_name=payload.get("owner_last_name") or "",
        customer_account=account,
    )
    owner.add_restaurant(restaurant)

    owner_role = db.session.query(Role).filter_by(name=ROLE_RESTAURANT_OWNER).first()
    if owner_role is not None:
        owner.add_role(owner_role)

    db.session.add_all([account, restaurant, owner])

    for default in db.session.query(DefaultCategory).order_by(DefaultCategory.sort_order):
        category = Category(name=default.name, sort_order=default.sort_order)
        category.restaurant = restaurant
        db.session.add(category)

    db.session.commit()
    return restaurant


def set_restaurant_active(uuid: str, is_active: bool) -> Restaurant:
    restaurant = get_restaurant(uuid)
    restaurant.is_active = is_active
    db.session.commit()
    return restaurant


def list_accessible_restaurants(principal) -> list[Restaurant]:
    if not principal.accessible_restaurant_ids:
        return []
    return (
        db.session.query(Restaurant)
        .filter(Restaurant.id.in_(principal.accessible_restaurant_ids), Restaurant.deleted_at.is_(None))
        .order_by(Restaurant.name)
        .all()
    )


def switch_restaurant(ctx, restaurant_uuid: str, codec):
    """Select another restaurant for the principal and issue new tokens."""
    restaurant = require_restaurant_access(ctx.principal, restaurant_uuid)

    user = db.session.get(User, ctx.principal.id)
    user.restaurant = restaurant
    db.session.commit()

    log_security_event(
        user_id=user.id,
        event_type="RESTAURANT_SWITCHED",
        success=True,
        reason=f"Selected restaurant {restaurant.id}",
        restaurant_id=restaurant.id,
    )
    return restaurant, issue_token_pair(user, codec)
