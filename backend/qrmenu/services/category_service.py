# Overview: Service-layer operations for categories of the current restaurant.

from __future__ import annotations

from ..errors import EntityNotFound
from ..extensions import db
from ..models import Category, DefaultCategory
from ..permissions import ResourceAction, Subject
from ..validation import ModelValidationPolicy, validate_payload
from . import permission_service


CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "description", "sort_order", "is_active"}),
    required_on_create=frozenset({"name"}),
)


def list_categories(ctx) -> list[Category]:
    return ctx.scope.query(Category).order_by(Category.sort_order, Category.id).all()


def get_category(ctx, uuid: str, action: ResourceAction = ResourceAction.VIEW) -> Category:
    """Category inside the scope that the principal may act on; 404 otherwise."""
    category = ctx.scope.get(Category, uuid)
    if category is None:
        raise EntityNotFound("Category", uuid)
    permission_service.deny_access_unless_granted(
        action, Subject.of(category), ctx.principal, entity_name="Category", identifier=uuid
    )
    return category


def create_category(ctx, payload: dict, restaurant_id: int | None = None) -> Category:
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)

    category = Category(**patch)
    ctx.scope.assign(category, restaurant_id)
    if "sort_order" not in patch:
        category.sort_order = ctx.scope.query(Category).filter(
            Category.restaurant_id == category.restaurant_id
        ).count()

    permission_service.deny_access_unless_granted(ResourceAction.EDIT, Subject.of(category), ctx.principal)

    db.session.add(category)
    db.session.commit()
    return category


def import_default_categories(ctx, restaurant_id: int | None = None) -> list[Category]:
    """Copy the global default categories the restaurant does not have yet."""
    target = ctx.scope.assign(Category(name=""), restaurant_id)
    permission_service.deny_access_unless_granted(ResourceAction.EDIT, Subject.of(target), ctx.principal)

    existing = {
        name for (name,) in ctx.scope.query(Category)
        .filter(Category.restaurant_id == target.restaurant_id)
        .with_entities(Category.name)
    }

    created = []
    for default in db.session.query(DefaultCategory).order_by(DefaultCategory.sort_order):
        if default.name in existing:
            continue
        category = Category(name=default.name, sort_order=default.sort_order)
        ctx.scope.assign(category, target.restaurant_id)
        db.session.add(category)
        created.append(category)

    db.session.commit()
    return created
