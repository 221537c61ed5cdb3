# Overview: Service-layer operations for the global default category templates.

from __future__ import annotations

from ..errors import ConflictError
from ..extensions import db
from ..models import DefaultCategory
from ..validation import ModelValidationPolicy, validate_payload


DEFAULT_CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "sort_order"}),
    required_on_create=frozenset({"name"}),
)


def list_default_categories() -> list[DefaultCategory]:
    return db.session.query(DefaultCategory).order_by(DefaultCategory.sort_order, DefaultCategory.id).all()


def create_default_category(payload: dict) -> DefaultCategory:
    patch = validate_payload(model=DefaultCategory, payload=payload, policy=DEFAULT_CATEGORY_POLICY, partial=False)

    if db.session.query(DefaultCategory).filter(DefaultCategory.name == patch["name"]).first() is not None:
        raise ConflictError(f'Default category "{patch["name"]}" already exists.')

    if "sort_order" not in patch:
        patch["sort_order"] = db.session.query(DefaultCategory).count()

    category = DefaultCategory(**patch)
    db.session.add(category)
    db.session.commit()
    return category
