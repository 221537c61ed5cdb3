# Overview: Service-layer operations for products; CRUD and the publication workflow.

"""
Product Service

MULTI-TENANT: Every product is loaded through the request's TenantScope and
then checked by the ownership voter. A product of another restaurant is
reported exactly like a missing one.

WORKFLOW: Status changes go through transition_product_status(), which
- re-checks the transition table,
- writes with UPDATE ... WHERE status = <observed> (compare-and-set), so a
  concurrent move of the same product loses with InvalidStatusTransition
  instead of overwriting,
- appends a ProductApprovalLog row in the same commit.

CATALOG: APPROVED products of every active restaurant form a shared catalog.
Browsing it is a deliberate cross-tenant read; it runs with the scope
lifted and exposes name and description only. Cloning copies a catalog
product into a category of the caller's restaurant.
"""

from __future__ import annotations

from typing import Optional

from flask import current_app

from ..enums import ApprovalAction, ProductStatus
from ..errors import EntityNotFound, InvalidStatusTransition, ValidationError
from ..extensions import db
from ..models import Category, Product, ProductApprovalLog, Restaurant
from ..permissions import ProductStatusAction, ResourceAction, Subject
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, enforce_rules_product, validate_payload
from . import permission_service


PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "description", "price", "sort_order", "is_active"}),
    required_on_create=frozenset({"name", "price", "category_uuid"}),
    extra_fields=frozenset({"category_uuid"}),
)

CLONE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"price"}),
    required_on_create=frozenset({"price", "category_uuid"}),
    extra_fields=frozenset({"category_uuid"}),
)


def list_products(ctx, category_uuid: Optional[str] = None, status: Optional[str] = None) -> list[Product]:
    query = ctx.scope.query(Product)

    if category_uuid is not None:
        category = _scoped_category(ctx, category_uuid)
        query = query.filter(Product.category_id == category.id)

    if status is not None:
        try:
            status_enum = ProductStatus(status)
        except ValueError:
            raise ValidationError(errors=[{"field": "status", "message": f'Invalid status "{status}".'}])
        query = query.filter(Product.status == status_enum)

    return query.order_by(Product.sort_order, Product.id).all()


def get_product(ctx, uuid: str, action: ResourceAction = ResourceAction.VIEW) -> Product:
    """Product inside the scope that the principal may act on; 404 otherwise."""
    product = ctx.scope.get(Product, uuid)
    if product is None:
        raise EntityNotFound("Product", uuid)
    permission_service.deny_access_unless_granted(
        action, Subject.of(product), ctx.principal, entity_name="Product", identifier=uuid
    )
    return product


def create_product(ctx, payload: dict) -> Product:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)

    category = _scoped_category(ctx, patch.pop("category_uuid"))
    if "sort_order" not in patch:
        patch["sort_order"] = ctx.scope.query(Product).filter(Product.category_id == category.id).count()

    product = Product(**patch)
    ctx.scope.assign(product, category.restaurant_id)
    product.status = ProductStatus.DRAFT
    product.category = category

    db.session.add(product)
    db.session.commit()

    current_app.logger.info("Product %s created in restaurant %s", product.uuid, product.restaurant_id)
    return product


def update_product(ctx, uuid: str, payload: dict) -> Product:
    product = get_product(ctx, uuid, ResourceAction.EDIT)

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    enforce_rules_product(patch)

    category_uuid = patch.pop("category_uuid", None)
    if category_uuid is not None:
        category = _scoped_category(ctx, category_uuid)
        if category.restaurant_id != product.restaurant_id:
            raise EntityNotFound("Category", category_uuid)
        product.category = category

    for key, value in patch.items():
        setattr(product, key, value)

    db.session.commit()
    return product


def delete_product(ctx, uuid: str) -> None:
    """Soft delete; the row stays for the approval history."""
    product = get_product(ctx, uuid, ResourceAction.DELETE)
    product.deleted_at = utcnow()
    db.session.commit()


def reorder_products(ctx, category_uuid: str, product_uuids: list[str]) -> None:
    """Set sort_order of the category's products to their position in the list."""
    if not product_uuids:
        raise ValidationError(errors=[{"field": "uuids", "message": "UUID list cannot be empty."}])

    category = _scoped_category(ctx, category_uuid)
    permission_service.deny_access_unless_granted(
        ResourceAction.EDIT, Subject.of(category), ctx.principal, entity_name="Category", identifier=category_uuid
    )

    indexed = {
        product.uuid: product
        for product in ctx.scope.query(Product).filter(Product.category_id == category.id)
    }
    for product_uuid in product_uuids:
        if product_uuid not in indexed:
            raise EntityNotFound("Product", product_uuid)

    for position, product_uuid in enumerate(product_uuids):
        indexed[product_uuid].sort_order = position

    db.session.commit()


def submit_product(ctx, uuid: str) -> Product:
    """Send a product to the approval queue."""
    product = get_product(ctx, uuid, ResourceAction.EDIT)
    permission_service.deny_unless_product_action(ProductStatusAction.SUBMIT, product, ctx.principal)

    return transition_product_status(
        ctx,
        product,
        ProductStatus.PENDING_APPROVAL,
        ApprovalAction.SUBMITTED,
    )


def list_catalog(ctx) -> list[Product]:
    """Approved originals of every active restaurant, by name."""
    with ctx.scope.lifted():
        return _catalog_query(ctx).order_by(Product.name, Product.id).all()


def catalog_to_dict(product: Product) -> dict:
    return {
        "uuid": product.uuid,
        "name": product.name,
        "description": product.description,
    }


def clone_from_catalog(ctx, catalog_uuid: str, payload: dict) -> Product:
    """
    Copy a catalog product into a category of the caller's restaurant.

    Payload: category_uuid, price. The copy is born APPROVED since its
    content already went through review; only the price is the caller's.
    """
    patch = validate_payload(model=Product, payload=payload, policy=CLONE_POLICY, partial=False)
    enforce_rules_product(patch)

    with ctx.scope.lifted():
        source = _catalog_query(ctx).filter(Product.uuid == catalog_uuid).first()
    if source is None:
        raise EntityNotFound("CatalogProduct", catalog_uuid)

    category = _scoped_category(ctx, patch.pop("category_uuid"))

    product = Product(
        name=source.name,
        description=source.description,
        price=patch["price"],
        sort_order=ctx.scope.query(Product).filter(Product.category_id == category.id).count(),
    )
    ctx.scope.assign(product, category.restaurant_id)
    product.status = ProductStatus.APPROVED
    product.category = category
    product.catalog_product = source

    db.session.add(product)
    db.session.commit()

    current_app.logger.info(
        "Product %s cloned from catalog product %s into restaurant %s",
        product.uuid, source.uuid, product.restaurant_id,
    )
    return product


def transition_product_status(
    ctx,
    product: Product,
    target: ProductStatus,
    log_action: ApprovalAction,
    note: Optional[str] = None,
) -> Product:
    """
    Move product to target with a compare-and-set on its observed status.

    Raises InvalidStatusTransition when the move is illegal or when another
    writer changed the status since the product was loaded.
    """
    observed = product.status
    if not observed.can_transition_to(target):
        raise InvalidStatusTransition(observed, target)

    now = utcnow()
    values = {Product.status: target}
    if target is ProductStatus.PENDING_APPROVAL:
        values[Product.submitted_at] = now

    updated = (
        ctx.scope.query(Product)
        .filter(Product.id == product.id, Product.status == observed)
        .update(values, synchronize_session=False)
    )
    if updated != 1:
        db.session.rollback()
        current_app.logger.warning(
            "Lost status race on product %s (%s -> %s)", product.uuid, observed.value, target.value
        )
        raise InvalidStatusTransition(observed, target)

    db.session.add(ProductApprovalLog(
        product_id=product.id,
        action=log_action,
        performed_by_id=ctx.principal.id,
        note=note,
        created_at=now,
    ))
    db.session.commit()

    db.session.refresh(product)
    return product


def _scoped_category(ctx, category_uuid) -> Category:
    if not isinstance(category_uuid, str):
        raise ValidationError(errors=[{"field": "category_uuid", "message": "This value should be a UUID."}])
    category = ctx.scope.get(Category, category_uuid)
    if category is None:
        raise EntityNotFound("Category", category_uuid)
    return category


def _catalog_query(ctx):
    """Catalog rows; call with the scope lifted."""
    return (
        ctx.scope.query(Product)
        .join(Restaurant, Restaurant.id == Product.restaurant_id)
        .filter(
            Product.status == ProductStatus.APPROVED,
            Product.is_active.is_(True),
            Product.catalog_product_id.is_(None),
            Restaurant.is_active.is_(True),
            Restaurant.deleted_at.is_(None),
        )
    )
