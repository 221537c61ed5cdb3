# Overview: Service-layer operations for the public menu.

"""
Public Menu Assembly

Anonymous, unrestricted reads keyed by restaurant slug. Only what a guest
may see is returned: an active restaurant, its active categories and their
active, approved, non-deleted products.
"""

from __future__ import annotations

from ..enums import ProductStatus
from ..errors import EntityNotFound
from ..extensions import db
from ..models import Category, Product, Restaurant, RestaurantPage, RestaurantSocialLink


def assemble_menu(scope, slug: str) -> dict:
    restaurant = (
        db.session.query(Restaurant)
        .filter(
            Restaurant.slug == slug,
            Restaurant.is_active.is_(True),
            Restaurant.deleted_at.is_(None),
        )
        .first()
    )
    if restaurant is None:
        raise EntityNotFound("Restaurant", slug)

    categories = (
        scope.query(Category)
        .filter(Category.restaurant_id == restaurant.id, Category.is_active.is_(True))
        .order_by(Category.sort_order, Category.id)
        .all()
    )

    products = (
        scope.query(Product)
        .filter(
            Product.restaurant_id == restaurant.id,
            Product.is_active.is_(True),
            Product.status == ProductStatus.APPROVED,
        )
        .order_by(Product.sort_order, Product.id)
        .all()
    )
    by_category: dict[int, list[Product]] = {}
    for product in products:
        by_category.setdefault(product.category_id, []).append(product)

    pages = scope.query(RestaurantPage).filter(RestaurantPage.restaurant_id == restaurant.id).all()
    links = scope.query(RestaurantSocialLink).filter(RestaurantSocialLink.restaurant_id == restaurant.id).all()

    return {
        "uuid": restaurant.uuid,
        "name": restaurant.name,
        "slug": restaurant.slug,
        "description": restaurant.description,
        "categories": [
            {
                "uuid": category.uuid,
                "name": category.name,
                "description": category.description,
                "products": [_public_product(p) for p in by_category.get(category.id, [])],
            }
            for category in categories
        ],
        "pages": [{"slug": page.slug, "title": page.title} for page in pages],
        "social_links": [{"platform": link.platform, "url": link.url} for link in links],
    }


def _public_product(product: Product) -> dict:
    return {
        "uuid": product.uuid,
        "name": product.name,
        "description": product.description,
        "price": str(product.price),
    }
