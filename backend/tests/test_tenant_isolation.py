# Overview: Pytest coverage for tenant isolation behavior over HTTP.

"""
Multi-Tenant Isolation Tests

SECURITY TESTS: Prove that cross-tenant access is denied for core resources.

These tests create two restaurants with separate owners, then verify that:
1. Owner A cannot read/write data of Restaurant B
2. Foreign entities answer exactly like missing ones (404, same body)
3. Passing a foreign restaurant id is rejected
4. Security events are logged for cross-tenant access attempts
5. Switching restaurants only works for restaurants the user may access
"""

import pytest

from qrmenu.enums import ProductStatus
from qrmenu.errors import EntityNotFound
from qrmenu.models import Category, Product, SecurityEvent
from qrmenu.permissions import ROLE_EDITOR, Principal, ResourceAction
from qrmenu.request_context import RequestContext
from qrmenu.services import product_service
from qrmenu.services.tenant_service import unrestricted


MISSING_UUID = "00000000-0000-0000-0000-000000000000"


def _not_found(entity, identifier):
    return {
        "status": 404,
        "type": "not_found",
        "message": f'{entity} with identifier "{identifier}" not found.',
    }


class TestProductIsolation:
    """Products of another restaurant are invisible."""

    def test_foreign_product_answers_like_missing(self, client, owner_a_headers, product_b):
        foreign = client.get(f"/api/admin/products/{product_b.uuid}", headers=owner_a_headers)
        missing = client.get(f"/api/admin/products/{MISSING_UUID}", headers=owner_a_headers)

        assert foreign.status_code == missing.status_code == 404
        assert foreign.get_json() == _not_found("Product", product_b.uuid)
        assert missing.get_json() == _not_found("Product", MISSING_UUID)

    @pytest.mark.parametrize("method,suffix", [
        ("put", ""),
        ("delete", ""),
        ("post", "/submit"),
    ])
    def test_foreign_product_writes(self, client, db_session, owner_a_headers, product_b, method, suffix):
        resp = getattr(client, method)(
            f"/api/admin/products/{product_b.uuid}{suffix}",
            headers=owner_a_headers,
            json={"name": "Hijacked"},
        )
        assert resp.status_code == 404

        db_session.refresh(product_b)
        assert product_b.name == "Goulash"
        assert product_b.status is ProductStatus.DRAFT
        assert product_b.deleted_at is None

    def test_list_only_own(self, client, owner_a_headers, product_a, product_b):
        resp = client.get("/api/admin/products", headers=owner_a_headers)
        assert [p["uuid"] for p in resp.get_json()] == [product_a.uuid]

    def test_create_in_foreign_category(self, client, db_session, owner_a_headers, restaurant_a, category_b):
        resp = client.post("/api/admin/products", headers=owner_a_headers, json={
            "name": "Stray", "price": "1.00", "category_uuid": category_b.uuid,
        })
        assert resp.status_code == 404
        assert resp.get_json() == _not_found("Category", category_b.uuid)
        assert db_session.query(Product).count() == 0

    def test_restaurant_id_in_payload_refused(self, client, owner_a_headers, category_a, restaurant_b):
        resp = client.post("/api/admin/products", headers=owner_a_headers, json={
            "name": "Stray", "price": "1.00", "category_uuid": category_a.uuid,
            "restaurant_id": restaurant_b.id,
        })
        assert resp.status_code == 422

    def test_ownership_voter_backs_up_the_scope(self, db_session, owner_a, product_b):
        """Even with the predicate off, the voter hides foreign products."""
        ctx = RequestContext(principal=Principal.from_user(owner_a), scope=unrestricted())

        with pytest.raises(EntityNotFound) as exc_info:
            product_service.get_product(ctx, product_b.uuid, ResourceAction.VIEW)

        assert exc_info.value.to_dict() == _not_found("Product", product_b.uuid)
        event = db_session.query(SecurityEvent).filter_by(event_type="CROSS_TENANT_ACCESS_DENIED").one()
        assert event.user_id == owner_a.id


class TestCategoryIsolation:

    def test_create_for_foreign_restaurant(self, client, db_session, owner_a_headers, restaurant_b):
        resp = client.post("/api/admin/categories", headers=owner_a_headers, json={
            "name": "Injected", "restaurant_id": restaurant_b.id,
        })
        assert resp.status_code == 403
        assert db_session.query(Category).filter_by(restaurant_id=restaurant_b.id).count() == 0

    def test_create_in_own_restaurant(self, client, owner_a_headers, restaurant_a):
        resp = client.post("/api/admin/categories", headers=owner_a_headers, json={"name": "Desserts"})
        assert resp.status_code == 201
        assert resp.get_json()["restaurant_id"] == restaurant_a.id

    def test_foreign_category(self, client, owner_a_headers, category_b):
        resp = client.get(f"/api/admin/categories/{category_b.uuid}", headers=owner_a_headers)
        assert resp.get_json() == _not_found("Category", category_b.uuid)

    def test_list_only_own(self, client, owner_a_headers, category_a, category_b):
        resp = client.get("/api/admin/categories", headers=owner_a_headers)
        assert [c["uuid"] for c in resp.get_json()] == [category_a.uuid]


class TestRestaurantContext:
    """Selecting the restaurant to work in."""

    @pytest.fixture
    def multi_editor(self, db_session, user_factory, restaurant_a, restaurant_b):
        user = user_factory("multi@test.test", [ROLE_EDITOR], restaurant_a)
        user.add_restaurant(restaurant_b)
        db_session.commit()
        return user

    def test_switch_to_accessible_restaurant(self, client, db_session, token_for, multi_editor,
                                             restaurant_b, product_a, product_b):
        headers = token_for(multi_editor)

        listed = client.get("/api/admin/context/restaurants", headers=headers)
        assert {r["slug"] for r in listed.get_json()} == {"cafe-a", "bistro-b"}

        resp = client.post("/api/admin/context/restaurant", headers=headers,
                           json={"restaurant_uuid": restaurant_b.uuid})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["restaurant"]["uuid"] == restaurant_b.uuid

        switched = {"Authorization": f"Bearer {body['accessToken']}"}
        products = client.get("/api/admin/products", headers=switched)
        assert [p["uuid"] for p in products.get_json()] == [product_b.uuid]

        event = db_session.query(SecurityEvent).filter_by(event_type="RESTAURANT_SWITCHED").one()
        assert event.restaurant_id == restaurant_b.id

    def test_switch_to_foreign_restaurant(self, client, db_session, owner_a_headers, restaurant_b):
        resp = client.post("/api/admin/context/restaurant", headers=owner_a_headers,
                           json={"restaurant_uuid": restaurant_b.uuid})

        assert resp.status_code == 404
        assert resp.get_json() == _not_found("Restaurant", restaurant_b.uuid)
        assert db_session.query(SecurityEvent).filter_by(event_type="CROSS_TENANT_ACCESS_DENIED").count() == 1

    def test_user_without_restaurant_refused(self, client, user_factory, token_for):
        loose = user_factory("loose@test.test", [ROLE_EDITOR])
        resp = client.get("/api/admin/products", headers=token_for(loose))
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "No restaurant selected."

    def test_super_admin_sees_all(self, client, super_admin_headers, product_a, product_b):
        resp = client.get("/api/admin/products", headers=super_admin_headers)
        assert {p["uuid"] for p in resp.get_json()} == {product_a.uuid, product_b.uuid}


class TestSuperAdminArea:
    """Tenant users never reach the super-admin API."""

    @pytest.mark.parametrize("method,path", [
        ("GET", "/api/super-admin/restaurants"),
        ("POST", "/api/super-admin/restaurants"),
        ("GET", "/api/super-admin/default-categories"),
        ("GET", "/api/super-admin/approvals/pending"),
    ])
    def test_owner_forbidden(self, client, owner_a_headers, method, path):
        resp = getattr(client, method.lower())(path, headers=owner_a_headers, json={})
        assert resp.status_code == 403

    def test_anonymous_unauthorized(self, client, db_session):
        assert client.get("/api/super-admin/restaurants").status_code == 401


class TestPublicMenu:
    """Anonymous reads see approved, active, non-deleted products only."""

    def test_menu_shows_approved_only(self, client, db_session, restaurant_a, category_a, product_a):
        approved = Product(
            restaurant_id=restaurant_a.id, category_id=category_a.id, name="Cola",
            price=product_a.price, status=ProductStatus.APPROVED,
        )
        hidden = Product(
            restaurant_id=restaurant_a.id, category_id=category_a.id, name="Secret",
            price=product_a.price, status=ProductStatus.APPROVED, is_active=False,
        )
        db_session.add_all([approved, hidden])
        db_session.commit()

        resp = client.get("/api/menu/cafe-a")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["slug"] == "cafe-a"
        assert [p["name"] for p in body["categories"][0]["products"]] == ["Cola"]

    def test_menu_never_leaks_other_restaurants(self, client, db_session, restaurant_a, category_a, product_b):
        product_b.status = ProductStatus.APPROVED
        db_session.commit()

        body = client.get("/api/menu/cafe-a").get_json()
        names = [p["name"] for c in body["categories"] for p in c["products"]]
        assert "Goulash" not in names

    def test_inactive_restaurant_not_found(self, client, db_session, restaurant_a):
        restaurant_a.is_active = False
        db_session.commit()

        resp = client.get("/api/menu/cafe-a")
        assert resp.status_code == 404
        assert resp.get_json() == _not_found("Restaurant", "cafe-a")

    def test_unknown_slug(self, client, db_session):
        assert client.get("/api/menu/nowhere").status_code == 404
