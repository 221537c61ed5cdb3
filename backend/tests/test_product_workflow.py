# Overview: Pytest coverage for product CRUD and the approval workflow.

"""
Product Workflow Tests

Verifies:
- Products are created as DRAFT inside the caller's restaurant
- Owners and editors submit; super-admins approve or reject
- Illegal moves answer 400, wrong roles answer 403
- Every move is recorded in the approval history
- A lost compare-and-set race fails instead of overwriting
"""

from types import SimpleNamespace

import pytest

from qrmenu.enums import ApprovalAction, ProductStatus
from qrmenu.errors import InvalidStatusTransition
from qrmenu.models import Product, ProductApprovalLog
from qrmenu.permissions import Principal
from qrmenu.request_context import RequestContext
from qrmenu.services.product_service import transition_product_status
from qrmenu.services.tenant_service import unrestricted


def _submit(client, headers, product):
    return client.post(f"/api/admin/products/{product.uuid}/submit", headers=headers)


def _approve(client, headers, product):
    return client.post(f"/api/super-admin/approvals/{product.uuid}/approve", headers=headers)


def _reject(client, headers, product, note=None):
    body = {} if note is None else {"note": note}
    return client.post(f"/api/super-admin/approvals/{product.uuid}/reject", headers=headers, json=body)


class TestProductCrud:
    """Owner-side product management."""

    def test_create_is_draft_in_own_restaurant(self, client, owner_a_headers, restaurant_a, category_a):
        resp = client.post("/api/admin/products", headers=owner_a_headers, json={
            "name": "Espresso",
            "price": "2.40",
            "category_uuid": category_a.uuid,
        })

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["status"] == "DRAFT"
        assert body["price"] == "2.40"
        assert body["restaurant_id"] == restaurant_a.id
        assert body["category_uuid"] == category_a.uuid

    def test_create_requires_fields(self, client, owner_a_headers, category_a):
        resp = client.post("/api/admin/products", headers=owner_a_headers, json={"name": "Espresso"})

        assert resp.status_code == 422
        fields = {error["field"] for error in resp.get_json()["errors"]}
        assert fields == {"price", "category_uuid"}

    def test_status_is_not_writable(self, client, owner_a_headers, category_a):
        resp = client.post("/api/admin/products", headers=owner_a_headers, json={
            "name": "Espresso",
            "price": "2.40",
            "category_uuid": category_a.uuid,
            "status": "APPROVED",
        })
        assert resp.status_code == 422

    def test_negative_price_rejected(self, client, owner_a_headers, category_a):
        resp = client.post("/api/admin/products", headers=owner_a_headers, json={
            "name": "Espresso", "price": "-1", "category_uuid": category_a.uuid,
        })
        assert resp.status_code == 422

    def test_update(self, client, owner_a_headers, product_a):
        resp = client.put(f"/api/admin/products/{product_a.uuid}", headers=owner_a_headers, json={"price": 4})
        assert resp.status_code == 200
        assert resp.get_json()["price"] == "4.00"

    def test_delete_is_soft(self, client, db_session, owner_a_headers, product_a):
        resp = client.delete(f"/api/admin/products/{product_a.uuid}", headers=owner_a_headers)
        assert resp.status_code == 204

        assert client.get(f"/api/admin/products/{product_a.uuid}", headers=owner_a_headers).status_code == 404
        assert db_session.get(Product, product_a.id).deleted_at is not None

    def test_list_filters_by_status(self, client, db_session, owner_a_headers, product_a):
        resp = client.get("/api/admin/products?status=DRAFT", headers=owner_a_headers)
        assert [p["uuid"] for p in resp.get_json()] == [product_a.uuid]

        resp = client.get("/api/admin/products?status=APPROVED", headers=owner_a_headers)
        assert resp.get_json() == []

        resp = client.get("/api/admin/products?status=PUBLISHED", headers=owner_a_headers)
        assert resp.status_code == 422

    def test_reorder(self, client, db_session, owner_a_headers, category_a, product_a):
        second = Product(
            restaurant_id=category_a.restaurant_id, category_id=category_a.id,
            name="Iced Tea", price=product_a.price, sort_order=1,
        )
        db_session.add(second)
        db_session.commit()

        resp = client.post("/api/admin/products/reorder", headers=owner_a_headers, json={
            "category_uuid": category_a.uuid,
            "uuids": [second.uuid, product_a.uuid],
        })
        assert resp.status_code == 204

        listed = client.get(f"/api/admin/products?category={category_a.uuid}", headers=owner_a_headers)
        assert [p["name"] for p in listed.get_json()] == ["Iced Tea", "Lemonade"]


class TestSubmit:
    """DRAFT/REJECTED -> PENDING_APPROVAL by owners and editors."""

    def test_owner_submits_draft(self, client, db_session, owner_a, owner_a_headers, product_a):
        resp = _submit(client, owner_a_headers, product_a)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "PENDING_APPROVAL"
        assert body["submitted_at"] == "2026-03-15T12:00:00Z"

        log = db_session.query(ProductApprovalLog).filter_by(product_id=product_a.id).one()
        assert log.action is ApprovalAction.SUBMITTED
        assert log.performed_by_id == owner_a.id

    def test_editor_submits(self, client, editor_a_headers, product_a):
        assert _submit(client, editor_a_headers, product_a).status_code == 200

    def test_resubmit_pending_is_bad_request(self, client, owner_a_headers, product_a):
        _submit(client, owner_a_headers, product_a)
        resp = _submit(client, owner_a_headers, product_a)

        assert resp.status_code == 400
        assert resp.get_json() == {
            "status": 400,
            "type": "bad_request",
            "message": 'Cannot transition product status from "PENDING_APPROVAL" to "PENDING_APPROVAL".',
        }

    def test_super_admin_cannot_submit(self, client, super_admin_headers, product_a):
        resp = _submit(client, super_admin_headers, product_a)
        assert resp.status_code == 403


class TestApproveReject:
    """Super-admin decisions on PENDING_APPROVAL products."""

    @pytest.fixture
    def pending(self, client, owner_a_headers, product_a):
        assert _submit(client, owner_a_headers, product_a).status_code == 200
        return product_a

    def test_approve(self, client, super_admin_headers, pending):
        resp = _approve(client, super_admin_headers, pending)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "APPROVED"
        assert [entry["action"] for entry in body["approval_history"]] == ["SUBMITTED", "APPROVED"]
        assert body["approval_history"][1]["performed_by"] == "Sam Admin"
        assert body["restaurant"]["slug"] == "cafe-a"

    def test_approved_is_terminal(self, client, super_admin_headers, owner_a_headers, pending):
        _approve(client, super_admin_headers, pending)

        again = _approve(client, super_admin_headers, pending)
        assert again.status_code == 400
        assert again.get_json()["message"] == 'Cannot transition product status from "APPROVED" to "APPROVED".'

        rejected = _reject(client, super_admin_headers, pending, note="Too late")
        assert rejected.status_code == 400
        assert rejected.get_json()["message"] == 'Cannot transition product status from "APPROVED" to "REJECTED".'

        assert _submit(client, owner_a_headers, pending).status_code == 400

    def test_approve_draft_is_bad_request(self, client, super_admin_headers, product_a):
        resp = _approve(client, super_admin_headers, product_a)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == 'Cannot transition product status from "DRAFT" to "APPROVED".'

    def test_owner_cannot_approve(self, client, owner_a_headers, pending):
        resp = _approve(client, owner_a_headers, pending)
        assert resp.status_code == 403
        assert resp.get_json() == {"status": 403, "type": "forbidden", "message": "Access denied."}

    @pytest.mark.parametrize("decide", [_approve, _reject])
    def test_foreign_and_missing_products_look_alike(self, client, owner_a_headers, product_b, decide):
        missing = SimpleNamespace(uuid="00000000-0000-0000-0000-000000000000")

        foreign_resp = decide(client, owner_a_headers, product_b)
        missing_resp = decide(client, owner_a_headers, missing)

        assert foreign_resp.status_code == missing_resp.status_code == 403
        assert foreign_resp.get_json() == missing_resp.get_json()

    def test_owner_reject_without_note_is_forbidden(self, client, owner_a_headers, product_b):
        resp = _reject(client, owner_a_headers, product_b)
        assert resp.status_code == 403
        assert resp.get_json()["type"] == "forbidden"

    def test_owner_cannot_see_queue(self, client, owner_a_headers, pending):
        assert client.get("/api/super-admin/approvals/pending", headers=owner_a_headers).status_code == 403

    def test_reject_requires_note(self, client, super_admin_headers, pending):
        assert _reject(client, super_admin_headers, pending).status_code == 422
        assert _reject(client, super_admin_headers, pending, note="   ").status_code == 422

    def test_reject_then_resubmit(self, client, db_session, super_admin_headers, owner_a_headers, pending):
        resp = _reject(client, super_admin_headers, pending, note="Add a photo")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "REJECTED"
        assert body["approval_history"][-1]["note"] == "Add a photo"

        resubmitted = _submit(client, owner_a_headers, pending)
        assert resubmitted.status_code == 200
        assert resubmitted.get_json()["status"] == "PENDING_APPROVAL"

        actions = [log.action for log in db_session.query(ProductApprovalLog).order_by(ProductApprovalLog.id)]
        assert actions == [ApprovalAction.SUBMITTED, ApprovalAction.REJECTED, ApprovalAction.SUBMITTED]

    def test_queue_oldest_first(self, client, clock, db_session, owner_a_headers, owner_b_headers,
                                super_admin_headers, product_a, product_b):
        _submit(client, owner_b_headers, product_b)
        clock.advance(seconds=60)
        _submit(client, owner_a_headers, product_a)

        resp = client.get("/api/super-admin/approvals/pending", headers=super_admin_headers)
        assert resp.status_code == 200
        assert [p["uuid"] for p in resp.get_json()] == [product_b.uuid, product_a.uuid]

    def test_detail(self, client, super_admin_headers, pending):
        resp = client.get(f"/api/super-admin/approvals/{pending.uuid}", headers=super_admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "PENDING_APPROVAL"


class TestCompareAndSet:
    """Concurrent moves of one product: exactly one wins."""

    def test_stale_status_loses(self, db_session, super_admin, product_a):
        product_a.status = ProductStatus.PENDING_APPROVAL
        db_session.commit()
        ctx = RequestContext(principal=Principal.from_user(super_admin), scope=unrestricted())

        stale = db_session.get(Product, product_a.id)
        assert stale.status is ProductStatus.PENDING_APPROVAL

        # Another writer rejects it behind our back
        db_session.query(Product).filter(Product.id == product_a.id).update(
            {Product.status: ProductStatus.REJECTED}, synchronize_session=False
        )

        with pytest.raises(InvalidStatusTransition):
            transition_product_status(ctx, stale, ProductStatus.APPROVED, ApprovalAction.APPROVED)

        assert db_session.query(ProductApprovalLog).count() == 0

    def test_illegal_target_refused_before_write(self, db_session, super_admin, product_a):
        ctx = RequestContext(principal=Principal.from_user(super_admin), scope=unrestricted())

        with pytest.raises(InvalidStatusTransition):
            transition_product_status(ctx, product_a, ProductStatus.APPROVED, ApprovalAction.APPROVED)

        db_session.refresh(product_a)
        assert product_a.status is ProductStatus.DRAFT
