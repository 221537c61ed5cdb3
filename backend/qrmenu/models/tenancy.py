from __future__ import annotations

import uuid

from sqlalchemy.orm import declared_attr, validates

from ..extensions import db
from ..time_utils import to_utc_z


def new_uuid() -> str:
    return str(uuid.uuid4())


class Restaurant(db.Model):
    """
    Multi-tenant root: every tenant is a Restaurant.

    All categories, products, media, QR codes, pages and social links belong
    to exactly one restaurant. No tenant-owned row may cross restaurants.
    """
    __tablename__ = "restaurants"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True, default=new_uuid)
    customer_account_id = db.Column(
        db.Integer, db.ForeignKey("customer_accounts.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now()
    )
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    customer_account = db.relationship("CustomerAccount", backref=db.backref("restaurants", lazy=True))

    def __repr__(self) -> str:
        return f"<Restaurant id={self.id} slug={self.slug!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uuid": self.uuid,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "is_active": self.is_active,
            "customer_account_id": self.customer_account_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class TenantOwnedMixin:
    """
    Columns shared by every tenant-owned entity.

    MULTI-TENANT: restaurant_id is set at creation and never reassigned.
    Queries must go through TenantScope.query() so the tenant predicate is
    applied (see services/tenant_service.py).
    """

    # SubjectKind of the entity, used by the ownership voter
    subject_kind = None

    # Entities that soft-delete override this with a deleted_at column
    soft_deletes = False

    @declared_attr
    def restaurant_id(cls):
        return db.Column(
            db.Integer, db.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
        )

    @declared_attr
    def restaurant(cls):
        return db.relationship("Restaurant")

    @validates("restaurant_id")
    def _validate_restaurant_id(self, key, value):
        if self.restaurant_id is not None and value != self.restaurant_id:
            raise ValueError("Tenant reference cannot be reassigned")
        return value
