from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .tenancy import new_uuid


class CustomerAccount(db.Model):
    """
    Billing account owning one or more users and restaurants.

    INVARIANT (procedural, not a constraint): at most one subscription with
    is_active=True whose period covers today. The subscription gate
    re-checks it on every protected request.
    """
    __tablename__ = "customer_accounts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True, default=new_uuid)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(180), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now()
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uuid": self.uuid,
            "name": self.name,
            "email": self.email,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Plan(db.Model):
    __tablename__ = "plans"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), nullable=False, unique=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    max_restaurants = db.Column(db.Integer, nullable=False, default=1)
    yearly_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def duration_months(self) -> int:
        # Free plans run for one quarter; paid plans for a year.
        return 3 if self.code.lower() == "free" else 12

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "max_restaurants": self.max_restaurants,
            "yearly_price": str(self.yearly_price),
            "duration_months": self.duration_months(),
            "is_active": self.is_active,
        }


class CustomerSubscription(db.Model):
    """
    Subscription period of a billing account.

    LIFECYCLE: created active on purchase/renewal. Becomes inactive when a
    renewal replaces it, or lazily when the subscription gate sees
    ends_at < today. No scheduler flips the flag.
    """
    __tablename__ = "customer_subscriptions"
    __table_args__ = (
        db.Index("ix_customer_subscriptions_account_active", "customer_account_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_account_id = db.Column(
        db.Integer, db.ForeignKey("customer_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_id = db.Column(db.Integer, db.ForeignKey("plans.id"), nullable=False)

    starts_at = db.Column(db.Date, nullable=False)
    ends_at = db.Column(db.Date, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer_account = db.relationship("CustomerAccount", backref=db.backref("subscriptions", lazy=True))
    plan = db.relationship("Plan")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_account_id": self.customer_account_id,
            "plan": self.plan.code if self.plan else None,
            "starts_at": self.starts_at.isoformat(),
            "ends_at": self.ends_at.isoformat(),
            "is_active": self.is_active,
        }
