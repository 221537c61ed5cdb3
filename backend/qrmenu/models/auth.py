from __future__ import annotations

from ..extensions import db
from ..permissions.roles import ROLE_SUPER_ADMIN, ROLE_USER
from ..time_utils import to_utc_z
from .tenancy import new_uuid


user_roles = db.Table(
    "user_roles",
    db.Column("user_id", db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    db.Column("role_id", db.Integer, db.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)

user_restaurants = db.Table(
    "user_restaurants",
    db.Column("user_id", db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    db.Column("restaurant_id", db.Integer, db.ForeignKey("restaurants.id", ondelete="CASCADE"), primary_key=True),
)


class Role(db.Model):
    """Global role (ROLE_SUPER_ADMIN, ROLE_RESTAURANT_OWNER, ROLE_EDITOR)."""
    __tablename__ = "roles"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}


class User(db.Model):
    """
    User accounts for authentication and attribution.

    MULTI-TENANT: A user works inside one selected restaurant at a time
    (restaurant_id) but may be granted several (restaurants). Super-admins
    are cross-tenant.

    Users are never hard-deleted; deleted_at marks them gone.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("idx_users_restaurant", "restaurant_id"),
        db.Index("idx_users_customer_account", "customer_account_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True, default=new_uuid)

    email = db.Column(db.String(180), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=False, default="")
    last_name = db.Column(db.String(100), nullable=False, default="")

    # Selected restaurant (owned restaurant for single-restaurant owners)
    restaurant_id = db.Column(db.Integer, db.ForeignKey("restaurants.id", ondelete="SET NULL"), nullable=True)
    customer_account_id = db.Column(
        db.Integer, db.ForeignKey("customer_accounts.id", ondelete="SET NULL"), nullable=True
    )

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    restaurant = db.relationship("Restaurant", foreign_keys=[restaurant_id])
    customer_account = db.relationship("CustomerAccount", backref=db.backref("users", lazy=True))
    roles = db.relationship("Role", secondary=user_roles, lazy="selectin", order_by="Role.id")
    restaurants = db.relationship(
        "Restaurant", secondary=user_restaurants, lazy="selectin", order_by="Restaurant.id",
        backref=db.backref("users", lazy=True),
    )

    def get_roles(self) -> list[str]:
        """Role names in grant order, always ending with ROLE_USER, no duplicates."""
        names = [role.name for role in self.roles]
        names.append(ROLE_USER)
        return list(dict.fromkeys(names))

    def is_super_admin(self) -> bool:
        return ROLE_SUPER_ADMIN in self.get_roles()

    def get_accessible_restaurant_ids(self) -> list[int]:
        ids = {restaurant.id for restaurant in self.restaurants if restaurant.id is not None}
        if self.restaurant_id is not None:
            ids.add(self.restaurant_id)
        return sorted(ids)

    def add_restaurant(self, restaurant) -> None:
        if restaurant not in self.restaurants:
            self.restaurants.append(restaurant)
        if self.restaurant is None and self.restaurant_id is None:
            self.restaurant = restaurant

    def add_role(self, role: Role) -> None:
        if role not in self.roles:
            self.roles.append(role)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uuid": self.uuid,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "roles": self.get_roles(),
            "restaurant_id": self.restaurant_id,
            "accessible_restaurant_ids": self.get_accessible_restaurant_ids(),
            "customer_account_id": self.customer_account_id,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }
