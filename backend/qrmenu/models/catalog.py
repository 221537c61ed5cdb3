from __future__ import annotations

from ..enums import ApprovalAction, ProductStatus
from ..extensions import db
from ..permissions.subjects import SubjectKind
from ..time_utils import to_utc_z
from .tenancy import TenantOwnedMixin, new_uuid


class Category(TenantOwnedMixin, db.Model):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    subject_kind = SubjectKind.CATEGORY
    soft_deletes = True

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True, default=new_uuid)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            "uuid": self.uuid,
            "restaurant_id": self.restaurant_id,
            "name": self.name,
            "description": self.description,
            "sort_order": self.sort_order,
            "is_active": self.is_active,
        }


class Product(TenantOwnedMixin, db.Model):
    """
    Menu product.

    status follows the publication workflow in enums.ProductStatus. Status
    writes use a compare-and-set on the observed status (product_service).
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_restaurant_status", "restaurant_id", "status"),
        {"sqlite_autoincrement": True},
    )

    subject_kind = SubjectKind.PRODUCT
    soft_deletes = True

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True, default=new_uuid)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)
    # Approved product of any restaurant this one was cloned from
    catalog_product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(
        db.Enum(ProductStatus, native_enum=False, length=32),
        nullable=False,
        default=ProductStatus.DRAFT,
    )
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now()
    )
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    catalog_product = db.relationship("Product", remote_side=[id])

    def to_dict(self) -> dict:
        return {
            "uuid": self.uuid,
            "restaurant_id": self.restaurant_id,
            "category_uuid": self.category.uuid if self.category else None,
            "catalog_product_uuid": self.catalog_product.uuid if self.catalog_product else None,
            "name": self.name,
            "description": self.description,
            "price": str(self.price),
            "status": self.status.value,
            "submitted_at": to_utc_z(self.submitted_at),
            "sort_order": self.sort_order,
            "is_active": self.is_active,
        }


class ProductApprovalLog(db.Model):
    """Append-only history of workflow moves on a product."""
    __tablename__ = "product_approval_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    action = db.Column(db.Enum(ApprovalAction, native_enum=False, length=32), nullable=False)
    performed_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    note = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    product = db.relationship(
        "Product", backref=db.backref("approval_logs", lazy=True, order_by="ProductApprovalLog.id")
    )
    performed_by = db.relationship("User")

    def to_dict(self) -> dict:
        performer = self.performed_by
        return {
            "action": self.action.value,
            "performed_by": f"{performer.first_name} {performer.last_name}".strip() if performer else None,
            "note": self.note,
            "created_at": to_utc_z(self.created_at),
        }


class Media(TenantOwnedMixin, db.Model):
    __tablename__ = "media"
    __table_args__ = {"sqlite_autoincrement": True}

    subject_kind = SubjectKind.MEDIA
    soft_deletes = True

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True, default=new_uuid)
    original_filename = db.Column(db.String(255), nullable=False)
    storage_path = db.Column(db.String(512), nullable=False)
    mime_type = db.Column(db.String(100), nullable=False)
    file_size = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)


class QrCode(TenantOwnedMixin, db.Model):
    __tablename__ = "qr_codes"
    __table_args__ = {"sqlite_autoincrement": True}

    subject_kind = SubjectKind.QR_CODE

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True, default=new_uuid)
    label = db.Column(db.String(120), nullable=False)
    table_number = db.Column(db.String(32), nullable=True)


class RestaurantPage(TenantOwnedMixin, db.Model):
    __tablename__ = "restaurant_pages"
    __table_args__ = (
        db.UniqueConstraint("restaurant_id", "slug", name="uq_restaurant_pages_restaurant_slug"),
        {"sqlite_autoincrement": True},
    )

    subject_kind = SubjectKind.PAGE

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(64), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=True)


class RestaurantSocialLink(TenantOwnedMixin, db.Model):
    __tablename__ = "restaurant_social_links"
    __table_args__ = {"sqlite_autoincrement": True}

    subject_kind = SubjectKind.SOCIAL_LINK

    id = db.Column(db.Integer, primary_key=True)
    platform = db.Column(db.String(32), nullable=False)
    url = db.Column(db.String(512), nullable=False)


class DefaultCategory(db.Model):
    """Global category template, managed by super-admins. Not tenant-owned."""
    __tablename__ = "default_categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True, default=new_uuid)
    name = db.Column(db.String(255), nullable=False, unique=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {"uuid": self.uuid, "name": self.name, "sort_order": self.sort_order}
