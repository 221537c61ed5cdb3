from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

class SecurityEvent(db.Model):
    """
    Security event audit log with tenant context.

    WHY: Track authentication failures, permission denials, cross-tenant
    attempts and subscription suspensions.

    IMMUTABLE: Never update. Append-only, pruned only by the retention
    maintenance command.
    """
    __tablename__ = "security_events"
    __table_args__ = (
        db.Index("ix_security_events_user_type", "user_id", "event_type"),
        db.Index("ix_security_events_restaurant_occurred", "restaurant_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # No foreign keys: events outlive the rows they mention
    restaurant_id = db.Column(db.Integer, nullable=True, index=True)
    user_id = db.Column(db.Integer, nullable=True, index=True)  # Nullable for anonymous

    # Event classification
    event_type = db.Column(db.String(64), nullable=False, index=True)  # ACCESS_DENIED, SUBSCRIPTION_SUSPENDED, etc.
    resource = db.Column(db.String(255), nullable=True)  # e.g., "/api/admin/products/<uuid>"
    action = db.Column(db.String(64), nullable=True)     # e.g., "GET", "PRODUCT_APPROVE"

    success = db.Column(db.Boolean, nullable=False, index=True)
    reason = db.Column(db.Text, nullable=True)

    # Client context
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "user_id": self.user_id,
            "event_type": self.event_type,
            "resource": self.resource,
            "action": self.action,
            "success": self.success,
            "reason": self.reason,
            "ip_address": self.ip_address,
            "occurred_at": to_utc_z(self.occurred_at),
        }
