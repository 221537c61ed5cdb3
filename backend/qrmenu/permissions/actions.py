# Overview: Action enums the voters are keyed by, and the vote outcomes.

import enum


class ResourceAction(str, enum.Enum):
    """Ownership voter actions on tenant-owned entities."""
    VIEW = "VIEW"
    EDIT = "EDIT"
    DELETE = "DELETE"


class SuperAdminAction(str, enum.Enum):
    MANAGE_RESTAURANTS = "SUPER_ADMIN_MANAGE_RESTAURANTS"
    MANAGE_CATALOG = "SUPER_ADMIN_MANAGE_CATALOG"
    MANAGE_DEFAULTS = "SUPER_ADMIN_MANAGE_DEFAULTS"


class ProductStatusAction(str, enum.Enum):
    SUBMIT = "PRODUCT_SUBMIT"
    APPROVE = "PRODUCT_APPROVE"
    REJECT = "PRODUCT_REJECT"


class Vote(enum.Enum):
    GRANT = "GRANT"
    DENY = "DENY"
    # Principal may perform the action, but not from the subject's current state
    INVALID_STATE = "INVALID_STATE"
