# Overview: Authorization package.
# Re-exports the action enums, subjects, principal and voters.

from .actions import ProductStatusAction, ResourceAction, SuperAdminAction, Vote
from .principal import Principal
from .roles import (
    ROLE_DEFINITIONS,
    ROLE_EDITOR,
    ROLE_RESTAURANT_OWNER,
    ROLE_SUPER_ADMIN,
    ROLE_USER,
)
from .subjects import Subject, SubjectKind
from .voters import (
    PRODUCT_ACTION_TARGETS,
    VOTERS,
    vote_ownership,
    vote_product_status,
    vote_super_admin,
)

__all__ = [
    "ProductStatusAction",
    "ResourceAction",
    "SuperAdminAction",
    "Vote",
    "Principal",
    "ROLE_DEFINITIONS",
    "ROLE_EDITOR",
    "ROLE_RESTAURANT_OWNER",
    "ROLE_SUPER_ADMIN",
    "ROLE_USER",
    "Subject",
    "SubjectKind",
    "PRODUCT_ACTION_TARGETS",
    "VOTERS",
    "vote_ownership",
    "vote_product_status",
    "vote_super_admin",
]
