# Overview: Product publication workflow states and approval log actions.

from __future__ import annotations

import enum


class ProductStatus(str, enum.Enum):
    """
    Product publication workflow.

    STATE MACHINE:
        DRAFT -> PENDING_APPROVAL
        PENDING_APPROVAL -> APPROVED | REJECTED
        REJECTED -> DRAFT | PENDING_APPROVAL
        APPROVED is terminal.

    Legality depends only on (current, requested); who may ask for a move is
    decided by the product status voter.
    """

    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    def can_transition_to(self, target: "ProductStatus") -> bool:
        return target in PRODUCT_STATUS_TRANSITIONS[self]


# Every status must have an entry; a new status without one fails at import.
PRODUCT_STATUS_TRANSITIONS: dict[ProductStatus, frozenset[ProductStatus]] = {
    ProductStatus.DRAFT: frozenset({ProductStatus.PENDING_APPROVAL}),
    ProductStatus.PENDING_APPROVAL: frozenset({ProductStatus.APPROVED, ProductStatus.REJECTED}),
    ProductStatus.REJECTED: frozenset({ProductStatus.DRAFT, ProductStatus.PENDING_APPROVAL}),
    ProductStatus.APPROVED: frozenset(),
}

_missing = set(ProductStatus) - set(PRODUCT_STATUS_TRANSITIONS)
if _missing:
    raise RuntimeError(f"No transition entry for: {sorted(s.value for s in _missing)}")


def can_transition(from_status: ProductStatus | str, to_status: ProductStatus | str) -> bool:
    """Check a move against the transition table. Self-transitions are illegal."""
    return ProductStatus(from_status).can_transition_to(ProductStatus(to_status))


class ApprovalAction(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
