# Overview: Tagged subject variant handed to the voters.

from __future__ import annotations

import enum
from dataclasses import dataclass


class SubjectKind(enum.Enum):
    """One variant per protected tenant-owned entity kind."""
    CATEGORY = "category"
    PRODUCT = "product"
    MEDIA = "media"
    QR_CODE = "qr_code"
    PAGE = "page"
    SOCIAL_LINK = "social_link"


@dataclass(frozen=True)
class Subject:
    """
    What a voter decides about: entity kind, owning restaurant and, for
    products, the current workflow status.
    """
    kind: SubjectKind
    restaurant_id: int | None
    status: object | None = None  # ProductStatus for PRODUCT subjects

    @classmethod
    def of(cls, entity) -> "Subject":
        """Build the subject of a tenant-owned model instance."""
        kind = entity.subject_kind
        if not isinstance(kind, SubjectKind):
            raise TypeError(f"{type(entity).__name__} is not a protected entity")
        status = entity.status if kind is SubjectKind.PRODUCT else None
        return cls(kind=kind, restaurant_id=entity.restaurant_id, status=status)
