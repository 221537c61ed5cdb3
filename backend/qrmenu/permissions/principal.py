# Overview: The authenticated actor of one request.

from __future__ import annotations

from dataclasses import dataclass, field

from .roles import ROLE_RESTAURANT_OWNER, ROLE_SUPER_ADMIN


@dataclass(frozen=True)
class Principal:
    """
    Identity resolved from a bearer token and the user record.

    Immutable for the duration of one request. Built from the database, not
    from token claims, so role or tenant changes apply on the next request.
    """
    id: int
    uuid: str
    email: str
    roles: tuple[str, ...]
    restaurant_id: int | None = None
    restaurant_uuid: str | None = None
    accessible_restaurant_ids: frozenset[int] = field(default_factory=frozenset)
    customer_account_id: int | None = None

    @classmethod
    def from_user(cls, user) -> "Principal":
        restaurant = user.restaurant
        return cls(
            id=user.id,
            uuid=user.uuid,
            email=user.email,
            roles=tuple(user.get_roles()),
            restaurant_id=user.restaurant_id,
            restaurant_uuid=restaurant.uuid if restaurant is not None else None,
            accessible_restaurant_ids=frozenset(user.get_accessible_restaurant_ids()),
            customer_account_id=user.customer_account_id,
        )

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_super_admin(self) -> bool:
        return ROLE_SUPER_ADMIN in self.roles

    @property
    def is_owner(self) -> bool:
        return ROLE_RESTAURANT_OWNER in self.roles
