# Overview: Service-layer operations for permission; dispatches voters and writes the audit log.

"""
Authorization Checks and Security Event Logging with Tenant Context

WHY: Routes ask one question ("may this principal do X to Y?") and get a
yes/no or an exception. The decision itself lives in the pure voters
(permissions/voters.py); this module adds dispatch, error mapping and the
audit trail.

DESIGN PRINCIPLES:
- Fail closed: an action without a voter is denied
- Log denials only: grants are not logged
- Ownership denials are answered as not-found, never as forbidden, so a
  tenant cannot learn that another tenant's entity exists
"""

from __future__ import annotations

from typing import Optional

from flask import current_app, has_request_context, request

from ..errors import AccessDenied, EntityNotFound, InvalidStatusTransition
from ..extensions import db
from ..models import SecurityEvent
from ..permissions import (
    PRODUCT_ACTION_TARGETS,
    VOTERS,
    Principal,
    ProductStatusAction,
    ResourceAction,
    Subject,
    Vote,
)
from ..time_utils import utcnow


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    restaurant_id: int | None = None,
) -> SecurityEvent:
    """
    Append an event to the security audit log and commit it.

    event_type examples:
    - LOGIN_FAILED
    - AUTHENTICATION_FAILED
    - ACCESS_DENIED
    - CROSS_TENANT_ACCESS_DENIED
    - SUBSCRIPTION_EXPIRED
    - SUBSCRIPTION_SUSPENDED
    - RESTAURANT_SWITCHED
    """
    if has_request_context():
        resource = resource if resource is not None else request.path
        action = action if action is not None else request.method
        ip_address = ip_address if ip_address is not None else request.remote_addr
        user_agent = user_agent if user_agent is not None else request.headers.get("User-Agent")

    event = SecurityEvent(
        user_id=user_id,
        restaurant_id=restaurant_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )

    db.session.add(event)
    db.session.commit()

    return event


def vote(action, subject: Optional[Subject], principal: Optional[Principal]) -> Vote:
    """Ask the voter registered for the action's family. Unknown actions are denied."""
    voter = VOTERS.get(type(action))
    if voter is None:
        return Vote.DENY
    return voter(action, subject, principal)


def is_granted(action, subject: Optional[Subject], principal: Optional[Principal]) -> bool:
    return vote(action, subject, principal) is Vote.GRANT


def deny_access_unless_granted(
    action,
    subject: Optional[Subject],
    principal: Optional[Principal],
    *,
    entity_name: str | None = None,
    identifier=None,
) -> None:
    """
    Raise unless the principal may perform action on subject.

    - Ownership denial with entity_name/identifier -> EntityNotFound
    - Any other denial -> AccessDenied
    - Product status action whose precondition fails -> InvalidStatusTransition
    """
    outcome = vote(action, subject, principal)
    if outcome is Vote.GRANT:
        return

    user_id = principal.id if principal is not None else None
    restaurant_id = subject.restaurant_id if subject is not None else None
    action_name = getattr(action, "value", str(action))

    if outcome is Vote.INVALID_STATE:
        raise InvalidStatusTransition(subject.status, PRODUCT_ACTION_TARGETS[action])

    if isinstance(action, ResourceAction) and entity_name is not None:
        log_security_event(
            user_id=user_id,
            event_type="CROSS_TENANT_ACCESS_DENIED",
            success=False,
            action=action_name,
            reason=f"{entity_name} {identifier} belongs to restaurant {restaurant_id}",
            restaurant_id=principal.restaurant_id if principal is not None else None,
        )
        raise EntityNotFound(entity_name, identifier)

    current_app.logger.info("Access denied: user=%s action=%s", user_id, action_name)
    log_security_event(
        user_id=user_id,
        event_type="ACCESS_DENIED",
        success=False,
        action=action_name,
        reason=f"Voter denied {action_name}",
        restaurant_id=restaurant_id,
    )
    raise AccessDenied()


def deny_unless_product_action(action: ProductStatusAction, product, principal: Principal) -> None:
    """Shorthand for the product workflow actions."""
    deny_access_unless_granted(action, Subject.of(product), principal)
