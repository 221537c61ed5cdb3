# Overview: Service-layer operations for subscriptions; the owner-area gate and renewals.

"""
Subscription Gate and Renewal

WHY: Restaurant owners work in the owner area only while their billing
account has a subscription covering today. There is no scheduler: a lapsed
subscription is switched off lazily, the first time the gate sees it.

GATE (once per request, before route logic):
- Applies only to owner-area paths outside the exempt prefixes (login,
  logout, renewal), and only to owners who are not super-admins.
- No customer account -> nothing to check.
- Step 1: the latest active subscription is deactivated (and committed
  at once) if it ended before today.
- Step 2: allow if an active subscription covers today.
- Otherwise deny; the message tells whether step 1 just suspended the
  account or there simply is no subscription.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Optional

from flask import current_app

from ..errors import EntityNotFound, ValidationError
from ..extensions import db
from ..models import CustomerAccount, CustomerSubscription, Plan, Restaurant
from ..permissions import Principal
from .permission_service import log_security_event


SUSPENDED_MESSAGE = (
    "Your account has been suspended because the subscription period ended. "
    "Renew to continue."
)
NO_SUBSCRIPTION_MESSAGE = "Your account has no active subscription. Renew to continue."


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    subscription: Optional[CustomerSubscription] = None
    expired_now: bool = False
    message: Optional[str] = None


ALLOW = GateDecision(allowed=True)


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def plan_period_end(start: date, plan: Plan) -> date:
    return add_months(start, plan.duration_months())


def find_active_for_account(customer_account_id: int, today: date) -> Optional[CustomerSubscription]:
    """Active subscription whose period covers today, latest end first."""
    return (
        db.session.query(CustomerSubscription)
        .filter(
            CustomerSubscription.customer_account_id == customer_account_id,
            CustomerSubscription.is_active.is_(True),
            CustomerSubscription.starts_at <= today,
            CustomerSubscription.ends_at >= today,
        )
        .order_by(CustomerSubscription.ends_at.desc())
        .first()
    )


def find_latest_active_for_account(customer_account_id: int) -> Optional[CustomerSubscription]:
    return (
        db.session.query(CustomerSubscription)
        .filter(
            CustomerSubscription.customer_account_id == customer_account_id,
            CustomerSubscription.is_active.is_(True),
        )
        .order_by(CustomerSubscription.ends_at.desc(), CustomerSubscription.id.desc())
        .first()
    )


def find_latest_for_account(customer_account_id: int) -> Optional[CustomerSubscription]:
    return (
        db.session.query(CustomerSubscription)
        .filter(CustomerSubscription.customer_account_id == customer_account_id)
        .order_by(CustomerSubscription.ends_at.desc(), CustomerSubscription.id.desc())
        .first()
    )


def suspend_expired_subscription_if_needed(customer_account_id: int, today: date) -> bool:
    """
    Deactivate the latest active subscription if it ended before today.

    Commits immediately so the expiry survives whatever the request does
    next. Returns True when a subscription was deactivated.
    """
    latest = find_latest_active_for_account(customer_account_id)
    if latest is None or latest.ends_at >= today:
        return False

    latest.is_active = False
    db.session.commit()

    current_app.logger.info(
        "Subscription %s of account %s expired on %s; deactivated",
        latest.id, customer_account_id, latest.ends_at.isoformat(),
    )
    return True


def gate_applies(principal: Optional[Principal], path: str, config) -> bool:
    """True when the subscription gate must run for this request."""
    prefix = config["OWNER_AREA_PREFIX"]
    if path != prefix and not path.startswith(prefix + "/"):
        return False

    if path.startswith(tuple(config["SUBSCRIPTION_EXEMPT_PATHS"])):
        return False

    if principal is None:
        return False
    return principal.is_owner and not principal.is_super_admin


def check_subscription(principal: Optional[Principal], path: str, today: date, config) -> GateDecision:
    if not gate_applies(principal, path, config):
        return ALLOW

    if principal.customer_account_id is None:
        return ALLOW

    expired_now = suspend_expired_subscription_if_needed(principal.customer_account_id, today)

    active = find_active_for_account(principal.customer_account_id, today)
    if active is not None:
        return GateDecision(allowed=True, subscription=active)

    message = SUSPENDED_MESSAGE if expired_now else NO_SUBSCRIPTION_MESSAGE
    log_security_event(
        user_id=principal.id,
        event_type="SUBSCRIPTION_SUSPENDED" if expired_now else "SUBSCRIPTION_MISSING",
        success=False,
        reason=message,
        restaurant_id=principal.restaurant_id,
    )
    return GateDecision(allowed=False, expired_now=expired_now, message=message)


def renew_subscription(customer_account_id: int, plan_id: int, today: date) -> CustomerSubscription:
    """
    Renew or switch the account's subscription.

    Same plan as the active subscription: its period is extended by one
    plan duration. Another plan: the active one is deactivated and a new
    one starts today. The account's restaurants must fit the plan.
    """
    account = db.session.get(CustomerAccount, customer_account_id)
    if account is None:
        raise EntityNotFound("CustomerAccount", customer_account_id)

    plan = db.session.get(Plan, plan_id) if plan_id is not None else None
    if plan is None or not plan.is_active:
        raise ValidationError(errors=[{"field": "plan_id", "message": "Select a valid plan."}])

    restaurants_used = (
        db.session.query(Restaurant)
        .filter(Restaurant.customer_account_id == account.id, Restaurant.deleted_at.is_(None))
        .count()
    )
    if restaurants_used > plan.max_restaurants:
        raise ValidationError(
            errors=[{"field": "plan_id", "message": "Reduce the number of restaurants to switch to this plan."}]
        )

    suspend_expired_subscription_if_needed(account.id, today)
    active = find_active_for_account(account.id, today)

    if active is not None and active.plan_id == plan.id:
        active.ends_at = plan_period_end(active.ends_at, plan)
        active.is_active = True
        db.session.commit()
        current_app.logger.info("Subscription %s extended to %s", active.id, active.ends_at.isoformat())
        return active

    if active is not None:
        active.is_active = False

    subscription = CustomerSubscription(
        customer_account_id=account.id,
        plan_id=plan.id,
        starts_at=today,
        ends_at=plan_period_end(today, plan),
        is_active=True,
    )
    db.session.add(subscription)
    db.session.commit()

    current_app.logger.info(
        "Account %s subscribed to plan %s until %s", account.id, plan.code, subscription.ends_at.isoformat()
    )
    return subscription
