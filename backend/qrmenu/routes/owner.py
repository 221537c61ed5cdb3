# Overview: Owner-area routes; cookie login, dashboard and subscription renewal.

# backend/qrmenu/routes/owner.py
"""
Owner area (/admin)

Browser-facing counterpart of the JSON API. POST /admin/login keeps the
access token in the signed session cookie; the request pipeline reads it
from there for /admin paths.

Every /admin path except login, logout and the renewal screen sits behind
the subscription gate (request_context.py), which redirects here with a
flashed message when the owner's subscription has lapsed.
"""

from flask import Blueprint, flash, get_flashed_messages, redirect, request, session, url_for

from ..decorators import require_auth
from ..errors import AccessDenied, ValidationError
from ..extensions import db
from ..models import Plan, User
from ..request_context import SESSION_TOKEN_KEY, get_request_context
from ..services import auth_service, subscription_service
from ..services.token_service import get_token_codec
from ..time_utils import get_clock
from ..validation import require_text


owner_bp = Blueprint("owner", __name__, url_prefix="/admin")


def _form_or_json() -> dict:
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def _messages() -> list[dict]:
    return [
        {"category": category, "message": message}
        for category, message in get_flashed_messages(with_categories=True)
    ]


def _customer_account_id() -> int:
    principal = get_request_context().principal
    if principal.customer_account_id is None:
        raise AccessDenied("No billing account.")
    return principal.customer_account_id


@owner_bp.post("/login")
def login_route():
    data = _form_or_json()
    email = require_text(data, "email")
    password = require_text(data, "password")

    tokens = auth_service.login(email, password, get_token_codec())
    session[SESSION_TOKEN_KEY] = tokens.access_token
    return redirect(url_for("owner.dashboard"))


@owner_bp.post("/logout")
def logout_route():
    session.pop(SESSION_TOKEN_KEY, None)
    return {"message": "Logged out."}, 200


@owner_bp.get("/dashboard")
@require_auth
def dashboard():
    ctx = get_request_context()
    user = db.session.get(User, ctx.principal.id)
    return {
        "user": user.to_dict(),
        "restaurant": user.restaurant.to_dict() if user.restaurant else None,
        "subscription": ctx.subscription.to_dict() if ctx.subscription else None,
        "messages": _messages(),
    }


@owner_bp.get("/account/subscription/renew")
@require_auth
def renew_subscription():
    account_id = _customer_account_id()
    today = get_clock().today()

    expired_now = subscription_service.suspend_expired_subscription_if_needed(account_id, today)
    if subscription_service.find_active_for_account(account_id, today) is not None:
        return redirect(url_for("owner.dashboard"))

    if expired_now:
        flash(subscription_service.SUSPENDED_MESSAGE, "error")

    latest = subscription_service.find_latest_for_account(account_id)
    plans = db.session.query(Plan).filter(Plan.is_active.is_(True)).order_by(Plan.yearly_price, Plan.id).all()
    return {
        "plans": [plan.to_dict() for plan in plans],
        "latest_subscription": latest.to_dict() if latest else None,
        "messages": _messages(),
    }


@owner_bp.post("/account/subscription/renew")
@require_auth
def renew_subscription_submit():
    account_id = _customer_account_id()
    data = _form_or_json()

    try:
        plan_id = int(data.get("plan_id"))
    except (TypeError, ValueError):
        plan_id = None

    try:
        subscription = subscription_service.renew_subscription(account_id, plan_id, get_clock().today())
    except ValidationError as exc:
        for error in exc.errors or [{"message": exc.message}]:
            flash(error["message"], "error")
        return redirect(url_for("owner.renew_subscription"))

    flash(f"Subscription active until {subscription.ends_at.isoformat()}.", "success")
    return redirect(url_for("owner.dashboard"))
