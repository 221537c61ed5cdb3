# Overview: Per-request pipeline; principal, subscription gate and tenant scope on flask.g.

"""
Request Context

Every request runs the same pipeline before its view:

    bearer token -> Principal -> subscription gate -> TenantScope

The result is one RequestContext stored on flask.g and handed explicitly to
services. Nothing outlives the request.

Owner-area pages also accept the access token kept in the signed session
cookie by POST /admin/login, so browsers can follow the gate's redirects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import current_app, flash, g, redirect, request, session, url_for

from .errors import AuthenticationFailed
from .models import CustomerSubscription
from .permissions import Principal
from .services.permission_service import log_security_event
from .services.principal_service import BEARER_PREFIX, resolve_principal
from .services.subscription_service import check_subscription
from .services.tenant_service import TenantScope, build_tenant_scope, unrestricted
from .services.token_service import get_token_codec
from .time_utils import get_clock


SESSION_TOKEN_KEY = "access_token"


@dataclass
class RequestContext:
    principal: Optional[Principal]
    scope: TenantScope
    subscription: Optional[CustomerSubscription] = None

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None


def get_request_context() -> RequestContext:
    ctx = g.get("request_context")
    if ctx is None:
        ctx = RequestContext(principal=None, scope=unrestricted())
        g.request_context = ctx
    return ctx


def _session_header() -> Optional[str]:
    prefix = current_app.config["OWNER_AREA_PREFIX"]
    if request.path == prefix or request.path.startswith(prefix + "/"):
        token = session.get(SESSION_TOKEN_KEY)
        if token:
            return BEARER_PREFIX + token
    return None


def _resolve() -> Optional[Principal]:
    codec = get_token_codec()
    header = request.headers.get("Authorization")
    if header:
        return resolve_principal(header, codec)

    header = _session_header()
    try:
        return resolve_principal(header, codec)
    except AuthenticationFailed:
        # Stale cookie: forget it and continue anonymously
        session.pop(SESSION_TOKEN_KEY, None)
        return None


def establish_request_context():
    """before_request hook. Returns a redirect when the subscription gate denies."""
    g.request_context = RequestContext(principal=None, scope=unrestricted())

    try:
        principal = _resolve()
    except AuthenticationFailed as exc:
        log_security_event(
            user_id=None,
            event_type="AUTHENTICATION_FAILED",
            success=False,
            reason=exc.message,
        )
        raise

    config = current_app.config
    decision = check_subscription(principal, request.path, get_clock().today(), config)
    if not decision.allowed:
        flash(decision.message, "error")
        return redirect(url_for("owner.renew_subscription"))

    g.request_context = RequestContext(
        principal=principal,
        scope=build_tenant_scope(principal, request.path, config),
        subscription=decision.subscription,
    )
    return None


def register_request_hooks(app) -> None:
    app.before_request(establish_request_context)
