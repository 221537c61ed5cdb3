# Overview: Service-layer operations for principal resolution; bearer header to Principal.

"""
Principal Resolution

Turns an Authorization header into the authenticated Principal of a request.

RULES:
- Only headers starting with the literal "Bearer " (case-sensitive, one
  space) are handled; anything else means "not this authenticator" and
  resolves to None. The route then decides whether anonymous is fine.
- The token must verify, be an access token and name a subject.
- The subject must be an existing, active, non-deleted user. The Principal
  is built from the user row, not from token claims, so role and tenant
  changes take effect on the next request.

Every failure raises AuthenticationFailed with a fixed client message; the
specific cause goes to the log only.
"""

from __future__ import annotations

from typing import Callable, Optional

from flask import current_app

from ..errors import AuthenticationFailed
from ..extensions import db
from ..models import User
from ..permissions import Principal
from .token_service import TokenCodec, TokenError


BEARER_PREFIX = "Bearer "

MSG_MISSING_TOKEN = "Missing JWT token."
MSG_INVALID_TOKEN = "Invalid or expired token."
MSG_INVALID_TYPE = "Invalid token type."
MSG_INVALID_PAYLOAD = "Invalid token payload."
MSG_USER_INACTIVE = "User not found or inactive."


def load_active_user(user_id: int) -> Optional[User]:
    """User by id, or None when missing, deactivated or soft-deleted."""
    user = db.session.get(User, user_id)
    if user is None or not user.is_active or user.deleted_at is not None:
        return None
    return user


def resolve_principal(
    header: Optional[str],
    codec: TokenCodec,
    load_user: Callable[[int], Optional[User]] = load_active_user,
) -> Optional[Principal]:
    """
    Resolve the principal for one request.

    Returns None when the header is not a bearer header.
    Raises AuthenticationFailed for every bearer header that does not
    authenticate.
    """
    user = resolve_user(header, codec, load_user)
    if user is None:
        return None
    return Principal.from_user(user)


def resolve_user(
    header: Optional[str],
    codec: TokenCodec,
    load_user: Callable[[int], Optional[User]] = load_active_user,
) -> Optional[User]:
    """Same as resolve_principal() but returns the loaded User row."""
    if not header or not header.startswith(BEARER_PREFIX):
        return None

    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationFailed(MSG_MISSING_TOKEN)

    try:
        claims = codec.verify(token)
    except TokenError as exc:
        current_app.logger.warning("Bearer token rejected: %s", exc)
        raise AuthenticationFailed(MSG_INVALID_TOKEN) from exc

    if not claims.is_access:
        raise AuthenticationFailed(MSG_INVALID_TYPE)

    if claims.subject is None:
        raise AuthenticationFailed(MSG_INVALID_PAYLOAD)

    user = load_user(claims.subject)
    if user is None:
        raise AuthenticationFailed(MSG_USER_INACTIVE)

    return user
