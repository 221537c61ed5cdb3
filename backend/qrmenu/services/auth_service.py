# Overview: Service-layer operations for auth; passwords, login and token refresh.

"""
Authentication Service

WHY: Every token traces back to a password check done here. Uses bcrypt for
password hashing and the TokenCodec for the token pair.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters, mixed case, digit and special character
- Unknown email and wrong password answer the same message
- Refresh accepts refresh tokens only; the user is re-checked every time
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import bcrypt
from flask import current_app

from ..errors import AuthenticationFailed, ConflictError
from ..extensions import db
from ..models import Restaurant, Role, User
from ..permissions import Principal
from ..time_utils import utcnow
from .permission_service import log_security_event
from .principal_service import MSG_INVALID_PAYLOAD, MSG_USER_INACTIVE, load_active_user
from .token_service import TokenCodec, TokenError


MSG_INVALID_CREDENTIALS = "Invalid credentials."
MSG_ACCOUNT_DISABLED = "Account is disabled."
MSG_INVALID_REFRESH = "Invalid or expired refresh token."
MSG_NOT_REFRESH = "Invalid token type. Expected refresh token."


class PasswordValidationError(ValueError):
    """Raised when password doesn't meet strength requirements."""
    pass


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int

    def to_dict(self) -> dict:
        return {
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "expiresIn": self.expires_in,
        }


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>_\-]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt."""
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe check via bcrypt.checkpw(). Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def issue_token_pair(user: User, codec: TokenCodec) -> TokenPair:
    principal = Principal.from_user(user)
    return TokenPair(
        access_token=codec.issue_access_token(principal),
        refresh_token=codec.issue_refresh_token(principal),
        expires_in=codec.access_ttl,
    )


def login(email: str, password: str, codec: TokenCodec) -> TokenPair:
    """
    Check credentials and issue a token pair.

    Updates last_login_at. Failures are logged as LOGIN_FAILED.
    """
    user = db.session.query(User).filter(User.email == email).first()

    if user is None:
        _log_login_failure(None, f"Unknown email {email}")
        raise AuthenticationFailed(MSG_INVALID_CREDENTIALS)

    if not user.is_active or user.deleted_at is not None:
        _log_login_failure(user, "Account disabled")
        raise AuthenticationFailed(MSG_ACCOUNT_DISABLED)

    if not verify_password(password, user.password_hash):
        _log_login_failure(user, "Wrong password")
        raise AuthenticationFailed(MSG_INVALID_CREDENTIALS)

    user.last_login_at = utcnow()
    db.session.commit()

    return issue_token_pair(user, codec)


def refresh_tokens(refresh_token: str, codec: TokenCodec) -> TokenPair:
    """Exchange a refresh token for a new pair."""
    try:
        claims = codec.verify(refresh_token)
    except TokenError as exc:
        current_app.logger.warning("Refresh token rejected: %s", exc)
        raise AuthenticationFailed(MSG_INVALID_REFRESH) from exc

    if not claims.is_refresh:
        raise AuthenticationFailed(MSG_NOT_REFRESH)

    if claims.subject is None:
        raise AuthenticationFailed(MSG_INVALID_PAYLOAD)

    user = load_active_user(claims.subject)
    if user is None:
        raise AuthenticationFailed(MSG_USER_INACTIVE)

    return issue_token_pair(user, codec)


def create_user(
    email: str,
    password: str,
    first_name: str = "",
    last_name: str = "",
    role_names: list[str] | None = None,
    restaurant: Restaurant | None = None,
    customer_account_id: int | None = None,
) -> User:
    """
    Create a user with a bcrypt password hash.

    Raises PasswordValidationError for weak passwords, ConflictError for a
    taken email and ValueError for unknown roles.
    """
    if db.session.query(User).filter(User.email == email).first() is not None:
        raise ConflictError("Email already in use.")

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        customer_account_id=customer_account_id,
    )

    for role_name in role_names or []:
        role = db.session.query(Role).filter_by(name=role_name).first()
        if role is None:
            raise ValueError(f"Role {role_name} not found")
        user.add_role(role)

    if restaurant is not None:
        user.add_restaurant(restaurant)

    db.session.add(user)
    db.session.commit()
    return user


def _log_login_failure(user: User | None, reason: str) -> None:
    current_app.logger.warning("Login failed: %s", reason)
    log_security_event(
        user_id=user.id if user is not None else None,
        event_type="LOGIN_FAILED",
        success=False,
        reason=reason,
        restaurant_id=user.restaurant_id if user is not None else None,
    )
