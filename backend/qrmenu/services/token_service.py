# Overview: Service-layer operations for bearer tokens; signs and verifies JWTs.

"""
Stateless Bearer Token Codec

WHY: Authentication without a server-side session store. A token is a
signed, time-boxed claim set; nothing about it is persisted.

WIRE FORMAT (shared with existing clients, do not change):
- HS256 JWT signed with the process-wide JWT_SECRET
- Access token claims:  iat, exp, sub (int), uuid, email, roles (array),
                        type="access", and when the user has a restaurant
                        restaurant_id (int), restaurant_uuid
- Refresh token claims: iat, exp, sub (int), type="refresh"
- iat/exp are integer UNIX seconds, exp = iat + ttl

CLOCK: PyJWT's built-in time checks are disabled. Issuance and validation
both read the same injectable clock (time_utils), so tests can pin time.

Callers must check TokenClaims.token_type: a refresh token is never accepted
where an access token is expected, and vice versa.
"""

from __future__ import annotations

import binascii
import json
from dataclasses import dataclass, field
from typing import Any

import jwt
from jwt.utils import base64url_decode, base64url_encode
from flask import current_app

from ..time_utils import SystemClock


JWT_ALGORITHM = "HS256"
TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"
TOKEN_TYPES = (TOKEN_TYPE_ACCESS, TOKEN_TYPE_REFRESH)

# PyJWT validates nothing but the signature; the rest is checked here.
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


class TokenError(Exception):
    """Base class for token verification failures."""


class MalformedToken(TokenError):
    """The string is not a parseable JWT or lacks required claims."""


class SignatureInvalid(TokenError):
    """The signature does not match the configured secret."""


class TokenExpired(TokenError):
    """The clock is at or past the token's exp."""


@dataclass(frozen=True)
class TokenClaims:
    subject: int | None
    token_type: str | None
    issued_at: int
    expires_at: int
    uuid: str | None = None
    email: str | None = None
    roles: tuple[str, ...] = ()
    restaurant_id: int | None = None
    restaurant_uuid: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_access(self) -> bool:
        return self.token_type == TOKEN_TYPE_ACCESS

    @property
    def is_refresh(self) -> bool:
        return self.token_type == TOKEN_TYPE_REFRESH


class TokenCodec:
    """
    Issues and verifies tokens with one symmetric secret.

    Built once in create_app() from configuration and never mutated.
    """

    def __init__(self, secret: str, access_ttl: int, refresh_ttl: int, clock=None):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        if access_ttl <= 0 or refresh_ttl <= 0:
            raise ValueError("Token lifetimes must be positive")
        self._secret = secret
        self._access_ttl = int(access_ttl)
        self._refresh_ttl = int(refresh_ttl)
        self._clock = clock or SystemClock()

    @property
    def access_ttl(self) -> int:
        return self._access_ttl

    @property
    def refresh_ttl(self) -> int:
        return self._refresh_ttl

    def issue(self, principal, token_type: str, ttl: int | None = None) -> str:
        """
        Sign a token for principal.

        ttl defaults to the configured lifetime of the token type.
        """
        if token_type not in TOKEN_TYPES:
            raise ValueError(f"Unknown token type: {token_type!r}")
        if ttl is None:
            ttl = self._access_ttl if token_type == TOKEN_TYPE_ACCESS else self._refresh_ttl

        issued_at = int(self._clock.now().timestamp())
        payload: dict[str, Any] = {
            "iat": issued_at,
            "exp": issued_at + int(ttl),
            "sub": principal.id,
        }

        if token_type == TOKEN_TYPE_ACCESS:
            payload["uuid"] = str(principal.uuid)
            payload["email"] = principal.email
            payload["roles"] = list(principal.roles)

        payload["type"] = token_type

        if token_type == TOKEN_TYPE_ACCESS and principal.restaurant_id is not None:
            payload["restaurant_id"] = principal.restaurant_id
            payload["restaurant_uuid"] = str(principal.restaurant_uuid)

        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def issue_access_token(self, principal) -> str:
        return self.issue(principal, TOKEN_TYPE_ACCESS)

    def issue_refresh_token(self, principal) -> str:
        return self.issue(principal, TOKEN_TYPE_REFRESH)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature and lifetime, return the claims.

        Raises MalformedToken, SignatureInvalid or TokenExpired. Does NOT
        check the token type.

        Header and payload are parsed before PyJWT sees the token, so any
        decode failure left afterwards belongs to the signature segment.
        """
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedToken("Token is not a compact JWS")

        header_segment, payload_segment, signature_segment = token.split(".")
        header = _decode_segment(header_segment, "header")
        _decode_segment(payload_segment, "payload")

        if header.get("alg") != JWT_ALGORITHM:
            raise SignatureInvalid("Unexpected signing algorithm")

        if not _is_canonical_signature(signature_segment):
            raise SignatureInvalid("Token signature mismatch")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options=_DECODE_OPTIONS,
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError, jwt.DecodeError) as exc:
            raise SignatureInvalid("Token signature mismatch") from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedToken("Token cannot be parsed") from exc

        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if not _is_timestamp(issued_at) or not _is_timestamp(expires_at):
            raise MalformedToken("Token lacks iat/exp timestamps")

        now = self._clock.now().timestamp()
        if now >= expires_at:
            raise TokenExpired("Token has expired")
        if issued_at > now:
            raise MalformedToken("Token was issued in the future")
        not_before = payload.get("nbf")
        if _is_timestamp(not_before) and not_before > now:
            raise MalformedToken("Token is not valid yet")

        return _claims_from_payload(payload)


def get_token_codec() -> TokenCodec:
    """Codec configured on the current app."""
    return current_app.extensions["qrmenu.token_codec"]


def _is_timestamp(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_int(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _claims_from_payload(payload: dict[str, Any]) -> TokenClaims:
    roles = payload.get("roles") or []
    if not isinstance(roles, list):
        raise MalformedToken("roles claim must be an array")

    return TokenClaims(
        subject=_as_int(payload.get("sub")),
        token_type=payload.get("type"),
        issued_at=int(payload["iat"]),
        expires_at=int(payload["exp"]),
        uuid=payload.get("uuid"),
        email=payload.get("email"),
        roles=tuple(str(role) for role in roles),
        restaurant_id=_as_int(payload.get("restaurant_id")),
        restaurant_uuid=payload.get("restaurant_uuid"),
        raw=dict(payload),
    )


def _decode_segment(segment: str, name: str) -> dict[str, Any]:
    """JSON object of a header or payload segment, or MalformedToken."""
    try:
        value = json.loads(base64url_decode(segment))
    except (binascii.Error, ValueError) as exc:
        raise MalformedToken(f"Token {name} cannot be parsed") from exc
    if not isinstance(value, dict):
        raise MalformedToken(f"Token {name} must be a JSON object")
    return value


def _is_canonical_signature(segment: str) -> bool:
    """
    True when the segment is unpadded base64url that re-encodes to itself.

    Non-zero trailing bits would otherwise decode to the same digest as the
    genuine signature.
    """
    if not segment or "=" in segment:
        return False
    try:
        decoded = base64url_decode(segment)
    except (binascii.Error, ValueError):
        return False
    return base64url_encode(decoded).decode("ascii") == segment
