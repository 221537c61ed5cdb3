# Overview: Pytest coverage for turning Authorization headers into principals.

"""
Principal Resolution Tests

Verifies:
- Non-bearer headers resolve to no principal (anonymous)
- Every bearer failure answers 401 with its fixed message
- The principal is built from the user row, not from token claims
- Failed authentications are logged as security events
"""

import jwt
import pytest

from qrmenu.errors import AuthenticationFailed
from qrmenu.models import Role, SecurityEvent
from qrmenu.permissions import ROLE_EDITOR, ROLE_RESTAURANT_OWNER, ROLE_USER, Principal
from qrmenu.services.principal_service import (
    MSG_INVALID_PAYLOAD,
    MSG_INVALID_TOKEN,
    MSG_INVALID_TYPE,
    MSG_MISSING_TOKEN,
    MSG_USER_INACTIVE,
    resolve_principal,
)
from qrmenu.time_utils import utcnow


@pytest.fixture
def codec(app):
    return app.extensions["qrmenu.token_codec"]


def _resolve_error(header, codec) -> str:
    with pytest.raises(AuthenticationFailed) as exc_info:
        resolve_principal(header, codec)
    return exc_info.value.message


class TestNotBearer:
    """Headers this authenticator does not handle."""

    @pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwYXNz", "bearer abc.def.ghi", "Token abc"])
    def test_resolves_to_none(self, db_session, codec, header):
        assert resolve_principal(header, codec) is None


class TestBearerFailures:
    """Each failure has its own fixed client message."""

    def test_empty_token(self, db_session, codec):
        assert _resolve_error("Bearer ", codec) == MSG_MISSING_TOKEN
        assert _resolve_error("Bearer    ", codec) == MSG_MISSING_TOKEN

    def test_garbage_token(self, db_session, codec):
        assert _resolve_error("Bearer not-a-jwt", codec) == MSG_INVALID_TOKEN

    def test_expired_token(self, db_session, codec, clock, owner_a):
        token = codec.issue_access_token(Principal.from_user(owner_a))
        clock.advance(seconds=3600)
        assert _resolve_error(f"Bearer {token}", codec) == MSG_INVALID_TOKEN

    def test_refresh_token_is_wrong_type(self, db_session, codec, owner_a):
        token = codec.issue_refresh_token(Principal.from_user(owner_a))
        assert _resolve_error(f"Bearer {token}", codec) == MSG_INVALID_TYPE

    def test_missing_subject(self, app, db_session, codec, clock):
        now = int(clock.now().timestamp())
        token = jwt.encode(
            {"iat": now, "exp": now + 60, "type": "access"},
            app.config["JWT_SECRET"],
            algorithm="HS256",
        )
        assert _resolve_error(f"Bearer {token}", codec) == MSG_INVALID_PAYLOAD

    def test_unknown_user(self, db_session, codec):
        ghost = Principal(id=99999, uuid="ghost", email="ghost@nowhere.test", roles=(ROLE_USER,))
        token = codec.issue_access_token(ghost)
        assert _resolve_error(f"Bearer {token}", codec) == MSG_USER_INACTIVE

    def test_deactivated_user(self, db_session, codec, owner_a):
        token = codec.issue_access_token(Principal.from_user(owner_a))
        owner_a.is_active = False
        db_session.commit()
        assert _resolve_error(f"Bearer {token}", codec) == MSG_USER_INACTIVE

    def test_soft_deleted_user(self, db_session, codec, owner_a):
        token = codec.issue_access_token(Principal.from_user(owner_a))
        owner_a.deleted_at = utcnow()
        db_session.commit()
        assert _resolve_error(f"Bearer {token}", codec) == MSG_USER_INACTIVE


class TestPrincipalFromUser:
    """Principal reflects the database at request time."""

    def test_owner_principal(self, db_session, codec, owner_a, restaurant_a):
        token = codec.issue_access_token(Principal.from_user(owner_a))
        principal = resolve_principal(f"Bearer {token}", codec)

        assert principal.id == owner_a.id
        assert principal.email == "owner@cafe-a.test"
        assert principal.roles == (ROLE_RESTAURANT_OWNER, ROLE_USER)
        assert principal.restaurant_id == restaurant_a.id
        assert principal.restaurant_uuid == restaurant_a.uuid
        assert principal.accessible_restaurant_ids == frozenset({restaurant_a.id})
        assert principal.is_owner
        assert not principal.is_super_admin

    def test_role_change_applies_to_existing_token(self, db_session, codec, owner_a):
        token = codec.issue_access_token(Principal.from_user(owner_a))

        owner_a.add_role(db_session.query(Role).filter_by(name=ROLE_EDITOR).one())
        db_session.commit()

        principal = resolve_principal(f"Bearer {token}", codec)
        assert principal.has_role(ROLE_EDITOR)

    def test_injected_loader(self, db_session, codec, owner_a):
        token = codec.issue_access_token(Principal.from_user(owner_a))
        with pytest.raises(AuthenticationFailed) as exc_info:
            resolve_principal(f"Bearer {token}", codec, load_user=lambda user_id: None)
        assert exc_info.value.message == MSG_USER_INACTIVE


class TestRequestPipeline:
    """401 bodies and audit trail over HTTP."""

    def test_anonymous_on_protected_route(self, client, db_session):
        resp = client.get("/api/admin/auth/me")
        assert resp.status_code == 401
        assert resp.get_json() == {
            "status": 401,
            "type": "unauthorized",
            "message": "Authentication required.",
        }

    def test_bad_token_body(self, client, db_session):
        resp = client.get("/api/admin/auth/me", headers={"Authorization": "Bearer junk"})
        assert resp.status_code == 401
        assert resp.get_json() == {"status": 401, "type": "unauthorized", "message": MSG_INVALID_TOKEN}

    def test_failure_logged(self, client, db_session):
        client.get("/api/admin/auth/me", headers={"Authorization": "Bearer "})

        event = db_session.query(SecurityEvent).filter_by(event_type="AUTHENTICATION_FAILED").one()
        assert event.success is False
        assert event.reason == MSG_MISSING_TOKEN
        assert event.resource == "/api/admin/auth/me"
        assert event.action == "GET"

    def test_public_route_ignores_non_bearer(self, client, db_session, restaurant_a):
        resp = client.get("/api/menu/cafe-a", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert resp.status_code == 200
