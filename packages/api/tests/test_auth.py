# This project was developed with assistance from AI tools.
"""Tests for JWT authentication middleware."""

import pytest
from fastapi import Depends, FastAPI, HTTPException
from fastapi.testclient import TestClient
from homestay_db.enums import UserRole

from homestay_api.core.config import settings
from homestay_api.middleware.auth import (
    CurrentUser,
    _extract_token,
    _resolve_role,
    get_current_user,
    require_roles,
)
from homestay_api.schemas.auth import DataScope, TokenPayload, UserContext

# ---------------------------------------------------------------------------
# AUTH_DISABLED bypass
# ---------------------------------------------------------------------------


def test_auth_disabled_returns_dev_admin(monkeypatch):
    """When AUTH_DISABLED=true, any request gets a dev admin user."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {
            "user_id": user.user_id,
            "role": user.role.value,
            "full_pipeline": user.data_scope.full_pipeline,
        }

    resp = TestClient(app).get("/me")
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == "dev-user"
    assert body["role"] == "admin"
    assert body["full_pipeline"] is True


# ---------------------------------------------------------------------------
# Missing / malformed token
# ---------------------------------------------------------------------------


def test_missing_token_returns_401(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {}

    resp = TestClient(app).get("/me")
    assert resp.status_code == 401
    assert "Missing authentication token" in resp.json()["detail"]
    assert resp.headers["www-authenticate"] == "Bearer"


def test_non_bearer_header_is_ignored(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {}

    resp = TestClient(app).get("/me", headers={"Authorization": "Basic YWRtaW46YWRtaW4="})
    assert resp.status_code == 401


def test_extract_token_strips_bearer_prefix():
    class _Req:
        headers = {"Authorization": "Bearer abc.def.ghi"}

    assert _extract_token(_Req()) == "abc.def.ghi"


# ---------------------------------------------------------------------------
# Token decoding
# ---------------------------------------------------------------------------


class _FakeRequest:
    def __init__(self):
        self.headers = {"Authorization": "Bearer token"}

        class _State:
            pass

        self.state = _State()


async def test_decoded_district_officer_gets_district_scope(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)
    monkeypatch.setattr(
        "homestay_api.middleware.auth._decode_token",
        lambda token: TokenPayload(
            sub="da-kullu-001",
            email="da.kullu@hp.gov.in",
            name="Meena Sharma",
            district="Kullu",
            realm_access={"roles": ["offline_access", "dealing_assistant"]},
        ),
    )
    request = _FakeRequest()

    user = await get_current_user(request)

    assert user.role == UserRole.DEALING_ASSISTANT
    assert user.district == "Kullu"
    assert user.data_scope.district == "Kullu"
    assert request.state.pii_mask is False


async def test_decoded_state_officer_sets_pii_mask(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)
    monkeypatch.setattr(
        "homestay_api.middleware.auth._decode_token",
        lambda token: TokenPayload(
            sub="state-001",
            preferred_username="state.officer",
            realm_access={"roles": ["state_officer"]},
        ),
    )
    request = _FakeRequest()

    user = await get_current_user(request)

    assert user.name == "state.officer"
    assert request.state.pii_mask is True


# ---------------------------------------------------------------------------
# Role resolution
# ---------------------------------------------------------------------------


def test_resolve_role_picks_known_role():
    """_resolve_role ignores Keycloak built-in roles."""
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "district_tourism_officer", "uma_authorization"]},
    )
    assert _resolve_role(payload) == UserRole.DISTRICT_TOURISM_OFFICER


def test_resolve_role_no_known_role_is_forbidden():
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "uma_authorization"]},
    )

    with pytest.raises(HTTPException) as exc_info:
        _resolve_role(payload)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "No recognized role assigned"


def test_resolve_role_multiple_roles_uses_first():
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["property_owner", "admin"]},
    )
    assert _resolve_role(payload) == UserRole.PROPERTY_OWNER


# ---------------------------------------------------------------------------
# require_roles dependency
# ---------------------------------------------------------------------------


def test_require_roles_rejects_wrong_role(monkeypatch):
    """require_roles returns 403 when the user's role is not in the allowed set."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/dtdo-only", dependencies=[Depends(require_roles(UserRole.DISTRICT_TOURISM_OFFICER))])
    async def dtdo_only(user: CurrentUser):
        return {"ok": True}

    # dev-user is admin, not DTDO
    resp = TestClient(app).get("/dtdo-only")
    assert resp.status_code == 403
    assert "Insufficient permissions" in resp.json()["detail"]


def test_require_roles_allows_listed_role():
    app = FastAPI()

    @app.get("/owners", dependencies=[Depends(require_roles(UserRole.PROPERTY_OWNER))])
    async def owners(user: CurrentUser):
        return {"user": user.user_id}

    app.dependency_overrides[get_current_user] = lambda: UserContext(
        user_id="owner-1",
        role=UserRole.PROPERTY_OWNER,
        email="owner@example.com",
        name="Owner",
        data_scope=DataScope(own_data_only=True, user_id="owner-1"),
    )

    resp = TestClient(app).get("/owners")
    assert resp.status_code == 200
    assert resp.json() == {"user": "owner-1"}
