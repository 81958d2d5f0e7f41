# This project was developed with assistance from AI tools.
"""Tests for route-level role enforcement."""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from homestay_db import get_db
from homestay_db.enums import UserRole

from homestay_api.core.auth import build_data_scope
from homestay_api.core.config import settings
from homestay_api.middleware.auth import get_current_user
from homestay_api.routes.admin import router as admin_router
from homestay_api.routes.analytics import router as analytics_router
from homestay_api.routes.applications import router as applications_router
from homestay_api.routes.da import router as da_router
from homestay_api.routes.dtdo import router as dtdo_router
from homestay_api.routes.grievances import router as grievances_router
from homestay_api.routes.officer import router as officer_router
from homestay_api.schemas.auth import UserContext


def _user(role: UserRole) -> UserContext:
    user_id = f"{role.value}-1"
    return UserContext(
        user_id=user_id,
        role=role,
        email=f"{user_id}@example.com",
        name=role.value,
        district="Shimla",
        data_scope=build_data_scope(role, user_id, "Shimla"),
    )


def _client(role: UserRole, monkeypatch) -> TestClient:
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)
    app = FastAPI()
    app.include_router(applications_router, prefix="/api/applications")
    app.include_router(da_router, prefix="/api/da")
    app.include_router(dtdo_router, prefix="/api/dtdo")
    app.include_router(grievances_router, prefix="/api/grievances")
    app.include_router(officer_router, prefix="/api/officer")
    app.include_router(analytics_router, prefix="/api/analytics")
    app.include_router(admin_router, prefix="/api/admin")

    user = _user(role)

    async def fake_user():
        return user

    async def fake_db():
        yield AsyncMock()

    app.dependency_overrides[get_current_user] = fake_user
    app.dependency_overrides[get_db] = fake_db
    return TestClient(app)


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/api/da/applications"),
        ("get", "/api/da/dashboard"),
        ("post", "/api/da/applications/1/start-scrutiny"),
        ("post", "/api/da/applications/1/send-back"),
        ("get", "/api/dtdo/applications"),
        ("post", "/api/dtdo/applications/1/accept"),
        ("post", "/api/dtdo/applications/1/inspection-report/approve"),
        ("get", "/api/officer/search"),
        ("get", "/api/analytics/overview"),
        ("get", "/api/grievances/reports/summary"),
        ("post", "/api/admin/seed"),
        ("get", "/api/admin/audit/verify"),
    ],
)
def test_owner_is_forbidden_from_officer_routes(method, path, monkeypatch):
    client = _client(UserRole.PROPERTY_OWNER, monkeypatch)
    resp = getattr(client, method)(path)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Insufficient permissions"


@pytest.mark.parametrize(
    "path",
    [
        "/api/dtdo/applications/1/accept",
        "/api/dtdo/applications/1/schedule-inspection",
        "/api/dtdo/applications/1/approve-cancellation",
    ],
)
def test_da_cannot_take_dtdo_decisions(path, monkeypatch):
    resp = _client(UserRole.DEALING_ASSISTANT, monkeypatch).post(path, json={})
    assert resp.status_code == 403


def test_dtdo_cannot_use_da_desk(monkeypatch):
    resp = _client(UserRole.DISTRICT_TOURISM_OFFICER, monkeypatch).post(
        "/api/da/applications/1/forward-to-dtdo", json={"remarks": "ok"}
    )
    assert resp.status_code == 403


@pytest.mark.parametrize(
    "method,path",
    [
        ("post", "/api/applications/"),
        ("patch", "/api/applications/1"),
        ("delete", "/api/applications/1"),
        ("post", "/api/applications/1/submit"),
        ("post", "/api/applications/1/resubmit"),
    ],
)
def test_state_officer_is_read_only_on_applications(method, path, monkeypatch):
    client = _client(UserRole.STATE_OFFICER, monkeypatch)
    resp = client.request(method.upper(), path, json={})
    assert resp.status_code == 403


def test_state_officer_cannot_seed(monkeypatch):
    resp = _client(UserRole.STATE_OFFICER, monkeypatch).post("/api/admin/seed")
    assert resp.status_code == 403


def test_unauthenticated_request_is_rejected(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)
    app = FastAPI()
    app.include_router(applications_router, prefix="/api/applications")

    resp = TestClient(app).get("/api/applications/")
    assert resp.status_code == 401
