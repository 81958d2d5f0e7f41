# This project was developed with assistance from AI tools.
"""Tests for role-based data scope construction and query filtering."""

from homestay_db import Application
from homestay_db.enums import UserRole
from sqlalchemy import select

from homestay_api.core.auth import build_data_scope, is_officer
from homestay_api.schemas.auth import DataScope, UserContext
from homestay_api.services.scope import apply_data_scope


def _sql(stmt) -> str:
    return str(stmt.compile(compile_kwargs={"literal_binds": True}))


def _user(scope: DataScope, role=UserRole.DEALING_ASSISTANT) -> UserContext:
    return UserContext(user_id="u-1", role=role, email="", name="", data_scope=scope)


def test_owner_scope_is_own_data():
    scope = build_data_scope(UserRole.PROPERTY_OWNER, "owner-1")
    assert scope.own_data_only is True
    assert scope.user_id == "owner-1"
    assert scope.pii_mask is False


def test_district_officer_scope():
    scope = build_data_scope(UserRole.DISTRICT_TOURISM_OFFICER, "dtdo-1", "Shimla")
    assert scope.district == "Shimla"
    assert scope.full_pipeline is False


def test_district_officer_without_district_sees_only_own():
    scope = build_data_scope(UserRole.DEALING_ASSISTANT, "da-1", None)
    assert scope.district is None
    assert scope.own_data_only is True


def test_state_officer_is_statewide_and_masked():
    scope = build_data_scope(UserRole.STATE_OFFICER, "so-1", "Shimla")
    assert scope.full_pipeline is True
    assert scope.pii_mask is True
    assert scope.district is None


def test_admin_is_statewide_unmasked():
    scope = build_data_scope(UserRole.ADMIN, "admin-1")
    assert scope.full_pipeline is True
    assert scope.pii_mask is False


def test_is_officer():
    assert is_officer(UserRole.STATE_OFFICER)
    assert not is_officer(UserRole.PROPERTY_OWNER)


def test_full_pipeline_adds_no_filter():
    scope = DataScope(full_pipeline=True)
    stmt = apply_data_scope(select(Application), scope, _user(scope, UserRole.ADMIN))
    assert "WHERE" not in _sql(stmt)


def test_district_scope_filters_by_district():
    scope = DataScope(district="Kullu", user_id="da-1")
    sql = _sql(apply_data_scope(select(Application), scope, _user(scope)))
    assert "applications.district = 'Kullu'" in sql


def test_own_data_scope_joins_owner():
    scope = DataScope(own_data_only=True, user_id="owner-1")
    sql = _sql(apply_data_scope(select(Application), scope, _user(scope, UserRole.PROPERTY_OWNER)))
    assert "JOIN portal_users" in sql
    assert "portal_users.keycloak_user_id = 'owner-1'" in sql


def test_empty_scope_matches_nothing():
    scope = DataScope()
    sql = _sql(apply_data_scope(select(Application), scope, _user(scope)))
    assert "false" in sql.lower() or "0 = 1" in sql
