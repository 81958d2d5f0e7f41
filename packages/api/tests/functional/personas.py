# This project was developed with assistance from AI tools.
"""Persona factories for functional tests.

Each function returns a UserContext matching the DataScope built by
``core/auth.py:build_data_scope()`` for that role. Fixed user IDs ensure
cross-test consistency.
"""

from homestay_db.enums import UserRole

from homestay_api.core.auth import build_data_scope
from homestay_api.schemas.auth import UserContext

# Fixed IDs for cross-test referencing
RAJESH_USER_ID = "rajesh-thakur-001"
ANITA_USER_ID = "anita-sharma-002"
DA_SHIMLA_USER_ID = "da-shimla-001"
DA_KULLU_USER_ID = "da-kullu-001"
DTDO_SHIMLA_USER_ID = "dtdo-shimla-001"
STATE_OFFICER_USER_ID = "state-officer-001"
ADMIN_USER_ID = "admin-user"


def _persona(user_id, role, email, name, district=None, mobile=None) -> UserContext:
    return UserContext(
        user_id=user_id,
        role=role,
        email=email,
        name=name,
        mobile=mobile,
        district=district,
        data_scope=build_data_scope(role, user_id, district),
    )


def owner_rajesh() -> UserContext:
    return _persona(
        RAJESH_USER_ID,
        UserRole.PROPERTY_OWNER,
        "rajesh@example.com",
        "Rajesh Thakur",
        mobile="9816012345",
    )


def owner_anita() -> UserContext:
    return _persona(
        ANITA_USER_ID,
        UserRole.PROPERTY_OWNER,
        "anita@example.com",
        "Anita Sharma",
        mobile="9418054321",
    )


def da_shimla() -> UserContext:
    return _persona(
        DA_SHIMLA_USER_ID,
        UserRole.DEALING_ASSISTANT,
        "da.shimla@hp.gov.in",
        "Sunil Verma",
        district="Shimla",
    )


def da_kullu() -> UserContext:
    return _persona(
        DA_KULLU_USER_ID,
        UserRole.DEALING_ASSISTANT,
        "da.kullu@hp.gov.in",
        "Meena Sharma",
        district="Kullu",
    )


def dtdo_shimla() -> UserContext:
    return _persona(
        DTDO_SHIMLA_USER_ID,
        UserRole.DISTRICT_TOURISM_OFFICER,
        "dtdo.shimla@hp.gov.in",
        "Kavita Negi",
        district="Shimla",
    )


def state_officer() -> UserContext:
    return _persona(
        STATE_OFFICER_USER_ID,
        UserRole.STATE_OFFICER,
        "state.officer@hp.gov.in",
        "Vikram Chauhan",
    )


def admin() -> UserContext:
    return _persona(ADMIN_USER_ID, UserRole.ADMIN, "admin@hp.gov.in", "Admin User")
