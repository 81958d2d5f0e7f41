# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Used by the middleware layer and by the seeding CLI, which builds user
contexts outside the request lifecycle.
"""

from homestay_db.enums import UserRole

from ..schemas.auth import DataScope

OFFICER_ROLES = frozenset(
    {
        UserRole.DEALING_ASSISTANT,
        UserRole.DISTRICT_TOURISM_OFFICER,
        UserRole.STATE_OFFICER,
        UserRole.ADMIN,
    }
)

DISTRICT_ROLES = frozenset({UserRole.DEALING_ASSISTANT, UserRole.DISTRICT_TOURISM_OFFICER})


def is_officer(role: UserRole) -> bool:
    return role in OFFICER_ROLES


def build_data_scope(role: UserRole, user_id: str, district: str | None = None) -> DataScope:
    """Build data scope rules based on the user's role.

    District officers without a district claim get an empty scope rather
    than a statewide one.
    """
    if role == UserRole.PROPERTY_OWNER:
        return DataScope(own_data_only=True, user_id=user_id)
    if role in DISTRICT_ROLES:
        if not district:
            return DataScope(own_data_only=True, user_id=user_id)
        return DataScope(district=district, user_id=user_id)
    if role == UserRole.STATE_OFFICER:
        return DataScope(pii_mask=True, full_pipeline=True, user_id=user_id)
    if role == UserRole.ADMIN:
        return DataScope(full_pipeline=True, user_id=user_id)
    return DataScope()
