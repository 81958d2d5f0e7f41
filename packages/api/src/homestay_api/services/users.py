# This project was developed with assistance from AI tools.
"""Portal user records linked to Keycloak identities."""

import logging

from homestay_db import PortalUser
from homestay_db.enums import UserRole
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext

logger = logging.getLogger(__name__)


async def get_portal_user(session: AsyncSession, keycloak_user_id: str) -> PortalUser | None:
    stmt = select(PortalUser).where(PortalUser.keycloak_user_id == keycloak_user_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def ensure_portal_user(session: AsyncSession, user: UserContext) -> PortalUser:
    """Find or create the PortalUser row for the authenticated caller.

    Role and district follow the token, so a reassigned officer is picked
    up on their next write.
    """
    portal_user = await get_portal_user(session, user.user_id)
    if portal_user is None:
        portal_user = PortalUser(
            keycloak_user_id=user.user_id,
            full_name=user.name or user.email or user.user_id,
            email=user.email or None,
            mobile=user.mobile,
            role=user.role,
            district=user.district,
            is_active=True,
        )
        session.add(portal_user)
        await session.flush()
        logger.info("Created portal user %s (%s)", user.user_id, user.role.value)
        return portal_user

    if portal_user.role != user.role or portal_user.district != user.district:
        portal_user.role = user.role
        portal_user.district = user.district
        await session.flush()
    return portal_user


async def list_district_officers(
    session: AsyncSession,
    district: str,
    role: UserRole,
) -> list[PortalUser]:
    """Active officers of one role posted to a district."""
    stmt = (
        select(PortalUser)
        .where(
            PortalUser.district == district,
            PortalUser.role == role,
            PortalUser.is_active.is_(True),
        )
        .order_by(PortalUser.full_name)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
