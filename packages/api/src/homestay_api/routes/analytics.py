# This project was developed with assistance from AI tools.
"""Pipeline analytics for supervising officers."""

from homestay_db import get_db
from homestay_db.enums import UserRole
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.analytics import AnalyticsOverview
from ..services.analytics import get_overview

router = APIRouter()


@router.get(
    "/overview",
    response_model=AnalyticsOverview,
    dependencies=[
        Depends(
            require_roles(
                UserRole.ADMIN,
                UserRole.STATE_OFFICER,
                UserRole.DISTRICT_TOURISM_OFFICER,
            )
        )
    ],
)
async def overview(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AnalyticsOverview:
    """Counts by status, category and district, scoped to the caller's districts."""
    return AnalyticsOverview(**await get_overview(session, user))
