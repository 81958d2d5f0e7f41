# This project was developed with assistance from AI tools.
"""Cross-queue application search for officers."""

from homestay_db import get_db
from homestay_db.enums import ApplicationStatus, UserRole
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import ApplicationListResponse
from ..services.officer import search_applications
from .applications import build_app_response

router = APIRouter()


@router.get(
    "/search",
    response_model=ApplicationListResponse,
    dependencies=[
        Depends(
            require_roles(
                UserRole.ADMIN,
                UserRole.DEALING_ASSISTANT,
                UserRole.DISTRICT_TOURISM_OFFICER,
                UserRole.STATE_OFFICER,
            )
        )
    ],
)
async def search(
    user: CurrentUser,
    q: str | None = Query(default=None, max_length=100),
    app_status: ApplicationStatus | None = Query(default=None, alias="status"),
    district: str | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> ApplicationListResponse:
    """Match application number, property, owner name or mobile within scope."""
    items, total = await search_applications(
        session,
        user,
        q=q,
        status=app_status,
        district=district,
        offset=offset,
        limit=limit,
    )
    return ApplicationListResponse(
        data=[build_app_response(app) for app in items],
        pagination=Pagination.build(total, offset, limit),
    )
