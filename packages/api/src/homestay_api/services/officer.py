# This project was developed with assistance from AI tools.
"""Application search for officers."""

from homestay_db import Application
from homestay_db.enums import ApplicationStatus
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .scope import apply_data_scope


def _search_clause(q: str):
    pattern = f"%{q.strip()}%"
    return or_(
        Application.application_number.ilike(pattern),
        Application.property_name.ilike(pattern),
        Application.owner_name.ilike(pattern),
        Application.owner_mobile.ilike(pattern),
    )


async def search_applications(
    session: AsyncSession,
    user: UserContext,
    *,
    q: str | None = None,
    status: ApplicationStatus | None = None,
    district: str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Application], int]:
    """Search by number, property name, owner name or mobile.

    District officers are held to their own district whatever ``district``
    says; state officers and admins may narrow by it.
    """
    stmt = apply_data_scope(select(Application), user.data_scope, user)
    if q and q.strip():
        stmt = stmt.where(_search_clause(q))
    if status is not None:
        stmt = stmt.where(Application.status == status)
    if district and user.data_scope.full_pipeline:
        stmt = stmt.where(Application.district == district)

    total = (
        await session.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar() or 0
    stmt = stmt.order_by(Application.updated_at.desc(), Application.id.desc())
    result = await session.execute(stmt.offset(offset).limit(limit))
    return list(result.unique().scalars().all()), total
