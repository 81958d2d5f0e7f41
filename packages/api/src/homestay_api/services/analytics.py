# This project was developed with assistance from AI tools.
"""Pipeline analytics across the caller's data scope."""

from collections import Counter
from datetime import UTC

from homestay_db import Application
from homestay_db.enums import ApplicationStatus
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .scope import apply_data_scope
from .status import to_display_status


def _key(value) -> str:
    return getattr(value, "value", value) or "unknown"


async def _grouped(session: AsyncSession, user: UserContext, column) -> dict[str, int]:
    stmt = apply_data_scope(
        select(column, func.count(Application.id)), user.data_scope, user
    ).group_by(column)
    return {_key(key): count for key, count in (await session.execute(stmt)).all()}


def _aware(value):
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def average_processing_days(pairs) -> float | None:
    """Mean days from submission to approval over approved applications."""
    durations = [
        (_aware(approved) - _aware(submitted)).total_seconds() / 86400
        for submitted, approved in pairs
        if submitted is not None and approved is not None
    ]
    if not durations:
        return None
    return round(sum(durations) / len(durations), 1)


async def get_overview(session: AsyncSession, user: UserContext) -> dict:
    by_status = await _grouped(session, user, Application.status)
    by_category = await _grouped(session, user, Application.category)
    by_district = await _grouped(session, user, Application.district)

    by_display: Counter = Counter()
    for status, count in by_status.items():
        by_display[to_display_status(status)] += count

    timing_stmt = apply_data_scope(
        select(Application.submitted_at, Application.approved_at), user.data_scope, user
    ).where(Application.status == ApplicationStatus.APPROVED)
    timings = (await session.execute(timing_stmt)).all()

    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_display_status": dict(by_display),
        "by_category": by_category,
        "by_district": by_district,
        "average_processing_days": average_processing_days(timings),
    }
