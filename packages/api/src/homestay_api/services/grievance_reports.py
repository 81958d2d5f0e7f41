# This project was developed with assistance from AI tools.
"""Aggregate grievance reports for officers.

Durations and monthly buckets are computed in Python so the same code runs
on PostgreSQL and SQLite.
"""

import csv
import io
from datetime import UTC, datetime, timedelta

from homestay_db import Grievance
from homestay_db.enums import GrievanceStatus, GrievanceType
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

CSV_COLUMNS = [
    "ticket_number",
    "ticket_type",
    "category",
    "priority",
    "status",
    "subject",
    "application_id",
    "assigned_to",
    "created_at",
    "resolved_at",
]


def _aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _filtered(stmt, ticket_type: GrievanceType | None):
    if ticket_type is not None:
        stmt = stmt.where(Grievance.ticket_type == ticket_type)
    return stmt


async def _count_by(session: AsyncSession, column, ticket_type: GrievanceType | None) -> list[dict]:
    stmt = _filtered(select(column, func.count(Grievance.id)), ticket_type).group_by(column)
    rows = (await session.execute(stmt)).all()
    counts = [
        {"key": getattr(key, "value", key), "count": count} for key, count in rows
    ]
    return sorted(counts, key=lambda row: (-row["count"], row["key"] or ""))


async def by_category(session: AsyncSession, ticket_type: GrievanceType | None = None) -> list[dict]:
    return await _count_by(session, Grievance.category, ticket_type)


async def by_status(session: AsyncSession, ticket_type: GrievanceType | None = None) -> list[dict]:
    return await _count_by(session, Grievance.status, ticket_type)


async def by_priority(session: AsyncSession, ticket_type: GrievanceType | None = None) -> list[dict]:
    return await _count_by(session, Grievance.priority, ticket_type)


def average_resolution_days(pairs) -> float | None:
    """Mean of (resolved_at - created_at) in days, over resolved pairs only."""
    durations = [
        (_aware(resolved) - _aware(created)).total_seconds() / 86400
        for created, resolved in pairs
        if created is not None and resolved is not None
    ]
    if not durations:
        return None
    return round(sum(durations) / len(durations), 1)


async def summary(
    session: AsyncSession,
    ticket_type: GrievanceType | None = None,
    now: datetime | None = None,
) -> dict:
    """Totals by status, average resolution time, and 30-day activity."""
    now = now or datetime.now(UTC)
    since = now - timedelta(days=30)

    stmt = _filtered(select(Grievance.status, Grievance.created_at, Grievance.resolved_at), ticket_type)
    rows = (await session.execute(stmt)).all()

    by_state = {status.value: 0 for status in GrievanceStatus}
    for status, _, _ in rows:
        by_state[getattr(status, "value", status)] += 1

    return {
        "total": len(rows),
        "by_status": by_state,
        "average_resolution_days": average_resolution_days(
            (created, resolved) for _, created, resolved in rows
        ),
        "created_last_30_days": sum(1 for _, created, _ in rows if created and _aware(created) >= since),
        "resolved_last_30_days": sum(
            1 for _, _, resolved in rows if resolved and _aware(resolved) >= since
        ),
    }


def _month_keys(now: datetime, months: int) -> list[str]:
    keys = []
    year, month = now.year, now.month
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


async def monthly_trend(
    session: AsyncSession,
    months: int = 6,
    ticket_type: GrievanceType | None = None,
    now: datetime | None = None,
) -> list[dict]:
    """Created and resolved counts per calendar month, oldest first."""
    now = now or datetime.now(UTC)
    keys = _month_keys(now, months)
    buckets = {key: {"month": key, "created": 0, "resolved": 0} for key in keys}

    stmt = _filtered(select(Grievance.created_at, Grievance.resolved_at), ticket_type)
    for created, resolved in (await session.execute(stmt)).all():
        if created is not None:
            key = created.strftime("%Y-%m")
            if key in buckets:
                buckets[key]["created"] += 1
        if resolved is not None:
            key = resolved.strftime("%Y-%m")
            if key in buckets:
                buckets[key]["resolved"] += 1
    return [buckets[key] for key in keys]


def _csv_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(getattr(value, "value", value))


async def export_csv(
    session: AsyncSession,
    ticket_type: GrievanceType | None = None,
    status: GrievanceStatus | None = None,
) -> str:
    stmt = _filtered(select(Grievance), ticket_type)
    if status is not None:
        stmt = stmt.where(Grievance.status == status)
    stmt = stmt.order_by(Grievance.created_at.desc(), Grievance.id.desc())
    grievances = (await session.execute(stmt)).scalars().all()

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for grievance in grievances:
        writer.writerow([_csv_value(getattr(grievance, column)) for column in CSV_COLUMNS])
    return buffer.getvalue()
