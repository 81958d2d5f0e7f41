# This project was developed with assistance from AI tools.
"""Audit event service.

Writes append-only audit trail entries with a SHA-256 hash chain for tamper
evidence. On PostgreSQL a transaction-scoped advisory lock serializes hash
computation across concurrent writers.

The same table backs the application timeline and the grievance audit log,
so the query helpers here are shared by those features.
"""

import hashlib
import json
import logging
from datetime import UTC, datetime

from homestay_db import AuditEvent
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext

logger = logging.getLogger(__name__)

# Fixed advisory lock key for audit trail serialization.
AUDIT_LOCK_KEY = 900_001


def _normalize_timestamp(ts: datetime | None) -> str:
    """Render a timestamp identically whether it came back tz-aware or naive."""
    if ts is None:
        return ""
    if ts.tzinfo is not None:
        ts = ts.astimezone(UTC).replace(tzinfo=None)
    return ts.isoformat()


def _compute_hash(event_id: int, timestamp: datetime | None, event_data: dict | None) -> str:
    """Compute SHA-256 hash of an audit event's key fields."""
    payload = (
        f"{event_id}|{_normalize_timestamp(timestamp)}|"
        f"{json.dumps(event_data, sort_keys=True, default=str)}"
    )
    return hashlib.sha256(payload.encode()).hexdigest()


def _is_postgres(session: AsyncSession) -> bool:
    dialect = getattr(session.bind, "dialect", None)
    return getattr(dialect, "name", None) == "postgresql"


async def write_audit_event(
    session: AsyncSession,
    *,
    event_type: str,
    user: UserContext | None = None,
    user_id: str | None = None,
    user_role: str | None = None,
    application_id: int | None = None,
    grievance_id: int | None = None,
    event_data: dict | None = None,
) -> AuditEvent:
    """Write a single audit event with hash chain linkage.

    Args:
        session: Database session. The caller owns the commit.
        event_type: Event category (e.g. 'status_change', 'document_verified').
        user: Acting user; fills user_id/user_role when given.
        application_id: Related application, if any.
        grievance_id: Related grievance, if any.
        event_data: JSON-serializable payload.

    Returns:
        The created AuditEvent row (with prev_hash set).
    """
    if user is not None:
        user_id = user.user_id
        user_role = user.role.value

    if _is_postgres(session):
        # Released automatically when the transaction commits or rolls back.
        await session.execute(text(f"SELECT pg_advisory_xact_lock({AUDIT_LOCK_KEY})"))

    latest_stmt = select(AuditEvent).order_by(AuditEvent.id.desc()).limit(1)
    result = await session.execute(latest_stmt)
    prev_event = result.scalar_one_or_none()

    if prev_event is not None:
        prev_hash = _compute_hash(prev_event.id, prev_event.timestamp, prev_event.event_data)
    else:
        prev_hash = "genesis"

    audit = AuditEvent(
        timestamp=datetime.now(UTC),
        event_type=event_type,
        user_id=user_id,
        user_role=user_role,
        application_id=application_id,
        grievance_id=grievance_id,
        event_data=event_data,
        prev_hash=prev_hash,
    )
    session.add(audit)
    await session.flush()
    return audit


async def verify_audit_chain(session: AsyncSession) -> dict:
    """Verify the integrity of the audit event hash chain.

    Walks all events in ID order, recomputes each expected prev_hash,
    and compares against the stored value.

    Returns:
        {"status": "OK", "events_checked": N} on success, or
        {"status": "TAMPERED", "first_break_id": id, "events_checked": N}
        if a mismatch is found.
    """
    stmt = select(AuditEvent).order_by(AuditEvent.id.asc())
    result = await session.execute(stmt)
    events = list(result.scalars().all())

    for i, event in enumerate(events):
        if i == 0:
            expected = "genesis"
        else:
            prev = events[i - 1]
            expected = _compute_hash(prev.id, prev.timestamp, prev.event_data)

        if event.prev_hash != expected:
            logger.warning("Audit chain break detected at event %s", event.id)
            return {
                "status": "TAMPERED",
                "first_break_id": event.id,
                "events_checked": i + 1,
            }

    return {"status": "OK", "events_checked": len(events)}


async def get_audit_chain_length(session: AsyncSession) -> int:
    """Return the total number of audit events."""
    result = await session.execute(select(func.count(AuditEvent.id)))
    return result.scalar_one()


async def get_events_by_application(
    session: AsyncSession,
    application_id: int,
    event_types: list[str] | None = None,
) -> list[AuditEvent]:
    """Return audit events for an application in chronological order."""
    stmt = select(AuditEvent).where(AuditEvent.application_id == application_id)
    if event_types:
        stmt = stmt.where(AuditEvent.event_type.in_(event_types))
    stmt = stmt.order_by(AuditEvent.id.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_events_by_grievance(
    session: AsyncSession,
    grievance_id: int,
) -> list[AuditEvent]:
    """Return the audit log of a grievance, newest first."""
    stmt = (
        select(AuditEvent)
        .where(AuditEvent.grievance_id == grievance_id)
        .order_by(AuditEvent.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
