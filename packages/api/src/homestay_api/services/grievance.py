# This project was developed with assistance from AI tools.
"""Grievance tickets: owner grievances and internal officer tickets.

Owners see only the grievances they raised. Officers see every ticket and
may keep internal comments that owners never receive. Each side has its
own read marker so unread counts work for both.
"""

import logging
import secrets
import string
from datetime import UTC, datetime

from homestay_db import Grievance, GrievanceComment
from homestay_db.enums import (
    GrievanceCategory,
    GrievancePriority,
    GrievanceStatus,
    GrievanceType,
    UserRole,
)
from sqlalchemy import and_, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import is_officer
from ..schemas.auth import UserContext
from .application import get_application
from .audit import get_events_by_grievance, write_audit_event
from .notification import notify, notify_district_officers
from .users import ensure_portal_user, get_portal_user
from .workflow import WorkflowRuleError

logger = logging.getLogger(__name__)

_TICKET_ALPHABET = string.ascii_uppercase + string.digits
_TICKET_PREFIX = {
    GrievanceType.OWNER_GRIEVANCE: "GRV",
    GrievanceType.INTERNAL_TICKET: "INT",
}

OFFICER_UPDATABLE_FIELDS = ("status", "priority", "assigned_to", "resolution_notes")


class GrievanceAccessError(Exception):
    """Raised when the caller may not perform a grievance operation."""


def generate_ticket_number(ticket_type: GrievanceType, now: datetime | None = None) -> str:
    """``GRV-{year}-{6 upper alnum}``, or ``INT-`` for internal tickets."""
    now = now or datetime.now(UTC)
    suffix = "".join(secrets.choice(_TICKET_ALPHABET) for _ in range(6))
    return f"{_TICKET_PREFIX[ticket_type]}-{now.year}-{suffix}"


def _context(grievance: Grievance, **extra) -> dict:
    return {
        "ticket_number": grievance.ticket_number,
        "subject": grievance.subject,
        **extra,
    }


async def _visibility_filter(session: AsyncSession, user: UserContext):
    """WHERE clause limiting grievances to what the caller may see."""
    if is_officer(user.role):
        return None
    portal_user = await get_portal_user(session, user.user_id)
    if portal_user is None:
        return false()
    return and_(
        Grievance.user_id == portal_user.id,
        Grievance.ticket_type == GrievanceType.OWNER_GRIEVANCE,
    )


async def _load_visible(session: AsyncSession, user: UserContext, grievance_id: int) -> Grievance | None:
    stmt = select(Grievance).where(Grievance.id == grievance_id)
    clause = await _visibility_filter(session, user)
    if clause is not None:
        stmt = stmt.where(clause)
    return (await session.execute(stmt)).scalar_one_or_none()


def _stamp_read(grievance: Grievance, user: UserContext, now: datetime) -> None:
    if is_officer(user.role):
        grievance.last_read_by_officer = now
    else:
        grievance.last_read_by_owner = now


# -- Tickets -----------------------------------------------------------------


async def create_grievance(
    session: AsyncSession,
    user: UserContext,
    data: dict,
) -> Grievance:
    """Open a ticket.

    Owners may only raise owner grievances; officers default to internal
    tickets.

    Raises:
        GrievanceAccessError: an owner asked for an internal ticket.
        WorkflowRuleError: the linked application is not visible.
    """
    officer = is_officer(user.role)
    ticket_type = data.get("ticket_type") or (
        GrievanceType.INTERNAL_TICKET if officer else GrievanceType.OWNER_GRIEVANCE
    )
    if ticket_type == GrievanceType.INTERNAL_TICKET and not officer:
        raise GrievanceAccessError("Only officers can create internal tickets.")

    district = None
    application_id = data.get("application_id")
    if application_id is not None:
        app = await get_application(session, user, application_id)
        if app is None:
            raise WorkflowRuleError("Linked application was not found.")
        district = app.district

    creator = await ensure_portal_user(session, user)
    now = datetime.now(UTC)
    grievance = Grievance(
        ticket_number=generate_ticket_number(ticket_type, now),
        ticket_type=ticket_type,
        user_id=creator.id,
        application_id=application_id,
        category=data.get("category") or GrievanceCategory.OTHER,
        priority=data.get("priority") or GrievancePriority.MEDIUM,
        status=GrievanceStatus.OPEN,
        subject=data["subject"],
        description=data["description"],
        last_read_by_owner=None if officer else now,
        last_read_by_officer=now if officer else None,
    )
    session.add(grievance)
    await session.flush()

    await write_audit_event(
        session,
        event_type="grievance_created",
        user=user,
        application_id=application_id,
        grievance_id=grievance.id,
        event_data={
            "ticket_number": grievance.ticket_number,
            "ticket_type": ticket_type.value,
            "category": grievance.category.value,
        },
    )
    if ticket_type == GrievanceType.OWNER_GRIEVANCE:
        await notify_district_officers(
            session,
            district or user.district,
            UserRole.DISTRICT_TOURISM_OFFICER,
            "grievance_created",
            _context(grievance),
            grievance_id=grievance.id,
        )
    grievance_id = grievance.id
    await session.commit()
    logger.info("Grievance %s created by %s", grievance.ticket_number, user.user_id)
    return await _load_visible(session, user, grievance_id)


async def list_grievances(
    session: AsyncSession,
    user: UserContext,
    *,
    ticket_type: GrievanceType | None = None,
    status: GrievanceStatus | None = None,
    category: GrievanceCategory | None = None,
    priority: GrievancePriority | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Grievance], int]:
    stmt = select(Grievance)
    clause = await _visibility_filter(session, user)
    if clause is not None:
        stmt = stmt.where(clause)
    filters = {
        Grievance.ticket_type: ticket_type,
        Grievance.status: status,
        Grievance.category: category,
        Grievance.priority: priority,
    }
    for column, value in filters.items():
        if value is not None:
            stmt = stmt.where(column == value)

    total = (
        await session.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar() or 0
    stmt = stmt.order_by(Grievance.created_at.desc(), Grievance.id.desc())
    result = await session.execute(stmt.offset(offset).limit(limit))
    return list(result.scalars().all()), total


async def get_grievance(
    session: AsyncSession,
    user: UserContext,
    grievance_id: int,
    *,
    mark_read: bool = True,
) -> Grievance | None:
    """Return a visible grievance, marking it read for the caller's side."""
    grievance = await _load_visible(session, user, grievance_id)
    if grievance is None or not mark_read:
        return grievance
    _stamp_read(grievance, user, datetime.now(UTC))
    await session.commit()
    return grievance


async def mark_read(session: AsyncSession, user: UserContext, grievance_id: int) -> Grievance | None:
    return await get_grievance(session, user, grievance_id, mark_read=True)


async def unread_count(session: AsyncSession, user: UserContext) -> int:
    """Tickets with comments newer than the caller's side last read them."""
    marker = Grievance.last_read_by_officer if is_officer(user.role) else Grievance.last_read_by_owner
    stmt = select(func.count(Grievance.id)).where(
        Grievance.last_comment_at.is_not(None),
        or_(marker.is_(None), Grievance.last_comment_at > marker),
    )
    clause = await _visibility_filter(session, user)
    if clause is not None:
        stmt = stmt.where(clause)
    return (await session.execute(stmt)).scalar() or 0


async def update_grievance(
    session: AsyncSession,
    user: UserContext,
    grievance_id: int,
    updates: dict,
) -> Grievance | None:
    """Officer update of status, priority, assignee or resolution notes.

    Each changed field gets its own audit entry. A status change notifies
    the owner who raised the ticket.
    """
    if not is_officer(user.role):
        raise GrievanceAccessError("Only officers can update grievances.")
    grievance = await _load_visible(session, user, grievance_id)
    if grievance is None:
        return None

    now = datetime.now(UTC)
    changed: dict[str, tuple] = {}
    for field in OFFICER_UPDATABLE_FIELDS:
        if field not in updates:
            continue
        value = updates[field]
        previous = getattr(grievance, field)
        if previous == value:
            continue
        setattr(grievance, field, value)
        changed[field] = (previous, value)

    if not changed:
        return grievance

    if "status" in changed:
        if grievance.status == GrievanceStatus.RESOLVED:
            grievance.resolved_at = now
        elif grievance.status in (GrievanceStatus.OPEN, GrievanceStatus.IN_PROGRESS):
            grievance.resolved_at = None

    for field, (previous, value) in changed.items():
        await write_audit_event(
            session,
            event_type=f"grievance_{field}_changed",
            user=user,
            application_id=grievance.application_id,
            grievance_id=grievance.id,
            event_data={
                "field": field,
                "from": getattr(previous, "value", previous),
                "to": getattr(value, "value", value),
            },
        )

    if "status" in changed and grievance.ticket_type == GrievanceType.OWNER_GRIEVANCE:
        if grievance.status == GrievanceStatus.RESOLVED:
            template = "grievance_resolved"
        else:
            template = "grievance_status_changed"
        await notify(
            session,
            recipient_id=grievance.user_id,
            template=template,
            context=_context(
                grievance,
                status=grievance.status.value.replace("_", " "),
                resolution_notes=grievance.resolution_notes or "",
            ),
            grievance_id=grievance.id,
        )

    await session.commit()
    logger.info(
        "Grievance %s updated by %s: %s", grievance.ticket_number, user.user_id, sorted(changed)
    )
    return await _load_visible(session, user, grievance_id)


# -- Comments ----------------------------------------------------------------


async def list_comments(
    session: AsyncSession,
    user: UserContext,
    grievance_id: int,
) -> list[GrievanceComment] | None:
    grievance = await _load_visible(session, user, grievance_id)
    if grievance is None:
        return None
    stmt = select(GrievanceComment).where(GrievanceComment.grievance_id == grievance.id)
    if not is_officer(user.role):
        stmt = stmt.where(GrievanceComment.is_internal.is_(False))
    stmt = stmt.order_by(GrievanceComment.created_at.asc(), GrievanceComment.id.asc())
    return list((await session.execute(stmt)).scalars().all())


async def add_comment(
    session: AsyncSession,
    user: UserContext,
    grievance_id: int,
    *,
    comment: str,
    is_internal: bool = False,
) -> GrievanceComment | None:
    """Append a comment to a ticket.

    Raises:
        GrievanceAccessError: an owner tried to post an internal note.
        WorkflowRuleError: the ticket is closed or the comment is empty.
    """
    officer = is_officer(user.role)
    if is_internal and not officer:
        raise GrievanceAccessError("Only officers can add internal comments.")
    grievance = await _load_visible(session, user, grievance_id)
    if grievance is None:
        return None
    if grievance.status == GrievanceStatus.CLOSED:
        raise WorkflowRuleError("Comments cannot be added to a closed grievance.")
    text = (comment or "").strip()
    if not text:
        raise WorkflowRuleError("Comment cannot be empty.")

    author = await ensure_portal_user(session, user)
    now = datetime.now(UTC)
    entry = GrievanceComment(
        grievance_id=grievance.id,
        user_id=author.id,
        author_role=user.role.value,
        comment=text,
        is_internal=is_internal,
    )
    session.add(entry)

    # Internal notes are invisible to the owner, so they do not count as news.
    if not is_internal:
        grievance.last_comment_at = now
    _stamp_read(grievance, user, now)
    await session.flush()

    await write_audit_event(
        session,
        event_type="grievance_comment_added",
        user=user,
        application_id=grievance.application_id,
        grievance_id=grievance.id,
        event_data={"comment_id": entry.id, "is_internal": is_internal},
    )
    if (
        officer
        and not is_internal
        and grievance.ticket_type == GrievanceType.OWNER_GRIEVANCE
        and grievance.user_id != author.id
    ):
        await notify(
            session,
            recipient_id=grievance.user_id,
            template="grievance_officer_reply",
            context=_context(grievance),
            grievance_id=grievance.id,
        )
    await session.commit()
    await session.refresh(entry)
    return entry


async def get_audit_log(session: AsyncSession, user: UserContext, grievance_id: int) -> list | None:
    if not is_officer(user.role):
        raise GrievanceAccessError("Only officers can view a grievance's audit log.")
    grievance = await _load_visible(session, user, grievance_id)
    if grievance is None:
        return None
    return await get_events_by_grievance(session, grievance.id)
