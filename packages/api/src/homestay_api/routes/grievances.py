# This project was developed with assistance from AI tools.
"""Grievance tickets, comment threads and officer reports."""

from homestay_db import get_db
from homestay_db.enums import (
    GrievanceCategory,
    GrievancePriority,
    GrievanceStatus,
    GrievanceType,
    UserRole,
)
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.admin import AuditEventItem, AuditLogResponse
from ..schemas.grievance import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    CountItem,
    GrievanceCreate,
    GrievanceListResponse,
    GrievanceResponse,
    GrievanceSummaryResponse,
    GrievanceUpdate,
    MonthlyTrendItem,
    UnreadCountResponse,
)
from ..services import grievance as grievance_service
from ..services import grievance_reports as reports

router = APIRouter()

_ALL_AUTHENTICATED = (
    UserRole.ADMIN,
    UserRole.PROPERTY_OWNER,
    UserRole.DEALING_ASSISTANT,
    UserRole.DISTRICT_TOURISM_OFFICER,
    UserRole.STATE_OFFICER,
)

_OFFICER_ROLES = (
    UserRole.ADMIN,
    UserRole.DEALING_ASSISTANT,
    UserRole.DISTRICT_TOURISM_OFFICER,
    UserRole.STATE_OFFICER,
)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grievance not found")


@router.post(
    "/",
    response_model=GrievanceResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def create_grievance(
    body: GrievanceCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> GrievanceResponse:
    """Raise a ticket. Owners file grievances; officers default to internal tickets."""
    grievance = await grievance_service.create_grievance(session, user, body.model_dump())
    return GrievanceResponse.model_validate(grievance)


@router.get(
    "/",
    response_model=GrievanceListResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def list_grievances(
    user: CurrentUser,
    ticket_type: GrievanceType | None = None,
    grievance_status: GrievanceStatus | None = Query(default=None, alias="status"),
    category: GrievanceCategory | None = None,
    priority: GrievancePriority | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> GrievanceListResponse:
    items, total = await grievance_service.list_grievances(
        session,
        user,
        ticket_type=ticket_type,
        status=grievance_status,
        category=category,
        priority=priority,
        offset=offset,
        limit=limit,
    )
    return GrievanceListResponse(
        data=[GrievanceResponse.model_validate(g) for g in items],
        pagination=Pagination.build(total, offset, limit),
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def unread_count(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> UnreadCountResponse:
    """Tickets with replies the caller has not read yet."""
    return UnreadCountResponse(unread=await grievance_service.unread_count(session, user))


# -- Reports (officers) -------------------------------------------------------


@router.get(
    "/reports/summary",
    response_model=GrievanceSummaryResponse,
    dependencies=[Depends(require_roles(*_OFFICER_ROLES))],
)
async def report_summary(
    ticket_type: GrievanceType | None = None,
    session: AsyncSession = Depends(get_db),
) -> GrievanceSummaryResponse:
    return GrievanceSummaryResponse(**await reports.summary(session, ticket_type))


@router.get(
    "/reports/by-category",
    response_model=list[CountItem],
    dependencies=[Depends(require_roles(*_OFFICER_ROLES))],
)
async def report_by_category(
    ticket_type: GrievanceType | None = None,
    session: AsyncSession = Depends(get_db),
) -> list[CountItem]:
    return [CountItem(**row) for row in await reports.by_category(session, ticket_type)]


@router.get(
    "/reports/by-status",
    response_model=list[CountItem],
    dependencies=[Depends(require_roles(*_OFFICER_ROLES))],
)
async def report_by_status(
    ticket_type: GrievanceType | None = None,
    session: AsyncSession = Depends(get_db),
) -> list[CountItem]:
    return [CountItem(**row) for row in await reports.by_status(session, ticket_type)]


@router.get(
    "/reports/by-priority",
    response_model=list[CountItem],
    dependencies=[Depends(require_roles(*_OFFICER_ROLES))],
)
async def report_by_priority(
    ticket_type: GrievanceType | None = None,
    session: AsyncSession = Depends(get_db),
) -> list[CountItem]:
    return [CountItem(**row) for row in await reports.by_priority(session, ticket_type)]


@router.get(
    "/reports/monthly-trend",
    response_model=list[MonthlyTrendItem],
    dependencies=[Depends(require_roles(*_OFFICER_ROLES))],
)
async def report_monthly_trend(
    months: int = Query(default=6, ge=1, le=24),
    ticket_type: GrievanceType | None = None,
    session: AsyncSession = Depends(get_db),
) -> list[MonthlyTrendItem]:
    """Created and resolved tickets per month, oldest first."""
    rows = await reports.monthly_trend(session, months=months, ticket_type=ticket_type)
    return [MonthlyTrendItem(**row) for row in rows]


@router.get(
    "/reports/export",
    dependencies=[Depends(require_roles(*_OFFICER_ROLES))],
)
async def export_grievances(
    ticket_type: GrievanceType | None = None,
    grievance_status: GrievanceStatus | None = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Download matching tickets as CSV."""
    content = await reports.export_csv(session, ticket_type=ticket_type, status=grievance_status)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=grievances.csv"},
    )


# -- Single ticket ------------------------------------------------------------


@router.get(
    "/{grievance_id}",
    response_model=GrievanceResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def get_grievance(
    grievance_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> GrievanceResponse:
    """Fetch a ticket. Viewing it marks the thread read for the caller's side."""
    grievance = await grievance_service.get_grievance(session, user, grievance_id)
    if grievance is None:
        raise _not_found()
    return GrievanceResponse.model_validate(grievance)


@router.patch(
    "/{grievance_id}",
    response_model=GrievanceResponse,
    dependencies=[Depends(require_roles(*_OFFICER_ROLES))],
)
async def update_grievance(
    grievance_id: int,
    body: GrievanceUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> GrievanceResponse:
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )
    grievance = await grievance_service.update_grievance(session, user, grievance_id, updates)
    if grievance is None:
        raise _not_found()
    return GrievanceResponse.model_validate(grievance)


@router.post(
    "/{grievance_id}/mark-read",
    response_model=GrievanceResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def mark_read(
    grievance_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> GrievanceResponse:
    grievance = await grievance_service.mark_read(session, user, grievance_id)
    if grievance is None:
        raise _not_found()
    return GrievanceResponse.model_validate(grievance)


@router.get(
    "/{grievance_id}/comments",
    response_model=CommentListResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def list_comments(
    grievance_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CommentListResponse:
    """The ticket thread. Internal notes are hidden from owners."""
    comments = await grievance_service.list_comments(session, user, grievance_id)
    if comments is None:
        raise _not_found()
    items = [CommentResponse.model_validate(c) for c in comments]
    return CommentListResponse(data=items, count=len(items))


@router.post(
    "/{grievance_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def add_comment(
    grievance_id: int,
    body: CommentCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CommentResponse:
    comment = await grievance_service.add_comment(
        session,
        user,
        grievance_id,
        comment=body.comment,
        is_internal=body.is_internal,
    )
    if comment is None:
        raise _not_found()
    return CommentResponse.model_validate(comment)


@router.get(
    "/{grievance_id}/audit-log",
    response_model=AuditLogResponse,
    dependencies=[Depends(require_roles(*_OFFICER_ROLES))],
)
async def get_audit_log(
    grievance_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AuditLogResponse:
    """Field changes and comments on the ticket, newest first."""
    events = await grievance_service.get_audit_log(session, user, grievance_id)
    if events is None:
        raise _not_found()
    return AuditLogResponse(
        count=len(events),
        events=[AuditEventItem.model_validate(e) for e in events],
    )
