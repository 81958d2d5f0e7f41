# This project was developed with assistance from AI tools.
"""District Tourism Development Officer routes."""

from homestay_db import get_db
from homestay_db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import ApplicationResponse
from ..schemas.inspection import (
    DealingAssistantItem,
    InspectionReportResponse,
    ScheduleInspectionRequest,
)
from ..schemas.workflow import DashboardResponse, QueueResponse, RemarksRequest
from ..services import dtdo as dtdo_service
from ..services import inspection as inspection_service
from ..services.queues import DTDO_TABS, list_queue
from .applications import build_app_response

router = APIRouter(
    dependencies=[Depends(require_roles(UserRole.DISTRICT_TOURISM_OFFICER, UserRole.ADMIN))],
)


def _not_found(what: str = "Application") -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


@router.get("/applications", response_model=QueueResponse)
async def get_queue(
    user: CurrentUser,
    tab: str = Query(default="pending"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> QueueResponse:
    """One tab of the district decision queue with counts for every tab."""
    if tab not in DTDO_TABS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown tab '{tab}'. Choose one of: {', '.join(DTDO_TABS)}",
        )
    items, total, counts = await list_queue(
        session, user, DTDO_TABS, tab, offset=offset, limit=limit
    )
    return QueueResponse(
        tab=tab,
        data=[build_app_response(app) for app in items],
        pagination=Pagination.build(total, offset, limit),
        counts=counts,
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DashboardResponse:
    return DashboardResponse(counts=await dtdo_service.get_dashboard(session, user))


@router.get("/dealing-assistants", response_model=list[DealingAssistantItem])
async def list_dealing_assistants(
    user: CurrentUser,
    district: str | None = None,
    session: AsyncSession = Depends(get_db),
) -> list[DealingAssistantItem]:
    """DAs available for inspection assignment. DTDOs only see their own district."""
    users = await dtdo_service.list_dealing_assistants(session, user, district)
    return [DealingAssistantItem.model_validate(u) for u in users]


@router.post("/applications/{application_id}/schedule-inspection", response_model=ApplicationResponse)
async def schedule_inspection(
    application_id: int,
    body: ScheduleInspectionRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Issue an inspection order to a DA of the application's district."""
    app = await inspection_service.schedule_inspection(
        session,
        user,
        application_id,
        inspection_date=body.inspection_date,
        assigned_to=body.assigned_to,
        inspection_address=body.inspection_address,
        special_instructions=body.special_instructions,
        expected_version=body.expected_version,
    )
    if app is None:
        raise _not_found()
    return build_app_response(app)


@router.get("/applications/{application_id}/inspection-report", response_model=InspectionReportResponse)
async def get_inspection_report(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InspectionReportResponse:
    report = await inspection_service.get_latest_report(session, user, application_id)
    if report is None:
        raise _not_found("Inspection report")
    return InspectionReportResponse.model_validate(report)


async def _decide(service_fn, application_id, body, user, session) -> ApplicationResponse:
    app = await service_fn(
        session,
        user,
        application_id,
        remarks=body.remarks,
        expected_version=body.expected_version,
    )
    if app is None:
        raise _not_found()
    return build_app_response(app)


@router.post("/applications/{application_id}/accept", response_model=ApplicationResponse)
async def accept(
    application_id: int,
    body: RemarksRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Accept a forwarded application; inspection scheduling comes next."""
    return await _decide(dtdo_service.accept, application_id, body, user, session)


@router.post("/applications/{application_id}/reject", response_model=ApplicationResponse)
async def reject(
    application_id: int,
    body: RemarksRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    return await _decide(dtdo_service.reject, application_id, body, user, session)


@router.post("/applications/{application_id}/revert", response_model=ApplicationResponse)
async def revert(
    application_id: int,
    body: RemarksRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Send back to the owner. The second DTDO revert rejects instead."""
    return await _decide(dtdo_service.revert, application_id, body, user, session)


@router.post(
    "/applications/{application_id}/inspection-report/approve",
    response_model=ApplicationResponse,
)
async def approve_inspection(
    application_id: int,
    body: RemarksRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    return await _decide(dtdo_service.approve_inspection, application_id, body, user, session)


@router.post(
    "/applications/{application_id}/inspection-report/reject",
    response_model=ApplicationResponse,
)
async def reject_inspection(
    application_id: int,
    body: RemarksRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    return await _decide(dtdo_service.reject_inspection, application_id, body, user, session)


@router.post(
    "/applications/{application_id}/inspection-report/raise-objections",
    response_model=ApplicationResponse,
)
async def raise_objections(
    application_id: int,
    body: RemarksRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    return await _decide(dtdo_service.raise_objections, application_id, body, user, session)


@router.post(
    "/applications/{application_id}/approve-cancellation",
    response_model=ApplicationResponse,
)
async def approve_cancellation(
    application_id: int,
    body: RemarksRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Approve a cancellation request, which also revokes the parent certificate."""
    return await _decide(dtdo_service.approve_cancellation, application_id, body, user, session)
