# This project was developed with assistance from AI tools.
"""Dealing Assistant routes: scrutiny queue, document checks and field inspections."""

from homestay_db import get_db
from homestay_db.enums import InspectionStatus, UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import ApplicationResponse, VersionedRequest
from ..schemas.document import DocumentResponse, DocumentVerifyRequest
from ..schemas.inspection import (
    InspectionOrderListResponse,
    InspectionOrderResponse,
    InspectionReportCreate,
    InspectionReportResponse,
)
from ..schemas.workflow import DashboardResponse, QueueResponse, RemarksRequest, SendBackRequest
from ..services import da as da_service
from ..services import inspection as inspection_service
from ..services.queues import DA_TABS, list_queue
from .applications import build_app_response

router = APIRouter(
    dependencies=[Depends(require_roles(UserRole.DEALING_ASSISTANT, UserRole.ADMIN))],
)


def _not_found(what: str = "Application") -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


@router.get("/applications", response_model=QueueResponse)
async def get_queue(
    user: CurrentUser,
    tab: str = Query(default="active"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> QueueResponse:
    """One tab of the district scrutiny queue with counts for every tab."""
    if tab not in DA_TABS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown tab '{tab}'. Choose one of: {', '.join(DA_TABS)}",
        )
    items, total, counts = await list_queue(
        session, user, DA_TABS, tab, offset=offset, limit=limit
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
    return DashboardResponse(counts=await da_service.get_dashboard(session, user))


@router.post("/applications/{application_id}/start-scrutiny", response_model=ApplicationResponse)
async def start_scrutiny(
    application_id: int,
    user: CurrentUser,
    body: VersionedRequest | None = None,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    app = await da_service.start_scrutiny(
        session,
        user,
        application_id,
        expected_version=body.expected_version if body else None,
    )
    if app is None:
        raise _not_found()
    return build_app_response(app)


@router.patch("/documents/{document_id}/verify", response_model=DocumentResponse)
async def verify_document(
    document_id: int,
    body: DocumentVerifyRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    """Mark a document verified, or flag it with a note for the owner."""
    doc = await da_service.verify_document(
        session, user, document_id, status=body.status, notes=body.notes
    )
    if doc is None:
        raise _not_found("Document")
    return DocumentResponse.model_validate(doc)


@router.post("/applications/{application_id}/forward-to-dtdo", response_model=ApplicationResponse)
async def forward_to_dtdo(
    application_id: int,
    body: RemarksRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    app = await da_service.forward_to_dtdo(
        session,
        user,
        application_id,
        remarks=body.remarks,
        expected_version=body.expected_version,
    )
    if app is None:
        raise _not_found()
    return build_app_response(app)


@router.post("/applications/{application_id}/send-back", response_model=ApplicationResponse)
async def send_back(
    application_id: int,
    body: SendBackRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Return the application to the owner for corrections.

    The send-back that reaches the configured limit rejects the application
    instead; the response then carries status ``rejected``.
    """
    app = await da_service.send_back(
        session,
        user,
        application_id,
        reason=body.reason,
        expected_version=body.expected_version,
    )
    if app is None:
        raise _not_found()
    return build_app_response(app)


@router.get("/inspections", response_model=InspectionOrderListResponse)
async def list_inspections(
    user: CurrentUser,
    inspection_status: InspectionStatus | None = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_db),
) -> InspectionOrderListResponse:
    """Inspection orders assigned to the calling DA."""
    orders = await inspection_service.list_inspections(session, user, status=inspection_status)
    items = [InspectionOrderResponse.model_validate(o) for o in orders]
    return InspectionOrderListResponse(data=items, count=len(items))


@router.get("/inspections/{order_id}", response_model=InspectionOrderResponse)
async def get_inspection(
    order_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InspectionOrderResponse:
    order = await inspection_service.get_inspection_order(session, user, order_id)
    if order is None:
        raise _not_found("Inspection order")
    return InspectionOrderResponse.model_validate(order)


@router.post(
    "/inspections/{order_id}/submit-report",
    response_model=InspectionReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_report(
    order_id: int,
    body: InspectionReportCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InspectionReportResponse:
    report = await inspection_service.submit_report(session, user, order_id, body.model_dump())
    if report is None:
        raise _not_found("Inspection order")
    return InspectionReportResponse.model_validate(report)
