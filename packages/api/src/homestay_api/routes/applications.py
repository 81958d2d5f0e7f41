# This project was developed with assistance from AI tools.
"""Owner application routes with RBAC enforcement.

Workflow failures raised by the services (illegal transition, rule
violation, version conflict) are turned into Problem Details by the
exception handlers registered in ``main``.
"""

from homestay_db import Application, get_db
from homestay_db.enums import ApplicationStatus, UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationUpdate,
    CertificateResponse,
    ResubmitRequest,
    ServiceRequestCreate,
    VersionedRequest,
)
from ..schemas.inspection import InspectionOrderResponse
from ..schemas.status import ApplicationStatusResponse, TimelineResponse
from ..services import application as app_service
from ..services import inspection as inspection_service
from ..services.certificate import certificate_view
from ..services.status import get_application_status, get_application_timeline, to_display_status

router = APIRouter()

_ALL_AUTHENTICATED = (
    UserRole.ADMIN,
    UserRole.PROPERTY_OWNER,
    UserRole.DEALING_ASSISTANT,
    UserRole.DISTRICT_TOURISM_OFFICER,
    UserRole.STATE_OFFICER,
)

_OWNER_ROLES = (UserRole.PROPERTY_OWNER, UserRole.ADMIN)


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Application not found",
    )


def build_app_response(app: Application) -> ApplicationResponse:
    """Build ApplicationResponse from the ORM row, adding the owner-facing status."""
    response = ApplicationResponse.model_validate(app)
    response.display_status = to_display_status(app.status)
    return response


@router.get(
    "/",
    response_model=ApplicationListResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def list_applications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    filter_status: ApplicationStatus | None = None,
) -> ApplicationListResponse:
    """List applications visible to the current user's role and data scope."""
    applications, total = await app_service.list_applications(
        session,
        user,
        offset=offset,
        limit=limit,
        filter_status=filter_status,
    )
    return ApplicationListResponse(
        data=[build_app_response(app) for app in applications],
        pagination=Pagination.build(total, offset, limit),
    )


@router.post(
    "/",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_OWNER_ROLES))],
)
async def create_application(
    body: ApplicationCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Create a draft registration. Owners and admins only."""
    app = await app_service.create_application(session, user, body.model_dump())
    return build_app_response(app)


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def get_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Get a single application. Returns 404 for out-of-scope resources."""
    app = await app_service.get_application(session, user, application_id)
    if app is None:
        raise _not_found()
    return build_app_response(app)


@router.patch(
    "/{application_id}",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_OWNER_ROLES))],
)
async def update_application(
    application_id: int,
    body: ApplicationUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Edit a draft or an application sent back for corrections."""
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )
    app = await app_service.update_application(session, user, application_id, updates)
    if app is None:
        raise _not_found()
    return build_app_response(app)


@router.delete(
    "/{application_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*_OWNER_ROLES))],
)
async def delete_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a draft."""
    deleted = await app_service.delete_application(session, user, application_id)
    if deleted is None:
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{application_id}/status",
    response_model=ApplicationStatusResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def get_status(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationStatusResponse:
    """Get the consolidated status, progress and pending actions."""
    result = await get_application_status(session, user, application_id)
    if result is None:
        raise _not_found()
    return result


@router.get(
    "/{application_id}/timeline",
    response_model=TimelineResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def get_timeline(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> TimelineResponse:
    result = await get_application_timeline(session, user, application_id)
    if result is None:
        raise _not_found()
    return result


@router.post(
    "/{application_id}/submit",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_OWNER_ROLES))],
)
async def submit_application(
    application_id: int,
    user: CurrentUser,
    body: VersionedRequest | None = None,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Submit a draft for scrutiny."""
    app = await app_service.submit_application(
        session,
        user,
        application_id,
        expected_version=body.expected_version if body else None,
    )
    if app is None:
        raise _not_found()
    return build_app_response(app)


@router.post(
    "/{application_id}/resubmit",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_OWNER_ROLES))],
)
async def resubmit_application(
    application_id: int,
    user: CurrentUser,
    body: ResubmitRequest | None = None,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Resubmit after corrections were requested."""
    body = body or ResubmitRequest()
    app = await app_service.resubmit_application(
        session,
        user,
        application_id,
        expected_version=body.expected_version,
        note=body.note,
    )
    if app is None:
        raise _not_found()
    return build_app_response(app)


@router.get(
    "/{application_id}/inspection",
    response_model=InspectionOrderResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def get_inspection(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InspectionOrderResponse:
    """The application's current inspection order."""
    found = await inspection_service.get_owner_inspection(session, user, application_id)
    if found is None:
        raise _not_found()
    _, order = found
    if order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No inspection has been scheduled",
        )
    return InspectionOrderResponse.model_validate(order)


@router.post(
    "/{application_id}/inspection/acknowledge",
    response_model=InspectionOrderResponse,
    dependencies=[Depends(require_roles(*_OWNER_ROLES))],
)
async def acknowledge_inspection(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InspectionOrderResponse:
    order = await inspection_service.acknowledge_inspection(session, user, application_id)
    if order is None:
        raise _not_found()
    return InspectionOrderResponse.model_validate(order)


@router.post(
    "/{application_id}/service-requests",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_OWNER_ROLES))],
)
async def create_service_request(
    application_id: int,
    body: ServiceRequestCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Open an amendment or cancellation against an approved certificate."""
    child = await app_service.create_service_request(
        session,
        user,
        application_id,
        kind=body.kind,
        requested_rooms=body.requested_rooms,
        requested_category=body.requested_category,
        reason=body.reason,
    )
    if child is None:
        raise _not_found()
    return build_app_response(child)


@router.get(
    "/{application_id}/certificate",
    response_model=CertificateResponse,
    dependencies=[Depends(require_roles(*_ALL_AUTHENTICATED))],
)
async def get_certificate(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CertificateResponse:
    """Registration certificate data. Only approved applications carry one."""
    app = await app_service.get_application(session, user, application_id)
    if app is None:
        raise _not_found()
    if app.status != ApplicationStatus.APPROVED or not app.certificate_number:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active registration certificate for this application",
        )
    return CertificateResponse(**certificate_view(app))
