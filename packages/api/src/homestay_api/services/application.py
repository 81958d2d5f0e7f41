# This project was developed with assistance from AI tools.
"""Owner-facing application lifecycle with role-based data scope filtering.

Every query is filtered through the caller's DataScope so that owners see
only their own applications, district officers see their district, and
state officers and admins see everything. Status changes are delegated to
the workflow engine.
"""

import logging
import secrets
from datetime import UTC, datetime

from homestay_db import Application, Document
from homestay_db.enums import (
    ApplicationKind,
    ApplicationStatus,
    DocumentStatus,
    PropertyCategory,
    UserRole,
    WorkflowAction,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from .audit import write_audit_event
from .fees import FeeBreakdown, calculate_fees
from .notification import notify_district_officers, notify_keycloak_user
from .scope import apply_data_scope
from .users import ensure_portal_user
from .workflow import WorkflowRuleError, apply_action, commit_or_conflict

logger = logging.getLogger(__name__)

S = ApplicationStatus

EDITABLE_STATUSES = frozenset({S.DRAFT}) | S.correction_statuses()

AMENDMENT_KINDS = frozenset(
    {ApplicationKind.ADD_ROOMS, ApplicationKind.DELETE_ROOMS, ApplicationKind.CHANGE_CATEGORY}
)
SERVICE_REQUEST_KINDS = AMENDMENT_KINDS | {ApplicationKind.CANCEL_CERTIFICATE}

# A service request blocks a new one until it reaches one of these.
_CLOSED_STATUSES = S.terminal_statuses() | {S.APPROVED}

_FEE_FIELDS = {"category", "certificate_validity_years", "owner_gender", "is_pangi_sub_division"}

_UPDATABLE_FIELDS = {
    "property_name",
    "district",
    "tehsil",
    "address",
    "pincode",
    "category",
    "total_rooms",
    "is_pangi_sub_division",
    "certificate_validity_years",
    "owner_name",
    "owner_mobile",
    "owner_email",
    "owner_aadhaar",
    "owner_gender",
}


def generate_application_number(district: str, now: datetime | None = None) -> str:
    """``HP-HS-{year}-{DISTRICT3}-{6 digits}``, e.g. HP-HS-2025-SHI-004217."""
    now = now or datetime.now(UTC)
    code = "".join(ch for ch in district.upper() if ch.isalpha())[:3].ljust(3, "X")
    return f"HP-HS-{now.year}-{code}-{secrets.randbelow(1_000_000):06d}"


def _fee_columns(app: Application) -> dict:
    if app.application_kind in (ApplicationKind.CANCEL_CERTIFICATE, ApplicationKind.DELETE_ROOMS):
        return FeeBreakdown.zero().as_dict()
    category = app.requested_category or app.category
    return calculate_fees(
        category,
        app.certificate_validity_years or settings.CERTIFICATE_VALIDITY_YEARS,
        app.owner_gender,
        bool(app.is_pangi_sub_division),
    ).as_dict()


def apply_fees(app: Application) -> None:
    """Recompute the fee breakdown columns from the application's own fields."""
    for column, value in _fee_columns(app).items():
        setattr(app, column, value)


async def list_applications(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
    filter_status: ApplicationStatus | None = None,
) -> tuple[list[Application], int]:
    """Return applications visible to the current user, newest activity first."""
    count_stmt = apply_data_scope(
        select(func.count(Application.id)), user.data_scope, user
    )
    stmt = apply_data_scope(select(Application), user.data_scope, user)
    if filter_status is not None:
        count_stmt = count_stmt.where(Application.status == filter_status)
        stmt = stmt.where(Application.status == filter_status)

    total = (await session.execute(count_stmt)).scalar() or 0
    stmt = stmt.order_by(Application.updated_at.desc(), Application.id.desc())
    result = await session.execute(stmt.offset(offset).limit(limit))
    return list(result.unique().scalars().all()), total


async def get_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> Application | None:
    """Return a single application if visible to the current user.

    Returns None (which the route maps to 404) for out-of-scope applications
    rather than 403, to avoid leaking existence of resources.
    """
    stmt = (
        select(Application)
        .where(Application.id == application_id)
        .execution_options(populate_existing=True)
    )
    stmt = apply_data_scope(stmt, user.data_scope, user)
    result = await session.execute(stmt)
    return result.unique().scalar_one_or_none()


async def create_application(
    session: AsyncSession,
    user: UserContext,
    data: dict,
) -> Application:
    """Create a draft registration for the current owner, with fees computed."""
    owner = await ensure_portal_user(session, user)

    app = Application(
        application_number=generate_application_number(data["district"]),
        owner_id=owner.id,
        application_kind=ApplicationKind.NEW_REGISTRATION,
        status=S.DRAFT,
        property_name=data["property_name"],
        district=data["district"],
        tehsil=data.get("tehsil"),
        address=data.get("address"),
        pincode=data.get("pincode"),
        category=data.get("category") or PropertyCategory.SILVER,
        total_rooms=data.get("total_rooms") or 1,
        is_pangi_sub_division=bool(data.get("is_pangi_sub_division")),
        certificate_validity_years=(
            data.get("certificate_validity_years") or settings.CERTIFICATE_VALIDITY_YEARS
        ),
        owner_name=data.get("owner_name") or user.name,
        owner_mobile=data.get("owner_mobile") or user.mobile,
        owner_email=data.get("owner_email") or user.email or None,
        owner_aadhaar=data.get("owner_aadhaar"),
        owner_gender=data.get("owner_gender"),
        revert_count=0,
        dtdo_revert_count=0,
        correction_submission_count=0,
    )
    apply_fees(app)
    session.add(app)
    await session.flush()

    await write_audit_event(
        session,
        event_type="application_created",
        user=user,
        application_id=app.id,
        event_data={"application_number": app.application_number, "total_fee": str(app.total_fee)},
    )
    app_id = app.id
    await session.commit()
    logger.info("Application %s created by %s", app.application_number, user.user_id)
    return await get_application(session, user, app_id)


async def update_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    updates: dict,
) -> Application | None:
    """Patch a draft or an application awaiting corrections.

    Raises:
        WorkflowRuleError: the application is past the editable statuses.
    """
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    if app.status not in EDITABLE_STATUSES:
        raise WorkflowRuleError(
            f"Application can only be edited as a draft or while corrections are requested "
            f"(current status '{app.status.value}')."
        )

    changed = []
    for field, value in updates.items():
        if field in _UPDATABLE_FIELDS and getattr(app, field) != value:
            setattr(app, field, value)
            changed.append(field)

    if not changed:
        return app
    if _FEE_FIELDS.intersection(changed):
        apply_fees(app)

    await session.flush()
    await write_audit_event(
        session,
        event_type="application_updated",
        user=user,
        application_id=app.id,
        event_data={"fields": sorted(changed)},
    )
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def delete_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> bool | None:
    """Delete a draft. None if not visible, raises once it left draft."""
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    if app.status != S.DRAFT:
        raise WorkflowRuleError("Only draft applications can be deleted.")

    await write_audit_event(
        session,
        event_type="application_deleted",
        user=user,
        application_id=app.id,
        event_data={"application_number": app.application_number},
    )
    await session.delete(app)
    await session.commit()
    logger.info("Draft %s deleted by %s", app.application_number, user.user_id)
    return True


def _notify_context(app: Application, **extra) -> dict:
    return {
        "application_number": app.application_number,
        "property_name": app.property_name,
        **extra,
    }


async def submit_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    expected_version: int | None = None,
) -> Application | None:
    """Submit a draft (or a paid, unsubmitted) application for scrutiny."""
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    if (
        settings.PAYMENT_WORKFLOW == "upfront"
        and app.status == S.DRAFT
        and app.application_kind != ApplicationKind.CANCEL_CERTIFICATE
        and app.total_fee
    ):
        raise WorkflowRuleError("The registration fee must be paid before submission.")

    app.submitted_at = datetime.now(UTC)
    await apply_action(
        session, user, app, WorkflowAction.SUBMIT, expected_version=expected_version
    )

    context = _notify_context(app)
    await notify_keycloak_user(
        session, user.user_id, "application_submitted", context, application_id=app.id
    )
    await notify_district_officers(
        session,
        app.district,
        UserRole.DEALING_ASSISTANT,
        "application_received",
        context,
        application_id=app.id,
    )
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


def resubmit_target(status: ApplicationStatus) -> ApplicationStatus:
    """Where a corrected application goes next.

    DTDO reverts and inspection objections always go back to the DTDO; DA
    send-backs return to scrutiny unless configured to skip the DA.
    """
    if settings.CORRECTION_RESUBMIT_TARGET == "dtdo" or status in (
        S.REVERTED_BY_DTDO,
        S.OBJECTION_RAISED,
    ):
        return S.DTDO_REVIEW
    return S.UNDER_SCRUTINY


async def resubmit_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    expected_version: int | None = None,
    note: str | None = None,
) -> Application | None:
    """Resubmit after a send-back, DTDO revert or inspection objection."""
    app = await get_application(session, user, application_id)
    if app is None:
        return None

    previous = app.status
    target = resubmit_target(previous) if previous in S.correction_statuses() else None

    docs = await session.execute(
        select(Document).where(
            Document.application_id == app.id,
            Document.verification_status == DocumentStatus.NEEDS_CORRECTION,
        )
    )
    reset_docs = list(docs.scalars().all())

    app.correction_submission_count = (app.correction_submission_count or 0) + 1
    app.clarification_requested = None
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.RESUBMIT_CORRECTION,
        target=target,
        expected_version=expected_version,
    )
    for doc in reset_docs:
        doc.verification_status = DocumentStatus.PENDING
        doc.verification_notes = None
        doc.verified_by = None
        doc.verified_at = None

    await write_audit_event(
        session,
        event_type="correction_resubmitted",
        user=user,
        application_id=app.id,
        event_data={
            "from": previous.value,
            "to": app.status.value,
            "correction_submission_count": app.correction_submission_count,
            "documents_reset": len(reset_docs),
            "note": note,
        },
    )
    officer_role = (
        UserRole.DISTRICT_TOURISM_OFFICER if app.status == S.DTDO_REVIEW else UserRole.DEALING_ASSISTANT
    )
    await notify_district_officers(
        session,
        app.district,
        officer_role,
        "correction_resubmitted",
        _notify_context(app),
        application_id=app.id,
    )
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def create_service_request(
    session: AsyncSession,
    user: UserContext,
    parent_id: int,
    *,
    kind: ApplicationKind,
    requested_rooms: int | None = None,
    requested_category: PropertyCategory | None = None,
    reason: str | None = None,
) -> Application | None:
    """Open an amendment or cancellation against an approved certificate.

    Raises:
        WorkflowRuleError: the parent is not an active certificate, a request
            is already open, or the requested change is meaningless.
    """
    parent = await get_application(session, user, parent_id)
    if parent is None:
        return None
    if kind not in SERVICE_REQUEST_KINDS:
        raise WorkflowRuleError(f"'{kind.value}' is not a service request.")
    if parent.status != S.APPROVED or not parent.certificate_number:
        raise WorkflowRuleError("Service requests need an approved registration certificate.")

    open_stmt = select(func.count(Application.id)).where(
        Application.parent_application_id == parent.id,
        Application.status.notin_(list(_CLOSED_STATUSES)),
    )
    if ((await session.execute(open_stmt)).scalar() or 0) > 0:
        raise WorkflowRuleError("Another service request on this certificate is still open.")

    if kind == ApplicationKind.ADD_ROOMS and (requested_rooms or 0) <= parent.total_rooms:
        raise WorkflowRuleError("Requested room count must exceed the current room count.")
    if kind == ApplicationKind.DELETE_ROOMS and not (1 <= (requested_rooms or 0) < parent.total_rooms):
        raise WorkflowRuleError("Requested room count must be at least 1 and below the current count.")
    if kind == ApplicationKind.CHANGE_CATEGORY and (
        requested_category is None or requested_category == parent.category
    ):
        raise WorkflowRuleError("Choose a category different from the current one.")

    child = Application(
        application_number=generate_application_number(parent.district),
        owner_id=parent.owner_id,
        application_kind=kind,
        parent_application_id=parent.id,
        status=S.DRAFT,
        property_name=parent.property_name,
        district=parent.district,
        tehsil=parent.tehsil,
        address=parent.address,
        pincode=parent.pincode,
        category=parent.category,
        total_rooms=parent.total_rooms,
        requested_rooms=requested_rooms,
        requested_category=requested_category,
        is_pangi_sub_division=parent.is_pangi_sub_division,
        certificate_validity_years=parent.certificate_validity_years,
        owner_name=parent.owner_name,
        owner_mobile=parent.owner_mobile,
        owner_email=parent.owner_email,
        owner_aadhaar=parent.owner_aadhaar,
        owner_gender=parent.owner_gender,
        certificate_number=None,
        revert_count=0,
        dtdo_revert_count=0,
        correction_submission_count=0,
    )
    apply_fees(child)
    session.add(child)
    await session.flush()

    await write_audit_event(
        session,
        event_type="application_created",
        user=user,
        application_id=child.id,
        event_data={
            "application_number": child.application_number,
            "kind": kind.value,
            "parent_application_id": parent.id,
            "reason": reason,
        },
    )
    child_id = child.id
    await session.commit()
    logger.info(
        "Service request %s (%s) opened on %s", child.application_number, kind.value, parent.id
    )
    return await get_application(session, user, child_id)
