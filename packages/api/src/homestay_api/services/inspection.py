# This project was developed with assistance from AI tools.
"""Site inspections: DTDO scheduling, owner acknowledgement, DA field reports."""

import logging
from datetime import UTC, date, datetime, time

from homestay_db import Application, InspectionOrder, InspectionReport, PortalUser
from homestay_db.enums import (
    InspectionRecommendation,
    InspectionStatus,
    UserRole,
    WorkflowAction,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from .application import get_application
from .audit import write_audit_event
from .notification import notify, notify_district_officers, notify_keycloak_user
from .scope import apply_data_scope
from .workflow import (
    ActionNotPermittedError,
    WorkflowRuleError,
    apply_action,
    check_transition,
    commit_or_conflict,
)

logger = logging.getLogger(__name__)

ACTIVE_ORDER_STATUSES = (InspectionStatus.SCHEDULED, InspectionStatus.ACKNOWLEDGED)

OUTCOME_BY_RECOMMENDATION = {
    InspectionRecommendation.APPROVE: "recommended",
    InspectionRecommendation.RAISE_OBJECTIONS: "objection",
    InspectionRecommendation.REJECT: "not_recommended",
}


def _as_date(value: datetime | date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _context(app: Application, order: InspectionOrder) -> dict:
    return {
        "application_number": app.application_number,
        "property_name": app.property_name,
        "inspection_date": _as_date(order.inspection_date).isoformat(),
    }


# -- Queries -----------------------------------------------------------------


async def get_current_order(session: AsyncSession, application_id: int) -> InspectionOrder | None:
    """Most recent non-cancelled order for an application."""
    stmt = (
        select(InspectionOrder)
        .where(
            InspectionOrder.application_id == application_id,
            InspectionOrder.status != InspectionStatus.CANCELLED,
        )
        .order_by(InspectionOrder.id.desc())
        .limit(1)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_owner_inspection(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> tuple[Application, InspectionOrder | None] | None:
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    return app, await get_current_order(session, app.id)


async def list_inspections(
    session: AsyncSession,
    user: UserContext,
    *,
    status: InspectionStatus | None = None,
    assigned_only: bool = True,
) -> list[InspectionOrder]:
    """Orders in the caller's scope, by default only those assigned to them."""
    stmt = select(InspectionOrder)
    stmt = apply_data_scope(
        stmt, user.data_scope, user, join_to_application=InspectionOrder.application
    )
    if assigned_only and user.role == UserRole.DEALING_ASSISTANT:
        stmt = stmt.where(InspectionOrder.assigned_to == user.user_id)
    if status is not None:
        stmt = stmt.where(InspectionOrder.status == status)
    stmt = stmt.order_by(InspectionOrder.inspection_date.asc(), InspectionOrder.id.asc())
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


async def get_inspection_order(
    session: AsyncSession,
    user: UserContext,
    order_id: int,
) -> InspectionOrder | None:
    stmt = select(InspectionOrder).where(InspectionOrder.id == order_id)
    stmt = apply_data_scope(
        stmt, user.data_scope, user, join_to_application=InspectionOrder.application
    )
    return (await session.execute(stmt)).unique().scalar_one_or_none()


async def get_latest_report(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> InspectionReport | None:
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    stmt = (
        select(InspectionReport)
        .where(InspectionReport.application_id == app.id)
        .order_by(InspectionReport.id.desc())
        .limit(1)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


# -- DTDO --------------------------------------------------------------------


async def schedule_inspection(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    inspection_date: datetime,
    assigned_to: str,
    inspection_address: str | None = None,
    special_instructions: str | None = None,
    expected_version: int | None = None,
) -> Application | None:
    """Create an inspection order and move the application to inspection_scheduled.

    Raises:
        WorkflowRuleError: the date is in the past or the assignee is not an
            active DA of the application's district.
    """
    app = await get_application(session, user, application_id)
    if app is None:
        return None

    check_transition(app.status, WorkflowAction.SCHEDULE_INSPECTION, user.role)
    if _as_date(inspection_date) < datetime.now(UTC).date():
        raise WorkflowRuleError("Inspection date cannot be in the past.")

    da_stmt = select(PortalUser).where(PortalUser.keycloak_user_id == assigned_to)
    dealing_assistant = (await session.execute(da_stmt)).scalar_one_or_none()
    if (
        dealing_assistant is None
        or dealing_assistant.role != UserRole.DEALING_ASSISTANT
        or not dealing_assistant.is_active
        or dealing_assistant.district != app.district
    ):
        raise WorkflowRuleError(
            f"Inspection must be assigned to an active Dealing Assistant of {app.district}."
        )

    if inspection_date.tzinfo is None:
        inspection_date = inspection_date.replace(tzinfo=UTC)

    order = InspectionOrder(
        application_id=app.id,
        scheduled_by=user.user_id,
        assigned_to=assigned_to,
        district=app.district,
        inspection_date=inspection_date,
        inspection_address=inspection_address or app.address,
        special_instructions=special_instructions,
        status=InspectionStatus.SCHEDULED,
    )
    session.add(order)

    app.site_inspection_scheduled_date = inspection_date
    app.site_inspection_completed_date = None
    app.dtdo_id = user.user_id
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.SCHEDULE_INSPECTION,
        expected_version=expected_version,
        event_data={"assigned_to": assigned_to, "inspection_date": inspection_date.isoformat()},
    )

    context = _context(app, order)
    await notify(
        session,
        recipient_id=app.owner_id,
        template="inspection_scheduled",
        context=context,
        application_id=app.id,
    )
    await notify_keycloak_user(
        session, assigned_to, "inspection_assigned", context, application_id=app.id
    )
    await commit_or_conflict(session)
    logger.info("Inspection scheduled for application %s, DA %s", app.id, assigned_to)
    return await get_application(session, user, application_id)


# -- Owner -------------------------------------------------------------------


async def acknowledge_inspection(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> InspectionOrder | None:
    """Owner acknowledges the inspection order. Allowed once, before completion."""
    found = await get_owner_inspection(session, user, application_id)
    if found is None:
        return None
    app, order = found
    if order is None:
        raise WorkflowRuleError("No inspection has been scheduled for this application.")
    if order.status == InspectionStatus.COMPLETED:
        raise WorkflowRuleError("The inspection has already been completed.")
    if order.owner_acknowledged_at is not None:
        raise WorkflowRuleError("The inspection order has already been acknowledged.")

    order.owner_acknowledged_at = datetime.now(UTC)
    order.status = InspectionStatus.ACKNOWLEDGED
    await write_audit_event(
        session,
        event_type="inspection_acknowledged",
        user=user,
        application_id=app.id,
        event_data={"inspection_order_id": order.id},
    )
    await session.commit()
    return order


# -- DA ----------------------------------------------------------------------


def check_report_dates(
    scheduled: datetime | date,
    actual: date,
    early_override: bool,
    early_reason: str | None,
    today: date | None = None,
) -> None:
    """Validate the actual inspection date against today and the schedule.

    Raises:
        WorkflowRuleError: future date, or an early inspection without an
            override and a long enough justification.
    """
    today = today or datetime.now(UTC).date()
    if actual > today:
        raise WorkflowRuleError("Actual inspection date cannot be in the future.")
    if actual < _as_date(scheduled):
        minimum = settings.EARLY_INSPECTION_JUSTIFICATION_MIN_LENGTH
        if not early_override:
            raise WorkflowRuleError(
                "Inspection happened before the scheduled date; an early-inspection override is required."
            )
        if len((early_reason or "").strip()) < minimum:
            raise WorkflowRuleError(
                f"Early-inspection justification must be at least {minimum} characters."
            )


async def submit_report(
    session: AsyncSession,
    user: UserContext,
    order_id: int,
    data: dict,
) -> InspectionReport | None:
    """File the DA's field report and hand the application to the DTDO.

    Raises:
        ActionNotPermittedError: the caller is not the assigned DA.
        WorkflowRuleError: order not open, or report dates invalid.
    """
    order = await get_inspection_order(session, user, order_id)
    if order is None:
        return None
    if user.role != UserRole.ADMIN and order.assigned_to != user.user_id:
        raise ActionNotPermittedError("Only the assigned Dealing Assistant can file this report.")
    if order.status not in ACTIVE_ORDER_STATUSES:
        raise WorkflowRuleError(f"Inspection order is already {order.status.value}.")

    app = await get_application(session, user, order.application_id)
    if app is None:
        return None
    check_transition(app.status, WorkflowAction.SUBMIT_INSPECTION_REPORT, user.role)

    actual: date = data["actual_inspection_date"]
    check_report_dates(
        order.inspection_date,
        actual,
        bool(data.get("early_inspection_override")),
        data.get("early_inspection_reason"),
    )

    recommendation = InspectionRecommendation(data["recommendation"])
    report = InspectionReport(
        inspection_order_id=order.id,
        application_id=app.id,
        submitted_by=user.user_id,
        actual_inspection_date=actual,
        room_count_verified=bool(data.get("room_count_verified")),
        actual_room_count=data.get("actual_room_count"),
        category_meets_standards=bool(data.get("category_meets_standards")),
        recommended_category=data.get("recommended_category"),
        checklist=data.get("checklist"),
        observations=data.get("observations"),
        recommendation=recommendation,
        early_inspection_override=bool(data.get("early_inspection_override")),
        early_inspection_reason=data.get("early_inspection_reason"),
    )
    session.add(report)

    now = datetime.now(UTC)
    order.status = InspectionStatus.COMPLETED
    if order.owner_acknowledged_at is None:
        order.owner_acknowledged_at = now

    app.site_inspection_completed_date = datetime.combine(actual, time(0, 0), tzinfo=UTC)
    app.site_inspection_outcome = OUTCOME_BY_RECOMMENDATION[recommendation]
    app.site_inspection_notes = data.get("observations")
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.SUBMIT_INSPECTION_REPORT,
        event_data={"recommendation": recommendation.value, "inspection_order_id": order.id},
    )
    await notify_district_officers(
        session,
        app.district,
        UserRole.DISTRICT_TOURISM_OFFICER,
        "inspection_report_submitted",
        _context(app, order),
        application_id=app.id,
    )
    await commit_or_conflict(session)
    await session.refresh(report)
    logger.info(
        "Inspection report %s filed for application %s (%s)",
        report.id,
        app.id,
        recommendation.value,
    )
    return report
