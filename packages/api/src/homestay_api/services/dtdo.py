# This project was developed with assistance from AI tools.
"""District Tourism Officer decisions.

The DTDO accepts forwarded applications, reverts or rejects them, reviews
the inspection report and approves cancellation requests. Every action is
limited to the officer's district through the data scope.
"""

import logging
from datetime import UTC, datetime

from homestay_db import Application, PortalUser
from homestay_db.enums import (
    ApplicationKind,
    ApplicationStatus,
    PaymentStatus,
    UserRole,
    WorkflowAction,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from .application import get_application
from .certificate import load_parent, record_approval, stamp_approval
from .da import auto_reject_message, require_text
from .notification import notify
from .queues import DTDO_TABS, tab_counts
from .workflow import WorkflowRuleError, apply_action, check_transition, commit_or_conflict

logger = logging.getLogger(__name__)

S = ApplicationStatus


def _context(app: Application, **extra) -> dict:
    return {
        "application_number": app.application_number,
        "property_name": app.property_name,
        **extra,
    }


async def _notify_owner(session: AsyncSession, app: Application, template: str, **extra) -> None:
    await notify(
        session,
        recipient_id=app.owner_id,
        template=template,
        context=_context(app, **extra),
        application_id=app.id,
    )


def _stamp_review(app: Application, user: UserContext, remarks: str | None) -> None:
    app.dtdo_id = user.user_id
    app.dtdo_remarks = remarks
    app.dtdo_review_date = datetime.now(UTC)


async def accept(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    remarks: str | None,
    expected_version: int | None = None,
) -> Application | None:
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    check_transition(app.status, WorkflowAction.DTDO_ACCEPT, user.role)
    remarks = require_text(remarks, "Remarks")
    _stamp_review(app, user, remarks)
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.DTDO_ACCEPT,
        expected_version=expected_version,
        event_data={"remarks": remarks},
    )
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def reject(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    remarks: str | None,
    expected_version: int | None = None,
) -> Application | None:
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    check_transition(app.status, WorkflowAction.DTDO_REJECT, user.role)
    remarks = require_text(remarks, "A rejection reason")
    _stamp_review(app, user, remarks)
    app.rejection_reason = remarks
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.DTDO_REJECT,
        expected_version=expected_version,
        event_data={"reason": remarks},
    )
    await _notify_owner(session, app, "application_rejected", reason=remarks)
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def revert(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    remarks: str | None,
    expected_version: int | None = None,
) -> Application | None:
    """Return the application to the owner; the revert reaching the limit rejects."""
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    check_transition(app.status, WorkflowAction.DTDO_REVERT, user.role)
    remarks = require_text(remarks, "Revert remarks")
    _stamp_review(app, user, remarks)
    app.dtdo_revert_count = (app.dtdo_revert_count or 0) + 1

    if app.dtdo_revert_count >= settings.MAX_DTDO_REVERTS:
        app.rejection_reason = auto_reject_message(remarks, app.dtdo_revert_count, by_dtdo=True)
        await apply_action(
            session,
            user,
            app,
            WorkflowAction.AUTO_REJECT,
            expected_version=expected_version,
            event_data={"reason": remarks, "dtdo_revert_count": app.dtdo_revert_count},
        )
        logger.warning(
            "Application %s auto-rejected after %s DTDO reverts", app.id, app.dtdo_revert_count
        )
        await _notify_owner(session, app, "application_rejected", reason=app.rejection_reason)
    else:
        app.clarification_requested = remarks
        await apply_action(
            session,
            user,
            app,
            WorkflowAction.DTDO_REVERT,
            expected_version=expected_version,
            event_data={"reason": remarks, "dtdo_revert_count": app.dtdo_revert_count},
        )
        await _notify_owner(session, app, "application_reverted_by_dtdo", reason=remarks)

    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def approve_inspection(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    remarks: str | None = None,
    expected_version: int | None = None,
) -> Application | None:
    """Accept the inspection report.

    Applications already paid (upfront workflow) or carrying no fee are
    approved with an RC straight away; the rest wait for payment.
    """
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    paid = app.payment_status == PaymentStatus.SUCCESS or not app.total_fee
    target = S.APPROVED if paid else S.VERIFIED_FOR_PAYMENT
    check_transition(app.status, WorkflowAction.APPROVE_INSPECTION, user.role, target)

    _stamp_review(app, user, remarks)
    if paid:
        stamp_approval(app)
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.APPROVE_INSPECTION,
        target=target,
        expected_version=expected_version,
        event_data={"remarks": remarks},
    )
    if paid:
        await record_approval(session, user, app)
        await _notify_owner(
            session, app, "application_approved", certificate_number=app.certificate_number
        )
    else:
        await _notify_owner(session, app, "payment_pending", amount=str(app.total_fee))
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def reject_inspection(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    remarks: str | None,
    expected_version: int | None = None,
) -> Application | None:
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    check_transition(app.status, WorkflowAction.REJECT_INSPECTION, user.role)
    remarks = require_text(remarks, "A rejection reason")
    _stamp_review(app, user, remarks)
    app.rejection_reason = remarks
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.REJECT_INSPECTION,
        expected_version=expected_version,
        event_data={"reason": remarks},
    )
    await _notify_owner(session, app, "application_rejected", reason=remarks)
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def raise_objections(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    remarks: str | None,
    expected_version: int | None = None,
) -> Application | None:
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    check_transition(app.status, WorkflowAction.RAISE_OBJECTION, user.role)
    remarks = require_text(remarks, "The objections")
    _stamp_review(app, user, remarks)
    app.clarification_requested = remarks
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.RAISE_OBJECTION,
        expected_version=expected_version,
        event_data={"objections": remarks},
    )
    await _notify_owner(session, app, "objection_raised", reason=remarks)
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def approve_cancellation(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    remarks: str | None = None,
    expected_version: int | None = None,
) -> Application | None:
    """Approve a cancel_certificate request and revoke the parent RC."""
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    if app.application_kind != ApplicationKind.CANCEL_CERTIFICATE:
        raise WorkflowRuleError("Only certificate cancellation requests can be approved this way.")
    check_transition(app.status, WorkflowAction.APPROVE_CANCELLATION, user.role)

    parent = await load_parent(session, app)
    _stamp_review(app, user, remarks)
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.APPROVE_CANCELLATION,
        expected_version=expected_version,
        event_data={"remarks": remarks, "parent_application_id": app.parent_application_id},
    )
    if parent is not None and parent.status == S.APPROVED:
        await apply_action(
            session,
            user,
            parent,
            WorkflowAction.REVOKE_CERTIFICATE,
            event_data={"cancelled_by": app.application_number},
        )
        await _notify_owner(
            session, parent, "certificate_cancelled", certificate_number=parent.certificate_number
        )
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def list_dealing_assistants(
    session: AsyncSession,
    user: UserContext,
    district: str | None = None,
) -> list[PortalUser]:
    """Active DAs the caller may assign inspections to."""
    district = user.district if user.role == UserRole.DISTRICT_TOURISM_OFFICER else district
    stmt = select(PortalUser).where(
        PortalUser.role == UserRole.DEALING_ASSISTANT,
        PortalUser.is_active.is_(True),
    )
    if district:
        stmt = stmt.where(PortalUser.district == district)
    result = await session.execute(stmt.order_by(PortalUser.full_name))
    return list(result.scalars().all())


async def get_dashboard(session: AsyncSession, user: UserContext) -> dict:
    return await tab_counts(session, user, DTDO_TABS)
