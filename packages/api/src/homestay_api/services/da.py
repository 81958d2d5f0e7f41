# This project was developed with assistance from AI tools.
"""Dealing Assistant scrutiny: document verification, forward and send-back."""

import logging
from datetime import UTC, datetime

from homestay_db import Application, Document, InspectionOrder
from homestay_db.enums import (
    ApplicationKind,
    ApplicationStatus,
    DocumentStatus,
    InspectionStatus,
    UserRole,
    WorkflowAction,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from .application import get_application
from .audit import write_audit_event
from .document import count_documents, get_document
from .notification import notify, notify_district_officers
from .queues import DA_DASHBOARD_GROUPS, group_counts
from .workflow import (
    WorkflowRuleError,
    apply_action,
    check_transition,
    commit_or_conflict,
)

logger = logging.getLogger(__name__)

_TIMES = {1: "once", 2: "twice"}


def require_text(text: str | None, what: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise WorkflowRuleError(f"{what} is required.")
    return cleaned


def auto_reject_message(reason: str, count: int, by_dtdo: bool = False) -> str:
    times = _TIMES.get(count, f"{count} times")
    who = " by the DTDO" if by_dtdo else ""
    verb = "reverted" if by_dtdo else "sent back"
    return (
        f"APPLICATION AUTO-REJECTED: Application was {verb} {times}{who}. "
        f"Original reason: {reason}"
    )


def _context(app: Application, **extra) -> dict:
    return {
        "application_number": app.application_number,
        "property_name": app.property_name,
        **extra,
    }


async def start_scrutiny(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    expected_version: int | None = None,
) -> Application | None:
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    app.da_id = user.user_id
    await apply_action(
        session, user, app, WorkflowAction.START_SCRUTINY, expected_version=expected_version
    )
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def verify_document(
    session: AsyncSession,
    user: UserContext,
    document_id: int,
    *,
    status: DocumentStatus,
    notes: str | None = None,
) -> Document | None:
    """Record the DA's verdict on one document.

    Raises:
        WorkflowRuleError: application not under scrutiny, or a correction
            verdict without notes.
    """
    doc = await get_document(session, user, document_id)
    if doc is None:
        return None
    app = await get_application(session, user, doc.application_id)
    if app is None:
        return None
    if app.status != ApplicationStatus.UNDER_SCRUTINY:
        raise WorkflowRuleError("Documents can only be verified while the application is under scrutiny.")
    if status == DocumentStatus.PENDING:
        raise WorkflowRuleError("Choose verified, needs_correction or rejected.")
    if status in (DocumentStatus.NEEDS_CORRECTION, DocumentStatus.REJECTED):
        notes = require_text(notes, "A note explaining the problem")

    previous = doc.verification_status
    doc.verification_status = status
    doc.verification_notes = notes
    doc.verified_by = user.user_id
    doc.verified_at = datetime.now(UTC)

    await write_audit_event(
        session,
        event_type="document_verified",
        user=user,
        application_id=app.id,
        event_data={
            "document_id": doc.id,
            "doc_type": doc.doc_type.value,
            "from": previous.value if previous else None,
            "to": status.value,
            "notes": notes,
        },
    )
    await session.commit()
    await session.refresh(doc)
    return doc


async def forward_to_dtdo(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    remarks: str | None,
    expected_version: int | None = None,
) -> Application | None:
    """Forward a scrutinised application to the district's DTDO.

    Cancellation requests carry no documents; everything else needs at
    least one document and none left pending.
    """
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    check_transition(app.status, WorkflowAction.FORWARD_TO_DTDO, user.role)
    remarks = require_text(remarks, "Forwarding remarks")

    if app.application_kind != ApplicationKind.CANCEL_CERTIFICATE:
        counts = await count_documents(session, app.id)
        if sum(counts.values()) == 0:
            raise WorkflowRuleError("At least one document must be uploaded before forwarding.")
        pending = counts.get(DocumentStatus.PENDING, 0)
        if pending:
            raise WorkflowRuleError(f"{pending} document(s) are still pending verification.")

    app.da_id = user.user_id
    app.da_remarks = remarks
    app.da_forwarded_date = datetime.now(UTC)
    await apply_action(
        session,
        user,
        app,
        WorkflowAction.FORWARD_TO_DTDO,
        expected_version=expected_version,
        event_data={"remarks": remarks},
    )
    await notify_district_officers(
        session,
        app.district,
        UserRole.DISTRICT_TOURISM_OFFICER,
        "application_forwarded",
        _context(app),
        application_id=app.id,
    )
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def send_back(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    reason: str | None,
    expected_version: int | None = None,
) -> Application | None:
    """Send an application back to the owner, auto-rejecting at the limit.

    The send-back that would reach ``MAX_SEND_BACKS`` rejects instead.
    """
    if not settings.DA_SEND_BACK_ENABLED:
        raise WorkflowRuleError("Sending applications back is disabled.")

    app = await get_application(session, user, application_id)
    if app is None:
        return None
    check_transition(app.status, WorkflowAction.SEND_BACK, user.role)
    reason = require_text(reason, "A reason for sending back")

    app.da_id = user.user_id
    app.da_remarks = reason
    app.revert_count = (app.revert_count or 0) + 1

    if app.revert_count >= settings.MAX_SEND_BACKS:
        app.rejection_reason = auto_reject_message(reason, app.revert_count)
        await apply_action(
            session,
            user,
            app,
            WorkflowAction.AUTO_REJECT,
            expected_version=expected_version,
            event_data={"reason": reason, "revert_count": app.revert_count},
        )
        logger.warning(
            "Application %s auto-rejected after %s send-backs", app.id, app.revert_count
        )
        template = "application_rejected"
        context = _context(app, reason=app.rejection_reason)
    else:
        app.clarification_requested = reason
        await apply_action(
            session,
            user,
            app,
            WorkflowAction.SEND_BACK,
            expected_version=expected_version,
            event_data={"reason": reason, "revert_count": app.revert_count},
        )
        template = "application_sent_back"
        context = _context(app, reason=reason)

    await notify(
        session,
        recipient_id=app.owner_id,
        template=template,
        context=context,
        application_id=app.id,
    )
    await commit_or_conflict(session)
    return await get_application(session, user, application_id)


async def get_dashboard(session: AsyncSession, user: UserContext) -> dict:
    counts = await group_counts(session, user, DA_DASHBOARD_GROUPS)
    stmt = select(func.count(InspectionOrder.id)).where(
        InspectionOrder.assigned_to == user.user_id,
        InspectionOrder.status.in_([InspectionStatus.SCHEDULED, InspectionStatus.ACKNOWLEDGED]),
    )
    counts["pending_inspections"] = (await session.execute(stmt)).scalar() or 0
    return counts
