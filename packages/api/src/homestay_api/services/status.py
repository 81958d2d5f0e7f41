# This project was developed with assistance from AI tools.
"""Consolidated application status and owner progress.

The portal shows owners a handful of display statuses instead of the raw
workflow statuses, plus a milestone progress bar. Officers get the same
summary with the actions their role can take next.
"""

import logging

from homestay_db import Document, InspectionOrder
from homestay_db.enums import (
    ApplicationStatus,
    DocumentStatus,
    InspectionStatus,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from ..schemas.status import (
    ApplicationStatusResponse,
    Milestone,
    PendingAction,
    ProgressInfo,
    StatusInfo,
    TimelineEntry,
    TimelineResponse,
)
from .application import get_application
from .audit import get_events_by_application
from .workflow import allowed_actions

logger = logging.getLogger(__name__)

S = ApplicationStatus

# -- Display status ----------------------------------------------------------

DISPLAY_LABELS: dict[str, str] = {
    "draft": "Draft",
    "submitted": "Submitted",
    "under_review": "Under Review",
    "correction_required": "Correction Required",
    "inspection_pending": "Inspection Pending",
    "payment_pending": "Payment Pending",
    "approved": "Approved",
    "rejected": "Rejected",
    "cancelled": "Cancelled",
}

_DISPLAY_MAP: dict[ApplicationStatus, str] = {
    S.DRAFT: "draft",
    S.PAID_PENDING_SUBMIT: "draft",
    S.SUBMITTED: "submitted",
    S.FORWARDED_TO_DTDO: "submitted",
    S.UNDER_SCRUTINY: "under_review",
    S.DTDO_REVIEW: "under_review",
    S.INSPECTION_UNDER_REVIEW: "under_review",
    S.INSPECTION_COMPLETED: "under_review",
    S.REVERTED_TO_APPLICANT: "correction_required",
    S.SENT_BACK_FOR_CORRECTIONS: "correction_required",
    S.REVERTED_BY_DTDO: "correction_required",
    S.OBJECTION_RAISED: "correction_required",
    S.INSPECTION_SCHEDULED: "inspection_pending",
    S.VERIFIED_FOR_PAYMENT: "payment_pending",
    S.PAYMENT_FAILED: "payment_pending",
    S.APPROVED: "approved",
    S.REJECTED: "rejected",
    S.CERTIFICATE_CANCELLED: "cancelled",
    S.SUPERSEDED: "cancelled",
}


def to_display_status(status: ApplicationStatus | str | None) -> str:
    """Collapse a raw workflow status into the owner-facing display status.

    ``None`` is a draft that was never saved with a status; anything not
    recognised is shown as under review.
    """
    if status is None:
        return "draft"
    try:
        status = ApplicationStatus(status)
    except ValueError:
        return "under_review"
    return _DISPLAY_MAP.get(status, "under_review")


def display_label(status: ApplicationStatus | str | None) -> str:
    return DISPLAY_LABELS[to_display_status(status)]


# -- Per-status info ---------------------------------------------------------

STATUS_INFO: dict[str, StatusInfo] = {
    S.DRAFT.value: StatusInfo(
        label="Draft",
        description="Your application has been saved but not submitted.",
        next_step="Complete the form, upload documents and submit.",
        typical_timeline="At your convenience",
    ),
    S.PAID_PENDING_SUBMIT.value: StatusInfo(
        label="Paid, Awaiting Submission",
        description="The registration fee has been received.",
        next_step="Submit the application for scrutiny.",
        typical_timeline="At your convenience",
    ),
    S.SUBMITTED.value: StatusInfo(
        label="Submitted",
        description="Your application is with the Dealing Assistant for review.",
        next_step="The Dealing Assistant will begin document scrutiny.",
        typical_timeline="1-3 working days",
    ),
    S.UNDER_SCRUTINY.value: StatusInfo(
        label="Under Scrutiny",
        description="The Dealing Assistant is verifying your documents.",
        next_step="The application will be forwarded to the DTDO or sent back for corrections.",
        typical_timeline="3-7 working days",
    ),
    S.REVERTED_TO_APPLICANT.value: StatusInfo(
        label="Sent Back",
        description="The Dealing Assistant has asked for corrections.",
        next_step="Update the flagged details or documents and resubmit.",
        typical_timeline="Depends on your response",
    ),
    S.SENT_BACK_FOR_CORRECTIONS.value: StatusInfo(
        label="Sent Back for Corrections",
        description="Corrections are required before review can continue.",
        next_step="Update the flagged details or documents and resubmit.",
        typical_timeline="Depends on your response",
    ),
    S.FORWARDED_TO_DTDO.value: StatusInfo(
        label="Forwarded to DTDO",
        description="Scrutiny is complete and the application is with the District Tourism Officer.",
        next_step="The DTDO will accept the application for review or revert it.",
        typical_timeline="2-5 working days",
    ),
    S.DTDO_REVIEW.value: StatusInfo(
        label="DTDO Review",
        description="The District Tourism Officer is reviewing your application.",
        next_step="A site inspection will be scheduled.",
        typical_timeline="3-7 working days",
    ),
    S.REVERTED_BY_DTDO.value: StatusInfo(
        label="Reverted by DTDO",
        description="The District Tourism Officer has requested revisions.",
        next_step="Review the remarks, update the application and resubmit.",
        typical_timeline="Depends on your response",
    ),
    S.OBJECTION_RAISED.value: StatusInfo(
        label="Objection Raised",
        description="Objections were raised after the site inspection.",
        next_step="Address the objections and resubmit.",
        typical_timeline="Depends on your response",
    ),
    S.INSPECTION_SCHEDULED.value: StatusInfo(
        label="Inspection Scheduled",
        description="A site inspection of your property has been scheduled.",
        next_step="Acknowledge the inspection order and keep the property available.",
        typical_timeline="As scheduled",
    ),
    S.INSPECTION_UNDER_REVIEW.value: StatusInfo(
        label="Inspection Under Review",
        description="The inspection report is being reviewed by the DTDO.",
        next_step="The DTDO will approve, reject or raise objections.",
        typical_timeline="2-5 working days",
    ),
    S.INSPECTION_COMPLETED.value: StatusInfo(
        label="Inspection Completed",
        description="The inspection is finished.",
        next_step="Await final payment instructions.",
        typical_timeline="2-5 working days",
    ),
    S.VERIFIED_FOR_PAYMENT.value: StatusInfo(
        label="Verified for Payment",
        description="Your application is verified and the registration fee is due.",
        next_step="Pay the registration fee to receive your certificate.",
        typical_timeline="At your convenience",
    ),
    S.PAYMENT_FAILED.value: StatusInfo(
        label="Payment Failed",
        description="The last payment attempt did not go through.",
        next_step="Retry the payment.",
        typical_timeline="At your convenience",
    ),
    S.APPROVED.value: StatusInfo(
        label="Approved",
        description="Your homestay is registered and the certificate has been issued.",
        next_step="Download your registration certificate.",
        typical_timeline="Complete",
    ),
    S.REJECTED.value: StatusInfo(
        label="Rejected",
        description="Your application was not approved.",
        next_step="Review the rejection reason. You may file a fresh application.",
        typical_timeline="Complete",
    ),
    S.CERTIFICATE_CANCELLED.value: StatusInfo(
        label="Certificate Cancelled",
        description="The registration certificate has been cancelled.",
        next_step="No further action required.",
        typical_timeline="Complete",
    ),
    S.SUPERSEDED.value: StatusInfo(
        label="Superseded",
        description="This certificate was replaced by an approved amendment.",
        next_step="Use the latest certificate.",
        typical_timeline="Complete",
    ),
}


def get_status_info(status: ApplicationStatus | str) -> StatusInfo:
    value = status.value if isinstance(status, ApplicationStatus) else str(status)
    return STATUS_INFO.get(
        value,
        StatusInfo(
            label=value.replace("_", " ").title(),
            description="Your application is being processed.",
            next_step="Contact the district tourism office for details.",
            typical_timeline="Varies",
        ),
    )


# -- Owner progress ----------------------------------------------------------

MILESTONES: list[Milestone] = [
    Milestone(id="da_review", label="With Dealing Assistant", short="DA Review"),
    Milestone(id="forwarded_dtdo", label="Forwarded to DTDO", short="DTDO"),
    Milestone(id="inspection_scheduled", label="Inspection Scheduled", short="Inspection"),
    Milestone(id="inspection_completed", label="Inspection Completed", short="Completed"),
    Milestone(id="payment_pending", label="Payment Pending", short="Payment"),
    Milestone(id="certificate", label="Registration Approved", short="Approved"),
]

_MILESTONE_INDEX: dict[ApplicationStatus, int] = {
    S.DRAFT: 0,
    S.PAID_PENDING_SUBMIT: 0,
    S.SUBMITTED: 0,
    S.UNDER_SCRUTINY: 0,
    S.SENT_BACK_FOR_CORRECTIONS: 0,
    S.REVERTED_TO_APPLICANT: 0,
    S.FORWARDED_TO_DTDO: 1,
    S.DTDO_REVIEW: 1,
    S.REVERTED_BY_DTDO: 1,
    S.INSPECTION_SCHEDULED: 2,
    S.INSPECTION_UNDER_REVIEW: 3,
    S.INSPECTION_COMPLETED: 3,
    S.OBJECTION_RAISED: 3,
    S.VERIFIED_FOR_PAYMENT: 4,
    S.PAYMENT_FAILED: 4,
    S.APPROVED: 5,
    S.REJECTED: 5,
}

_PROGRESS_SUMMARY: dict[ApplicationStatus, str] = {
    S.DRAFT: "Complete the draft to submit your application.",
    S.PAID_PENDING_SUBMIT: "Fee received. Submit your application to start the review.",
    S.SUBMITTED: "Your application is with the Dealing Assistant for review.",
    S.UNDER_SCRUTINY: "Your application is being reviewed by the Dealing Assistant.",
    S.FORWARDED_TO_DTDO: "Your application has been forwarded to DTDO for final decision.",
    S.DTDO_REVIEW: "Your application is under DTDO review.",
    S.SENT_BACK_FOR_CORRECTIONS: "Action required: update the application with the requested corrections.",
    S.REVERTED_TO_APPLICANT: "Action required: update the application with the requested corrections.",
    S.REVERTED_BY_DTDO: "DTDO requested revisions. Please review the remarks.",
    S.OBJECTION_RAISED: "Objections were raised after inspection. Please address them.",
    S.INSPECTION_SCHEDULED: "The inspection has been scheduled. Keep an eye on notifications.",
    S.INSPECTION_UNDER_REVIEW: "Inspection report is under review.",
    S.INSPECTION_COMPLETED: "Inspection finished. Awaiting final payment instructions.",
    S.VERIFIED_FOR_PAYMENT: "Verification complete. Pay the registration fee to get your certificate.",
    S.PAYMENT_FAILED: "Your last payment failed. Please retry.",
    S.APPROVED: "Your homestay is registered. Download your certificate.",
    S.REJECTED: "Your application was rejected. See the remarks for details.",
    S.CERTIFICATE_CANCELLED: "This registration certificate has been cancelled.",
    S.SUPERSEDED: "This certificate was replaced by an approved amendment.",
}


def build_progress(app) -> ProgressInfo:
    """Milestone index for the owner's progress bar.

    The recorded inspection dates can move the bar further than the status
    alone, and an approval always lands on the last milestone.
    """
    status = app.status or S.DRAFT
    index = _MILESTONE_INDEX.get(status, 0)

    if app.site_inspection_completed_date:
        index = max(index, 3)
    elif app.site_inspection_scheduled_date:
        index = max(index, 2)
    if app.approved_at or status == S.APPROVED:
        index = len(MILESTONES) - 1

    index = min(max(index, 0), len(MILESTONES) - 1)
    return ProgressInfo(
        milestones=MILESTONES,
        current_index=index,
        current_milestone=MILESTONES[index],
        summary=_PROGRESS_SUMMARY.get(status, "Your application is being processed."),
    )


# -- Aggregated summary ------------------------------------------------------


async def _pending_actions(session: AsyncSession, app) -> list[PendingAction]:
    status = app.status or S.DRAFT
    actions: list[PendingAction] = []

    if status in S.correction_statuses():
        result = await session.execute(
            select(Document).where(
                Document.application_id == app.id,
                Document.verification_status == DocumentStatus.NEEDS_CORRECTION,
            )
        )
        for doc in result.scalars().all():
            actions.append(
                PendingAction(
                    action_type="correct_document",
                    description=f"Replace {doc.doc_type.value.replace('_', ' ')}"
                    + (f": {doc.verification_notes}" if doc.verification_notes else ""),
                )
            )
        actions.append(
            PendingAction(
                action_type="resubmit",
                description="Resubmit the application after making corrections",
            )
        )
    elif status == S.DRAFT:
        if settings.PAYMENT_WORKFLOW == "upfront":
            actions.append(
                PendingAction(action_type="pay_fee", description="Pay the registration fee")
            )
        else:
            actions.append(
                PendingAction(action_type="submit", description="Submit the application")
            )
    elif status == S.PAID_PENDING_SUBMIT:
        actions.append(PendingAction(action_type="submit", description="Submit the application"))
    elif status in (S.VERIFIED_FOR_PAYMENT, S.PAYMENT_FAILED):
        actions.append(
            PendingAction(
                action_type="pay_fee",
                description=f"Pay the registration fee of Rs. {app.total_fee}",
            )
        )
    elif status == S.INSPECTION_SCHEDULED:
        result = await session.execute(
            select(InspectionOrder).where(
                InspectionOrder.application_id == app.id,
                InspectionOrder.status == InspectionStatus.SCHEDULED,
            )
        )
        if result.scalars().first() is not None:
            actions.append(
                PendingAction(
                    action_type="acknowledge_inspection",
                    description="Acknowledge the site inspection order",
                )
            )
    return actions


async def get_application_status(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> ApplicationStatusResponse | None:
    """Build an aggregated status summary for an application.

    Returns None if the application is not found or not accessible.
    """
    app = await get_application(session, user, application_id)
    if app is None:
        return None

    status = app.status or S.DRAFT
    display = to_display_status(status)
    return ApplicationStatusResponse(
        application_id=app.id,
        application_number=app.application_number,
        status=status.value,
        display_status=display,
        display_label=DISPLAY_LABELS[display],
        status_info=get_status_info(status),
        progress=build_progress(app),
        version=app.version,
        allowed_actions=[a.value for a in allowed_actions(status, user.role)],
        pending_actions=await _pending_actions(session, app),
    )


TIMELINE_EVENT_TYPES = [
    "application_created",
    "status_change",
    "correction_resubmitted",
    "document_verified",
    "inspection_acknowledged",
    "payment_initiated",
    "payment_completed",
    "certificate_issued",
]


async def get_application_timeline(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> TimelineResponse | None:
    """Chronological history built from the application's audit events."""
    app = await get_application(session, user, application_id)
    if app is None:
        return None

    events = await get_events_by_application(session, app.id, TIMELINE_EVENT_TYPES)
    entries = []
    for event in events:
        data = dict(event.event_data or {})
        entries.append(
            TimelineEntry(
                id=event.id,
                timestamp=event.timestamp,
                event_type=event.event_type,
                user_id=event.user_id,
                user_role=event.user_role,
                action=data.pop("action", None),
                from_status=data.pop("from", None),
                to_status=data.pop("to", None),
                details=data or None,
            )
        )
    return TimelineResponse(application_id=app.id, events=entries)
