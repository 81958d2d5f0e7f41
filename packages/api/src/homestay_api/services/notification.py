# This project was developed with assistance from AI tools.
"""In-app notifications rendered from named templates.

Only the in-app channel is stored; every notification is also logged so a
delivery worker can be attached later without touching callers.
"""

import logging

from homestay_db import Notification, PortalUser
from homestay_db.enums import UserRole
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .users import get_portal_user

logger = logging.getLogger(__name__)

TEMPLATES: dict[str, tuple[str, str]] = {
    "application_submitted": (
        "Application {application_number} submitted",
        "Your application for {property_name} has been submitted for scrutiny.",
    ),
    "application_received": (
        "New application {application_number}",
        "{property_name} has been submitted and is waiting for scrutiny.",
    ),
    "application_sent_back": (
        "Corrections needed on {application_number}",
        "Your application was sent back for corrections: {reason}",
    ),
    "application_reverted_by_dtdo": (
        "Application {application_number} reverted",
        "The District Tourism Officer reverted your application: {reason}",
    ),
    "application_forwarded": (
        "Application {application_number} forwarded",
        "{property_name} has been scrutinised and forwarded for review.",
    ),
    "correction_resubmitted": (
        "Corrections resubmitted on {application_number}",
        "The owner of {property_name} has resubmitted corrections.",
    ),
    "application_rejected": (
        "Application {application_number} rejected",
        "Your application has been rejected. Reason: {reason}",
    ),
    "inspection_scheduled": (
        "Site inspection scheduled for {application_number}",
        "An inspection of {property_name} is scheduled on {inspection_date}.",
    ),
    "inspection_assigned": (
        "Inspection assigned: {application_number}",
        "You have been assigned to inspect {property_name} on {inspection_date}.",
    ),
    "inspection_report_submitted": (
        "Inspection report filed for {application_number}",
        "The field report for {property_name} is ready for review.",
    ),
    "objection_raised": (
        "Objection raised on {application_number}",
        "Objections were raised after inspection: {reason}",
    ),
    "payment_pending": (
        "Fee payment due for {application_number}",
        "Your application is verified. Pay the registration fee of Rs. {amount} to receive your certificate.",
    ),
    "payment_failed": (
        "Payment failed for {application_number}",
        "Your payment could not be completed. Please retry.",
    ),
    "application_approved": (
        "Registration certificate issued",
        "Congratulations! Certificate {certificate_number} has been issued for {property_name}.",
    ),
    "certificate_cancelled": (
        "Registration certificate cancelled",
        "Certificate {certificate_number} for {property_name} has been cancelled.",
    ),
    "grievance_created": (
        "New grievance {ticket_number}",
        "{subject}",
    ),
    "grievance_officer_reply": (
        "Reply on grievance {ticket_number}",
        "An officer has replied to your grievance '{subject}'.",
    ),
    "grievance_status_changed": (
        "Grievance {ticket_number} updated",
        "Your grievance is now {status}.",
    ),
    "grievance_resolved": (
        "Grievance {ticket_number} resolved",
        "Your grievance '{subject}' has been resolved. {resolution_notes}",
    ),
}


class _Blank(dict):
    def __missing__(self, key):
        return ""


def render_template(template: str, context: dict | None = None) -> tuple[str, str]:
    """Render a template to (title, message). Missing fields render empty."""
    title, message = TEMPLATES[template]
    values = _Blank(context or {})
    return title.format_map(values), message.format_map(values).strip()


async def notify(
    session: AsyncSession,
    *,
    recipient_id: int,
    template: str,
    context: dict | None = None,
    application_id: int | None = None,
    grievance_id: int | None = None,
) -> Notification:
    """Store an in-app notification for a PortalUser. The caller owns the commit."""
    title, message = render_template(template, context)
    notification = Notification(
        user_id=recipient_id,
        application_id=application_id,
        grievance_id=grievance_id,
        type=template,
        title=title,
        message=message,
        channels=["in_app"],
        is_read=False,
    )
    session.add(notification)
    await session.flush()
    logger.info("Notification %s queued for user %s", template, recipient_id)
    return notification


async def notify_keycloak_user(
    session: AsyncSession,
    keycloak_user_id: str | None,
    template: str,
    context: dict | None = None,
    **refs,
) -> Notification | None:
    """Notify a user identified by token subject; skipped if they never signed in."""
    if not keycloak_user_id:
        return None
    portal_user = await get_portal_user(session, keycloak_user_id)
    if portal_user is None:
        logger.info("Skipping %s notification: no portal user %s", template, keycloak_user_id)
        return None
    return await notify(
        session, recipient_id=portal_user.id, template=template, context=context, **refs
    )


async def notify_district_officers(
    session: AsyncSession,
    district: str | None,
    role: UserRole,
    template: str,
    context: dict | None = None,
    **refs,
) -> int:
    """Notify every active officer of ``role`` in ``district``. Returns the count."""
    stmt = select(PortalUser.id).where(
        PortalUser.role == role,
        PortalUser.is_active.is_(True),
    )
    if district:
        stmt = stmt.where(PortalUser.district == district)
    recipients = (await session.execute(stmt)).scalars().all()
    for recipient_id in recipients:
        await notify(
            session, recipient_id=recipient_id, template=template, context=context, **refs
        )
    return len(recipients)


async def list_notifications(
    session: AsyncSession,
    user: UserContext,
    *,
    unread_only: bool = False,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Notification], int, int]:
    """Return (page, total, unread) for the caller's notifications."""
    portal_user = await get_portal_user(session, user.user_id)
    if portal_user is None:
        return [], 0, 0

    base = select(Notification).where(Notification.user_id == portal_user.id)
    if unread_only:
        base = base.where(Notification.is_read.is_(False))

    total = (
        await session.execute(select(func.count()).select_from(base.subquery()))
    ).scalar() or 0
    unread = (
        await session.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == portal_user.id,
                Notification.is_read.is_(False),
            )
        )
    ).scalar() or 0

    stmt = base.order_by(Notification.id.desc()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all()), total, unread


async def mark_notification_read(
    session: AsyncSession,
    user: UserContext,
    notification_id: int,
) -> Notification | None:
    """Mark one of the caller's notifications read. None if not theirs."""
    portal_user = await get_portal_user(session, user.user_id)
    if portal_user is None:
        return None
    stmt = select(Notification).where(
        Notification.id == notification_id,
        Notification.user_id == portal_user.id,
    )
    notification = (await session.execute(stmt)).scalar_one_or_none()
    if notification is None:
        return None
    notification.is_read = True
    await session.commit()
    return notification


async def mark_all_read(session: AsyncSession, user: UserContext) -> int:
    portal_user = await get_portal_user(session, user.user_id)
    if portal_user is None:
        return 0
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == portal_user.id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    await session.commit()
    return result.rowcount or 0
