# This project was developed with assistance from AI tools.
"""Registration certificate (RC) issuance.

An RC is issued when an application reaches ``approved``. Approving an
amendment issues a fresh RC carrying the amended rooms or category and
supersedes the parent's RC.
"""

import logging
import secrets
from datetime import UTC, datetime

from homestay_db import Application
from homestay_db.enums import ApplicationKind, ApplicationStatus, WorkflowAction
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from .audit import write_audit_event
from .workflow import apply_action

logger = logging.getLogger(__name__)


def generate_certificate_number(now: datetime | None = None) -> str:
    """``HP-HST-{year}-{5 digits}``."""
    now = now or datetime.now(UTC)
    return f"HP-HST-{now.year}-{secrets.randbelow(100_000):05d}"


def add_years(moment: datetime, years: int) -> datetime:
    """Same calendar day ``years`` later; Feb 29 falls back to Feb 28."""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)


def issue_certificate(app: Application, now: datetime | None = None) -> None:
    """Stamp certificate number, issue and expiry dates onto ``app``."""
    now = now or datetime.now(UTC)
    years = app.certificate_validity_years or settings.CERTIFICATE_VALIDITY_YEARS
    app.certificate_number = generate_certificate_number(now)
    app.certificate_issued_date = now
    app.certificate_expiry_date = add_years(now, years)
    app.approved_at = now


def stamp_approval(app: Application) -> None:
    """Set the RC fields on ``app`` ahead of its transition to ``approved``.

    Must run with no query between it and ``apply_action`` so the RC and
    the status change land in one versioned UPDATE. For an amendment, folds
    the requested change into the new RC.
    """
    if app.application_kind == ApplicationKind.ADD_ROOMS or (
        app.application_kind == ApplicationKind.DELETE_ROOMS
    ):
        app.total_rooms = app.requested_rooms or app.total_rooms
    elif app.application_kind == ApplicationKind.CHANGE_CATEGORY and app.requested_category:
        app.category = app.requested_category

    issue_certificate(app)


async def record_approval(session: AsyncSession, user: UserContext, app: Application) -> None:
    """Audit the issued RC and supersede an amended parent.

    Runs after the application's own transition has been flushed.
    """
    await write_audit_event(
        session,
        event_type="certificate_issued",
        user=user,
        application_id=app.id,
        event_data={
            "certificate_number": app.certificate_number,
            "expiry": app.certificate_expiry_date.isoformat(),
        },
    )
    logger.info("Certificate %s issued for application %s", app.certificate_number, app.id)

    if app.parent_application_id and app.application_kind != ApplicationKind.CANCEL_CERTIFICATE:
        parent = await load_parent(session, app)
        if parent is not None and parent.status == ApplicationStatus.APPROVED:
            await apply_action(
                session,
                user,
                parent,
                WorkflowAction.SUPERSEDE,
                event_data={"superseded_by": app.application_number},
            )


async def load_parent(session: AsyncSession, app: Application) -> Application | None:
    if not app.parent_application_id:
        return None
    result = await session.execute(
        select(Application).where(Application.id == app.parent_application_id)
    )
    return result.scalar_one_or_none()


def certificate_view(app: Application) -> dict:
    """Data printed on the RC."""
    return {
        "application_id": app.id,
        "application_number": app.application_number,
        "certificate_number": app.certificate_number,
        "property_name": app.property_name,
        "owner_name": app.owner_name,
        "district": app.district,
        "tehsil": app.tehsil,
        "address": app.address,
        "category": app.category,
        "total_rooms": app.total_rooms,
        "issued_date": app.certificate_issued_date,
        "expiry_date": app.certificate_expiry_date,
        "validity_years": app.certificate_validity_years,
    }
