# This project was developed with assistance from AI tools.
"""Demo data seeding service.

Seeds portal users, applications spread across the workflow, documents,
an inspection order and grievances, so every persona has data to explore
right after deployment. Statuses are written directly rather than driven
through the workflow engine; each application still gets an audit entry.

Simulated for demonstration purposes -- not real owners or properties.
"""

import json
import logging
from datetime import UTC, datetime, timedelta

from homestay_db import (
    Application,
    DemoDataManifest,
    Document,
    Grievance,
    GrievanceComment,
    InspectionOrder,
    InspectionReport,
    Notification,
    Payment,
    PortalUser,
)
from homestay_db.enums import ApplicationKind, ApplicationStatus, PaymentStatus
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import settings
from ..application import apply_fees, generate_application_number
from ..audit import write_audit_event
from ..certificate import issue_certificate
from .fixtures import APPLICATIONS, GRIEVANCES, USERS, compute_config_hash

logger = logging.getLogger(__name__)


async def _check_manifest(session: AsyncSession) -> DemoDataManifest | None:
    """Check if demo data has been seeded."""
    result = await session.execute(
        select(DemoDataManifest).order_by(DemoDataManifest.id.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def _clear_demo_data(session: AsyncSession) -> None:
    """Delete demo rows owned by the fixture users.

    Audit events are append-only and stay behind.
    """
    known_ids = [u["keycloak_user_id"] for u in USERS]
    result = await session.execute(
        select(PortalUser.id).where(PortalUser.keycloak_user_id.in_(known_ids))
    )
    user_ids = list(result.scalars().all())
    if not user_ids:
        await session.execute(delete(DemoDataManifest))
        return

    app_result = await session.execute(
        select(Application.id).where(Application.owner_id.in_(user_ids))
    )
    app_ids = list(app_result.scalars().all())

    grievance_result = await session.execute(
        select(Grievance.id).where(Grievance.user_id.in_(user_ids))
    )
    grievance_ids = list(grievance_result.scalars().all())
    if grievance_ids:
        await session.execute(
            delete(GrievanceComment).where(GrievanceComment.grievance_id.in_(grievance_ids))
        )
        await session.execute(delete(Grievance).where(Grievance.id.in_(grievance_ids)))

    if app_ids:
        # Child rows first; no FK cascade assumed on every backend.
        await session.execute(delete(Document).where(Document.application_id.in_(app_ids)))
        await session.execute(
            delete(InspectionReport).where(InspectionReport.application_id.in_(app_ids))
        )
        await session.execute(
            delete(InspectionOrder).where(InspectionOrder.application_id.in_(app_ids))
        )
        await session.execute(delete(Payment).where(Payment.application_id.in_(app_ids)))
        await session.execute(delete(Application).where(Application.id.in_(app_ids)))

    await session.execute(delete(Notification).where(Notification.user_id.in_(user_ids)))
    await session.execute(delete(PortalUser).where(PortalUser.id.in_(user_ids)))
    await session.execute(delete(DemoDataManifest))
    logger.info("Cleared existing demo data")


def _user_map(users: list[PortalUser]) -> dict[str, PortalUser]:
    """Map keycloak_user_id -> PortalUser for FK resolution."""
    return {u.keycloak_user_id: u for u in users}


async def _seed_applications(
    session: AsyncSession,
    users: dict[str, PortalUser],
) -> dict[str, Application]:
    """Seed application records with documents and inspection orders."""
    now = datetime.now(UTC)
    seeded: dict[str, Application] = {}

    for app_def in APPLICATIONS:
        owner = users[app_def["owner_ref"]]
        status = app_def["status"]
        submitted_days = app_def.get("submitted_days_ago")
        submitted_at = now - timedelta(days=submitted_days) if submitted_days is not None else None

        app = Application(
            application_number=generate_application_number(app_def["district"], now),
            owner_id=owner.id,
            application_kind=ApplicationKind.NEW_REGISTRATION,
            status=status,
            property_name=app_def["property_name"],
            district=app_def["district"],
            tehsil=app_def["tehsil"],
            address=app_def["address"],
            pincode=app_def["pincode"],
            category=app_def["category"],
            total_rooms=app_def["total_rooms"],
            is_pangi_sub_division=False,
            certificate_validity_years=app_def.get(
                "certificate_validity_years", settings.CERTIFICATE_VALIDITY_YEARS
            ),
            owner_name=owner.full_name,
            owner_mobile=owner.mobile,
            owner_email=owner.email,
            owner_aadhaar=owner.aadhaar,
            owner_gender=app_def["owner_gender"],
            revert_count=app_def.get("revert_count", 0),
            dtdo_revert_count=0,
            correction_submission_count=0,
            da_id=app_def.get("da_ref"),
            da_remarks=app_def.get("da_remarks"),
            dtdo_id=app_def.get("dtdo_ref"),
            clarification_requested=app_def.get("clarification_requested"),
            rejection_reason=app_def.get("rejection_reason"),
            site_inspection_outcome=app_def.get("inspection_outcome"),
            submitted_at=submitted_at,
        )
        apply_fees(app)
        if status == ApplicationStatus.APPROVED:
            app.payment_status = PaymentStatus.SUCCESS
            issue_certificate(app, now - timedelta(days=app_def.get("approved_days_ago", 0)))
        session.add(app)
        await session.flush()

        for doc_def in app_def.get("documents", []):
            doc_type = doc_def["doc_type"]
            session.add(
                Document(
                    application_id=app.id,
                    doc_type=doc_type,
                    file_name=f"{doc_type.value}.pdf",
                    file_path=f"demo/{app.id}/{doc_type.value}.pdf",
                    content_type="application/pdf",
                    file_size=120_000,
                    verification_status=doc_def["status"],
                    verification_notes=doc_def.get("notes"),
                    verified_by=app_def.get("da_ref") if doc_def["status"].value != "pending" else None,
                    uploaded_by=owner.keycloak_user_id,
                )
            )

        inspection = app_def.get("inspection")
        if inspection:
            session.add(
                InspectionOrder(
                    application_id=app.id,
                    scheduled_by=inspection["scheduled_by"],
                    assigned_to=inspection["assigned_to"],
                    district=app.district,
                    inspection_date=inspection["inspection_date"],
                    inspection_address=app.address,
                    special_instructions=inspection.get("special_instructions"),
                    status=inspection["status"],
                )
            )
            app.site_inspection_scheduled_date = inspection["inspection_date"]

        await write_audit_event(
            session,
            event_type="application_created",
            user_id=owner.keycloak_user_id,
            user_role="system",
            application_id=app.id,
            event_data={"source": "demo_seed", "status": status.value},
        )
        seeded[app_def["ref"]] = app

    return seeded


async def _seed_grievances(
    session: AsyncSession,
    users: dict[str, PortalUser],
    applications: dict[str, Application],
) -> int:
    now = datetime.now(UTC)
    for g_def in GRIEVANCES:
        app = applications.get(g_def["application_ref"]) if g_def["application_ref"] else None
        grievance = Grievance(
            ticket_number=g_def["ticket_number"],
            ticket_type=g_def["ticket_type"],
            user_id=users[g_def["user_ref"]].id,
            application_id=app.id if app else None,
            category=g_def["category"],
            priority=g_def["priority"],
            status=g_def["status"],
            subject=g_def["subject"],
            description=g_def["description"],
            resolution_notes=g_def.get("resolution_notes"),
            resolved_at=now if g_def.get("resolution_notes") else None,
            last_comment_at=now if g_def["comments"] else None,
        )
        session.add(grievance)
        await session.flush()
        for c_def in g_def["comments"]:
            author = users[c_def["user_ref"]]
            session.add(
                GrievanceComment(
                    grievance_id=grievance.id,
                    user_id=author.id,
                    author_role=author.role.value,
                    comment=c_def["comment"],
                    is_internal=c_def["is_internal"],
                )
            )
        await write_audit_event(
            session,
            event_type="grievance_created",
            user_id=users[g_def["user_ref"]].keycloak_user_id,
            user_role="system",
            application_id=grievance.application_id,
            grievance_id=grievance.id,
            event_data={"source": "demo_seed", "ticket_number": grievance.ticket_number},
        )
    return len(GRIEVANCES)


async def seed_demo_data(session: AsyncSession, force: bool = False) -> dict:
    """Seed demo data. Returns summary dict.

    Args:
        session: Database session.
        force: If True, clear and re-seed even if already seeded.

    Returns:
        Summary dict with counts of seeded records, or the existing
        manifest when already seeded and ``force`` is False.
    """
    manifest = await _check_manifest(session)
    if manifest and not force:
        return {
            "status": "already_seeded",
            "seeded_at": manifest.seeded_at.isoformat(),
            "config_hash": manifest.config_hash,
        }

    if manifest and force:
        await _clear_demo_data(session)

    # 1. Portal users
    user_records = []
    for u_data in USERS:
        user = PortalUser(
            keycloak_user_id=u_data["keycloak_user_id"],
            full_name=u_data["full_name"],
            email=u_data["email"],
            mobile=u_data.get("mobile"),
            aadhaar=u_data.get("aadhaar"),
            role=u_data["role"],
            district=u_data.get("district"),
            is_active=True,
        )
        session.add(user)
        user_records.append(user)
    await session.flush()
    users = _user_map(user_records)

    # 2. Applications with documents and inspections
    applications = await _seed_applications(session, users)

    # 3. Grievances
    grievance_count = await _seed_grievances(session, users, applications)

    # 4. Manifest
    config_hash = compute_config_hash()
    summary = {
        "users": len(user_records),
        "applications": len(applications),
        "grievances": grievance_count,
    }
    session.add(DemoDataManifest(config_hash=config_hash, summary=json.dumps(summary)))
    await write_audit_event(
        session,
        event_type="demo_data_seeded",
        user_id="system",
        user_role="system",
        event_data=summary,
    )

    await session.commit()
    logger.info("Demo data seeded: %s", summary)

    return {
        "status": "seeded",
        "seeded_at": datetime.now(UTC).isoformat(),
        "config_hash": config_hash,
        **summary,
    }


async def get_seed_status(session: AsyncSession) -> dict:
    """Check if demo data has been seeded."""
    manifest = await _check_manifest(session)
    if manifest is None:
        return {"seeded": False}
    return {
        "seeded": True,
        "seeded_at": manifest.seeded_at.isoformat(),
        "config_hash": manifest.config_hash,
        "summary": json.loads(manifest.summary) if manifest.summary else None,
    }
