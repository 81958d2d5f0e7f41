# This project was developed with assistance from AI tools.
"""Grievance tickets against a real database: visibility, comments, resolution."""

import pytest
from homestay_db import Notification
from homestay_db.enums import GrievanceCategory, GrievanceStatus, GrievanceType
from sqlalchemy import select

from homestay_api.services import grievance as grievance_service
from homestay_api.services import grievance_reports as reports
from homestay_api.services.application import create_application
from homestay_api.services.grievance import GrievanceAccessError
from homestay_api.services.workflow import WorkflowRuleError
from tests.functional.personas import da_shimla, dtdo_shimla, owner_anita, owner_rajesh

pytestmark = pytest.mark.integration


async def _raise_grievance(session):
    app = await create_application(
        session, owner_rajesh(), {"property_name": "Deodar View Homestay", "district": "Shimla"}
    )
    return await grievance_service.create_grievance(
        session,
        owner_rajesh(),
        {
            "application_id": app.id,
            "category": GrievanceCategory.APPLICATION,
            "subject": "Scrutiny taking too long",
            "description": "Submitted three weeks ago with no update.",
        },
    )


async def test_owner_grievance_is_numbered_and_routed(db_session, portal_users):
    grievance = await _raise_grievance(db_session)

    assert grievance.ticket_number.startswith("GRV-")
    assert grievance.ticket_type == GrievanceType.OWNER_GRIEVANCE
    assert grievance.status == GrievanceStatus.OPEN

    notified = (
        await db_session.execute(
            select(Notification).where(Notification.type == "grievance_created")
        )
    ).scalars().all()
    assert len(notified) == 1
    assert notified[0].grievance_id == grievance.id


async def test_visibility_between_owners_and_officers(db_session, portal_users):
    grievance = await _raise_grievance(db_session)

    mine, total = await grievance_service.list_grievances(db_session, owner_rajesh())
    assert total == 1 and mine[0].id == grievance.id

    _, others = await grievance_service.list_grievances(db_session, owner_anita())
    assert others == 0
    assert await grievance_service.get_grievance(db_session, owner_anita(), grievance.id) is None

    _, officer_total = await grievance_service.list_grievances(db_session, da_shimla())
    assert officer_total == 1


async def test_officer_reply_is_unread_until_owner_opens(db_session, portal_users):
    grievance = await _raise_grievance(db_session)
    owner = owner_rajesh()
    assert await grievance_service.unread_count(db_session, owner) == 0

    await grievance_service.add_comment(
        db_session, dtdo_shimla(), grievance.id, comment="Your file is with the DA today."
    )
    assert await grievance_service.unread_count(db_session, owner) == 1

    await grievance_service.get_grievance(db_session, owner, grievance.id)
    assert await grievance_service.unread_count(db_session, owner) == 0


async def test_internal_notes_stay_with_officers(db_session, portal_users):
    grievance = await _raise_grievance(db_session)

    with pytest.raises(GrievanceAccessError):
        await grievance_service.add_comment(
            db_session, owner_rajesh(), grievance.id, comment="hi", is_internal=True
        )

    await grievance_service.add_comment(
        db_session, da_shimla(), grievance.id, comment="Check the revenue papers first.", is_internal=True
    )

    owner_view = await grievance_service.list_comments(db_session, owner_rajesh(), grievance.id)
    officer_view = await grievance_service.list_comments(db_session, da_shimla(), grievance.id)
    assert owner_view == []
    assert len(officer_view) == 1
    assert await grievance_service.unread_count(db_session, owner_rajesh()) == 0


async def test_resolution_is_audited_and_reported(db_session, portal_users):
    grievance = await _raise_grievance(db_session)
    dtdo = dtdo_shimla()

    updated = await grievance_service.update_grievance(
        db_session,
        dtdo,
        grievance.id,
        {"status": GrievanceStatus.RESOLVED, "resolution_notes": "Scrutiny completed."},
    )

    assert updated.status == GrievanceStatus.RESOLVED
    assert updated.resolved_at is not None

    log = await grievance_service.get_audit_log(db_session, dtdo, grievance.id)
    assert {e.event_type for e in log} >= {
        "grievance_created",
        "grievance_status_changed",
        "grievance_resolution_notes_changed",
    }

    summary = await reports.summary(db_session)
    assert summary["total"] == 1
    assert summary["by_status"]["resolved"] == 1
    assert summary["created_last_30_days"] == 1
    assert summary["resolved_last_30_days"] == 1

    with pytest.raises(GrievanceAccessError):
        await grievance_service.update_grievance(
            db_session, owner_rajesh(), grievance.id, {"status": GrievanceStatus.OPEN}
        )


async def test_closed_ticket_takes_no_comments(db_session, portal_users):
    grievance = await _raise_grievance(db_session)
    await grievance_service.update_grievance(
        db_session, da_shimla(), grievance.id, {"status": GrievanceStatus.CLOSED}
    )

    with pytest.raises(WorkflowRuleError, match="closed"):
        await grievance_service.add_comment(
            db_session, owner_rajesh(), grievance.id, comment="Any news?"
        )
