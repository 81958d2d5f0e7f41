# This project was developed with assistance from AI tools.
"""A registration driven from draft to certificate against a real database."""

import re
from datetime import UTC, datetime
from decimal import Decimal

import pytest
from homestay_db import Notification, PortalUser
from homestay_db.enums import (
    ApplicationKind,
    ApplicationStatus,
    DocumentStatus,
    DocumentType,
    InspectionStatus,
    PaymentStatus,
    PropertyCategory,
)
from sqlalchemy import select

from homestay_api.services import da as da_service
from homestay_api.services import dtdo as dtdo_service
from homestay_api.services.application import (
    create_application,
    create_service_request,
    get_application,
    resubmit_application,
    submit_application,
)
from homestay_api.services.audit import get_events_by_application, verify_audit_chain
from homestay_api.services.certificate import issue_certificate
from homestay_api.services.document import upload_document
from homestay_api.services.inspection import get_current_order, schedule_inspection, submit_report
from homestay_api.services.payment import initiate_payment, process_callback
from homestay_api.services.workflow import (
    ConcurrencyConflictError,
    InvalidTransitionError,
    WorkflowRuleError,
)
from tests.functional.personas import (
    DA_SHIMLA_USER_ID,
    da_kullu,
    da_shimla,
    dtdo_shimla,
    owner_anita,
    owner_rajesh,
)

pytestmark = pytest.mark.integration

S = ApplicationStatus

_DRAFT = {
    "property_name": "Deodar View Homestay",
    "district": "Shimla",
    "tehsil": "Theog",
    "address": "Ward 4, Theog",
    "pincode": "171201",
    "category": PropertyCategory.GOLD,
    "total_rooms": 4,
}


async def _submitted_with_document(session, owner):
    app = await create_application(session, owner, dict(_DRAFT))
    doc = await upload_document(
        session,
        owner,
        app.id,
        DocumentType.REVENUE_PAPERS,
        "jamabandi.pdf",
        "application/pdf",
        b"%PDF-1.4 revenue papers",
    )
    app = await submit_application(session, owner, app.id)
    return app, doc


async def test_draft_has_fees_and_number(db_session, portal_users):
    app = await create_application(db_session, owner_rajesh(), dict(_DRAFT))

    assert app.status == S.DRAFT
    assert re.fullmatch(r"HP-HS-\d{4}-SHI-\d{6}", app.application_number)
    assert app.total_fee == Decimal("6000")
    assert app.version == 1


async def test_owner_scope_hides_other_owners(db_session, portal_users):
    app = await create_application(db_session, owner_rajesh(), dict(_DRAFT))

    assert await get_application(db_session, owner_anita(), app.id) is None
    assert await get_application(db_session, da_kullu(), app.id) is None
    assert await get_application(db_session, da_shimla(), app.id) is not None


async def test_full_registration_to_certificate(db_session, portal_users, mock_storage):
    owner, da, dtdo = owner_rajesh(), da_shimla(), dtdo_shimla()

    app, doc = await _submitted_with_document(db_session, owner)
    assert app.status == S.SUBMITTED
    assert app.submitted_at is not None
    mock_storage.upload_file.assert_awaited_once()

    app = await da_service.start_scrutiny(db_session, da, app.id)
    assert app.status == S.UNDER_SCRUTINY
    assert app.da_id == da.user_id

    with pytest.raises(WorkflowRuleError, match="pending verification"):
        await da_service.forward_to_dtdo(db_session, da, app.id, remarks="Looks fine")

    doc = await da_service.verify_document(db_session, da, doc.id, status=DocumentStatus.VERIFIED)
    assert doc.verification_status == DocumentStatus.VERIFIED

    app = await da_service.forward_to_dtdo(db_session, da, app.id, remarks="All papers in order")
    assert app.status == S.FORWARDED_TO_DTDO

    app = await dtdo_service.accept(db_session, dtdo, app.id, remarks="Proceed to inspection")
    assert app.status == S.DTDO_REVIEW

    today = datetime.now(UTC)
    app = await schedule_inspection(
        db_session, dtdo, app.id, inspection_date=today, assigned_to=DA_SHIMLA_USER_ID
    )
    assert app.status == S.INSPECTION_SCHEDULED
    order = await get_current_order(db_session, app.id)
    assert order.status == InspectionStatus.SCHEDULED

    report = await submit_report(
        db_session,
        da,
        order.id,
        {
            "actual_inspection_date": today.date(),
            "recommendation": "approve",
            "room_count_verified": True,
            "actual_room_count": 4,
            "category_meets_standards": True,
            "observations": "Four rooms as declared, clean and well ventilated.",
        },
    )
    assert report.application_id == app.id
    app = await get_application(db_session, dtdo, app.id)
    assert app.status == S.INSPECTION_UNDER_REVIEW

    app = await dtdo_service.approve_inspection(db_session, dtdo, app.id, remarks="Approved")
    assert app.status == S.VERIFIED_FOR_PAYMENT
    assert app.certificate_number is None

    payment = await initiate_payment(db_session, owner, app.id)
    assert payment.status == PaymentStatus.INITIATED
    assert payment.amount == Decimal("6000")

    payment = await process_callback(
        db_session, owner, payment.id, success=True, gateway_reference="HIMKOSH-0001"
    )
    assert payment.status == PaymentStatus.SUCCESS
    assert payment.gateway_response == {"gateway_reference": "HIMKOSH-0001"}

    app = await get_application(db_session, owner, app.id)
    assert app.status == S.APPROVED
    assert app.payment_status == PaymentStatus.SUCCESS
    assert re.fullmatch(r"HP-HST-\d{4}-\d{5}", app.certificate_number)
    assert app.certificate_expiry_date.year == app.certificate_issued_date.year + 1

    events = await get_events_by_application(db_session, app.id, ["status_change"])
    assert [(e.event_data["from"], e.event_data["to"]) for e in events] == [
        ("draft", "submitted"),
        ("submitted", "under_scrutiny"),
        ("under_scrutiny", "forwarded_to_dtdo"),
        ("forwarded_to_dtdo", "dtdo_review"),
        ("dtdo_review", "inspection_scheduled"),
        ("inspection_scheduled", "inspection_under_review"),
        ("inspection_under_review", "verified_for_payment"),
        ("verified_for_payment", "approved"),
    ]
    assert (await verify_audit_chain(db_session))["status"] == "OK"


async def test_repeated_payment_callback_is_ignored(db_session, portal_users):
    owner = owner_rajesh()
    app = await create_application(db_session, owner, dict(_DRAFT))
    app.status = S.VERIFIED_FOR_PAYMENT
    await db_session.commit()

    payment = await initiate_payment(db_session, owner, app.id)
    await process_callback(db_session, owner, payment.id, success=False)
    app = await get_application(db_session, owner, app.id)
    assert app.status == S.PAYMENT_FAILED

    retry = await initiate_payment(db_session, owner, app.id)
    await process_callback(db_session, owner, retry.id, success=True)
    again = await process_callback(db_session, owner, retry.id, success=False)

    assert again.status == PaymentStatus.SUCCESS
    app = await get_application(db_session, owner, app.id)
    assert app.status == S.APPROVED


async def test_second_send_back_auto_rejects(db_session, portal_users, mock_storage):
    owner, da = owner_rajesh(), da_shimla()
    app, _ = await _submitted_with_document(db_session, owner)
    await da_service.start_scrutiny(db_session, da, app.id)

    app = await da_service.send_back(db_session, da, app.id, reason="Revenue papers are blurred")
    assert app.status == S.REVERTED_TO_APPLICANT
    assert app.revert_count == 1
    assert app.clarification_requested == "Revenue papers are blurred"

    app = await resubmit_application(db_session, owner, app.id, note="Uploaded a clear scan")
    assert app.status == S.UNDER_SCRUTINY
    assert app.correction_submission_count == 1

    app = await da_service.send_back(db_session, da, app.id, reason="Still unreadable")
    assert app.status == S.REJECTED
    assert app.revert_count == 2
    assert "Still unreadable" in app.rejection_reason

    with pytest.raises(InvalidTransitionError):
        await resubmit_application(db_session, owner, app.id)

    owner_row = (
        await db_session.execute(select(PortalUser).where(PortalUser.keycloak_user_id == owner.user_id))
    ).scalar_one()
    types = (
        await db_session.execute(
            select(Notification.type).where(Notification.user_id == owner_row.id)
        )
    ).scalars().all()
    assert "application_sent_back" in types
    assert "application_rejected" in types


async def test_submission_notifies_district_assistant(db_session, portal_users, mock_storage):
    await _submitted_with_document(db_session, owner_rajesh())

    rows = (
        await db_session.execute(
            select(PortalUser.keycloak_user_id)
            .join(Notification, Notification.user_id == PortalUser.id)
            .where(Notification.type == "application_received")
        )
    ).scalars().all()
    assert rows == ["da-shimla-001"]


async def test_stale_version_is_rejected(db_session, portal_users, mock_storage):
    app, _ = await _submitted_with_document(db_session, owner_rajesh())

    with pytest.raises(ConcurrencyConflictError):
        await da_service.start_scrutiny(
            db_session, da_shimla(), app.id, expected_version=app.version - 1
        )


async def _transitions(session, application_id):
    events = await get_events_by_application(session, application_id, ["status_change"])
    return [(e.event_data["from"], e.event_data["to"]) for e in events]


async def _approved_registration(session, owner):
    app = await create_application(session, owner, dict(_DRAFT))
    app.status = S.APPROVED
    issue_certificate(app)
    await session.commit()
    return await get_application(session, owner, app.id)


async def test_each_transition_bumps_version_once(db_session, portal_users, mock_storage):
    owner, da, dtdo = owner_rajesh(), da_shimla(), dtdo_shimla()
    app, doc = await _submitted_with_document(db_session, owner)

    before = app.version
    app = await da_service.start_scrutiny(db_session, da, app.id, expected_version=before)
    assert app.version == before + 1

    await da_service.verify_document(db_session, da, doc.id, status=DocumentStatus.VERIFIED)
    app = await get_application(db_session, da, app.id)
    before = app.version
    app = await da_service.forward_to_dtdo(
        db_session, da, app.id, remarks="All papers in order", expected_version=before
    )
    assert app.version == before + 1

    before = app.version
    app = await dtdo_service.accept(
        db_session, dtdo, app.id, remarks="Proceed", expected_version=before
    )
    assert app.version == before + 1


async def test_paid_application_is_approved_on_inspection(db_session, portal_users):
    owner, dtdo = owner_rajesh(), dtdo_shimla()
    app = await create_application(db_session, owner, dict(_DRAFT))
    app.status = S.INSPECTION_UNDER_REVIEW
    app.payment_status = PaymentStatus.SUCCESS
    await db_session.commit()
    app = await get_application(db_session, dtdo, app.id)
    app_id, before = app.id, app.version

    with pytest.raises(ConcurrencyConflictError):
        await dtdo_service.approve_inspection(
            db_session, dtdo, app_id, remarks="Report accepted", expected_version=before - 1
        )
    await db_session.rollback()

    app = await dtdo_service.approve_inspection(
        db_session, dtdo, app_id, remarks="Report accepted", expected_version=before
    )

    assert app.status == S.APPROVED
    assert app.version == before + 1
    assert re.fullmatch(r"HP-HST-\d{4}-\d{5}", app.certificate_number)
    assert await _transitions(db_session, app.id) == [("inspection_under_review", "approved")]
    issued = await get_events_by_application(db_session, app.id, ["certificate_issued"])
    assert issued[0].event_data["certificate_number"] == app.certificate_number


async def test_payment_confirmation_bumps_version_once(db_session, portal_users):
    owner = owner_rajesh()
    app = await create_application(db_session, owner, dict(_DRAFT))
    app.status = S.VERIFIED_FOR_PAYMENT
    await db_session.commit()

    payment = await initiate_payment(db_session, owner, app.id)
    before = (await get_application(db_session, owner, app.id)).version
    await process_callback(db_session, owner, payment.id, success=True)

    app = await get_application(db_session, owner, app.id)
    assert app.status == S.APPROVED
    assert app.version == before + 1


async def test_paid_amendment_supersedes_parent(db_session, portal_users):
    owner = owner_rajesh()
    parent = await _approved_registration(db_session, owner)
    child = await create_service_request(
        db_session, owner, parent.id, kind=ApplicationKind.ADD_ROOMS, requested_rooms=6
    )
    assert child.status == S.DRAFT
    child.status = S.VERIFIED_FOR_PAYMENT
    await db_session.commit()

    payment = await initiate_payment(db_session, owner, child.id)
    child_before = (await get_application(db_session, owner, child.id)).version
    parent_before = (await get_application(db_session, owner, parent.id)).version

    await process_callback(
        db_session, owner, payment.id, success=True, gateway_reference="HIMKOSH-0042"
    )

    child = await get_application(db_session, owner, child.id)
    parent = await get_application(db_session, owner, parent.id)
    assert child.status == S.APPROVED
    assert child.version == child_before + 1
    assert child.total_rooms == 6
    assert child.certificate_number is not None
    assert parent.status == S.SUPERSEDED
    assert parent.version == parent_before + 1

    assert await _transitions(db_session, child.id) == [("verified_for_payment", "approved")]
    parent_events = await get_events_by_application(db_session, parent.id, ["status_change"])
    assert [(e.event_data["from"], e.event_data["to"]) for e in parent_events] == [
        ("approved", "superseded")
    ]
    assert parent_events[0].event_data["superseded_by"] == child.application_number


async def test_cancellation_revokes_parent_certificate(db_session, portal_users):
    owner, dtdo = owner_rajesh(), dtdo_shimla()
    parent = await _approved_registration(db_session, owner)
    request = await create_service_request(
        db_session,
        owner,
        parent.id,
        kind=ApplicationKind.CANCEL_CERTIFICATE,
        reason="Closing the homestay",
    )
    assert request.total_fee == Decimal("0.00")
    request.status = S.DTDO_REVIEW
    await db_session.commit()

    request = await get_application(db_session, dtdo, request.id)
    before = request.version
    parent_before = (await get_application(db_session, owner, parent.id)).version

    request = await dtdo_service.approve_cancellation(
        db_session, dtdo, request.id, remarks="Owner request verified", expected_version=before
    )

    assert request.status == S.CERTIFICATE_CANCELLED
    assert request.version == before + 1
    assert await _transitions(db_session, request.id) == [
        ("dtdo_review", "certificate_cancelled")
    ]

    parent = await get_application(db_session, owner, parent.id)
    assert parent.status == S.CERTIFICATE_CANCELLED
    assert parent.version == parent_before + 1
    assert await _transitions(db_session, parent.id) == [("approved", "certificate_cancelled")]
