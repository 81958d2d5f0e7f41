# This project was developed with assistance from AI tools.
"""Tests for Dealing Assistant scrutiny rules."""

from unittest.mock import AsyncMock, patch

import pytest
from homestay_db.enums import ApplicationStatus, DocumentStatus, UserRole

from homestay_api.core.config import settings
from homestay_api.schemas.auth import DataScope, UserContext
from homestay_api.services.da import (
    auto_reject_message,
    forward_to_dtdo,
    require_text,
    send_back,
    verify_document,
)
from homestay_api.services.workflow import WorkflowRuleError
from tests.factories import make_mock_app, make_mock_document

DA = UserContext(
    user_id="da-shimla-001",
    role=UserRole.DEALING_ASSISTANT,
    email="da.shimla@hp.gov.in",
    name="Sunil Verma",
    district="Shimla",
    data_scope=DataScope(district="Shimla", user_id="da-shimla-001"),
)


def test_require_text_strips():
    assert require_text("  Blurry revenue papers  ", "Reason") == "Blurry revenue papers"


@pytest.mark.parametrize("value", [None, "", "   "])
def test_require_text_rejects_blank(value):
    with pytest.raises(WorkflowRuleError, match="Reason is required."):
        require_text(value, "Reason")


def test_auto_reject_message_for_send_back():
    assert auto_reject_message("Missing NOC", 2) == (
        "APPLICATION AUTO-REJECTED: Application was sent back twice. Original reason: Missing NOC"
    )


def test_auto_reject_message_for_dtdo_revert():
    message = auto_reject_message("Photos unclear", 2, by_dtdo=True)
    assert message.startswith("APPLICATION AUTO-REJECTED: Application was reverted twice by the DTDO.")


def test_auto_reject_message_higher_count():
    assert "sent back 3 times" in auto_reject_message("x", 3)


# ---------------------------------------------------------------------------
# Service preconditions
# ---------------------------------------------------------------------------


@patch("homestay_api.services.da.get_application", new_callable=AsyncMock)
async def test_send_back_requires_reason(mock_get):
    mock_get.return_value = make_mock_app(status=ApplicationStatus.UNDER_SCRUTINY)

    with pytest.raises(WorkflowRuleError, match="reason for sending back is required"):
        await send_back(AsyncMock(), DA, 101, reason="  ")


async def test_send_back_disabled(monkeypatch):
    monkeypatch.setattr(settings, "DA_SEND_BACK_ENABLED", False)
    with pytest.raises(WorkflowRuleError, match="disabled"):
        await send_back(AsyncMock(), DA, 101, reason="Anything")


@patch("homestay_api.services.da.get_application", new_callable=AsyncMock)
async def test_send_back_out_of_scope_returns_none(mock_get):
    mock_get.return_value = None
    assert await send_back(AsyncMock(), DA, 999, reason="Anything") is None


@patch("homestay_api.services.da.count_documents", new_callable=AsyncMock)
@patch("homestay_api.services.da.get_application", new_callable=AsyncMock)
async def test_forward_blocked_by_pending_documents(mock_get, mock_counts):
    mock_get.return_value = make_mock_app(status=ApplicationStatus.UNDER_SCRUTINY)
    mock_counts.return_value = {DocumentStatus.VERIFIED: 3, DocumentStatus.PENDING: 2}

    with pytest.raises(WorkflowRuleError, match="2 document"):
        await forward_to_dtdo(AsyncMock(), DA, 101, remarks="All good")


@patch("homestay_api.services.da.count_documents", new_callable=AsyncMock)
@patch("homestay_api.services.da.get_application", new_callable=AsyncMock)
async def test_forward_requires_documents(mock_get, mock_counts):
    mock_get.return_value = make_mock_app(status=ApplicationStatus.UNDER_SCRUTINY)
    mock_counts.return_value = {}

    with pytest.raises(WorkflowRuleError, match="At least one document"):
        await forward_to_dtdo(AsyncMock(), DA, 101, remarks="All good")


@patch("homestay_api.services.da.get_application", new_callable=AsyncMock)
async def test_forward_requires_remarks(mock_get):
    mock_get.return_value = make_mock_app(status=ApplicationStatus.UNDER_SCRUTINY)

    with pytest.raises(WorkflowRuleError, match="Forwarding remarks is required"):
        await forward_to_dtdo(AsyncMock(), DA, 101, remarks=None)


@patch("homestay_api.services.da.get_application", new_callable=AsyncMock)
@patch("homestay_api.services.da.get_document", new_callable=AsyncMock)
async def test_verify_document_outside_scrutiny(mock_doc, mock_get):
    mock_doc.return_value = make_mock_document()
    mock_get.return_value = make_mock_app(status=ApplicationStatus.SUBMITTED)

    with pytest.raises(WorkflowRuleError, match="under scrutiny"):
        await verify_document(AsyncMock(), DA, 501, status=DocumentStatus.VERIFIED)


@patch("homestay_api.services.da.get_application", new_callable=AsyncMock)
@patch("homestay_api.services.da.get_document", new_callable=AsyncMock)
async def test_verify_document_correction_needs_notes(mock_doc, mock_get):
    mock_doc.return_value = make_mock_document()
    mock_get.return_value = make_mock_app(status=ApplicationStatus.UNDER_SCRUTINY)

    with pytest.raises(WorkflowRuleError, match="is required"):
        await verify_document(AsyncMock(), DA, 501, status=DocumentStatus.NEEDS_CORRECTION)


@patch("homestay_api.services.da.write_audit_event", new_callable=AsyncMock)
@patch("homestay_api.services.da.get_application", new_callable=AsyncMock)
@patch("homestay_api.services.da.get_document", new_callable=AsyncMock)
async def test_verify_document_records_verdict(mock_doc, mock_get, mock_audit):
    doc = make_mock_document()
    mock_doc.return_value = doc
    mock_get.return_value = make_mock_app(status=ApplicationStatus.UNDER_SCRUTINY)
    session = AsyncMock()

    result = await verify_document(session, DA, 501, status=DocumentStatus.VERIFIED)

    assert result is doc
    assert doc.verification_status == DocumentStatus.VERIFIED
    assert doc.verified_by == "da-shimla-001"
    assert mock_audit.call_args.kwargs["event_data"]["to"] == "verified"
    session.commit.assert_awaited_once()
