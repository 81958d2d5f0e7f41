# This project was developed with assistance from AI tools.
"""Tests for display statuses, status info and owner progress."""

from datetime import UTC, datetime

import pytest
from homestay_db.enums import ApplicationStatus

from homestay_api.services.status import (
    DISPLAY_LABELS,
    MILESTONES,
    STATUS_INFO,
    build_progress,
    display_label,
    get_status_info,
    to_display_status,
)
from tests.factories import make_mock_app

S = ApplicationStatus


@pytest.mark.parametrize(
    "status,expected",
    [
        (S.DRAFT, "draft"),
        (S.PAID_PENDING_SUBMIT, "draft"),
        (S.SUBMITTED, "submitted"),
        (S.FORWARDED_TO_DTDO, "submitted"),
        (S.UNDER_SCRUTINY, "under_review"),
        (S.DTDO_REVIEW, "under_review"),
        (S.REVERTED_TO_APPLICANT, "correction_required"),
        (S.OBJECTION_RAISED, "correction_required"),
        (S.INSPECTION_SCHEDULED, "inspection_pending"),
        (S.VERIFIED_FOR_PAYMENT, "payment_pending"),
        (S.PAYMENT_FAILED, "payment_pending"),
        (S.APPROVED, "approved"),
        (S.REJECTED, "rejected"),
        (S.CERTIFICATE_CANCELLED, "cancelled"),
        (S.SUPERSEDED, "cancelled"),
    ],
)
def test_to_display_status(status, expected):
    assert to_display_status(status) == expected


def test_every_status_has_a_display_status_and_info():
    for status in ApplicationStatus:
        assert to_display_status(status) in DISPLAY_LABELS
        assert status.value in STATUS_INFO


def test_none_is_draft():
    assert to_display_status(None) == "draft"


def test_unknown_status_is_under_review():
    assert to_display_status("legacy_pending") == "under_review"


def test_plain_string_status_is_accepted():
    assert to_display_status("approved") == "approved"
    assert display_label("reverted_by_dtdo") == "Correction Required"


def test_status_info_fallback_for_unknown_value():
    info = get_status_info("legacy_pending")
    assert info.label == "Legacy Pending"
    assert info.typical_timeline == "Varies"


def test_progress_starts_at_first_milestone():
    progress = build_progress(make_mock_app(status=S.SUBMITTED))
    assert progress.current_index == 0
    assert progress.current_milestone.id == "da_review"
    assert len(progress.milestones) == len(MILESTONES)


def test_progress_follows_status():
    assert build_progress(make_mock_app(status=S.DTDO_REVIEW)).current_index == 1
    assert build_progress(make_mock_app(status=S.VERIFIED_FOR_PAYMENT)).current_index == 4


def test_progress_uses_inspection_dates():
    app = make_mock_app(
        status=S.DTDO_REVIEW,
        site_inspection_completed_date=datetime(2026, 3, 10, tzinfo=UTC),
    )
    assert build_progress(app).current_index == 3


def test_approval_lands_on_last_milestone():
    app = make_mock_app(status=S.APPROVED, approved_at=datetime(2026, 4, 1, tzinfo=UTC))
    progress = build_progress(app)
    assert progress.current_index == len(MILESTONES) - 1
    assert progress.current_milestone.id == "certificate"
    assert "Download" in progress.summary
