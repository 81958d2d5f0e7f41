# This project was developed with assistance from AI tools.
"""Tests for officer work queue tabs and counts."""

from unittest.mock import AsyncMock, MagicMock

from homestay_db.enums import ApplicationStatus, UserRole

from homestay_api.schemas.auth import DataScope, UserContext
from homestay_api.services.queues import (
    DA_ACTIVE,
    DA_DASHBOARD_GROUPS,
    DA_TABS,
    DTDO_TABS,
    group_counts,
    list_queue,
)
from tests.factories import make_mock_app

S = ApplicationStatus

DA = UserContext(
    user_id="da-shimla-001",
    role=UserRole.DEALING_ASSISTANT,
    email="da.shimla@hp.gov.in",
    name="Sunil Verma",
    district="Shimla",
    data_scope=DataScope(district="Shimla", user_id="da-shimla-001"),
)


def test_da_tabs():
    assert set(DA_TABS) == {
        "active",
        "new_submissions",
        "under_scrutiny",
        "corrections",
        "dtdo",
        "completed",
        "draft",
    }


def test_dtdo_tabs():
    assert set(DTDO_TABS) == {
        "pending",
        "resubmitted",
        "waiting",
        "inspections",
        "payment",
        "approved",
        "rejected",
        "completed",
    }


def test_active_excludes_drafts_and_closed():
    assert S.DRAFT not in DA_ACTIVE
    assert S.APPROVED not in DA_ACTIVE
    assert S.SUBMITTED in DA_ACTIVE


def test_tab_predicates_compile():
    for tabs in (DA_TABS, DTDO_TABS):
        for predicate in tabs.values():
            assert "applications.status" in str(predicate())


async def test_group_counts_sums_statuses():
    session = AsyncMock()
    result = MagicMock()
    result.all.return_value = [
        (S.SUBMITTED, 3),
        (S.UNDER_SCRUTINY, 2),
        (S.REVERTED_TO_APPLICANT, 1),
        (S.APPROVED, 4),
        (S.DRAFT, 5),
    ]
    session.execute = AsyncMock(return_value=result)

    counts = await group_counts(session, DA, DA_DASHBOARD_GROUPS)

    assert counts["active"] == 6
    assert counts["scrutiny"] == 6
    assert counts["corrections"] == 1
    assert counts["completed"] == 4
    assert counts["draft"] == 5
    assert counts["forwarded_inspection"] == 0


async def test_list_queue_returns_items_total_and_counts():
    session = AsyncMock()
    apps = [make_mock_app(status=S.SUBMITTED, id=1), make_mock_app(status=S.SUBMITTED, id=2)]
    list_result = MagicMock()
    list_result.unique.return_value.scalars.return_value.all.return_value = apps
    count_result = MagicMock()
    count_result.scalar.return_value = 2
    session.execute = AsyncMock(side_effect=[list_result] + [count_result] * len(DA_TABS))

    items, total, counts = await list_queue(session, DA, DA_TABS, "new_submissions")

    assert items == apps
    assert total == 2
    assert set(counts) == set(DA_TABS)
