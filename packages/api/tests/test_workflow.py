# This project was developed with assistance from AI tools.
"""Tests for the application status workflow engine."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from homestay_db.enums import ApplicationStatus, UserRole, WorkflowAction
from sqlalchemy.orm.exc import StaleDataError

from homestay_api.schemas.auth import DataScope, UserContext
from homestay_api.services.workflow import (
    ACTION_RULES,
    ActionNotPermittedError,
    ConcurrencyConflictError,
    InvalidTransitionError,
    allowed_actions,
    apply_action,
    check_transition,
    commit_or_conflict,
)
from tests.factories import make_mock_app

S = ApplicationStatus
A = WorkflowAction


def _user(role: UserRole, user_id: str = "user-1") -> UserContext:
    return UserContext(
        user_id=user_id,
        role=role,
        email=f"{user_id}@hp.gov.in",
        name="Test User",
        district="Shimla",
        data_scope=DataScope(district="Shimla", user_id=user_id),
    )


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------


def test_every_rule_edge_is_a_valid_transition():
    """The action table never allows a move the status graph forbids."""
    graph = ApplicationStatus.valid_transitions()
    for action, rule in ACTION_RULES.items():
        for source in rule.sources:
            for target in rule.targets:
                if target in graph[source]:
                    continue
                # Multi-target rules may have sources that reach only some targets.
                assert len(rule.targets) > 1, f"{action.value}: {source.value} -> {target.value}"


def test_every_action_has_a_rule():
    assert set(ACTION_RULES) == set(WorkflowAction)


def test_terminal_statuses_have_no_exits():
    graph = ApplicationStatus.valid_transitions()
    for status in ApplicationStatus.terminal_statuses():
        assert graph[status] == frozenset()


# ---------------------------------------------------------------------------
# check_transition
# ---------------------------------------------------------------------------


def test_owner_submits_draft():
    assert check_transition(S.DRAFT, A.SUBMIT, UserRole.PROPERTY_OWNER) == S.SUBMITTED


def test_da_starts_scrutiny():
    assert (
        check_transition(S.SUBMITTED, A.START_SCRUTINY, UserRole.DEALING_ASSISTANT)
        == S.UNDER_SCRUTINY
    )


def test_owner_cannot_start_scrutiny():
    with pytest.raises(ActionNotPermittedError):
        check_transition(S.SUBMITTED, A.START_SCRUTINY, UserRole.PROPERTY_OWNER)


def test_da_cannot_accept_for_dtdo():
    with pytest.raises(ActionNotPermittedError):
        check_transition(S.FORWARDED_TO_DTDO, A.DTDO_ACCEPT, UserRole.DEALING_ASSISTANT)


def test_admin_may_take_any_action():
    assert check_transition(S.FORWARDED_TO_DTDO, A.DTDO_ACCEPT, UserRole.ADMIN) == S.DTDO_REVIEW


def test_forward_from_draft_is_invalid():
    with pytest.raises(InvalidTransitionError, match="Allowed from"):
        check_transition(S.DRAFT, A.FORWARD_TO_DTDO, UserRole.DEALING_ASSISTANT)


def test_nothing_leaves_rejected():
    for action in WorkflowAction:
        rule = ACTION_RULES[action]
        role = next(iter(rule.roles))
        with pytest.raises(InvalidTransitionError):
            check_transition(S.REJECTED, action, role)


def test_multi_target_action_requires_target():
    with pytest.raises(InvalidTransitionError, match="explicit target"):
        check_transition(
            S.INSPECTION_UNDER_REVIEW, A.APPROVE_INSPECTION, UserRole.DISTRICT_TOURISM_OFFICER
        )


def test_multi_target_action_with_target():
    result = check_transition(
        S.INSPECTION_UNDER_REVIEW,
        A.APPROVE_INSPECTION,
        UserRole.DISTRICT_TOURISM_OFFICER,
        target=S.VERIFIED_FOR_PAYMENT,
    )
    assert result == S.VERIFIED_FOR_PAYMENT


def test_target_outside_rule_is_rejected():
    with pytest.raises(InvalidTransitionError, match="cannot move"):
        check_transition(
            S.INSPECTION_UNDER_REVIEW,
            A.APPROVE_INSPECTION,
            UserRole.DISTRICT_TOURISM_OFFICER,
            target=S.REJECTED,
        )


def test_resubmit_targets_scrutiny_or_dtdo():
    for source in ApplicationStatus.correction_statuses():
        for target in (S.UNDER_SCRUTINY, S.DTDO_REVIEW):
            assert (
                check_transition(source, A.RESUBMIT_CORRECTION, UserRole.PROPERTY_OWNER, target)
                == target
            )


def test_payment_retry_after_failure():
    assert check_transition(S.PAYMENT_FAILED, A.CONFIRM_PAYMENT, UserRole.PROPERTY_OWNER) == S.APPROVED


# ---------------------------------------------------------------------------
# allowed_actions
# ---------------------------------------------------------------------------


def test_allowed_actions_for_da_under_scrutiny():
    actions = allowed_actions(S.UNDER_SCRUTINY, UserRole.DEALING_ASSISTANT)
    assert A.FORWARD_TO_DTDO in actions
    assert A.SEND_BACK in actions
    # auto-reject is a consequence of a send-back, never offered
    assert A.AUTO_REJECT not in actions


def test_allowed_actions_for_owner_under_scrutiny_is_empty():
    assert allowed_actions(S.UNDER_SCRUTINY, UserRole.PROPERTY_OWNER) == []


def test_allowed_actions_for_dtdo_review():
    actions = allowed_actions(S.DTDO_REVIEW, UserRole.DISTRICT_TOURISM_OFFICER)
    assert {A.SCHEDULE_INSPECTION, A.DTDO_REJECT, A.DTDO_REVERT, A.APPROVE_CANCELLATION} <= set(
        actions
    )


def test_state_officer_has_no_actions():
    for status in ApplicationStatus:
        assert allowed_actions(status, UserRole.STATE_OFFICER) == []


# ---------------------------------------------------------------------------
# apply_action
# ---------------------------------------------------------------------------


@patch("homestay_api.services.workflow.write_audit_event", new_callable=AsyncMock)
async def test_apply_action_moves_status_and_audits(mock_audit):
    session = AsyncMock()
    app = make_mock_app(status=S.SUBMITTED)
    user = _user(UserRole.DEALING_ASSISTANT, "da-shimla")

    previous = await apply_action(session, user, app, A.START_SCRUTINY)

    assert previous == S.SUBMITTED
    assert app.status == S.UNDER_SCRUTINY
    session.flush.assert_awaited_once()
    kwargs = mock_audit.call_args.kwargs
    assert kwargs["event_type"] == "status_change"
    assert kwargs["application_id"] == app.id
    assert kwargs["event_data"] == {
        "action": "start_scrutiny",
        "from": "submitted",
        "to": "under_scrutiny",
    }


@patch("homestay_api.services.workflow.write_audit_event", new_callable=AsyncMock)
async def test_apply_action_merges_event_data(mock_audit):
    session = AsyncMock()
    app = make_mock_app(status=S.UNDER_SCRUTINY)
    user = _user(UserRole.DEALING_ASSISTANT)

    await apply_action(session, user, app, A.SEND_BACK, event_data={"reason": "Blurry photo"})

    assert mock_audit.call_args.kwargs["event_data"]["reason"] == "Blurry photo"


@patch("homestay_api.services.workflow.write_audit_event", new_callable=AsyncMock)
async def test_apply_action_rejects_stale_expected_version(mock_audit):
    session = AsyncMock()
    app = make_mock_app(status=S.SUBMITTED, version=4)

    with pytest.raises(ConcurrencyConflictError, match="expected version 3"):
        await apply_action(
            session, _user(UserRole.DEALING_ASSISTANT), app, A.START_SCRUTINY, expected_version=3
        )

    assert app.status == S.SUBMITTED
    session.flush.assert_not_awaited()
    mock_audit.assert_not_awaited()


@patch("homestay_api.services.workflow.write_audit_event", new_callable=AsyncMock)
async def test_apply_action_translates_stale_flush(mock_audit):
    session = AsyncMock()
    session.flush = AsyncMock(side_effect=StaleDataError("row changed"))
    app = make_mock_app(status=S.SUBMITTED)

    with pytest.raises(ConcurrencyConflictError):
        await apply_action(session, _user(UserRole.DEALING_ASSISTANT), app, A.START_SCRUTINY)
    mock_audit.assert_not_awaited()


@patch("homestay_api.services.workflow.write_audit_event", new_callable=AsyncMock)
async def test_apply_action_illegal_move_leaves_status(mock_audit):
    session = AsyncMock()
    app = make_mock_app(status=S.APPROVED)

    with pytest.raises(InvalidTransitionError):
        await apply_action(session, _user(UserRole.PROPERTY_OWNER), app, A.SUBMIT)
    assert app.status == S.APPROVED


async def test_commit_or_conflict_rolls_back_on_stale_data():
    session = MagicMock()
    session.commit = AsyncMock(side_effect=StaleDataError("lost race"))
    session.rollback = AsyncMock()

    with pytest.raises(ConcurrencyConflictError):
        await commit_or_conflict(session)
    session.rollback.assert_awaited_once()
