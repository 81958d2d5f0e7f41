# This project was developed with assistance from AI tools.
"""Application status workflow engine.

Every status change goes through ``apply_action``. Each WorkflowAction has
a rule naming the statuses it may start from, the statuses it may land on,
and the roles allowed to take it. A rule edge must also be present in
``ApplicationStatus.valid_transitions()``, so the graph and the action
table cannot drift apart silently.

Concurrency: Application carries a ``version`` column mapped as SQLAlchemy's
``version_id_col``. Clients may send ``expected_version`` to fail fast; a
concurrent writer that wins the race surfaces as StaleDataError on flush.
Both become ConcurrencyConflictError.
"""

import logging
from dataclasses import dataclass

from homestay_db import Application
from homestay_db.enums import ApplicationStatus, UserRole, WorkflowAction
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..schemas.auth import UserContext
from .audit import write_audit_event

logger = logging.getLogger(__name__)


class WorkflowError(Exception):
    """Base class for workflow failures surfaced to API clients."""


class InvalidTransitionError(WorkflowError, ValueError):
    """Raised when an action is not legal from the application's current status."""


class ActionNotPermittedError(WorkflowError):
    """Raised when the caller's role may not take the requested action."""


class ConcurrencyConflictError(WorkflowError):
    """Raised when the application changed underneath the caller."""


class WorkflowRuleError(WorkflowError, ValueError):
    """Raised when a business precondition of an action is not met."""


@dataclass(frozen=True)
class ActionRule:
    sources: frozenset[ApplicationStatus]
    targets: frozenset[ApplicationStatus]
    roles: frozenset[UserRole]


S = ApplicationStatus
_OWNER = frozenset({UserRole.PROPERTY_OWNER})
_DA = frozenset({UserRole.DEALING_ASSISTANT})
_DTDO = frozenset({UserRole.DISTRICT_TOURISM_OFFICER})
_INSPECTION_REVIEW = frozenset({S.INSPECTION_UNDER_REVIEW, S.INSPECTION_COMPLETED})
_DTDO_DESK = frozenset({S.FORWARDED_TO_DTDO, S.DTDO_REVIEW})

ACTION_RULES: dict[WorkflowAction, ActionRule] = {
    WorkflowAction.SUBMIT: ActionRule(
        frozenset({S.DRAFT, S.PAID_PENDING_SUBMIT}), frozenset({S.SUBMITTED}), _OWNER
    ),
    WorkflowAction.RECORD_UPFRONT_PAYMENT: ActionRule(
        frozenset({S.DRAFT}), frozenset({S.PAID_PENDING_SUBMIT}), _OWNER
    ),
    WorkflowAction.START_SCRUTINY: ActionRule(
        frozenset({S.SUBMITTED}), frozenset({S.UNDER_SCRUTINY}), _DA
    ),
    WorkflowAction.FORWARD_TO_DTDO: ActionRule(
        frozenset({S.UNDER_SCRUTINY}), frozenset({S.FORWARDED_TO_DTDO}), _DA
    ),
    WorkflowAction.SEND_BACK: ActionRule(
        frozenset({S.UNDER_SCRUTINY}), frozenset({S.REVERTED_TO_APPLICANT}), _DA
    ),
    WorkflowAction.AUTO_REJECT: ActionRule(
        frozenset({S.UNDER_SCRUTINY}) | _DTDO_DESK,
        frozenset({S.REJECTED}),
        _DA | _DTDO,
    ),
    WorkflowAction.RESUBMIT_CORRECTION: ActionRule(
        ApplicationStatus.correction_statuses(),
        frozenset({S.UNDER_SCRUTINY, S.DTDO_REVIEW}),
        _OWNER,
    ),
    WorkflowAction.DTDO_ACCEPT: ActionRule(
        frozenset({S.FORWARDED_TO_DTDO}), frozenset({S.DTDO_REVIEW}), _DTDO
    ),
    WorkflowAction.DTDO_REJECT: ActionRule(_DTDO_DESK, frozenset({S.REJECTED}), _DTDO),
    WorkflowAction.DTDO_REVERT: ActionRule(_DTDO_DESK, frozenset({S.REVERTED_BY_DTDO}), _DTDO),
    WorkflowAction.SCHEDULE_INSPECTION: ActionRule(
        frozenset({S.DTDO_REVIEW}), frozenset({S.INSPECTION_SCHEDULED}), _DTDO
    ),
    WorkflowAction.SUBMIT_INSPECTION_REPORT: ActionRule(
        frozenset({S.INSPECTION_SCHEDULED}), frozenset({S.INSPECTION_UNDER_REVIEW}), _DA
    ),
    WorkflowAction.APPROVE_INSPECTION: ActionRule(
        _INSPECTION_REVIEW, frozenset({S.VERIFIED_FOR_PAYMENT, S.APPROVED}), _DTDO
    ),
    WorkflowAction.REJECT_INSPECTION: ActionRule(_INSPECTION_REVIEW, frozenset({S.REJECTED}), _DTDO),
    WorkflowAction.RAISE_OBJECTION: ActionRule(
        _INSPECTION_REVIEW, frozenset({S.OBJECTION_RAISED}), _DTDO
    ),
    WorkflowAction.CONFIRM_PAYMENT: ActionRule(
        frozenset({S.VERIFIED_FOR_PAYMENT, S.PAYMENT_FAILED}), frozenset({S.APPROVED}), _OWNER
    ),
    WorkflowAction.FAIL_PAYMENT: ActionRule(
        frozenset({S.VERIFIED_FOR_PAYMENT}), frozenset({S.PAYMENT_FAILED}), _OWNER
    ),
    WorkflowAction.APPROVE_CANCELLATION: ActionRule(
        _DTDO_DESK, frozenset({S.CERTIFICATE_CANCELLED}), _DTDO
    ),
    WorkflowAction.REVOKE_CERTIFICATE: ActionRule(
        frozenset({S.APPROVED}), frozenset({S.CERTIFICATE_CANCELLED}), _DTDO
    ),
    # Follows an amendment approval, which the owner completes by paying.
    WorkflowAction.SUPERSEDE: ActionRule(
        frozenset({S.APPROVED}), frozenset({S.SUPERSEDED}), _DTDO | _OWNER
    ),
}


# Side effects of other actions, never offered as a choice.
_CONSEQUENTIAL_ACTIONS = frozenset({WorkflowAction.AUTO_REJECT, WorkflowAction.SUPERSEDE})


def allowed_actions(status: ApplicationStatus, role: UserRole) -> list[WorkflowAction]:
    """Actions the given role may choose on an application in ``status``."""
    return [
        action
        for action, rule in ACTION_RULES.items()
        if action not in _CONSEQUENTIAL_ACTIONS
        and status in rule.sources and (role in rule.roles or role == UserRole.ADMIN)
    ]


def check_transition(
    current: ApplicationStatus,
    action: WorkflowAction,
    role: UserRole,
    target: ApplicationStatus | None = None,
) -> ApplicationStatus:
    """Validate an action against the rule table and return the resulting status.

    ``target`` picks between multiple landing statuses; it may be omitted
    when the action has exactly one.

    Raises:
        ActionNotPermittedError: role may not take this action.
        InvalidTransitionError: action is illegal from ``current`` or
            ``target`` is not one of the action's landing statuses.
    """
    rule = ACTION_RULES[action]

    if role not in rule.roles and role != UserRole.ADMIN:
        raise ActionNotPermittedError(
            f"Role '{role.value}' may not perform '{action.value}'."
        )

    if current not in rule.sources:
        raise InvalidTransitionError(
            f"Cannot {action.value.replace('_', ' ')} an application in status "
            f"'{current.value}'. Allowed from: {sorted(s.value for s in rule.sources)}."
        )

    if target is None:
        if len(rule.targets) != 1:
            raise InvalidTransitionError(
                f"Action '{action.value}' needs an explicit target status."
            )
        (target,) = rule.targets
    elif target not in rule.targets:
        raise InvalidTransitionError(
            f"Action '{action.value}' cannot move an application to '{target.value}'."
        )

    if target not in ApplicationStatus.valid_transitions().get(current, frozenset()):
        raise InvalidTransitionError(
            f"Cannot transition from '{current.value}' to '{target.value}'."
        )
    return target


async def apply_action(
    session: AsyncSession,
    user: UserContext,
    app: Application,
    action: WorkflowAction,
    *,
    target: ApplicationStatus | None = None,
    expected_version: int | None = None,
    event_data: dict | None = None,
) -> ApplicationStatus:
    """Move ``app`` through ``action`` and record a status_change audit event.

    Field updates the caller made on ``app`` before this call are flushed in
    the same UPDATE, provided no query ran in between: an autoflush would
    bump ``version`` early. The caller owns the commit (see
    ``commit_or_conflict``).

    Returns:
        The status the application was in before the transition.
    """
    if expected_version is not None and app.version != expected_version:
        raise ConcurrencyConflictError(
            f"Application {app.application_number} was modified "
            f"(expected version {expected_version}, found {app.version})."
        )

    previous = app.status or ApplicationStatus.DRAFT
    new_status = check_transition(previous, action, user.role, target)
    app.status = new_status

    try:
        await session.flush()
    except StaleDataError as exc:
        raise ConcurrencyConflictError(
            f"Application {app.application_number} was modified by another request."
        ) from exc

    data = {"action": action.value, "from": previous.value, "to": new_status.value}
    if event_data:
        data.update(event_data)
    await write_audit_event(
        session,
        event_type="status_change",
        user=user,
        application_id=app.id,
        event_data=data,
    )

    logger.info(
        "Application %s: %s -> %s via %s by %s",
        app.id,
        previous.value,
        new_status.value,
        action.value,
        user.user_id,
    )
    return previous


async def commit_or_conflict(session: AsyncSession) -> None:
    """Commit, translating a lost optimistic-concurrency race into a 409."""
    try:
        await session.commit()
    except StaleDataError as exc:
        await session.rollback()
        raise ConcurrencyConflictError("Application was modified by another request.") from exc
