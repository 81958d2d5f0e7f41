# This project was developed with assistance from AI tools.
"""Officer work queues.

Each tab is a named SQL predicate over Application. DA and DTDO listings
apply the caller's district scope, then the tab predicate, and report the
count of every tab so dashboards can render badges in one round trip.
"""

import logging

from homestay_db import Application
from homestay_db.enums import ApplicationStatus
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .scope import apply_data_scope

logger = logging.getLogger(__name__)

S = ApplicationStatus

# -- Status groups -----------------------------------------------------------

CORRECTION = S.correction_statuses()

DA_ACTIVE = frozenset(
    {
        S.SUBMITTED,
        S.UNDER_SCRUTINY,
        S.REVERTED_TO_APPLICANT,
        S.SENT_BACK_FOR_CORRECTIONS,
        S.FORWARDED_TO_DTDO,
        S.DTDO_REVIEW,
        S.INSPECTION_SCHEDULED,
        S.INSPECTION_COMPLETED,
        S.VERIFIED_FOR_PAYMENT,
        S.PAYMENT_FAILED,
        S.REVERTED_BY_DTDO,
        S.OBJECTION_RAISED,
    }
)
DRAFT = frozenset({S.DRAFT, S.PAID_PENDING_SUBMIT})
COMPLETED = frozenset({S.APPROVED, S.REJECTED, S.CERTIFICATE_CANCELLED, S.SUPERSEDED})
FORWARDED_INSPECTION = frozenset(
    {
        S.FORWARDED_TO_DTDO,
        S.DTDO_REVIEW,
        S.INSPECTION_SCHEDULED,
        S.INSPECTION_COMPLETED,
        S.INSPECTION_UNDER_REVIEW,
    }
)
DA_SCRUTINY = frozenset({S.SUBMITTED, S.UNDER_SCRUTINY}) | CORRECTION

DTDO_PENDING = frozenset({S.FORWARDED_TO_DTDO, S.DTDO_REVIEW})
DTDO_WAITING = frozenset({S.REVERTED_BY_DTDO, S.OBJECTION_RAISED})
DTDO_INSPECTIONS = frozenset(
    {S.INSPECTION_SCHEDULED, S.INSPECTION_UNDER_REVIEW, S.INSPECTION_COMPLETED}
)
DTDO_PAYMENT = frozenset({S.VERIFIED_FOR_PAYMENT, S.PAYMENT_FAILED})


def _in(statuses):
    return Application.status.in_(sorted(statuses, key=lambda s: s.value))


DA_TABS = {
    "active": lambda: _in(DA_ACTIVE),
    "new_submissions": lambda: Application.status == S.SUBMITTED,
    "under_scrutiny": lambda: Application.status == S.UNDER_SCRUTINY,
    "corrections": lambda: _in(CORRECTION),
    "dtdo": lambda: _in(FORWARDED_INSPECTION),
    "completed": lambda: _in(COMPLETED),
    "draft": lambda: _in(DRAFT),
}

DTDO_TABS = {
    "pending": lambda: _in(DTDO_PENDING),
    "resubmitted": lambda: and_(_in(DTDO_PENDING), Application.correction_submission_count > 0),
    "waiting": lambda: _in(DTDO_WAITING),
    "inspections": lambda: _in(DTDO_INSPECTIONS),
    "payment": lambda: _in(DTDO_PAYMENT),
    "approved": lambda: Application.status == S.APPROVED,
    "rejected": lambda: Application.status == S.REJECTED,
    "completed": lambda: _in(COMPLETED),
}

DA_DASHBOARD_GROUPS = {
    "active": DA_ACTIVE,
    "scrutiny": DA_SCRUTINY,
    "corrections": CORRECTION,
    "forwarded_inspection": FORWARDED_INSPECTION,
    "completed": COMPLETED,
    "draft": DRAFT,
}


async def tab_counts(session: AsyncSession, user: UserContext, tabs: dict) -> dict[str, int]:
    counts: dict[str, int] = {}
    for name, predicate in tabs.items():
        stmt = apply_data_scope(
            select(func.count(Application.id)).where(predicate()), user.data_scope, user
        )
        counts[name] = (await session.execute(stmt)).scalar() or 0
    return counts


async def list_queue(
    session: AsyncSession,
    user: UserContext,
    tabs: dict,
    tab: str,
    *,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Application], int, dict[str, int]]:
    """One page of a queue tab, its total, and the counts of every tab.

    Raises:
        KeyError: unknown tab name (routes validate it first).
    """
    predicate = tabs[tab]
    stmt = apply_data_scope(select(Application).where(predicate()), user.data_scope, user)
    stmt = stmt.order_by(Application.updated_at.desc(), Application.id.desc())
    result = await session.execute(stmt.offset(offset).limit(limit))
    items = list(result.unique().scalars().all())

    counts = await tab_counts(session, user, tabs)
    return items, counts[tab], counts


async def group_counts(
    session: AsyncSession,
    user: UserContext,
    groups: dict[str, frozenset],
) -> dict[str, int]:
    """Counts per named status group, from a single GROUP BY status query."""
    stmt = apply_data_scope(
        select(Application.status, func.count(Application.id)).group_by(Application.status),
        user.data_scope,
        user,
    )
    by_status = {ApplicationStatus(s): n for s, n in (await session.execute(stmt)).all()}
    return {
        name: sum(n for status, n in by_status.items() if status in members)
        for name, members in groups.items()
    }
