# This project was developed with assistance from AI tools.
"""Tests for the audit service hash chain."""

from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from homestay_db.enums import UserRole

from homestay_api.schemas.auth import DataScope, UserContext
from homestay_api.services.audit import (
    _compute_hash,
    _normalize_timestamp,
    verify_audit_chain,
    write_audit_event,
)


def _make_dtdo() -> UserContext:
    return UserContext(
        user_id="dtdo-shimla-001",
        role=UserRole.DISTRICT_TOURISM_OFFICER,
        email="dtdo.shimla@hp.gov.in",
        name="Kavita Negi",
        district="Shimla",
        data_scope=DataScope(district="Shimla", user_id="dtdo-shimla-001"),
    )


def _event(id, prev_hash, ts=None, data=None):
    event = MagicMock()
    event.id = id
    event.timestamp = ts or datetime(2026, 1, 1, 10, id, tzinfo=UTC)
    event.event_data = data if data is not None else {"n": id}
    event.prev_hash = prev_hash
    return event


def _mock_audit_session(prev_event=None):
    """Mock session for a non-PostgreSQL bind: only the latest-event query runs."""
    mock_session = AsyncMock()
    mock_session.add = MagicMock()
    query_result = MagicMock()
    query_result.scalar_one_or_none.return_value = prev_event
    mock_session.execute = AsyncMock(return_value=query_result)
    return mock_session


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------


def test_normalize_timestamp_aware_and_naive_agree():
    aware = datetime(2026, 3, 1, 15, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))
    naive_utc = datetime(2026, 3, 1, 10, 0)
    assert _normalize_timestamp(aware) == _normalize_timestamp(naive_utc)


def test_normalize_timestamp_none():
    assert _normalize_timestamp(None) == ""


def test_compute_hash_is_stable_across_key_order():
    ts = datetime(2026, 3, 1, 10, 0, tzinfo=UTC)
    assert _compute_hash(1, ts, {"a": 1, "b": 2}) == _compute_hash(1, ts, {"b": 2, "a": 1})


def test_compute_hash_changes_with_payload():
    ts = datetime(2026, 3, 1, 10, 0, tzinfo=UTC)
    assert _compute_hash(1, ts, {"a": 1}) != _compute_hash(1, ts, {"a": 2})
    assert len(_compute_hash(1, ts, None)) == 64


# ---------------------------------------------------------------------------
# write_audit_event
# ---------------------------------------------------------------------------


async def test_first_event_links_to_genesis():
    session = _mock_audit_session(prev_event=None)

    event = await write_audit_event(
        session,
        event_type="status_change",
        user=_make_dtdo(),
        application_id=101,
        event_data={"action": "dtdo_accept"},
    )

    session.add.assert_called_once_with(event)
    session.flush.assert_awaited_once()
    assert event.prev_hash == "genesis"
    assert event.user_id == "dtdo-shimla-001"
    assert event.user_role == "district_tourism_officer"
    assert event.application_id == 101
    assert event.timestamp.tzinfo is not None


async def test_event_links_to_previous_hash():
    prev = _event(41, "whatever", data={"action": "submit"})
    session = _mock_audit_session(prev_event=prev)

    event = await write_audit_event(session, event_type="payment_initiated", user_id="system")

    assert event.prev_hash == _compute_hash(41, prev.timestamp, {"action": "submit"})
    assert event.user_role is None


async def test_no_advisory_lock_outside_postgres():
    session = _mock_audit_session()
    await write_audit_event(session, event_type="grievance_created", grievance_id=3)
    assert session.execute.await_count == 1


# ---------------------------------------------------------------------------
# verify_audit_chain
# ---------------------------------------------------------------------------


def _chain_session(events):
    session = AsyncMock()
    result = MagicMock()
    result.scalars.return_value.all.return_value = events
    session.execute = AsyncMock(return_value=result)
    return session


def _build_chain(n):
    events = [_event(1, "genesis")]
    for i in range(2, n + 1):
        prev = events[-1]
        events.append(_event(i, _compute_hash(prev.id, prev.timestamp, prev.event_data)))
    return events


async def test_verify_intact_chain():
    result = await verify_audit_chain(_chain_session(_build_chain(4)))
    assert result == {"status": "OK", "events_checked": 4}


async def test_verify_empty_chain():
    result = await verify_audit_chain(_chain_session([]))
    assert result == {"status": "OK", "events_checked": 0}


async def test_verify_detects_edited_payload():
    events = _build_chain(4)
    events[1].event_data = {"n": "edited"}

    result = await verify_audit_chain(_chain_session(events))

    assert result["status"] == "TAMPERED"
    assert result["first_break_id"] == 3
    assert result["events_checked"] == 3
