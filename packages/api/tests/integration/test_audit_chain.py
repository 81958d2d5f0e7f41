# This project was developed with assistance from AI tools.
"""Audit hash chain against a real database."""

import pytest
from homestay_db import AuditEvent
from sqlalchemy import update

from homestay_api.services.audit import (
    get_events_by_application,
    verify_audit_chain,
    write_audit_event,
)
from tests.functional.personas import da_shimla

pytestmark = pytest.mark.integration


async def _write_chain(session, n=4):
    for i in range(n):
        await write_audit_event(
            session,
            event_type="status_change",
            user=da_shimla(),
            application_id=101 if i % 2 == 0 else 202,
            event_data={"step": i},
        )
    await session.commit()


async def test_chain_links_and_verifies(session_factory):
    async with session_factory() as session:
        await _write_chain(session)

    # A fresh session reads timestamps back from the database.
    async with session_factory() as session:
        result = await verify_audit_chain(session)
        events = await get_events_by_application(session, 101)

    assert result == {"status": "OK", "events_checked": 4}
    assert [e.event_data["step"] for e in events] == [0, 2]
    assert events[0].user_id == "da-shimla-001"
    assert events[0].user_role == "dealing_assistant"


async def test_first_event_links_to_genesis(session_factory):
    async with session_factory() as session:
        event = await write_audit_event(session, event_type="demo_data_seeded", user_id="system")
        await session.commit()

    assert event.prev_hash == "genesis"


async def test_edited_payload_breaks_chain(session_factory):
    async with session_factory() as session:
        await _write_chain(session)

    async with session_factory() as session:
        await session.execute(
            update(AuditEvent).where(AuditEvent.id == 2).values(event_data={"step": 99})
        )
        await session.commit()

    async with session_factory() as session:
        result = await verify_audit_chain(session)

    assert result == {"status": "TAMPERED", "first_break_id": 3, "events_checked": 3}
