# This project was developed with assistance from AI tools.
"""Integration test fixtures -- a real SQLite database, storage mocked out.

Each test gets a fresh in-memory database built from the ORM metadata, so
services run real SQL (data scope joins, optimistic locking, the audit hash
chain) without a database server.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import pytest_asyncio
from fastapi import Request
from homestay_db import Base, get_db
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from homestay_api.services.users import ensure_portal_user
from tests.functional.personas import (
    da_kullu,
    da_shimla,
    dtdo_shimla,
    owner_anita,
    owner_rajesh,
    state_officer,
)


@pytest_asyncio.fixture
async def async_engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def portal_users(session_factory):
    """Register every persona the way their first request would."""
    async with session_factory() as session:
        for user in (
            owner_rajesh(),
            owner_anita(),
            da_shimla(),
            da_kullu(),
            dtdo_shimla(),
            state_officer(),
        ):
            await ensure_portal_user(session, user)
        await session.commit()


@pytest.fixture
def mock_storage():
    """Patch S3 out of the upload path."""
    storage = MagicMock()
    storage.build_object_key.side_effect = (
        lambda number, doc_type, doc_id, filename: f"{number}/{doc_type}/{doc_id}/{filename}"
    )
    storage.upload_file = AsyncMock(side_effect=lambda data, key, content_type: key)
    with patch("homestay_api.services.document.get_storage_service", return_value=storage):
        yield storage


@pytest.fixture
def client_factory(db_session):
    """Factory returning an async httpx client bound to the test database."""
    from homestay_api.main import app
    from homestay_api.middleware.auth import get_current_user

    def _make(user):
        async def _get_db():
            try:
                yield db_session
            except Exception:
                await db_session.rollback()
                raise

        async def _get_current_user(request: Request):
            request.state.pii_mask = user.data_scope.pii_mask
            return user

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_current_user] = _get_current_user
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    yield _make

    app.dependency_overrides.clear()
