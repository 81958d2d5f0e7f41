# This project was developed with assistance from AI tools.
"""Async engine, session factory, and the FastAPI session dependency."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .config import db_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _engine_kwargs(url: str) -> dict:
    """Pool sizing only applies to server databases."""
    kwargs: dict = {"echo": db_settings.SQL_ECHO, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        kwargs["pool_size"] = db_settings.DB_POOL_SIZE
        kwargs["max_overflow"] = db_settings.DB_MAX_OVERFLOW
    return kwargs


engine = create_async_engine(db_settings.DATABASE_URL, **_engine_kwargs(db_settings.DATABASE_URL))

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yield a session, rolling back on error."""
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
