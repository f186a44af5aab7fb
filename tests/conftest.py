"""
Shared test helpers.

The app reads its settings at import time, so the environment is prepared
before anything from `clinic` is imported.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENV", "test")

from contextlib import asynccontextmanager
from datetime import datetime

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import clinic.models  # noqa: F401 - register tables
from clinic.api.deps import get_clock, get_session
from clinic.core.clock import FixedClock
from clinic.main import app
from clinic.models.appointment import Appointment


def make_appointment(
    scheduled_time: datetime | None,
    required_time: int = 30,
    doctor_name: str = "Gregory House",
    **kwargs,
) -> Appointment:
    return Appointment(
        doctor_name=doctor_name,
        required_time=required_time,
        scheduled_time=scheduled_time,
        **kwargs,
    )


@asynccontextmanager
async def _sqlite_sessionmaker():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


@asynccontextmanager
async def db_session():
    """Fresh in-memory database and a session on it."""
    async with _sqlite_sessionmaker() as maker:
        async with maker() as session:
            yield session


@asynccontextmanager
async def api_client(now: datetime):
    """HTTP client against the app with an in-memory database and a fixed clock."""
    async with _sqlite_sessionmaker() as maker:

        async def override_session():
            async with maker() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        app.dependency_overrides[get_session] = override_session
        app.dependency_overrides[get_clock] = lambda: FixedClock(now)
        try:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
        finally:
            app.dependency_overrides.clear()
