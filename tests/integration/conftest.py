"""Integration test fixtures for database and HTTP client operations.

Each test gets its own file-backed SQLite database (aiosqlite), so the suite
runs without external services. Transactions take the write lock up front
(``BEGIN IMMEDIATE``), which serializes concurrent writers the way row locks
do on PostgreSQL.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from src.lexora.auth import reset_provider_registry
from src.lexora.core import redis as redis_core
from src.lexora.core.db import engine as engine_module
from src.lexora.core.notifications import get_mailer
from src.lexora.main import create_app, reset_health_cache
from tests.helpers import RecordingMailer


def _configure_sqlite(test_engine: AsyncEngine) -> None:
    @event.listens_for(test_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
        # Let SQLAlchemy emit BEGIN itself (needed for SAVEPOINT support)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(test_engine.sync_engine, "begin")
    def _on_begin(conn):  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@pytest.fixture(autouse=True)
async def _reset_redis_between_tests() -> AsyncGenerator[None]:
    """Redis clients hold references to their event loop; reset per test."""
    redis_core.reset_redis_state()
    yield
    await redis_core.close_redis()


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Fresh database with all tables, installed as the application engine."""
    await engine_module.dispose_engine()

    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'lexora.db'}",
        poolclass=NullPool,
    )
    _configure_sqlite(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    engine_module._engine = test_engine
    reset_health_cache()
    yield test_engine

    engine_module._engine = None
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session for arranging and inspecting data.

    It does NOT auto-commit; helpers in tests.helpers commit what they create.
    """
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def app(engine: AsyncEngine, mailer: RecordingMailer) -> FastAPI:
    reset_provider_registry()
    application = create_app()
    application.dependency_overrides[get_mailer] = lambda: mailer
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    reset_provider_registry()
