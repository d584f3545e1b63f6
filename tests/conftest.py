"""Fixtures de test / Test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fleetops.api.deps import get_store
from fleetops.database import init_db
from fleetops.main import app
from fleetops.services.record_store import RecordStore


@pytest.fixture
async def engine():
    # Base SQLite en memoire partagee par connexion unique / In-memory SQLite on a single shared connection
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(bind=eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def store(engine):
    return RecordStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))


@pytest.fixture
async def client(store):
    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
