import os
import tempfile

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from mixmo.database import get_db
from mixmo.main import app
from mixmo.models.base import Base


@pytest.fixture
async def db_engine():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)
    test_db_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_async_engine(test_db_url, connect_args={"check_same_thread": False})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Factory for extra sessions, one per simulated player connection."""
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client() -> AsyncClient:
    """HTTP client that does NOT override the DB (for endpoints that don't need DB)."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_client(db_session: AsyncSession) -> AsyncClient:
    """HTTP client with DB dependency overridden to use the test SQLite DB."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
