"""Shared fixtures: a file-backed SQLite store per test and an API client."""

import asyncio
from collections.abc import AsyncIterator, Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from sfs_app.main import app
from sfs_app.models.base import get_async_session
from sfs_app.models.fts import init_db


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sfs.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture
def client() -> Iterator[TestClient]:
    """API client with crud calls expected to be patched by each test."""

    async def _no_database() -> AsyncIterator[MagicMock]:
        yield MagicMock()

    app.dependency_overrides[get_async_session] = _no_database
    # Not used as a context manager, so the lifespan (schema creation) never runs
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def store_client(tmp_path: Path) -> Iterator[TestClient]:
    """API client backed by an empty SQLite store.

    NullPool opens each connection on the loop that uses it, so the store can
    be created here and queried from the TestClient's own loop.
    """
    store = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool
    )
    asyncio.run(init_db(store))
    session_maker = async_sessionmaker(store, expire_on_commit=False)

    async def _store_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _store_session
    yield TestClient(app)
    app.dependency_overrides.clear()
