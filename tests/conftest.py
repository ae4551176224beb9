"""Shared fixtures for filemount tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel

from filemount.fs.database_fs import DatabaseBackend
from filemount.fs.local_disk import LocalDiskBackend
from filemount.fs.memory import MemoryBackend

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Async in-memory SQLite engine with all tables created."""
    eng = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def memory_backend() -> AsyncIterator[MemoryBackend]:
    backend = MemoryBackend()
    yield backend
    await backend.close()


@pytest.fixture
async def disk_backend(tmp_path: Path) -> AsyncIterator[LocalDiskBackend]:
    """LocalDiskBackend rooted at a fresh temporary directory."""
    root = tmp_path / "root"
    root.mkdir()
    backend = LocalDiskBackend(root)
    yield backend
    await backend.close()


@pytest.fixture
async def db_backend(async_engine: AsyncEngine) -> AsyncIterator[DatabaseBackend]:
    """DatabaseBackend sharing the test engine; the fixture disposes it."""
    backend = DatabaseBackend(engine=async_engine)
    yield backend
    await backend.close()


@pytest.fixture(params=["memory", "disk", "db"])
async def backend(request: pytest.FixtureRequest, tmp_path: Path):
    """Every concrete backend, for behavior they must share."""
    if request.param == "memory":
        instance = MemoryBackend()
    elif request.param == "disk":
        root = tmp_path / "shared"
        root.mkdir()
        instance = LocalDiskBackend(root)
    else:
        instance = DatabaseBackend("sqlite+aiosqlite://")
    yield instance
    await instance.close()
