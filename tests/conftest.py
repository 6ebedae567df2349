from __future__ import annotations

from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import snowops_tickets.db.models  # noqa: F401  registers the tables on SQLModel.metadata
from snowops_tickets.tickets.principal import Principal, Role


@pytest_asyncio.fixture
async def engine() -> AsyncEngine:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def akimat() -> Principal:
    return Principal(Role.AKIMAT_ADMIN, org_id=uuid4())


@pytest.fixture
def too() -> Principal:
    return Principal(Role.TOO_ADMIN, org_id=uuid4())


@pytest.fixture
def contractor() -> Principal:
    return Principal(Role.CONTRACTOR_ADMIN, org_id=uuid4())


@pytest.fixture
def driver() -> Principal:
    return Principal(Role.DRIVER, driver_id=uuid4())
