"""Pytest configuration and fixtures for integration tests."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from core.infrastructure.database.config import create_session_factory
from core.infrastructure.database.models import Base
from core.infrastructure.database.repositories import SQLAlchemyWorkflowRepository


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File-backed SQLite engine, so concurrent sessions use separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'gyld-test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
def sql_workflow_repository(test_session_factory) -> SQLAlchemyWorkflowRepository:
    return SQLAlchemyWorkflowRepository(test_session_factory)
