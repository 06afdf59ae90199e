"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest
import pytest_asyncio

from tests import SKIP_DB_TESTS, get_test_db_url


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


def pytest_collection_modifyitems(config, items):
    if not SKIP_DB_TESTS:
        return
    skip_db = pytest.mark.skip(reason="SKIP_DB_TESTS is set")
    for item in items:
        if "db" in item.keywords:
            item.add_marker(skip_db)


@pytest_asyncio.fixture
async def session_factory():
    """
    Fresh schema per test on the test database.

    Uses a StaticPool for SQLite so every session shares the one
    in-memory database.
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    from database.database import create_session_factory
    from database.models import Base

    url = get_test_db_url()
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    engine = create_async_engine(url, **kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield create_session_factory(engine)
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()
