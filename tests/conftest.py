import asyncio

import pytest
from fastapi.testclient import TestClient

from bookreview.Helper.QueryClient import query_client
from bookreview.Repository.CatalogRepo import CatalogRepo
from bookreview.Repository.SqlAlchemySetup import SqlAlchemySetup
from bookreview.main import app


@pytest.fixture
def database(tmp_path):
    """Fixture pointing the store at a fresh SQLite file"""
    SqlAlchemySetup.configure(f"sqlite+aiosqlite:///{tmp_path / 'bookreview.db'}")
    query_client.clear()
    yield
    query_client.clear()


@pytest.fixture
def client(database):
    """Fixture providing a TestClient with the app lifespan running"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def repo(database):
    """Fixture providing a CatalogRepo over freshly created tables"""
    asyncio.run(SqlAlchemySetup.create_async_tables())
    yield CatalogRepo()
    asyncio.run(SqlAlchemySetup.dispose())
