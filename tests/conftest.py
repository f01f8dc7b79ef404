import os

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from engagement_api.core.config import settings
from engagement_api.dependencies import get_db
from engagement_api.main import app, ensure_indexes


@pytest.fixture(scope="session", autouse=True)
def test_env():
    os.environ["SENTRY_DSN"] = ""  # отключаем Sentry
    settings.sentry_dsn = ""
    settings.mongo_db = "engagement_test"


@pytest.fixture
async def db():
    """Свежая in-memory Mongo на каждый тест, с теми же индексами."""
    client = AsyncMongoMockClient(tz_aware=True)
    database = client[settings.mongo_db]
    await ensure_indexes(database)
    yield database


@pytest.fixture
async def client(db):
    app.dependency_overrides[get_db] = lambda: db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport,
                           base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
