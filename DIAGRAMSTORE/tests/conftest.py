"""Pytest fixtures for the storage layer."""

from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio

from DIAGRAMSTORE.storage import EmbeddedStorage, RemoteStorage


CREATED_AT = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def embedded_storage(tmp_path):
    """Open embedded storage on a fresh file (migrated, not bootstrapped)."""
    storage = await EmbeddedStorage(str(tmp_path / "diagrams.db")).open()
    yield storage
    await storage.close()


@pytest.fixture
def record_service(tmp_path):
    """The record service app bound to a fresh temporary database."""
    from backend.dependencies import get_database
    from backend.main import app
    from backend.utils.database import RecordDatabase

    database = RecordDatabase(str(tmp_path / "records.db"))
    database.init_schema()
    app.dependency_overrides[get_database] = lambda: database
    yield app
    app.dependency_overrides.pop(get_database, None)


@pytest_asyncio.fixture
async def remote_storage(record_service):
    """Remote storage talking to the in-process record service."""
    storage = RemoteStorage("http://testserver", transport=httpx.ASGITransport(app=record_service))
    await storage.open()
    yield storage
    await storage.close()


@pytest.fixture(params=["embedded", "remote"])
def storage(request):
    """Each contract test runs once per backend."""
    return request.getfixturevalue(f"{request.param}_storage")


@pytest.fixture
def sample_diagram():
    """Minimal valid diagram."""
    return {
        "id": "d1",
        "name": "Shop",
        "databaseType": "postgresql",
        "createdAt": CREATED_AT,
        "updatedAt": CREATED_AT,
    }


@pytest.fixture
def sample_table():
    """Table with ordered fields and an index."""
    return {
        "id": "t1",
        "name": "customers",
        "schema": "public",
        "x": 10,
        "y": 20,
        "color": "#ff0000",
        "createdAt": CREATED_AT,
        "fields": [
            {
                "id": "f1",
                "name": "id",
                "type": {"id": "bigint", "name": "bigint"},
                "primaryKey": True,
                "unique": True,
                "nullable": False,
                "createdAt": CREATED_AT,
            },
            {
                "id": "f2",
                "name": "email",
                "type": {"id": "character_varying", "name": "character varying"},
                "characterMaximumLength": "255",
                "createdAt": CREATED_AT,
            },
            {
                "id": "f3",
                "name": "age",
                "type": {"id": "integer", "name": "integer"},
                "createdAt": CREATED_AT,
            },
        ],
        "indexes": [
            {"id": "i1", "name": "customers_email_idx", "unique": True, "fieldIds": ["f2"], "createdAt": CREATED_AT},
            {"id": "i2", "name": "customers_age_idx", "fieldIds": ["f3", "f1"], "createdAt": CREATED_AT},
        ],
    }
