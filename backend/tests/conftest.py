"""Pytest fixtures and configuration."""

import pytest
from fastapi.testclient import TestClient

from backend.dependencies import get_database
from backend.main import app
from backend.services.collection_service import CollectionService
from backend.services.config_service import ConfigService
from backend.services.diagram_service import DiagramService
from backend.utils.database import RecordDatabase


@pytest.fixture
def database(tmp_path):
    """Fresh record database with its schema created."""
    database = RecordDatabase(str(tmp_path / "records.db"))
    database.init_schema()
    return database


@pytest.fixture
def client(database):
    """Test client for FastAPI app, bound to the temporary database."""
    app.dependency_overrides[get_database] = lambda: database
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_database, None)


@pytest.fixture
def diagram_service(database):
    """DiagramService instance for testing."""
    return DiagramService(database)


@pytest.fixture
def collection_service(database):
    """CollectionService instance for testing."""
    return CollectionService(database)


@pytest.fixture
def config_service(database):
    """ConfigService instance for testing."""
    return ConfigService(database)


@pytest.fixture
def sample_diagram():
    """Sample diagram payload for testing."""
    return {
        "id": "d1",
        "name": "Shop",
        "databaseType": "postgresql",
        "createdAt": "2024-01-02 03:04:05",
        "updatedAt": "2024-01-02 03:04:05",
    }


@pytest.fixture
def sample_table():
    """Sample table payload for testing."""
    return {
        "id": "t1",
        "name": "customers",
        "schema": "public",
        "x": 10,
        "y": 20,
        "createdAt": "2024-01-02 03:04:05",
        "fields": [
            {"id": "f1", "name": "id", "type": {"id": "bigint", "name": "bigint"}, "primaryKey": True},
            {"id": "f2", "name": "email", "type": {"id": "text", "name": "text"}},
        ],
        "indexes": [{"id": "i1", "name": "customers_email_idx", "unique": True, "fieldIds": ["f2"]}],
    }


@pytest.fixture
def populated(client, sample_diagram, sample_table):
    """One diagram with a child in every collection and a filter."""
    assert client.post("/diagrams", json={"diagram": sample_diagram}).status_code == 204
    children = [
        ("tables", "table", sample_table),
        ("relationships", "relationship", {"id": "r1", "sourceTableId": "t1", "targetTableId": "t1"}),
        ("dependencies", "dependency", {"id": "dep1", "tableId": "t1", "dependentTableId": "t1"}),
        ("areas", "area", {"id": "a1", "name": "zone"}),
        ("custom-types", "customType", {"id": "c1", "type": "mood", "kind": "enum", "values": ["sad", "ok"]}),
    ]
    for resource, body_key, document in children:
        response = client.post(f"/diagrams/d1/{resource}", json={body_key: document})
        assert response.status_code == 204, response.text
    assert client.put("/diagram-filters/d1", json={"tableIds": ["t1"], "schemasIds": None}).status_code == 204
    return client
