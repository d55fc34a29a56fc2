"""Tests for health, config and diagram filter endpoints."""


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_config_is_created_on_startup(client):
    response = client.get("/config")

    assert response.status_code == 200
    assert response.json() == {"id": 1, "defaultDiagramId": ""}


def test_put_config(client):
    assert client.put("/config", json={"defaultDiagramId": "d9"}).status_code == 204

    assert client.get("/config").json()["defaultDiagramId"] == "d9"


def test_put_config_requires_default_diagram(client):
    response = client.put("/config", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing defaultDiagramId"}


def test_put_config_rejects_unknown_attributes(client):
    response = client.put("/config", json={"theme": "dark"})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid attributes")


def test_missing_filter_is_404(client):
    response = client.get("/diagram-filters/d1")

    assert response.status_code == 404
    assert response.json() == {"error": "Diagram filter not found"}


def test_filter_keeps_null_and_empty_lists_apart(client):
    assert client.put("/diagram-filters/d1", json={"tableIds": [], "schemasIds": None}).status_code == 204

    assert client.get("/diagram-filters/d1").json() == {
        "diagramId": "d1",
        "tableIds": [],
        "schemasIds": None,
    }


def test_filter_put_replaces(client):
    client.put("/diagram-filters/d1", json={"tableIds": ["t1"]})
    client.put("/diagram-filters/d1", json={"tableIds": ["t2", "t3"]})

    assert client.get("/diagram-filters/d1").json()["tableIds"] == ["t2", "t3"]


def test_filter_put_requires_object(client):
    response = client.put("/diagram-filters/d1", json=["t1"])

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid or missing filter object"}


def test_delete_filter(client):
    client.put("/diagram-filters/d1", json={"tableIds": ["t1"]})

    assert client.delete("/diagram-filters/d1").status_code == 204
    assert client.get("/diagram-filters/d1").status_code == 404
    assert client.delete("/diagram-filters/d1").status_code == 204
