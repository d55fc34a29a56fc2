"""Tests for diagram endpoints, including the rename and delete cascades."""

import pytest

from backend.services import diagram_service


def test_create_and_get_diagram(client, sample_diagram):
    assert client.post("/diagrams", json={"diagram": sample_diagram}).status_code == 204

    response = client.get("/diagrams/d1")

    assert response.status_code == 200
    assert response.json() == {**sample_diagram, "databaseEdition": None}


def test_create_requires_fields(client):
    response = client.post("/diagrams", json={"diagram": {"id": "d1", "name": "Shop"}})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: id, name, or databaseType"}


def test_create_requires_diagram_object(client):
    response = client.post("/diagrams", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid or missing diagram object"}


def test_duplicate_diagram_is_rejected(client, sample_diagram):
    client.post("/diagrams", json={"diagram": sample_diagram})

    response = client.post("/diagrams", json={"diagram": sample_diagram})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Duplicate record")


def test_create_with_attached_children(client, sample_diagram, sample_table):
    payload = {**sample_diagram, "tables": [sample_table], "areas": [{"id": "a1", "name": "zone"}]}
    assert client.post("/diagrams", json={"diagram": payload}).status_code == 204

    tables = client.get("/diagrams/d1/tables").json()
    assert [t["id"] for t in tables] == ["t1"]
    assert tables[0]["diagramId"] == "d1"
    assert [a["id"] for a in client.get("/diagrams/d1/areas").json()] == ["a1"]


def test_missing_diagram_is_404(client):
    response = client.get("/diagrams/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Diagram not found"}


def test_list_with_include_parameters(populated):
    diagrams = populated.get("/diagrams", params={"includeTables": "true", "includeCustomTypes": "true"}).json()

    assert len(diagrams) == 1
    assert [t["id"] for t in diagrams[0]["tables"]] == ["t1"]
    assert [c["type"] for c in diagrams[0]["customTypes"]] == ["mood"]
    assert "relationships" not in diagrams[0]
    assert "areas" not in diagrams[0]


def test_get_without_include_parameters_has_no_children(populated):
    diagram = populated.get("/diagrams/d1").json()

    assert not {"tables", "relationships", "dependencies", "areas", "customTypes"} & set(diagram)


def test_patch_stamps_updated_at(client, sample_diagram):
    client.post("/diagrams", json={"diagram": sample_diagram})

    assert client.patch("/diagrams/d1", json={"attributes": {"name": "Store"}}).status_code == 204

    diagram = client.get("/diagrams/d1").json()
    assert diagram["name"] == "Store"
    assert diagram["createdAt"] == "2024-01-02 03:04:05"
    assert diagram["updatedAt"] != "2024-01-02 03:04:05"


def test_patch_rejects_unknown_attribute(client, sample_diagram):
    client.post("/diagrams", json={"diagram": sample_diagram})

    response = client.patch("/diagrams/d1", json={"attributes": {"colour": "red"}})

    assert response.status_code == 400


@pytest.mark.parametrize("attribute", ["id", "name", "databaseType"])
def test_patch_cannot_clear_required_attribute(client, sample_diagram, attribute):
    client.post("/diagrams", json={"diagram": sample_diagram})

    response = client.patch("/diagrams/d1", json={"attributes": {attribute: None}})

    assert response.status_code == 400
    assert f"{attribute} cannot be null" in response.json()["error"]
    assert [d["id"] for d in client.get("/diagrams").json()] == ["d1"]


def test_patch_requires_attributes_object(client, sample_diagram):
    client.post("/diagrams", json={"diagram": sample_diagram})

    response = client.patch("/diagrams/d1", json={"attributes": "name"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid or missing attributes"}


def test_rename_propagates_to_children(populated):
    assert populated.patch("/diagrams/d1", json={"attributes": {"id": "d2"}}).status_code == 204

    assert populated.get("/diagrams/d1").status_code == 404
    for resource in ("tables", "relationships", "dependencies", "areas", "custom-types"):
        assert len(populated.get(f"/diagrams/d2/{resource}").json()) == 1, resource
        assert populated.get(f"/diagrams/d1/{resource}").json() == [], resource
    assert populated.get("/diagram-filters/d2").json()["tableIds"] == ["t1"]


def test_rename_failure_leaves_completed_statements_applied(populated, monkeypatch):
    statements = list(diagram_service.CASCADE_RENAME_STATEMENTS)
    statements.insert(1, ("broken", 'UPDATE "no_such_table" SET "diagram_id" = ? WHERE "diagram_id" = ?'))
    monkeypatch.setattr(diagram_service, "CASCADE_RENAME_STATEMENTS", statements)

    response = populated.patch("/diagrams/d1", json={"attributes": {"id": "d2"}})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert populated.get("/diagrams/d2").status_code == 200
    assert [t["id"] for t in populated.get("/diagrams/d2/tables").json()] == ["t1"]
    assert [a["id"] for a in populated.get("/diagrams/d2/areas").json()] == ["a1"]


def test_delete_cascades(populated):
    assert populated.delete("/diagrams/d1").status_code == 204

    assert populated.get("/diagrams").json() == []
    for resource in ("tables", "relationships", "dependencies", "areas", "custom-types"):
        assert populated.get(f"/diagrams/d1/{resource}").json() == [], resource
    assert populated.get("/diagram-filters/d1").status_code == 404


def test_delete_is_atomic(populated, monkeypatch):
    statements = list(diagram_service.CASCADE_DELETE_STATEMENTS)
    statements.append(("broken", 'DELETE FROM "no_such_table" WHERE "diagram_id" = ?'))
    monkeypatch.setattr(diagram_service, "CASCADE_DELETE_STATEMENTS", statements)

    response = populated.delete("/diagrams/d1")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert populated.get("/diagrams/d1").status_code == 200
    assert [t["id"] for t in populated.get("/diagrams/d1/tables").json()] == ["t1"]
    assert populated.get("/diagram-filters/d1").status_code == 200


def test_delete_missing_diagram_succeeds(client):
    assert client.delete("/diagrams/nope").status_code == 204
