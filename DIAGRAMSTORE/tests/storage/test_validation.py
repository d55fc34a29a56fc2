"""Tests for input coercion and validation messages."""

import pytest

from DIAGRAMSTORE.models import DBTable, Diagram, DiagramFilter, DiagramPatch, TablePatch
from DIAGRAMSTORE.storage.collections import (
    CUSTOM_TYPES,
    DIAGRAMS,
    RELATIONSHIPS,
    TABLES,
    describe_fields,
)
from DIAGRAMSTORE.storage.validation import (
    coerce_entity,
    coerce_model,
    coerce_patch,
    load_document,
    load_documents,
)
from DIAGRAMSTORE.utils.error_handling import StorageError, ValidationError


def test_describe_fields():
    assert describe_fields(("id",)) == "id"
    assert describe_fields(("id", "name")) == "id or name"
    assert describe_fields(("id", "name", "databaseType")) == "id, name, or databaseType"


def test_missing_messages():
    assert DIAGRAMS.missing_message == "Missing required fields: id, name, or databaseType"
    assert TABLES.missing_message == "Missing required fields: id or name"
    assert CUSTOM_TYPES.missing_message == "Missing required fields: id or type"


def test_coerce_entity_accepts_models_and_mappings():
    table = DBTable(id="t1", name="users")

    assert coerce_entity(TABLES, table) is table
    assert coerce_entity(TABLES, {"id": "t1", "name": "users"}).name == "users"


def test_coerce_entity_reports_missing_fields():
    with pytest.raises(ValidationError, match="Missing required fields: id, sourceTableId, or targetTableId"):
        coerce_entity(RELATIONSHIPS, {"id": "r1", "sourceTableId": "t1"})


def test_coerce_entity_treats_empty_strings_as_missing():
    with pytest.raises(ValidationError, match="Missing required fields: id or name"):
        coerce_entity(TABLES, {"id": "t1", "name": ""})


def test_coerce_entity_rejects_non_mappings():
    with pytest.raises(ValidationError, match="Invalid or missing table object"):
        coerce_entity(TABLES, None)


def test_coerce_entity_reports_malformed_fields():
    with pytest.raises(ValidationError, match="Invalid table"):
        coerce_entity(TABLES, {"id": "t1", "name": "users", "x": "left"})


def test_coerce_patch():
    assert coerce_patch(TablePatch, {"x": 5}).to_attributes() == {"x": 5.0}
    with pytest.raises(ValidationError, match="Invalid attributes"):
        coerce_patch(TablePatch, {"nickname": "x"})
    with pytest.raises(ValidationError, match="Invalid or missing attributes"):
        coerce_patch(TablePatch, ["x"])


def test_coerce_patch_rejects_null_for_required_attribute():
    with pytest.raises(ValidationError, match="Invalid attributes: .*id cannot be null"):
        coerce_patch(DiagramPatch, {"id": None, "name": "Shop"})

    assert coerce_patch(DiagramPatch, {"databaseEdition": None}).to_attributes() == {"databaseEdition": None}


def test_coerce_model():
    diagram_filter = coerce_model(DiagramFilter, {"diagramId": "d1", "tableIds": ["t1"]}, "filter")

    assert diagram_filter.table_ids == ["t1"]
    with pytest.raises(ValidationError, match="Invalid or missing filter object"):
        coerce_model(DiagramFilter, "everything", "filter")


def test_load_document():
    assert load_document(DBTable, None) is None
    assert load_document(DBTable, {"id": "t1", "name": "users"}).name == "users"
    assert [t.id for t in load_documents(DBTable, [{"id": "t1", "name": "a"}, {"id": "t2", "name": "b"}])] == ["t1", "t2"]
    assert load_documents(DBTable, None) == []


def test_load_document_reports_storage_error():
    with pytest.raises(StorageError, match="Stored Diagram document is invalid: name: Field required") as exc_info:
        load_document(Diagram, {"id": "d1", "databaseType": "postgresql"})
    assert not isinstance(exc_info.value, ValidationError)

    with pytest.raises(StorageError, match="Stored DBTable document is not an object"):
        load_documents(DBTable, ["t1"])
